from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from tempfile import SpooledTemporaryFile
from typing import Callable, Iterator

from ..core.constants import PDF_CHUNK_SIZE, PDF_SPOOL_MAX_BYTES
from ..core.exceptions import NotFound
from ..idcards.model import IdCard
from ..idcards.repository import IdCardRepository
from .renderer import IdCardPdfRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PdfDocument:
    filename: str
    cards: list[IdCard]


class DocumentService:
    """Use case: printable PDFs of a principal's ID cards.

    Lookups happen in ``single_card_document`` / ``all_cards_document`` so a
    ``NotFound`` surfaces before any bytes are streamed; ``stream`` does the
    rendering lazily.
    """

    def __init__(
        self,
        cards: IdCardRepository,
        renderer: IdCardPdfRenderer,
        *,
        clock: Callable[[], float] = time.time,
    ):
        self._cards = cards
        self._renderer = renderer
        self._clock = clock

    def single_card_document(self, *, card_id: int, owner_id: int) -> PdfDocument:
        card = self._cards.get_for_owner(card_id=card_id, owner_id=owner_id)
        if not card:
            raise NotFound("ID Card not found")
        return PdfDocument(filename=f"IDCard_{card.id_number}.pdf", cards=[card])

    def all_cards_document(self, *, owner_id: int) -> PdfDocument:
        cards = list(self._cards.list_for_owner(owner_id))
        if not cards:
            raise NotFound("No ID Cards found")
        return PdfDocument(filename=f"All_IDCards_{int(self._clock() * 1000)}.pdf", cards=cards)

    def stream(self, document: PdfDocument, *, chunk_size: int = PDF_CHUNK_SIZE) -> Iterator[bytes]:
        # Large batches roll over to a temp file instead of staying in memory.
        with SpooledTemporaryFile(max_size=PDF_SPOOL_MAX_BYTES) as sink:
            pages = self._renderer.render(document.cards, sink)
            logger.info("Rendered %s (%d page(s), %d bytes)", document.filename, pages, sink.tell())
            sink.seek(0)
            while True:
                chunk = sink.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    def render_bytes(self, document: PdfDocument) -> bytes:
        return b"".join(self.stream(document))
