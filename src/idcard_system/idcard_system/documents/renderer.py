from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterable, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer

from ..common.datetime_utils import format_card_date
from ..core.constants import CARD_TITLE, EMPTY_VALUE, PHOTO_FIT_BOX
from ..idcards.model import IdCard
from ..uploads.storage import UploadStorage

logger = logging.getLogger(__name__)

PDF_FONT_NAME = "CardSans"
PAGE_MARGIN = 72

_registered_font: Optional[str] = None


def _register_pdf_font() -> str:
    global _registered_font
    if _registered_font:
        return _registered_font

    possible_fonts = [
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/freefont/FreeSans.ttf"),
    ]
    for font_path in possible_fonts:
        if font_path.exists():
            try:
                pdfmetrics.registerFont(TTFont(PDF_FONT_NAME, str(font_path)))
                logger.debug("Registered PDF font from %s", font_path)
                _registered_font = PDF_FONT_NAME
                return _registered_font
            except Exception as exc:  # pragma: no cover - font registration edge case
                logger.warning("Failed to register font %s: %s", font_path, exc)
    _registered_font = "Helvetica"
    return _registered_font


def card_lines(card: IdCard) -> List[Tuple[str, str]]:
    """Labelled values of a card, in print order."""
    return [
        ("Full Name", card.full_name or EMPTY_VALUE),
        ("Designation", card.designation or EMPTY_VALUE),
        ("Department", card.department or EMPTY_VALUE),
        ("ID Number", card.id_number or EMPTY_VALUE),
        ("Issue Date", format_card_date(card.issue_date) or EMPTY_VALUE),
        ("Expiry Date", format_card_date(card.expiry_date) or EMPTY_VALUE),
    ]


class IdCardPdfRenderer:
    """Lay out ID cards one per page and write the PDF into a binary sink."""

    def __init__(self, storage: UploadStorage, *, font_name: Optional[str] = None, compress: bool = True):
        self._storage = storage
        self._font_name = font_name
        self._compress = compress

    def _styles(self) -> dict:
        font_name = self._font_name or _register_pdf_font()
        return {
            "title": ParagraphStyle(
                name="CardTitle",
                fontName=font_name,
                fontSize=20,
                leading=24,
                alignment=TA_CENTER,
                spaceAfter=14,
            ),
            "field": ParagraphStyle(
                name="CardField",
                fontName=font_name,
                fontSize=14,
                leading=17,
                alignment=TA_LEFT,
            ),
        }

    def _photo(self, card: IdCard) -> Optional[Image]:
        path = self._storage.resolve_existing(card.photo)
        if not path:
            return None
        try:
            width, height = ImageReader(str(path)).getSize()
        except Exception as exc:
            # An unreadable photo is treated like a missing one.
            logger.warning("Skipping unreadable photo %s for card %s: %s", path.name, card.card_id, exc)
            return None

        box_w, box_h = PHOTO_FIT_BOX
        scale = min(box_w / width, box_h / height)
        image = Image(str(path), width=width * scale, height=height * scale)
        image.hAlign = "CENTER"
        return image

    def _card_flowables(self, card: IdCard, styles: dict) -> list:
        story = [Paragraph(escape(CARD_TITLE), styles["title"])]
        for label, value in card_lines(card):
            story.append(Paragraph(escape(f"{label}: {value}"), styles["field"]))

        photo = self._photo(card)
        if photo is not None:
            story.append(Spacer(1, 14))
            story.append(photo)
        return story

    def render(self, cards: Iterable[IdCard], sink: BinaryIO) -> int:
        """Write every card to ``sink``; returns the number of pages produced."""
        styles = self._styles()
        doc = SimpleDocTemplate(
            sink,
            pagesize=LETTER,
            topMargin=PAGE_MARGIN,
            bottomMargin=PAGE_MARGIN,
            leftMargin=PAGE_MARGIN,
            rightMargin=PAGE_MARGIN,
            title="ID Cards",
            pageCompression=1 if self._compress else 0,
        )

        story: list = []
        pages = 0
        for card in cards:
            if pages:
                story.append(PageBreak())
            story.extend(self._card_flowables(card, styles))
            pages += 1

        doc.build(story)
        return pages
