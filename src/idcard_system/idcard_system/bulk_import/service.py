from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.exceptions import BadInput, DuplicateIdentifier
from ..idcards.model import IdCard
from ..idcards.repository import IdCardRepository
from ..uploads.storage import UploadStorage
from .spreadsheet import coerce_cell_date, read_candidate_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    count: int
    records: list[IdCard]


class BulkImportService:
    """Use case: import ID cards from the first sheet of a spreadsheet.

    Business rules:
    - Rows are handled strictly in order, so a row can be skipped as a
      duplicate of a row persisted earlier in the same file.
    - A row whose ID number already exists anywhere is skipped, not an error.
    - Rows are not validated here; the store's own constraints decide. Any
      store error other than a duplicate key aborts the remaining rows and
      leaves already persisted rows (and the uploaded file) in place.
    """

    def __init__(self, cards: IdCardRepository, storage: UploadStorage):
        self._cards = cards
        self._storage = storage

    def import_file(self, *, owner_id: int, file_path: Optional[str | Path]) -> ImportResult:
        if not file_path:
            raise BadInput("No file uploaded")

        candidates = read_candidate_rows(file_path)
        logger.info("Total records found in %s: %d", Path(file_path).name, len(candidates))

        saved: list[IdCard] = []
        for candidate in candidates:
            if candidate.id_number and self._cards.id_number_exists(candidate.id_number):
                logger.info("Row %d: skipping duplicate ID Number %s", candidate.row_number, candidate.id_number)
                continue

            try:
                card = self._cards.create(
                    owner_id=owner_id,
                    full_name=candidate.full_name,
                    designation=candidate.designation,
                    department=candidate.department,
                    id_number=candidate.id_number,
                    issue_date=coerce_cell_date(candidate.issue_date),
                    expiry_date=coerce_cell_date(candidate.expiry_date),
                    photo=candidate.photo_file_name,
                )
            except DuplicateIdentifier:
                # Another writer took the ID Number between the check and the insert.
                logger.info("Row %d: skipping duplicate ID Number %s", candidate.row_number, candidate.id_number)
                continue

            logger.debug("Row %d: saved ID card with ID Number %s", candidate.row_number, card.id_number)
            saved.append(card)

        self._storage.discard(file_path)
        logger.info("Imported %d of %d rows; removed uploaded file", len(saved), len(candidates))
        return ImportResult(count=len(saved), records=saved)
