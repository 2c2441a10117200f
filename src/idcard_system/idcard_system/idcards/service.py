from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import optional_text, require_field
from ..core.exceptions import BadInput, DuplicateIdentifier, NotFound
from ..uploads.storage import UploadStorage
from .model import IdCard
from .repository import IdCardRepository

logger = logging.getLogger(__name__)

_LABELS = {
    "full_name": "Full Name",
    "designation": "Designation",
    "department": "Department",
    "id_number": "ID Number",
    "issue_date": "Issue Date",
    "expiry_date": "Expiry Date",
}


def parse_form_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise BadInput(f"{field_name} must be a date in YYYY-MM-DD format")


class IdCardService:
    """Use case: owner-scoped CRUD over ID cards.

    Photos arrive already stored (see ``UploadStorage.save``); the service
    takes ownership of the stored name and removes it again if the write
    it belongs to fails.
    """

    def __init__(
        self,
        cards: IdCardRepository,
        storage: UploadStorage,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._cards = cards
        self._storage = storage
        self._clock = clock

    def create_card(self, *, owner_id: int, fields: Mapping[str, Any], photo: Optional[str] = None) -> IdCard:
        try:
            full_name = require_field(fields.get("full_name"), _LABELS["full_name"])
            id_number = require_field(fields.get("id_number"), _LABELS["id_number"])
            issue_date = parse_form_date(fields.get("issue_date"), _LABELS["issue_date"])
            expiry_date = parse_form_date(fields.get("expiry_date"), _LABELS["expiry_date"])

            # Fast-path rejection only; the UNIQUE index on id_number is the real guard.
            if self._cards.id_number_exists(id_number):
                raise DuplicateIdentifier("ID Number already exists")

            card = self._cards.create(
                owner_id=owner_id,
                full_name=full_name,
                designation=optional_text(fields.get("designation")),
                department=optional_text(fields.get("department")),
                id_number=id_number,
                issue_date=issue_date or self._clock().date(),
                expiry_date=expiry_date,
                photo=photo,
            )
        except Exception:
            self._storage.remove(photo)
            raise

        logger.info("Created ID card %s (%s) for owner %s", card.card_id, card.id_number, owner_id)
        return card

    def list_cards(self, owner_id: int) -> Sequence[IdCard]:
        return self._cards.list_for_owner(owner_id)

    def get_card(self, *, card_id: int, owner_id: int) -> IdCard:
        card = self._cards.get_for_owner(card_id=card_id, owner_id=owner_id)
        if not card:
            raise NotFound("ID Card not found")
        return card

    def _build_changes(self, fields: Mapping[str, Any]) -> dict:
        changes: dict = {}
        for name, value in fields.items():
            if name in ("full_name", "id_number"):
                changes[name] = require_field(value, _LABELS[name])
            elif name in ("designation", "department"):
                changes[name] = optional_text(value)
            elif name in ("issue_date", "expiry_date"):
                changes[name] = parse_form_date(value, _LABELS[name])
        return changes

    def update_card(
        self,
        *,
        card_id: int,
        owner_id: int,
        fields: Mapping[str, Any],
        photo: Optional[str] = None,
    ) -> IdCard:
        try:
            changes = self._build_changes(fields)
            if photo:
                changes["photo"] = photo

            existing = self.get_card(card_id=card_id, owner_id=owner_id)
            updated = self._cards.update_for_owner(card_id=card_id, owner_id=owner_id, changes=changes)
            if not updated:
                raise NotFound("ID Card not found")
        except Exception:
            self._storage.remove(photo)
            raise

        if photo and existing.photo and existing.photo != photo:
            self._storage.remove(existing.photo)

        logger.info("Updated ID card %s for owner %s (%s)", card_id, owner_id, ", ".join(sorted(changes)) or "no fields")
        return updated

    def delete_card(self, *, card_id: int, owner_id: int) -> IdCard:
        card = self._cards.delete_for_owner(card_id=card_id, owner_id=owner_id)
        if not card:
            raise NotFound("ID Card not found")

        # Photo cleanup is not part of the delete; a failure here is only logged.
        if card.photo:
            self._storage.remove(card.photo)

        logger.info("Deleted ID card %s for owner %s", card_id, owner_id)
        return card
