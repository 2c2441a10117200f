from __future__ import annotations

from typing import Any, Mapping, Optional

from ..uploads.storage import UploadStorage
from .model import IdCard

# Wire (camelCase) name -> entity attribute.
REQUEST_FIELDS = {
    "fullName": "full_name",
    "designation": "designation",
    "department": "department",
    "idNumber": "id_number",
    "issueDate": "issue_date",
    "expiryDate": "expiry_date",
}


def fields_from_payload(payload: Mapping[str, Any]) -> dict:
    """Pick the card fields present in a form or JSON body, keyed by attribute name."""
    return {attr: payload.get(wire) for wire, attr in REQUEST_FIELDS.items() if wire in payload}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def card_to_dict(card: IdCard, *, storage: UploadStorage, base_url: str) -> dict:
    return {
        "id": card.card_id,
        "owner": card.owner_id,
        "fullName": card.full_name,
        "designation": card.designation,
        "department": card.department,
        "idNumber": card.id_number,
        "issueDate": _iso(card.issue_date),
        "expiryDate": _iso(card.expiry_date),
        "photo": storage.public_url(card.photo, base_url),
        "createdAt": _iso(card.created_at),
        "updatedAt": _iso(card.updated_at),
    }
