from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class IdCard:
    """Domain entity: an employee ID card owned by one principal.

    Note: Plain data object (no DB access code here).
    """

    card_id: int
    owner_id: int
    full_name: str
    designation: Optional[str]
    department: Optional[str]
    id_number: str
    issue_date: Optional[date]
    expiry_date: Optional[date]
    photo: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Columns a partial update may touch, keyed by entity attribute name.
UPDATABLE_FIELDS = (
    "full_name",
    "designation",
    "department",
    "id_number",
    "issue_date",
    "expiry_date",
    "photo",
)
