from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import IdCard


class IdCardRepository(Protocol):
    """Repository interface for ID cards.

    Every read or write except ``id_number_exists`` takes the owner id as a
    mandatory filter. ``create`` and ``update_for_owner`` raise
    ``DuplicateIdentifier`` when the store rejects a duplicate ``id_number``.
    """

    def id_number_exists(self, id_number: str) -> bool:
        raise NotImplementedError

    def create(
        self,
        *,
        owner_id: int,
        full_name: str,
        designation: Optional[str],
        department: Optional[str],
        id_number: str,
        issue_date: Optional[date],
        expiry_date: Optional[date],
        photo: Optional[str],
    ) -> IdCard:
        raise NotImplementedError

    def list_for_owner(self, owner_id: int) -> Sequence[IdCard]:
        raise NotImplementedError

    def get_for_owner(self, *, card_id: int, owner_id: int) -> Optional[IdCard]:
        raise NotImplementedError

    def update_for_owner(self, *, card_id: int, owner_id: int, changes: Mapping[str, Any]) -> Optional[IdCard]:
        raise NotImplementedError

    def delete_for_owner(self, *, card_id: int, owner_id: int) -> Optional[IdCard]:
        raise NotImplementedError
