from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Domain entity: an account that can own ID cards.

    Note: Plain data object (no DB access code here).
    """

    user_id: int
    full_name: str
    email: str
    password_hash: str
    is_active: bool = True
    created_at: Optional[datetime] = None
