from __future__ import annotations

from datetime import date, datetime
from typing import Optional

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date.

    Longer ISO timestamps (``2024-01-15T00:00:00Z``) are cut to their date part.
    """
    return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()


def format_card_date(value: Optional[date]) -> Optional[str]:
    """Render a date as ``Mon Jan 15 2024`` regardless of the process locale."""
    if value is None:
        return None
    return f"{_WEEKDAYS[value.weekday()]} {_MONTHS[value.month - 1]} {value.day:02d} {value.year}"


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
