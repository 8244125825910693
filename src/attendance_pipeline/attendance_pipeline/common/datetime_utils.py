from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    return parse_iso_date(v)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def start_of_day(value: date) -> datetime:
    return datetime.combine(value, datetime.min.time())


def end_of_day(value: date) -> datetime:
    """Last instant of the given day, used for inclusive upper bounds."""
    return start_of_day(value) + timedelta(days=1) - timedelta(microseconds=1)


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
