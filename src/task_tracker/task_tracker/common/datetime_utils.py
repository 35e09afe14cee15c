from __future__ import annotations

from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_calendar_day(value) -> date:
    """Parse a deadline as a calendar day; any time-of-day part is ignored."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return parse_iso_date(str(value).strip()[:10])
    except ValueError:
        raise ValidationError("Invalid date format")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def isoformat_or_none(value) -> str | None:
    return value.isoformat() if value is not None else None
