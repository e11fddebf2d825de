from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

logger = logging.getLogger(__name__)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now()


def to_local_naive(value: datetime) -> datetime:
    """Drop tzinfo after converting aware datetimes to local time."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp; None for anything unparseable.

    Accepts datetimes and ISO-8601 strings (a trailing ``Z`` is read as UTC).
    """
    if isinstance(value, datetime):
        return to_local_naive(value)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_local_naive(datetime.fromisoformat(text))
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def at_time(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour=hour, minute=minute))


def clamp(value: datetime, lower: datetime, upper: datetime) -> datetime:
    return max(lower, min(value, upper))


def start_of_week(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def as_date(value: Any) -> date:
    """Accept a date, datetime or YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))
