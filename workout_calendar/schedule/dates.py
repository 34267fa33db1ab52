"""Calendar-day helpers for the schedule engine.

Dates are timezone-less calendar days. All recurrence math goes through
``datetime.date`` ordinals, never through timestamps.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

DATE_KEY_FORMAT = "%Y-%m-%d"


def parse_date_key(value: str | date | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` key into a date.

    Accepts an existing ``date`` unchanged. Returns None for anything that
    cannot be read as a calendar day instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value.strip(), DATE_KEY_FORMAT).date()
    except (ValueError, AttributeError, TypeError):
        return None


def format_date_key(day: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return day.strftime(DATE_KEY_FORMAT)


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return end.toordinal() - start.toordinal()


def sunday_weekday(day: date) -> int:
    """Day of week with 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def previous_day(day: date) -> date:
    return day - timedelta(days=1)


def iter_days(start: date, end: date):
    """Yield each day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
