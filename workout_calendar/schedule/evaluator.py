"""Occurrence evaluator.

Decides whether a series fires on a calendar day and answers the range
queries the calendar views need. Pure and read-only.

Range queries evaluate every series on every day in the range, which is
O(series x days). Fine at personal-calendar scale.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from workout_calendar.schedule.dates import (
    days_between,
    days_in_month,
    iter_days,
    parse_date_key,
    sunday_weekday,
)
from workout_calendar.schedule.models import RepeatType, Series

DEFAULT_SEARCH_HORIZON_DAYS = 730


def _matches_rule(series: Series, day: date) -> bool:
    rule = series.repeat
    anchor = series.anchor_date
    match rule.type:
        case RepeatType.DAILY:
            return True
        case RepeatType.WEEKLY:
            return days_between(anchor, day) % 7 == 0
        case RepeatType.BIWEEKLY:
            return days_between(anchor, day) % 14 == 0
        case RepeatType.MONTHLY:
            # Months without the anchor's day-of-month are skipped.
            return day.day == anchor.day
        case RepeatType.CUSTOM:
            return sunday_weekday(day) in rule.custom_days
        case RepeatType.INTERVAL:
            if not rule.interval_days or rule.interval_days < 1:
                return False
            return days_between(anchor, day) % rule.interval_days == 0
        case _:
            return False


def occurs_on(series: Series, day: date | str) -> bool:
    """Return True if ``series`` has an occurrence on ``day``.

    Order of checks: exclusions, the until bound, the anchor itself, days
    before the anchor, then the repeat rule.

    Args:
        series: Series to evaluate
        day: Calendar date or ``YYYY-MM-DD`` key

    Returns:
        True if the series occurs on that day. False for unparseable keys.
    """
    check = parse_date_key(day)
    if check is None:
        return False
    if check in series.excluded_dates:
        return False
    if series.until_date is not None and check > series.until_date:
        return False
    if check == series.anchor_date:
        return True
    if check < series.anchor_date:
        return False
    return _matches_rule(series, check)


def occurrences_on_date(series: Iterable[Series], day: date | str) -> list[Series]:
    """Series from ``series`` that occur on ``day``, in input order."""
    check = parse_date_key(day)
    if check is None:
        return []
    return [s for s in series if occurs_on(s, check)]


def occurrences_in_range(series: Iterable[Series], start: date, end: date) -> dict[date, list[Series]]:
    """Occurrences for each day from ``start`` to ``end`` inclusive.

    Days with no occurrences are omitted.
    """
    candidates = list(series)
    by_day: dict[date, list[Series]] = {}
    for day in iter_days(start, end):
        matching = [s for s in candidates if occurs_on(s, day)]
        if matching:
            by_day[day] = matching
    return by_day


def occurrences_in_month(series: Iterable[Series], year: int, month: int) -> dict[int, list[Series]]:
    """Occurrences keyed by day-of-month for days 1..days_in_month.

    Days with no occurrences are omitted.
    """
    start = date(year, month, 1)
    end = date(year, month, days_in_month(year, month))
    return {day.day: matching for day, matching in occurrences_in_range(series, start, end).items()}


def next_occurrence(
    series: Series,
    after: date,
    horizon_days: int = DEFAULT_SEARCH_HORIZON_DAYS,
) -> date | None:
    """First occurrence strictly after ``after`` within ``horizon_days``.

    Args:
        series: Series to scan
        after: Exclusive lower bound
        horizon_days: Maximum number of days to look ahead

    Returns:
        The next occurrence date, or None if none falls inside the horizon
    """
    start = max(after + timedelta(days=1), series.anchor_date)
    end = after + timedelta(days=horizon_days)
    if series.until_date is not None:
        end = min(end, series.until_date)
    if not series.repeat.is_recurring:
        anchor = series.anchor_date
        return anchor if start <= anchor <= end and occurs_on(series, anchor) else None
    for day in iter_days(start, end):
        if occurs_on(series, day):
            return day
    return None
