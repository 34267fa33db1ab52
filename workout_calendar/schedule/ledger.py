"""Completion ledger.

Completion is keyed by (series id, date) and stored on the series itself, so
marking one day never touches another.
"""

from __future__ import annotations

from datetime import date

from workout_calendar.schedule.store import ScheduleState, replace_series


def is_completed(state: ScheduleState, owner_id: str, series_id: str, day: date) -> bool:
    series = state.get(owner_id, series_id)
    return series is not None and day in series.completed_dates


def toggle(state: ScheduleState, owner_id: str, series_id: str, day: date) -> ScheduleState:
    """Flip completion of ``day`` for the series."""
    series = state.require(owner_id, series_id)
    if day in series.completed_dates:
        return replace_series(state, series.without_completed(day))
    return replace_series(state, series.with_completed(day))


def mark_complete(state: ScheduleState, owner_id: str, series_id: str, day: date) -> ScheduleState:
    """Idempotently record ``day`` as completed. Returns ``state`` itself if already done."""
    series = state.require(owner_id, series_id)
    if day in series.completed_dates:
        return state
    return replace_series(state, series.with_completed(day))
