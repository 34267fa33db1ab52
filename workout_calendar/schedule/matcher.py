"""Completion matcher.

When a workout is saved for a day, pick the scheduled series it satisfies and
mark that day complete. First match wins:

1. series whose template id equals the saved workout's template id
2. series whose name equals the saved workout's name (trimmed, case-insensitive)
3. the only series scheduled that day, if there is exactly one

The sole-candidate fallback can attribute an unrelated workout to the only
series scheduled that day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from loguru import logger

from workout_calendar.schedule.evaluator import occurrences_on_date
from workout_calendar.schedule.ledger import mark_complete
from workout_calendar.schedule.models import Series
from workout_calendar.schedule.store import ScheduleState


class MatchReason(StrEnum):
    """Why a series was (or was not) selected."""

    TEMPLATE = "template"
    NAME = "name"
    SOLE_CANDIDATE = "sole_candidate"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class MatchResult:
    state: ScheduleState
    series_id: str | None
    reason: MatchReason
    already_completed: bool = False


def _normalize_name(value: str | None) -> str:
    return (value or "").strip().casefold()


def find_match(candidates: list[Series], day: date, template_id: str | None, name: str | None) -> tuple[Series | None, MatchReason]:
    """Select the best-fit series among ``candidates`` for a workout done on ``day``.

    Series not yet completed on ``day`` are preferred over completed ones.
    """
    ordered = sorted(candidates, key=lambda s: day in s.completed_dates)

    if template_id:
        for series in ordered:
            if series.payload.template_id == template_id:
                return series, MatchReason.TEMPLATE

    wanted = _normalize_name(name)
    if wanted:
        for series in ordered:
            if _normalize_name(series.payload.name) == wanted:
                return series, MatchReason.NAME

    if len(ordered) == 1:
        return ordered[0], MatchReason.SOLE_CANDIDATE

    return None, MatchReason.NO_MATCH


def match_and_complete(
    state: ScheduleState,
    owner_id: str,
    day: date,
    template_id: str | None = None,
    name: str | None = None,
) -> MatchResult:
    """Mark the scheduled occurrence satisfied by a saved workout as complete.

    Args:
        state: Current state
        owner_id: Owner who performed the workout
        day: Day the workout was performed
        template_id: Template the workout was started from, if any
        name: Display name of the saved workout

    Returns:
        MatchResult; ``series_id`` is None when the workout was unscheduled
    """
    candidates = occurrences_on_date(state.list_for_owner(owner_id), day)
    series, reason = find_match(candidates, day, template_id, name)

    if series is None:
        logger.debug("No scheduled series matched saved workout", owner_id=owner_id, day=str(day), candidates=len(candidates))
        return MatchResult(state, None, reason)

    if day in series.completed_dates:
        logger.debug("Matched series already completed", owner_id=owner_id, series_id=series.id, day=str(day))
        return MatchResult(state, series.id, reason, already_completed=True)

    logger.info(
        "Auto-completed scheduled series",
        owner_id=owner_id,
        series_id=series.id,
        day=str(day),
        reason=str(reason),
    )
    return MatchResult(mark_complete(state, owner_id, series.id, day), series.id, reason)
