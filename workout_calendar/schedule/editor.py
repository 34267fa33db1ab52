"""Series editor: "this one", "this and following" and "all" edit semantics.

Each intent is translated into primitive store operations on an immutable
ScheduleState. ``patch=None`` means delete.

- scope_one: exclude the day on the original; an edit re-creates that single
  day as a new non-recurring series carrying the patched payload.
- scope_forward: cut the original off the day before (``until_date``); an edit
  starts a new series at the day with the same cadence and no history.
- scope_all: edit in place keeping history, or delete the whole series.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone

from loguru import logger

from workout_calendar.schedule.dates import previous_day
from workout_calendar.schedule.errors import OccurrenceNotFoundError
from workout_calendar.schedule.evaluator import occurs_on
from workout_calendar.schedule.models import EditScope, RepeatRule, Series, SeriesPatch
from workout_calendar.schedule.store import (
    ScheduleState,
    create_series,
    new_series_id,
    remove_series,
    replace_series,
)


@dataclass(frozen=True)
class EditResult:
    """Outcome of an editor operation.

    Attributes:
        state: New schedule state
        series_id: Id of the series the edit targeted
        created_id: Id of a series created by the edit, if any
        deleted: Whether the targeted series was removed entirely
    """

    state: ScheduleState
    series_id: str
    created_id: str | None = None
    deleted: bool = False


def _fork(series: Series, anchor: date, until: date | None) -> Series:
    """Copy of ``series`` re-anchored at ``anchor`` with no id and no history."""
    return replace(
        series,
        id="",
        anchor_date=anchor,
        excluded_dates=frozenset(),
        completed_dates=frozenset(),
        until_date=until,
        created_at=datetime.now(timezone.utc),
    )


def scope_all(
    state: ScheduleState,
    owner_id: str,
    series_id: str,
    patch: SeriesPatch | None = None,
) -> EditResult:
    """Edit or delete every occurrence of a series."""
    series = state.require(owner_id, series_id)
    if patch is None:
        logger.info("Deleting whole series", owner_id=owner_id, series_id=series_id)
        return EditResult(remove_series(state, owner_id, series_id), series_id, deleted=True)
    logger.info("Editing whole series", owner_id=owner_id, series_id=series_id)
    return EditResult(replace_series(state, patch.apply(series)), series_id)


def scope_one(
    state: ScheduleState,
    owner_id: str,
    series_id: str,
    day: date,
    patch: SeriesPatch | None = None,
    id_factory: Callable[[], str] = new_series_id,
) -> EditResult:
    """Edit or delete only the occurrence on ``day``.

    Args:
        state: Current state
        owner_id: Caller's owner id
        series_id: Series to edit
        day: Occurrence day
        patch: Fields to change, or None to delete the occurrence
        id_factory: Id generator for the one-off series

    Returns:
        EditResult

    Raises:
        SeriesNotFoundError: Unknown id for this owner
        OccurrenceNotFoundError: The series does not occur on ``day``
    """
    series = state.require(owner_id, series_id)
    if not occurs_on(series, day):
        raise OccurrenceNotFoundError(owner_id, series_id, day)

    if not series.repeat.is_recurring:
        # The only occurrence of a one-off is the whole series.
        return scope_all(state, owner_id, series_id, patch)

    excluded = replace_series(state, series.with_excluded(day))
    if patch is None:
        logger.info("Excluded single occurrence", owner_id=owner_id, series_id=series_id, day=str(day))
        return EditResult(excluded, series_id)

    one_off = patch.apply(replace(_fork(series, day, None), repeat=RepeatRule.never()), keep_repeat=True)
    new_state, created = create_series(excluded, one_off, id_factory)
    logger.info(
        "Detached single occurrence",
        owner_id=owner_id,
        series_id=series_id,
        created_id=created.id,
        day=str(day),
    )
    return EditResult(new_state, series_id, created_id=created.id)


def scope_forward(
    state: ScheduleState,
    owner_id: str,
    series_id: str,
    day: date,
    patch: SeriesPatch | None = None,
    id_factory: Callable[[], str] = new_series_id,
) -> EditResult:
    """Edit or delete the occurrence on ``day`` and everything after it.

    Non-recurring series, and splits at or before the anchor, cover the whole
    series and are handled as ``scope_all``.

    Raises:
        SeriesNotFoundError: Unknown id for this owner
        OccurrenceNotFoundError: The series already ends before ``day``
    """
    series = state.require(owner_id, series_id)
    if not series.repeat.is_recurring or day <= series.anchor_date:
        return scope_all(state, owner_id, series_id, patch)
    if series.until_date is not None and series.until_date < day:
        raise OccurrenceNotFoundError(owner_id, series_id, day)

    truncated = replace_series(state, replace(series, until_date=previous_day(day)))
    if patch is None:
        logger.info("Ended series before day", owner_id=owner_id, series_id=series_id, day=str(day))
        return EditResult(truncated, series_id)

    continuation = patch.apply(_fork(series, day, series.until_date))
    new_state, created = create_series(truncated, continuation, id_factory)
    logger.info(
        "Split series",
        owner_id=owner_id,
        series_id=series_id,
        created_id=created.id,
        day=str(day),
    )
    return EditResult(new_state, series_id, created_id=created.id)


def apply_edit(
    state: ScheduleState,
    scope: EditScope,
    owner_id: str,
    series_id: str,
    day: date | None = None,
    patch: SeriesPatch | None = None,
) -> EditResult:
    """Dispatch an edit or delete by scope. ``day`` is required unless scope is ``all``."""
    if scope == EditScope.ALL:
        return scope_all(state, owner_id, series_id, patch)
    if day is None:
        raise ValueError(f"Scope {scope} requires an occurrence date")
    if scope == EditScope.ONE:
        return scope_one(state, owner_id, series_id, day, patch)
    return scope_forward(state, owner_id, series_id, day, patch)
