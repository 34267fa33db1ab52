"""Schedule service.

Single entry point used by the calendar views, the scheduling form and the
workout-completion flow. Every call is scoped by owner id; reads come from the
in-memory store and writes go through SeriesStore.apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from loguru import logger

from workout_calendar.schedule import editor, ledger
from workout_calendar.schedule.dates import parse_date_key
from workout_calendar.schedule.editor import EditResult
from workout_calendar.schedule.evaluator import (
    DEFAULT_SEARCH_HORIZON_DAYS,
    next_occurrence,
    occurrences_in_month,
    occurrences_in_range,
    occurrences_on_date,
)
from workout_calendar.schedule.matcher import MatchResult, match_and_complete
from workout_calendar.schedule.models import (
    EditScope,
    RepeatRule,
    Series,
    SeriesPatch,
    SeriesPayload,
    TimeOfDay,
)
from workout_calendar.schedule.store import SeriesStore


@dataclass(frozen=True)
class ScheduledOccurrence:
    """A computed occurrence with its completion status."""

    series: Series
    day: date
    completed: bool


def _with_status(series: list[Series], day: date) -> list[ScheduledOccurrence]:
    return [ScheduledOccurrence(s, day, day in s.completed_dates) for s in series]


class ScheduleService:
    def __init__(self, store: SeriesStore | None = None, search_horizon_days: int = DEFAULT_SEARCH_HORIZON_DAYS) -> None:
        self.store = store or SeriesStore()
        self.search_horizon_days = search_horizon_days

    # Series CRUD

    def create(
        self,
        owner_id: str,
        anchor_date: date,
        payload: SeriesPayload,
        repeat: RepeatRule | None = None,
        time: TimeOfDay | None = None,
    ) -> Series:
        series = Series(
            id="",
            owner_id=owner_id,
            anchor_date=anchor_date,
            payload=payload,
            repeat=repeat or RepeatRule.never(),
            time=time,
        )
        series_id = self.store.create(owner_id, series)
        return self.store.state.require(owner_id, series_id)

    def get(self, owner_id: str, series_id: str) -> Series | None:
        return self.store.get(owner_id, series_id)

    def list_for_owner(self, owner_id: str) -> list[Series]:
        return self.store.list_for_owner(owner_id)

    def update(self, owner_id: str, series_id: str, patch: SeriesPatch) -> Series:
        return self.store.update(owner_id, series_id, patch)

    def delete(self, owner_id: str, series_id: str) -> None:
        self.store.delete(owner_id, series_id)

    # Calendar queries

    def occurrences_on_date(self, owner_id: str, day: date | str) -> list[ScheduledOccurrence]:
        check = parse_date_key(day)
        if check is None:
            logger.debug("Ignoring unparseable date {!r}", day, owner_id=owner_id)
            return []
        return _with_status(occurrences_on_date(self.store.list_for_owner(owner_id), check), check)

    def occurrences_in_month(self, owner_id: str, year: int, month: int) -> dict[int, list[ScheduledOccurrence]]:
        by_day = occurrences_in_month(self.store.list_for_owner(owner_id), year, month)
        return {day: _with_status(series, date(year, month, day)) for day, series in by_day.items()}

    def occurrences_in_range(self, owner_id: str, start: date, end: date) -> dict[date, list[ScheduledOccurrence]]:
        by_day = occurrences_in_range(self.store.list_for_owner(owner_id), start, end)
        return {day: _with_status(series, day) for day, series in by_day.items()}

    def next_occurrence(self, owner_id: str, series_id: str, after: date) -> date | None:
        series = self.store.state.require(owner_id, series_id)
        return next_occurrence(series, after, self.search_horizon_days)

    # Completion ledger

    def toggle(self, owner_id: str, series_id: str, day: date) -> bool:
        """Flip completion for the day and return the new status."""
        state = self.store.apply(owner_id, lambda state: ledger.toggle(state, owner_id, series_id, day))
        completed = ledger.is_completed(state, owner_id, series_id, day)
        logger.info("Toggled completion", owner_id=owner_id, series_id=series_id, day=str(day), completed=completed)
        return completed

    def is_completed(self, owner_id: str, series_id: str, day: date) -> bool:
        return ledger.is_completed(self.store.state, owner_id, series_id, day)

    def mark_complete(self, owner_id: str, series_id: str, day: date) -> None:
        self.store.apply(owner_id, lambda state: ledger.mark_complete(state, owner_id, series_id, day))

    # Edit scopes

    def scope_one(self, owner_id: str, series_id: str, day: date, patch: SeriesPatch | None = None) -> EditResult:
        return self.store.apply(owner_id, lambda state: editor.scope_one(state, owner_id, series_id, day, patch))

    def scope_forward(self, owner_id: str, series_id: str, day: date, patch: SeriesPatch | None = None) -> EditResult:
        return self.store.apply(owner_id, lambda state: editor.scope_forward(state, owner_id, series_id, day, patch))

    def scope_all(self, owner_id: str, series_id: str, patch: SeriesPatch | None = None) -> EditResult:
        return self.store.apply(owner_id, lambda state: editor.scope_all(state, owner_id, series_id, patch))

    def edit(
        self,
        owner_id: str,
        series_id: str,
        scope: EditScope,
        day: date | None = None,
        patch: SeriesPatch | None = None,
    ) -> EditResult:
        return self.store.apply(
            owner_id,
            lambda state: editor.apply_edit(state, scope, owner_id, series_id, day, patch),
        )

    # Workout completion flow

    def match_and_complete(
        self,
        owner_id: str,
        day: date,
        template_id: str | None = None,
        name: str | None = None,
    ) -> MatchResult:
        return self.store.apply(
            owner_id,
            lambda state: match_and_complete(state, owner_id, day, template_id, name),
        )
