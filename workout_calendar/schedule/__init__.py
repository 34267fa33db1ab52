"""Schedule module - recurring workout series and their occurrences.

This module provides:
- Series, repeat rules and edit patches
- The occurrence evaluator and calendar range queries
- The completion ledger and the saved-workout matcher
- "This one / this and following / all" edit semantics
"""

from workout_calendar.schedule.editor import EditResult, apply_edit, scope_all, scope_forward, scope_one
from workout_calendar.schedule.errors import (
    DuplicateSeriesError,
    OccurrenceNotFoundError,
    ScheduleError,
    SeriesNotFoundError,
)
from workout_calendar.schedule.evaluator import (
    next_occurrence,
    occurrences_in_month,
    occurrences_in_range,
    occurrences_on_date,
    occurs_on,
)
from workout_calendar.schedule.matcher import MatchReason, MatchResult, match_and_complete
from workout_calendar.schedule.models import (
    EditScope,
    ReminderSettings,
    RepeatRule,
    RepeatType,
    Series,
    SeriesPatch,
    SeriesPayload,
    TimeOfDay,
)
from workout_calendar.schedule.service import ScheduledOccurrence, ScheduleService
from workout_calendar.schedule.store import ScheduleState, SeriesStore

__all__ = [
    "DuplicateSeriesError",
    "EditResult",
    "EditScope",
    "MatchReason",
    "MatchResult",
    "OccurrenceNotFoundError",
    "ReminderSettings",
    "RepeatRule",
    "RepeatType",
    "ScheduleError",
    "ScheduleService",
    "ScheduleState",
    "ScheduledOccurrence",
    "Series",
    "SeriesNotFoundError",
    "SeriesPatch",
    "SeriesPayload",
    "SeriesStore",
    "TimeOfDay",
    "apply_edit",
    "match_and_complete",
    "next_occurrence",
    "occurrences_in_month",
    "occurrences_in_range",
    "occurrences_on_date",
    "occurs_on",
    "scope_all",
    "scope_forward",
    "scope_one",
]
