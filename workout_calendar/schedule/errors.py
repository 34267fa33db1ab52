"""Error types for the schedule engine.

Business logic errors, reported to callers and never treated as storage failures.
"""


class ScheduleError(RuntimeError):
    """Base class for schedule errors."""


class SeriesNotFoundError(ScheduleError, LookupError):
    """Raised when a series id does not exist for the calling owner.

    Covers both unknown ids and ids owned by someone else; the two cases are
    indistinguishable to the caller.
    """

    def __init__(self, owner_id: str, series_id: str) -> None:
        super().__init__(f"Series {series_id} not found for owner {owner_id}")
        self.owner_id = owner_id
        self.series_id = series_id


class DuplicateSeriesError(ScheduleError):
    """Raised when creating a series whose id already exists for the owner."""

    def __init__(self, owner_id: str, series_id: str) -> None:
        super().__init__(f"Series {series_id} already exists for owner {owner_id}")
        self.owner_id = owner_id
        self.series_id = series_id


class SeriesDecodeError(ScheduleError, ValueError):
    """Raised when a persisted record cannot be turned into a Series."""


class OccurrenceNotFoundError(ScheduleError, LookupError):
    """Raised when a single-occurrence or forward edit targets a day the series does not cover."""

    def __init__(self, owner_id: str, series_id: str, day) -> None:
        super().__init__(f"Series {series_id} has no occurrence on {day} for owner {owner_id}")
        self.owner_id = owner_id
        self.series_id = series_id
        self.day = day
