"""Domain types for scheduled workout series.

A Series is the stored unit. Occurrences are never materialized: they are
computed from ``(series, date)`` by the evaluator.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import StrEnum

from loguru import logger


class RepeatType(StrEnum):
    """Recurrence rule variants."""

    NEVER = "never"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"
    INTERVAL = "interval"


class EditScope(StrEnum):
    """Breadth of an edit or delete."""

    ONE = "one"
    FORWARD = "forward"
    ALL = "all"


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise ValueError(f"Invalid time of day: {self.hour:02d}:{self.minute:02d}")

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class ReminderSettings:
    """Reminder fields read by the external notification service."""

    enabled: bool
    hour: int
    minute: int


@dataclass(frozen=True)
class RepeatRule:
    """A recurrence rule.

    Only ``custom`` (weekday set, 0 = Sunday ... 6 = Saturday) and
    ``interval`` (n >= 1 days) carry parameters.
    """

    type: RepeatType = RepeatType.NEVER
    custom_days: frozenset[int] = frozenset()
    interval_days: int | None = None

    @classmethod
    def never(cls) -> RepeatRule:
        return cls(RepeatType.NEVER)

    @classmethod
    def custom(cls, days) -> RepeatRule:
        return cls(RepeatType.CUSTOM, custom_days=frozenset(days))

    @classmethod
    def interval(cls, days: int) -> RepeatRule:
        return cls(RepeatType.INTERVAL, interval_days=days)

    @classmethod
    def coerce(
        cls,
        type_value: str | None,
        custom_days=None,
        interval_days: int | None = None,
    ) -> RepeatRule:
        """Build a rule from loose input, falling back to ``never``.

        Unknown types, ``custom`` without valid weekdays and ``interval``
        without a positive day count all degrade to a non-recurring rule.

        Args:
            type_value: Raw repeat type string
            custom_days: Iterable of weekday numbers (0 = Sunday)
            interval_days: Day count for ``interval``

        Returns:
            Normalized RepeatRule
        """
        try:
            repeat_type = RepeatType(str(type_value).strip().lower())
        except ValueError:
            logger.warning(f"Unknown repeat type {type_value!r}, treating as never")
            return cls.never()

        if repeat_type == RepeatType.CUSTOM:
            days = frozenset(d for d in (custom_days or []) if isinstance(d, int) and 0 <= d <= 6)
            if not days:
                logger.warning("Custom repeat without valid weekdays, treating as never")
                return cls.never()
            return cls.custom(days)

        if repeat_type == RepeatType.INTERVAL:
            if not isinstance(interval_days, int) or isinstance(interval_days, bool) or interval_days < 1:
                logger.warning(f"Interval repeat with invalid day count {interval_days!r}, treating as never")
                return cls.never()
            return cls.interval(interval_days)

        return cls(repeat_type)

    @property
    def is_recurring(self) -> bool:
        return self.type != RepeatType.NEVER


@dataclass(frozen=True)
class SeriesPayload:
    """Display and semantic fields. Opaque to the evaluator."""

    name: str
    description: str | None = None
    tag_id: str | None = None
    tag_color: str = ""
    template_id: str | None = None
    template_name: str = ""
    reminder: ReminderSettings | None = None


@dataclass(frozen=True)
class Series:
    """A scheduled workout: anchor date + repeat rule + exceptions + history."""

    id: str
    owner_id: str
    anchor_date: date
    payload: SeriesPayload
    repeat: RepeatRule = field(default_factory=RepeatRule.never)
    time: TimeOfDay | None = None
    excluded_dates: frozenset[date] = frozenset()
    completed_dates: frozenset[date] = frozenset()
    until_date: date | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def name(self) -> str:
        return self.payload.name

    def with_excluded(self, day: date) -> Series:
        return replace(self, excluded_dates=self.excluded_dates | {day})

    def with_completed(self, day: date) -> Series:
        return replace(self, completed_dates=self.completed_dates | {day})

    def without_completed(self, day: date) -> Series:
        return replace(self, completed_dates=self.completed_dates - {day})


CLEARABLE_FIELDS = frozenset({"description", "tag_id", "template_id", "reminder", "time"})


@dataclass(frozen=True)
class SeriesPatch:
    """Partial update of a series.

    None means "leave unchanged". Optional fields named in ``clear`` are reset
    to None instead, e.g. ``SeriesPatch(clear=frozenset({"template_id"}))``
    unlinks the template.
    """

    name: str | None = None
    description: str | None = None
    tag_id: str | None = None
    tag_color: str | None = None
    template_id: str | None = None
    template_name: str | None = None
    reminder: ReminderSettings | None = None
    time: TimeOfDay | None = None
    repeat: RepeatRule | None = None
    clear: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        unknown = self.clear - CLEARABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot clear fields: {', '.join(sorted(unknown))}")

    def apply_to_payload(self, payload: SeriesPayload) -> SeriesPayload:
        changes = {
            key: value
            for key, value in (
                ("name", self.name),
                ("description", self.description),
                ("tag_id", self.tag_id),
                ("tag_color", self.tag_color),
                ("template_id", self.template_id),
                ("template_name", self.template_name),
                ("reminder", self.reminder),
            )
            if value is not None
        }
        for key in self.clear - {"time"}:
            changes[key] = None
        return replace(payload, **changes)

    def apply(self, series: Series, *, keep_repeat: bool = False) -> Series:
        """Merge this patch over ``series``.

        Args:
            series: Series to patch
            keep_repeat: Ignore ``repeat`` (one-off edits are always ``never``)

        Returns:
            New Series with the patch applied
        """
        if "time" in self.clear:
            time = None
        else:
            time = self.time if self.time is not None else series.time
        return replace(
            series,
            payload=self.apply_to_payload(series.payload),
            time=time,
            repeat=self.repeat if self.repeat is not None and not keep_repeat else series.repeat,
        )
