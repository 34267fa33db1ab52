"""API contract schemas for the schedule endpoints."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field, field_validator, model_validator

from workout_calendar.schedule.models import (
    CLEARABLE_FIELDS,
    ReminderSettings,
    RepeatRule,
    RepeatType,
    SeriesPatch,
    SeriesPayload,
    TimeOfDay,
)

# ============================================================================
# Shared fields
# ============================================================================


class TimeSchema(BaseModel):
    """Clock time applied to every occurrence."""

    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)

    def to_domain(self) -> TimeOfDay:
        return TimeOfDay(self.hour, self.minute)


class ReminderSchema(BaseModel):
    """Reminder settings read by the notification service."""

    enabled: bool = Field(default=False)
    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)

    def to_domain(self) -> ReminderSettings:
        return ReminderSettings(self.enabled, self.hour, self.minute)


class RepeatSchema(BaseModel):
    """Repeat rule. ``custom_days`` uses 0 = Sunday ... 6 = Saturday."""

    type: RepeatType = Field(default=RepeatType.NEVER, description="never | daily | weekly | biweekly | monthly | custom | interval")
    custom_days: list[int] | None = Field(default=None, description="Weekdays for custom repeat")
    interval_days: int | None = Field(default=None, ge=1, description="Day count for interval repeat")

    @field_validator("custom_days")
    @classmethod
    def validate_custom_days(cls, value: list[int] | None) -> list[int] | None:
        if value is not None and any(day < 0 or day > 6 for day in value):
            raise ValueError("custom_days entries must be between 0 (Sunday) and 6 (Saturday)")
        return value

    @model_validator(mode="after")
    def validate_parameters(self) -> RepeatSchema:
        if self.type == RepeatType.CUSTOM and not self.custom_days:
            raise ValueError("custom repeat requires at least one weekday")
        if self.type == RepeatType.INTERVAL and self.interval_days is None:
            raise ValueError("interval repeat requires interval_days")
        return self

    def to_domain(self) -> RepeatRule:
        if self.type == RepeatType.CUSTOM:
            return RepeatRule.custom(self.custom_days or [])
        if self.type == RepeatType.INTERVAL:
            return RepeatRule.interval(self.interval_days or 1)
        return RepeatRule(self.type)

    @classmethod
    def from_domain(cls, rule: RepeatRule) -> RepeatSchema:
        return cls(
            type=rule.type,
            custom_days=sorted(rule.custom_days) if rule.type == RepeatType.CUSTOM else None,
            interval_days=rule.interval_days if rule.type == RepeatType.INTERVAL else None,
        )


# ============================================================================
# Series Schemas
# ============================================================================


class SeriesCreateRequest(BaseModel):
    """Request body for POST /schedule/series."""

    name: str = Field(min_length=1, description="Workout name")
    date: dt.date = Field(description="Anchor date (YYYY-MM-DD)")
    time: TimeSchema | None = Field(default=None)
    repeat: RepeatSchema = Field(default_factory=RepeatSchema)
    description: str | None = Field(default=None)
    tag_id: str | None = Field(default=None)
    tag_color: str = Field(default="")
    template_id: str | None = Field(default=None)
    template_name: str = Field(default="")
    reminder: ReminderSchema | None = Field(default=None)

    def payload(self) -> SeriesPayload:
        return SeriesPayload(
            name=self.name.strip(),
            description=self.description,
            tag_id=self.tag_id,
            tag_color=self.tag_color,
            template_id=self.template_id,
            template_name=self.template_name,
            reminder=self.reminder.to_domain() if self.reminder else None,
        )


class SeriesPatchRequest(BaseModel):
    """Request body for PATCH /schedule/series/{id}.

    Omitted fields are unchanged. An explicit null clears an optional field
    (description, tag_id, template_id, time, reminder).
    """

    name: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None)
    tag_id: str | None = Field(default=None)
    tag_color: str | None = Field(default=None)
    template_id: str | None = Field(default=None)
    template_name: str | None = Field(default=None)
    time: TimeSchema | None = Field(default=None)
    repeat: RepeatSchema | None = Field(default=None, description="Ignored when editing a single occurrence")
    reminder: ReminderSchema | None = Field(default=None)

    def to_domain(self) -> SeriesPatch:
        return SeriesPatch(
            name=self.name.strip() if self.name else None,
            description=self.description,
            tag_id=self.tag_id,
            tag_color=self.tag_color,
            template_id=self.template_id,
            template_name=self.template_name,
            reminder=self.reminder.to_domain() if self.reminder else None,
            time=self.time.to_domain() if self.time else None,
            repeat=self.repeat.to_domain() if self.repeat else None,
            clear=frozenset(
                name for name in CLEARABLE_FIELDS if name in self.model_fields_set and getattr(self, name) is None
            ),
        )


class SeriesResponse(BaseModel):
    """A stored series."""

    id: str
    name: str
    date: str = Field(description="Anchor date (YYYY-MM-DD)")
    time: TimeSchema | None = None
    repeat: RepeatSchema
    description: str | None = None
    tag_id: str | None = None
    tag_color: str = ""
    template_id: str | None = None
    template_name: str = ""
    reminder: ReminderSchema | None = None
    excluded_dates: list[str] = Field(default_factory=list)
    completed_dates: list[str] = Field(default_factory=list)
    until_date: str | None = None
    created_at: dt.datetime


class SeriesListResponse(BaseModel):
    series: list[SeriesResponse]


class EditResponse(BaseModel):
    """Result of an edit or delete by scope."""

    series_id: str
    created_id: str | None = Field(default=None, description="Series created by a split or single-occurrence edit")
    deleted: bool = Field(default=False, description="Whether the whole series was removed")


class NextOccurrenceResponse(BaseModel):
    series_id: str
    after: str
    next_date: str | None


# ============================================================================
# Calendar Schemas
# ============================================================================


class OccurrenceResponse(BaseModel):
    """A computed occurrence of a series on one day."""

    series_id: str
    date: str = Field(description="ISO 8601 date (YYYY-MM-DD)")
    name: str
    time: str | None = Field(default=None, description="Time of day (HH:MM)")
    tag_color: str = ""
    template_id: str | None = None
    recurring: bool
    completed: bool


class CalendarDayResponse(BaseModel):
    """Response for GET /schedule/calendar/day/{date}."""

    date: str
    occurrences: list[OccurrenceResponse]


class CalendarMonthResponse(BaseModel):
    """Response for GET /schedule/calendar/month/{year}/{month}. Only days with occurrences are listed."""

    year: int
    month: int
    days: dict[int, list[OccurrenceResponse]]


class CalendarRangeResponse(BaseModel):
    """Response for GET /schedule/calendar/range."""

    start: str
    end: str
    days: dict[str, list[OccurrenceResponse]]


# ============================================================================
# Completion Schemas
# ============================================================================


class ToggleResponse(BaseModel):
    series_id: str
    date: str
    completed: bool


class MatchRequest(BaseModel):
    """A workout that was just saved."""

    date: dt.date
    template_id: str | None = None
    name: str | None = None


class MatchResponse(BaseModel):
    series_id: str | None = Field(description="Series marked complete, or null if the workout was unscheduled")
    reason: str = Field(description="template | name | sole_candidate | no_match")
    already_completed: bool = False
