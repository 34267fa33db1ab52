"""Persisted record shape for series.

One JSON-compatible dict per series, dates as ``YYYY-MM-DD`` strings:

    {
      id, ownerId, name, description?, tagId, tagColor,
      date, time?: {hour, minute},
      repeat: {type, customDays?, intervalDays?},
      reminder?: {enabled, hour, minute},
      templateId?, templateName,
      completedDates: [...], excludedDates: [...], untilDate?,
      createdAt
    }
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from loguru import logger

from workout_calendar.schedule.dates import format_date_key, parse_date_key
from workout_calendar.schedule.errors import SeriesDecodeError
from workout_calendar.schedule.models import (
    ReminderSettings,
    RepeatRule,
    RepeatType,
    Series,
    SeriesPayload,
    TimeOfDay,
)


def _repeat_to_record(rule: RepeatRule) -> dict[str, Any]:
    record: dict[str, Any] = {"type": str(rule.type)}
    if rule.type == RepeatType.CUSTOM:
        record["customDays"] = sorted(rule.custom_days)
    if rule.type == RepeatType.INTERVAL:
        record["intervalDays"] = rule.interval_days
    return record


def series_to_record(series: Series) -> dict[str, Any]:
    """Encode a series into its persisted record."""
    payload = series.payload
    record: dict[str, Any] = {
        "id": series.id,
        "ownerId": series.owner_id,
        "name": payload.name,
        "tagId": payload.tag_id,
        "tagColor": payload.tag_color,
        "date": format_date_key(series.anchor_date),
        "repeat": _repeat_to_record(series.repeat),
        "templateName": payload.template_name,
        "completedDates": sorted(format_date_key(d) for d in series.completed_dates),
        "excludedDates": sorted(format_date_key(d) for d in series.excluded_dates),
        "createdAt": series.created_at.isoformat(),
    }
    if payload.description is not None:
        record["description"] = payload.description
    if series.time is not None:
        record["time"] = {"hour": series.time.hour, "minute": series.time.minute}
    if payload.reminder is not None:
        record["reminder"] = {
            "enabled": payload.reminder.enabled,
            "hour": payload.reminder.hour,
            "minute": payload.reminder.minute,
        }
    if payload.template_id is not None:
        record["templateId"] = payload.template_id
    if series.until_date is not None:
        record["untilDate"] = format_date_key(series.until_date)
    return record


def _decode_dates(values: Any, field_name: str, series_id: str) -> frozenset[date]:
    days: set[date] = set()
    for value in values or []:
        parsed = parse_date_key(value)
        if parsed is None:
            logger.warning("Dropping unparseable {} entry {!r}", field_name, value, series_id=series_id)
            continue
        days.add(parsed)
    return frozenset(days)


def _decode_created_at(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


def series_from_record(record: dict[str, Any]) -> Series:
    """Decode a persisted record.

    Unknown repeat types decode as ``never``. Unparseable entries in the date
    lists are dropped.

    Raises:
        SeriesDecodeError: Missing id/owner or unparseable anchor date
    """
    series_id = record.get("id")
    owner_id = record.get("ownerId")
    if not series_id or not owner_id:
        raise SeriesDecodeError(f"Record is missing id or ownerId: {record!r}")

    anchor = parse_date_key(record.get("date"))
    if anchor is None:
        raise SeriesDecodeError(f"Series {series_id} has unparseable date {record.get('date')!r}")

    repeat_record = record.get("repeat") or {}
    if not isinstance(repeat_record, dict):
        repeat_record = {}
    repeat = RepeatRule.coerce(
        repeat_record.get("type"),
        repeat_record.get("customDays"),
        repeat_record.get("intervalDays"),
    )

    time_record = record.get("time")
    time = None
    if isinstance(time_record, dict):
        try:
            time = TimeOfDay(int(time_record["hour"]), int(time_record["minute"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring invalid time {!r}", time_record, series_id=series_id)

    reminder_record = record.get("reminder")
    reminder = None
    if isinstance(reminder_record, dict):
        try:
            reminder = ReminderSettings(
                enabled=bool(reminder_record.get("enabled", False)),
                hour=int(reminder_record.get("hour", 0)),
                minute=int(reminder_record.get("minute", 0)),
            )
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid reminder {!r}", reminder_record, series_id=series_id)

    payload = SeriesPayload(
        name=record.get("name") or "",
        description=record.get("description"),
        tag_id=record.get("tagId"),
        tag_color=record.get("tagColor") or "",
        template_id=record.get("templateId"),
        template_name=record.get("templateName") or "",
        reminder=reminder,
    )

    return Series(
        id=str(series_id),
        owner_id=str(owner_id),
        anchor_date=anchor,
        payload=payload,
        repeat=repeat,
        time=time,
        excluded_dates=_decode_dates(record.get("excludedDates"), "excludedDates", series_id),
        completed_dates=_decode_dates(record.get("completedDates"), "completedDates", series_id),
        until_date=parse_date_key(record.get("untilDate")),
        created_at=_decode_created_at(record.get("createdAt")),
    )


def load_series(records: list[dict[str, Any]]) -> list[Series]:
    """Decode many records, skipping the ones that cannot be read."""
    series: list[Series] = []
    for record in records:
        try:
            series.append(series_from_record(record))
        except SeriesDecodeError as e:
            logger.warning(f"Skipping unreadable series record: {e}")
    return series
