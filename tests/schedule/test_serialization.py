"""Unit tests for the persisted series record."""

from datetime import date, datetime, timezone

import pytest

from workout_calendar.schedule.errors import SeriesDecodeError
from workout_calendar.schedule.models import (
    ReminderSettings,
    RepeatRule,
    RepeatType,
    Series,
    SeriesPayload,
    TimeOfDay,
)
from workout_calendar.schedule.serialization import load_series, series_from_record, series_to_record


def _record(**overrides):
    record = {
        "id": "s1",
        "ownerId": "user-1",
        "name": "Push Day",
        "tagId": "tag-1",
        "tagColor": "#00ff00",
        "date": "2024-01-01",
        "repeat": {"type": "weekly"},
        "templateName": "",
        "completedDates": [],
        "excludedDates": [],
        "createdAt": "2024-01-01T08:00:00+00:00",
    }
    record.update(overrides)
    return record


class TestEncode:
    def test_full_record_shape(self):
        series = Series(
            id="s1",
            owner_id="user-1",
            anchor_date=date(2024, 1, 1),
            payload=SeriesPayload(
                name="Push Day",
                description="Chest and triceps",
                tag_id="tag-1",
                tag_color="#00ff00",
                template_id="T1",
                template_name="Push Template",
                reminder=ReminderSettings(enabled=True, hour=7, minute=30),
            ),
            repeat=RepeatRule.custom({3, 1}),
            time=TimeOfDay(18, 0),
            excluded_dates=frozenset({date(2024, 1, 10), date(2024, 1, 3)}),
            completed_dates=frozenset({date(2024, 1, 1)}),
            until_date=date(2024, 6, 30),
            created_at=datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
        )
        record = series_to_record(series)
        assert record == {
            "id": "s1",
            "ownerId": "user-1",
            "name": "Push Day",
            "description": "Chest and triceps",
            "tagId": "tag-1",
            "tagColor": "#00ff00",
            "date": "2024-01-01",
            "time": {"hour": 18, "minute": 0},
            "repeat": {"type": "custom", "customDays": [1, 3]},
            "reminder": {"enabled": True, "hour": 7, "minute": 30},
            "templateId": "T1",
            "templateName": "Push Template",
            "completedDates": ["2024-01-01"],
            "excludedDates": ["2024-01-03", "2024-01-10"],
            "untilDate": "2024-06-30",
            "createdAt": "2024-01-01T08:00:00+00:00",
        }
        assert series_from_record(record) == series

    def test_optional_keys_are_omitted(self, make_series):
        record = series_to_record(make_series(repeat=RepeatRule.interval(3)))
        for key in ("description", "time", "reminder", "templateId", "untilDate"):
            assert key not in record
        assert record["repeat"] == {"type": "interval", "intervalDays": 3}


class TestDecode:
    @pytest.mark.parametrize(
        "repeat",
        [
            {"type": "yearly"},
            {"type": "custom", "customDays": []},
            {"type": "custom", "customDays": [9]},
            {"type": "interval", "intervalDays": 0},
            {"type": "interval"},
            None,
            "weekly",
        ],
    )
    def test_unusable_repeat_decodes_as_never(self, repeat):
        series = series_from_record(_record(repeat=repeat))
        assert series.repeat.type == RepeatType.NEVER

    def test_bad_list_entries_are_dropped(self):
        series = series_from_record(_record(completedDates=["2024-01-08", "oops", None], excludedDates=["2024-02-30"]))
        assert series.completed_dates == frozenset({date(2024, 1, 8)})
        assert series.excluded_dates == frozenset()

    def test_invalid_time_and_reminder_are_ignored(self):
        series = series_from_record(_record(time={"hour": 25, "minute": 0}, reminder={"hour": "x"}))
        assert series.time is None
        assert series.payload.reminder is None

    def test_missing_created_at_defaults_to_now(self):
        record = _record()
        del record["createdAt"]
        assert series_from_record(record).created_at.tzinfo is not None

    @pytest.mark.parametrize("overrides", [{"id": ""}, {"ownerId": None}, {"date": "01/01/2024"}])
    def test_unreadable_record_raises(self, overrides):
        with pytest.raises(SeriesDecodeError):
            series_from_record(_record(**overrides))

    def test_values_with_braces_are_logged_not_formatted(self, log_messages):
        series = series_from_record(
            _record(
                completedDates=[{"d": 1}, "{oops}", "2024-01-08"],
                time={"hour": 25, "minute": 0},
                reminder={"hour": "x"},
            )
        )
        assert series.completed_dates == frozenset({date(2024, 1, 8)})
        assert series.time is None
        assert any("{'d': 1}" in line for line in log_messages)
        assert any("{'hour': 25, 'minute': 0}" in line for line in log_messages)
        assert all("series_id" in line for line in log_messages if line.startswith("WARNING"))

    def test_load_keeps_records_with_unreadable_optional_fields(self, log_messages):
        loaded = load_series([_record(id="s1", reminder={"hour": "x"}), _record(id="s2", excludedDates=[{"x": 1}])])
        assert [s.id for s in loaded] == ["s1", "s2"]

    def test_load_skips_corrupt_records(self):
        loaded = load_series([_record(id="good"), _record(id="bad", date="never"), _record(id="also-good")])
        assert [s.id for s in loaded] == ["good", "also-good"]
