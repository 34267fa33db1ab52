"""Unit tests for calendar-day helpers."""

from datetime import date, datetime

import pytest

from workout_calendar.schedule.dates import (
    days_between,
    days_in_month,
    format_date_key,
    iter_days,
    parse_date_key,
    previous_day,
    sunday_weekday,
)


class TestParseDateKey:
    def test_parses_iso_key(self):
        assert parse_date_key("2024-02-29") == date(2024, 2, 29)

    def test_passes_dates_through(self):
        assert parse_date_key(date(2024, 1, 1)) == date(2024, 1, 1)

    def test_datetime_is_truncated_to_day(self):
        assert parse_date_key(datetime(2024, 1, 1, 23, 59)) == date(2024, 1, 1)

    @pytest.mark.parametrize("value", ["", "not-a-date", "2023-02-29", "2024/01/01", None, 20240101])
    def test_unparseable_returns_none(self, value):
        assert parse_date_key(value) is None


class TestDayArithmetic:
    def test_days_between_across_dst_boundary(self):
        """Whole-day difference is unaffected by clock changes (EU DST starts 2024-03-31)."""
        assert days_between(date(2024, 3, 30), date(2024, 4, 1)) == 2

    def test_days_between_negative(self):
        assert days_between(date(2024, 1, 10), date(2024, 1, 3)) == -7

    def test_sunday_weekday(self):
        assert sunday_weekday(date(2024, 1, 7)) == 0  # Sunday
        assert sunday_weekday(date(2024, 1, 1)) == 1  # Monday
        assert sunday_weekday(date(2024, 1, 6)) == 6  # Saturday

    def test_days_in_month_handles_leap_years(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2023, 2) == 28
        assert days_in_month(2024, 12) == 31

    def test_previous_day_crosses_year(self):
        assert previous_day(date(2024, 1, 1)) == date(2023, 12, 31)

    def test_iter_days_is_inclusive(self):
        assert list(iter_days(date(2024, 1, 30), date(2024, 2, 1))) == [
            date(2024, 1, 30),
            date(2024, 1, 31),
            date(2024, 2, 1),
        ]

    def test_format_date_key_pads(self):
        assert format_date_key(date(2024, 3, 5)) == "2024-03-05"
