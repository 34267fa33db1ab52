"""Tests for ScheduleService, the facade used by views and the completion flow."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from workout_calendar.schedule.errors import SeriesNotFoundError
from workout_calendar.schedule.models import EditScope, RepeatRule, RepeatType, SeriesPatch, SeriesPayload, TimeOfDay
from workout_calendar.schedule.service import ScheduleService
from workout_calendar.schedule.store import SeriesStore

OWNER = "user-1"
OTHER_OWNER = "user-2"
ANCHOR = date(2024, 1, 1)


@pytest.fixture
def service():
    return ScheduleService()


def _weekly(service, name="Push Day", template_id=None):
    return service.create(
        OWNER,
        ANCHOR,
        SeriesPayload(name=name, template_id=template_id),
        RepeatRule(RepeatType.WEEKLY),
        TimeOfDay(7, 0),
    )


class TestCrud:
    def test_create_assigns_id_and_defaults(self, service):
        series = service.create(OWNER, ANCHOR, SeriesPayload(name="Yoga"))
        assert series.id
        assert series.repeat.type == RepeatType.NEVER
        assert series.excluded_dates == frozenset()
        assert series.completed_dates == frozenset()
        assert service.get(OWNER, series.id) == series

    def test_reads_are_owner_scoped(self, service):
        series = _weekly(service)
        assert service.get(OTHER_OWNER, series.id) is None
        assert service.list_for_owner(OTHER_OWNER) == []
        assert service.occurrences_on_date(OTHER_OWNER, ANCHOR) == []

    def test_update_and_delete(self, service):
        series = _weekly(service)
        assert service.update(OWNER, series.id, SeriesPatch(name="Pull Day")).payload.name == "Pull Day"
        service.delete(OWNER, series.id)
        assert service.get(OWNER, series.id) is None

    def test_delete_other_owners_series(self, service):
        series = _weekly(service)
        with pytest.raises(SeriesNotFoundError):
            service.delete(OTHER_OWNER, series.id)


class TestCalendarQueries:
    def test_day_view_reports_completion(self, service):
        series = _weekly(service)
        service.toggle(OWNER, series.id, date(2024, 1, 8))
        [occurrence] = service.occurrences_on_date(OWNER, "2024-01-08")
        assert occurrence.series.id == series.id
        assert occurrence.day == date(2024, 1, 8)
        assert occurrence.completed

    def test_unparseable_day_is_empty(self, service):
        _weekly(service)
        assert service.occurrences_on_date(OWNER, "not-a-date") == []

    def test_unparseable_day_with_braces_is_empty(self, service, log_messages):
        _weekly(service)
        assert service.occurrences_on_date(OWNER, "{oops}") == []
        assert any("'{oops}'" in line for line in log_messages)

    def test_month_view(self, service):
        series = _weekly(service)
        service.toggle(OWNER, series.id, date(2024, 1, 15))
        by_day = service.occurrences_in_month(OWNER, 2024, 1)
        assert sorted(by_day) == [1, 8, 15, 22, 29]
        assert [o.completed for o in by_day[15]] == [True]
        assert [o.completed for o in by_day[22]] == [False]

    def test_range_view(self, service):
        _weekly(service)
        by_day = service.occurrences_in_range(OWNER, date(2024, 1, 2), date(2024, 1, 20))
        assert list(by_day) == [date(2024, 1, 8), date(2024, 1, 15)]

    def test_next_occurrence(self, service):
        series = _weekly(service)
        assert service.next_occurrence(OWNER, series.id, date(2024, 1, 2)) == date(2024, 1, 8)
        with pytest.raises(SeriesNotFoundError):
            service.next_occurrence(OTHER_OWNER, series.id, ANCHOR)


class TestLedger:
    def test_toggle_returns_new_status(self, service):
        series = _weekly(service)
        assert service.toggle(OWNER, series.id, ANCHOR) is True
        assert service.is_completed(OWNER, series.id, ANCHOR)
        assert service.toggle(OWNER, series.id, ANCHOR) is False
        assert not service.is_completed(OWNER, series.id, ANCHOR)

    def test_mark_complete_is_idempotent(self, service):
        series = _weekly(service)
        service.mark_complete(OWNER, series.id, ANCHOR)
        service.mark_complete(OWNER, series.id, ANCHOR)
        assert service.get(OWNER, series.id).completed_dates == frozenset({ANCHOR})


class TestEdits:
    def test_scope_one_delete(self, service):
        series = _weekly(service)
        service.scope_one(OWNER, series.id, date(2024, 1, 8))
        assert service.occurrences_on_date(OWNER, date(2024, 1, 8)) == []
        assert len(service.occurrences_on_date(OWNER, date(2024, 1, 15))) == 1

    def test_scope_one_edit_creates_one_off(self, service):
        series = _weekly(service)
        result = service.scope_one(OWNER, series.id, date(2024, 1, 8), SeriesPatch(name="Light"))
        [occurrence] = service.occurrences_on_date(OWNER, date(2024, 1, 8))
        assert occurrence.series.id == result.created_id
        assert occurrence.series.payload.name == "Light"

    def test_scope_forward_edit(self, service):
        series = _weekly(service)
        result = service.scope_forward(OWNER, series.id, date(2024, 1, 15), SeriesPatch(name="Phase 2"))
        assert [o.series.name for o in service.occurrences_on_date(OWNER, date(2024, 1, 8))] == ["Push Day"]
        assert [o.series.id for o in service.occurrences_on_date(OWNER, date(2024, 1, 22))] == [result.created_id]

    def test_scope_all_delete(self, service):
        series = _weekly(service)
        result = service.scope_all(OWNER, series.id)
        assert result.deleted
        assert service.list_for_owner(OWNER) == []

    def test_edit_dispatches_by_scope(self, service):
        series = _weekly(service)
        service.edit(OWNER, series.id, EditScope.FORWARD, date(2024, 1, 15))
        assert service.get(OWNER, series.id).until_date == date(2024, 1, 14)

    def test_failed_edit_leaves_state_untouched(self, service):
        series = _weekly(service)
        before = service.store.state
        with pytest.raises(SeriesNotFoundError):
            service.scope_one(OTHER_OWNER, series.id, date(2024, 1, 8))
        assert service.store.state is before


class TestCompletionFlow:
    def test_match_by_template(self, service):
        push = _weekly(service, name="Push", template_id="T1")
        pull = _weekly(service, name="Pull", template_id="T2")
        result = service.match_and_complete(OWNER, date(2024, 1, 8), template_id="T2")
        assert result.series_id == pull.id
        assert service.is_completed(OWNER, pull.id, date(2024, 1, 8))
        assert not service.is_completed(OWNER, push.id, date(2024, 1, 8))

    def test_writes_are_persisted_per_owner(self):
        saver = MagicMock()
        service = ScheduleService(SeriesStore(saver=saver))
        series = _weekly(service)
        service.toggle(OWNER, series.id, ANCHOR)
        assert saver.save_owner.call_count == 2
        owner_id, snapshot = saver.save_owner.call_args.args
        assert owner_id == OWNER
        assert snapshot[0].completed_dates == frozenset({ANCHOR})
