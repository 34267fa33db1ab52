"""Schedule API endpoints.

Series CRUD, scoped edits, calendar queries and completion tracking. Domain
errors (not found, duplicate) are translated to HTTP status codes by the
handlers registered in ``workout_calendar.main``.
"""

from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status
from loguru import logger

from workout_calendar.api.dependencies import get_current_user_id, get_schedule_service
from workout_calendar.api.schemas import (
    CalendarDayResponse,
    CalendarMonthResponse,
    CalendarRangeResponse,
    EditResponse,
    MatchRequest,
    MatchResponse,
    NextOccurrenceResponse,
    OccurrenceResponse,
    ReminderSchema,
    RepeatSchema,
    SeriesCreateRequest,
    SeriesListResponse,
    SeriesPatchRequest,
    SeriesResponse,
    TimeSchema,
    ToggleResponse,
)
from workout_calendar.schedule.dates import format_date_key
from workout_calendar.schedule.editor import EditResult
from workout_calendar.schedule.models import EditScope, Series
from workout_calendar.schedule.service import ScheduledOccurrence, ScheduleService

router = APIRouter(prefix="/schedule", tags=["schedule"])

MAX_RANGE_DAYS = 366


def _series_response(series: Series) -> SeriesResponse:
    payload = series.payload
    return SeriesResponse(
        id=series.id,
        name=payload.name,
        date=format_date_key(series.anchor_date),
        time=TimeSchema(hour=series.time.hour, minute=series.time.minute) if series.time else None,
        repeat=RepeatSchema.from_domain(series.repeat),
        description=payload.description,
        tag_id=payload.tag_id,
        tag_color=payload.tag_color,
        template_id=payload.template_id,
        template_name=payload.template_name,
        reminder=(
            ReminderSchema(
                enabled=payload.reminder.enabled,
                hour=payload.reminder.hour,
                minute=payload.reminder.minute,
            )
            if payload.reminder
            else None
        ),
        excluded_dates=sorted(format_date_key(d) for d in series.excluded_dates),
        completed_dates=sorted(format_date_key(d) for d in series.completed_dates),
        until_date=format_date_key(series.until_date) if series.until_date else None,
        created_at=series.created_at,
    )


def _occurrence_response(occurrence: ScheduledOccurrence) -> OccurrenceResponse:
    series = occurrence.series
    return OccurrenceResponse(
        series_id=series.id,
        date=format_date_key(occurrence.day),
        name=series.payload.name,
        time=str(series.time) if series.time else None,
        tag_color=series.payload.tag_color,
        template_id=series.payload.template_id,
        recurring=series.repeat.is_recurring,
        completed=occurrence.completed,
    )


def _edit_response(result: EditResult) -> EditResponse:
    return EditResponse(series_id=result.series_id, created_id=result.created_id, deleted=result.deleted)


# ============================================================================
# Series
# ============================================================================


@router.get("/series", response_model=SeriesListResponse)
def list_series(
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> SeriesListResponse:
    return SeriesListResponse(series=[_series_response(s) for s in service.list_for_owner(user_id)])


@router.post("/series", response_model=SeriesResponse, status_code=status.HTTP_201_CREATED)
def create_series(
    request: SeriesCreateRequest,
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> SeriesResponse:
    series = service.create(
        user_id,
        request.date,
        request.payload(),
        repeat=request.repeat.to_domain(),
        time=request.time.to_domain() if request.time else None,
    )
    return _series_response(series)


@router.get("/series/{series_id}", response_model=SeriesResponse)
def get_series(
    series_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> SeriesResponse:
    series = service.get(user_id, series_id)
    if series is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Series not found")
    return _series_response(series)


@router.delete("/series/{series_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_series(
    series_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> Response:
    service.delete(user_id, series_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/series/{series_id}", response_model=EditResponse)
def edit_series(
    series_id: str,
    request: SeriesPatchRequest,
    scope: EditScope = Query(default=EditScope.ALL),
    on: date | None = Query(default=None, alias="date", description="Occurrence date, required for one/forward"),
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> EditResponse:
    if scope != EditScope.ALL and on is None:
        raise HTTPException(status_code=422, detail=f"scope={scope} requires date")
    result = service.edit(user_id, series_id, scope, on, request.to_domain())
    return _edit_response(result)


@router.delete("/series/{series_id}/occurrences/{day}", response_model=EditResponse)
def delete_occurrence(
    series_id: str,
    day: date,
    scope: EditScope = Query(default=EditScope.ONE),
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> EditResponse:
    result = service.edit(user_id, series_id, scope, day)
    return _edit_response(result)


@router.get("/series/{series_id}/next", response_model=NextOccurrenceResponse)
def get_next_occurrence(
    series_id: str,
    after: date = Query(description="Exclusive lower bound (YYYY-MM-DD)"),
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> NextOccurrenceResponse:
    next_day = service.next_occurrence(user_id, series_id, after)
    return NextOccurrenceResponse(
        series_id=series_id,
        after=format_date_key(after),
        next_date=format_date_key(next_day) if next_day else None,
    )


# ============================================================================
# Completion
# ============================================================================


@router.post("/series/{series_id}/completions/{day}", response_model=ToggleResponse)
def toggle_completion(
    series_id: str,
    day: date,
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> ToggleResponse:
    completed = service.toggle(user_id, series_id, day)
    return ToggleResponse(series_id=series_id, date=format_date_key(day), completed=completed)


@router.post("/completions/match", response_model=MatchResponse)
def match_saved_workout(
    request: MatchRequest,
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> MatchResponse:
    result = service.match_and_complete(user_id, request.date, request.template_id, request.name)
    return MatchResponse(series_id=result.series_id, reason=str(result.reason), already_completed=result.already_completed)


# ============================================================================
# Calendar
# ============================================================================


@router.get("/calendar/day/{day}", response_model=CalendarDayResponse)
def get_day(
    day: date,
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> CalendarDayResponse:
    occurrences = service.occurrences_on_date(user_id, day)
    return CalendarDayResponse(date=format_date_key(day), occurrences=[_occurrence_response(o) for o in occurrences])


@router.get("/calendar/month/{year}/{month}", response_model=CalendarMonthResponse)
def get_month(
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=1, le=12),
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> CalendarMonthResponse:
    by_day = service.occurrences_in_month(user_id, year, month)
    logger.debug("Month view computed", user_id=user_id, year=year, month=month, days=len(by_day))
    return CalendarMonthResponse(
        year=year,
        month=month,
        days={day: [_occurrence_response(o) for o in occurrences] for day, occurrences in by_day.items()},
    )


@router.get("/calendar/range", response_model=CalendarRangeResponse)
def get_range(
    start: date = Query(description="First day (YYYY-MM-DD)"),
    end: date = Query(description="Last day, inclusive (YYYY-MM-DD)"),
    user_id: str = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service),
) -> CalendarRangeResponse:
    if end < start:
        raise HTTPException(status_code=422, detail="end must not be before start")
    if end - start > timedelta(days=MAX_RANGE_DAYS):
        raise HTTPException(
            status_code=422,
            detail=f"Range is limited to {MAX_RANGE_DAYS} days",
        )
    by_day = service.occurrences_in_range(user_id, start, end)
    return CalendarRangeResponse(
        start=format_date_key(start),
        end=format_date_key(end),
        days={format_date_key(day): [_occurrence_response(o) for o in occurrences] for day, occurrences in by_day.items()},
    )
