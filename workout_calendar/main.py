from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from workout_calendar.api.schedule import router as schedule_router
from workout_calendar.config.settings import settings
from workout_calendar.core.logger import setup_logger
from workout_calendar.db.session import create_tables
from workout_calendar.schedule.errors import (
    DuplicateSeriesError,
    OccurrenceNotFoundError,
    SeriesNotFoundError,
)
from workout_calendar.schedule.persistence import SqlSeriesRepository, WriteBehindSaver
from workout_calendar.schedule.service import ScheduleService
from workout_calendar.schedule.store import SeriesStore


def build_schedule_service() -> tuple[ScheduleService, WriteBehindSaver | None]:
    """Load persisted series and wire the write-behind saver.

    Returns:
        (service, saver) where saver is None when persistence is disabled
    """
    if not settings.persistence_enabled:
        logger.warning("Persistence disabled; schedule changes will not survive a restart")
        return ScheduleService(search_horizon_days=settings.schedule_search_horizon_days), None

    logger.info("Ensuring database tables exist")
    create_tables()
    repository = SqlSeriesRepository()
    saver = WriteBehindSaver(repository)
    store = SeriesStore(repository.load_state(), saver)
    return ScheduleService(store, search_horizon_days=settings.schedule_search_horizon_days), saver


def create_app(service: ScheduleService | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        service: Pre-built service (tests); when None the lifespan builds one
            from the configured database.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logger(level=settings.log_level, log_file=settings.log_file, serialize=settings.log_serialize)
        saver = None
        if getattr(app.state, "schedule_service", None) is None:
            app.state.schedule_service, saver = build_schedule_service()
        logger.info("Workout calendar service started")
        yield
        if saver is not None:
            logger.info("Flushing pending series snapshots")
            saver.shutdown()
        logger.info("Workout calendar service stopped")

    app = FastAPI(title="Workout Calendar", lifespan=lifespan)
    if service is not None:
        app.state.schedule_service = service

    @app.exception_handler(SeriesNotFoundError)
    @app.exception_handler(OccurrenceNotFoundError)
    async def not_found_handler(_request: Request, exc: LookupError) -> JSONResponse:
        logger.info(f"Schedule lookup failed: {exc}")
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(DuplicateSeriesError)
    async def duplicate_handler(_request: Request, exc: DuplicateSeriesError) -> JSONResponse:
        logger.warning(f"Duplicate series rejected: {exc}")
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(schedule_router)
    return app


app = create_app()
