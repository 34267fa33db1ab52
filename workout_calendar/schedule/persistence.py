"""Persistence boundary for series.

The in-memory ScheduleState is authoritative. After a commit the store hands
the changed owner's snapshot here; WriteBehindSaver queues it on a single
worker thread so rows reach the database in commit order without blocking the
caller.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from workout_calendar.db.models import WorkoutSeriesRecord
from workout_calendar.db.session import get_session
from workout_calendar.schedule.models import Series
from workout_calendar.schedule.serialization import load_series, series_to_record
from workout_calendar.schedule.store import ScheduleState


class SqlSeriesRepository:
    """Reads and writes series records through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory

    def load_state(self) -> ScheduleState:
        """Load every readable series into a fresh ScheduleState."""
        with get_session(self._session_factory) as session:
            records = [row.record for row in session.execute(select(WorkoutSeriesRecord)).scalars()]
        series = load_series(records)
        logger.info("Loaded {} series from database", len(series), skipped=len(records) - len(series))
        return ScheduleState.from_series(series)

    def load_owner(self, owner_id: str) -> list[Series]:
        with get_session(self._session_factory) as session:
            records = [
                row.record
                for row in session.execute(
                    select(WorkoutSeriesRecord).where(WorkoutSeriesRecord.owner_id == owner_id)
                ).scalars()
            ]
        return load_series(records)

    def save_owner(self, owner_id: str, series: tuple[Series, ...]) -> None:
        """Replace the owner's rows with ``series`` in one transaction."""
        keep_ids = [s.id for s in series]
        with get_session(self._session_factory) as session:
            session.execute(
                delete(WorkoutSeriesRecord).where(
                    WorkoutSeriesRecord.owner_id == owner_id,
                    WorkoutSeriesRecord.id.not_in(keep_ids),
                )
            )
            for item in series:
                session.merge(WorkoutSeriesRecord(owner_id=owner_id, id=item.id, record=series_to_record(item)))
            session.commit()
        logger.debug("Persisted series snapshot", owner_id=owner_id, series_count=len(series))


class WriteBehindSaver:
    """Queues owner snapshots for a repository on one background thread."""

    def __init__(self, repository: SqlSeriesRepository) -> None:
        self._repository = repository
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="series-saver")

    def _save(self, owner_id: str, series: tuple[Series, ...]) -> None:
        try:
            self._repository.save_owner(owner_id, series)
        except Exception:
            logger.exception("Failed to persist series snapshot", owner_id=owner_id)

    def save_owner(self, owner_id: str, series: tuple[Series, ...]) -> Future:
        return self._executor.submit(self._save, owner_id, series)

    def flush(self) -> None:
        """Block until every snapshot queued so far has been written."""
        self._executor.submit(lambda: None).result()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
