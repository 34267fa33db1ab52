"""Root conftest for all tests.

Shared series builders.
"""

import itertools
import os
from datetime import date

import pytest
from loguru import logger

# Settings are read at import time; keep tests off the default SQLite file.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PERSISTENCE_ENABLED", "false")

from workout_calendar.schedule.models import RepeatRule, Series, SeriesPayload  # noqa: E402
from workout_calendar.schedule.store import ScheduleState  # noqa: E402

OWNER = "user-1"


@pytest.fixture
def make_series():
    """Factory for Series with sensible defaults and unique ids."""
    counter = itertools.count(1)

    def _make(
        anchor: date = date(2024, 1, 1),
        repeat: RepeatRule | None = None,
        *,
        owner_id: str = OWNER,
        series_id: str | None = None,
        name: str = "Push Day",
        template_id: str | None = None,
        **fields,
    ) -> Series:
        return Series(
            id=series_id or f"series-{next(counter)}",
            owner_id=owner_id,
            anchor_date=anchor,
            payload=SeriesPayload(name=name, template_id=template_id, tag_color="#ff0000"),
            repeat=repeat or RepeatRule.never(),
            **fields,
        )

    return _make


@pytest.fixture
def state_of():
    """Build a ScheduleState from series."""

    def _state(*series: Series) -> ScheduleState:
        return ScheduleState.from_series(series)

    return _state


@pytest.fixture
def log_messages():
    """Capture loguru output at DEBUG level as a list of formatted lines."""
    messages: list[str] = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level} {message} {extra}")
    yield messages
    logger.remove(handler_id)
