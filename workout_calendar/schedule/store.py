"""Series store.

ScheduleState is an immutable value partitioned by owner. The module-level
functions are pure: they take a state and return a new one. SeriesStore is the
narrow transactional wrapper that holds the current state, swaps it on commit
and hands the changed owner's snapshot to the persistence collaborator.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, NamedTuple, Protocol, TypeVar

from loguru import logger

from workout_calendar.schedule.errors import DuplicateSeriesError, SeriesNotFoundError
from workout_calendar.schedule.models import Series, SeriesPatch

T = TypeVar("T")

_EMPTY: Mapping[str, Series] = MappingProxyType({})


def new_series_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ScheduleState:
    """All series for all owners. Never mutated in place."""

    owners: Mapping[str, Mapping[str, Series]] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_series(cls, series: Iterable[Series]) -> ScheduleState:
        owners: dict[str, dict[str, Series]] = {}
        for item in series:
            owners.setdefault(item.owner_id, {})[item.id] = item
        return cls(MappingProxyType({owner: MappingProxyType(items) for owner, items in owners.items()}))

    def partition(self, owner_id: str) -> Mapping[str, Series]:
        return self.owners.get(owner_id, _EMPTY)

    def list_for_owner(self, owner_id: str) -> list[Series]:
        return list(self.partition(owner_id).values())

    def get(self, owner_id: str, series_id: str) -> Series | None:
        return self.partition(owner_id).get(series_id)

    def require(self, owner_id: str, series_id: str) -> Series:
        """Get a series or raise SeriesNotFoundError."""
        series = self.get(owner_id, series_id)
        if series is None:
            raise SeriesNotFoundError(owner_id, series_id)
        return series

    def _with_partition(self, owner_id: str, partition: dict[str, Series]) -> ScheduleState:
        owners = dict(self.owners)
        if partition:
            owners[owner_id] = MappingProxyType(partition)
        else:
            owners.pop(owner_id, None)
        return ScheduleState(MappingProxyType(owners))


class CreateResult(NamedTuple):
    state: ScheduleState
    series: Series


def create_series(
    state: ScheduleState,
    series: Series,
    id_factory: Callable[[], str] = new_series_id,
) -> CreateResult:
    """Add a series to its owner's partition.

    Args:
        state: Current state
        series: Series to add; an empty id is replaced by a generated one
        id_factory: Id generator

    Returns:
        CreateResult with the new state and the stored series

    Raises:
        DuplicateSeriesError: If the id already exists for the owner
    """
    if not series.id:
        series = replace(series, id=id_factory())
    partition = dict(state.partition(series.owner_id))
    if series.id in partition:
        raise DuplicateSeriesError(series.owner_id, series.id)
    partition[series.id] = series
    return CreateResult(state._with_partition(series.owner_id, partition), series)


def replace_series(state: ScheduleState, series: Series) -> ScheduleState:
    """Swap an existing series for a new version with the same id."""
    state.require(series.owner_id, series.id)
    partition = dict(state.partition(series.owner_id))
    partition[series.id] = series
    return state._with_partition(series.owner_id, partition)


def remove_series(state: ScheduleState, owner_id: str, series_id: str) -> ScheduleState:
    state.require(owner_id, series_id)
    partition = dict(state.partition(owner_id))
    del partition[series_id]
    return state._with_partition(owner_id, partition)


def update_series(state: ScheduleState, owner_id: str, series_id: str, patch: SeriesPatch) -> ScheduleState:
    return replace_series(state, patch.apply(state.require(owner_id, series_id)))


class SnapshotSaver(Protocol):
    """Persistence collaborator fed after every successful commit."""

    def save_owner(self, owner_id: str, series: tuple[Series, ...]) -> None: ...


def _state_of(result: Any) -> ScheduleState:
    if isinstance(result, ScheduleState):
        return result
    return result.state


class SeriesStore:
    """Holds the current ScheduleState and commits replacements atomically.

    Reads are always served from memory. Persistence happens after the
    in-memory swap and its failures never undo a commit.
    """

    def __init__(self, state: ScheduleState | None = None, saver: SnapshotSaver | None = None) -> None:
        self._state = state or ScheduleState()
        self._saver = saver
        self._lock = threading.Lock()

    @property
    def state(self) -> ScheduleState:
        return self._state

    def apply(self, owner_id: str, operation: Callable[[ScheduleState], T]) -> T:
        """Run ``operation`` on the current state and commit what it returns.

        ``operation`` returns either a ScheduleState or a result object with a
        ``state`` attribute. If it raises, nothing is committed.

        The snapshot is handed to the saver while the lock is held, so savers
        receive snapshots in commit order.
        """
        with self._lock:
            result = operation(self._state)
            new_state = _state_of(result)
            changed = new_state.partition(owner_id) is not self._state.partition(owner_id)
            self._state = new_state
            if changed:
                self._persist(owner_id, new_state)
        return result

    def _persist(self, owner_id: str, state: ScheduleState) -> None:
        if self._saver is None:
            return
        try:
            self._saver.save_owner(owner_id, tuple(state.list_for_owner(owner_id)))
        except Exception:
            logger.exception("Failed to hand off series snapshot for persistence", owner_id=owner_id)

    def create(self, owner_id: str, series: Series) -> str:
        if series.owner_id != owner_id:
            series = replace(series, owner_id=owner_id)
        _, stored = self.apply(owner_id, lambda state: create_series(state, series))
        logger.info("Series created", owner_id=owner_id, series_id=stored.id, repeat=str(stored.repeat.type))
        return stored.id

    def get(self, owner_id: str, series_id: str) -> Series | None:
        return self._state.get(owner_id, series_id)

    def list_for_owner(self, owner_id: str) -> list[Series]:
        return self._state.list_for_owner(owner_id)

    def update(self, owner_id: str, series_id: str, patch: SeriesPatch) -> Series:
        state = self.apply(owner_id, lambda state: update_series(state, owner_id, series_id, patch))
        logger.info("Series updated", owner_id=owner_id, series_id=series_id)
        return state.require(owner_id, series_id)

    def delete(self, owner_id: str, series_id: str) -> None:
        self.apply(owner_id, lambda state: remove_series(state, owner_id, series_id))
        logger.info("Series deleted", owner_id=owner_id, series_id=series_id)
