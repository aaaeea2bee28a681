"""Process-local registry of schedules being edited, keyed by opaque handles."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from threading import RLock
from typing import Callable, Dict, Iterator, List, Optional

from ..config import get_settings
from ..errors import NotFoundError
from ..schedule_models import SchedulePlan
from ..telemetry import emit_event

logger = logging.getLogger(__name__)

SCHEDULE_NOT_FOUND_MESSAGE = "Schedule not found or expired"


class ScheduleNotFoundError(NotFoundError):
    def __init__(self, handle: str) -> None:
        super().__init__(SCHEDULE_NOT_FOUND_MESSAGE, field="scheduleId")
        self.handle = handle


@dataclass
class _StoreEntry:
    schedule: SchedulePlan
    expires_at: float
    version: int
    last_modified: float
    last_action: Optional[str] = None


@dataclass(frozen=True)
class StoredSchedule:
    """Snapshot of a stored schedule together with its bookkeeping."""

    handle: str
    schedule: SchedulePlan
    version: int
    last_action: Optional[str]


class ScheduleStore:
    """Schedules expire ``ttl_seconds`` after they were last read or written.

    Expired entries are evicted lazily on access or in bulk via ``purge_expired``.
    Callers that read, modify and write back must hold ``lock(handle)`` for the whole
    sequence; locks for different handles are independent.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, _StoreEntry] = {}
        self._handle_locks: Dict[str, RLock] = {}
        self._lock = RLock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def create(self, schedule: SchedulePlan) -> str:
        handle = uuid.uuid4().hex
        now = self._clock()
        with self._lock:
            self._entries[handle] = _StoreEntry(
                schedule=schedule.model_copy(deep=True),
                expires_at=now + self._ttl,
                version=1,
                last_modified=now,
            )
            self._handle_locks[handle] = RLock()
        emit_event("schedule_created", handle=handle, semesters=len(schedule.semesters))
        return handle

    def _live_entry(self, handle: str) -> _StoreEntry:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(handle)
            if entry is None:
                raise ScheduleNotFoundError(handle)
            if entry.expires_at <= now:
                self._evict(handle)
                raise ScheduleNotFoundError(handle)
            entry.expires_at = now + self._ttl
            return entry

    def _evict(self, handle: str) -> None:
        self._entries.pop(handle, None)
        self._handle_locks.pop(handle, None)
        logger.info("Schedule %s expired", handle)
        emit_event("schedule_expired", handle=handle)

    def get(self, handle: str) -> SchedulePlan:
        with self._lock:
            entry = self._live_entry(handle)
            return entry.schedule.model_copy(deep=True)

    def get_with_meta(self, handle: str) -> StoredSchedule:
        with self._lock:
            entry = self._live_entry(handle)
            return StoredSchedule(
                handle=handle,
                schedule=entry.schedule.model_copy(deep=True),
                version=entry.version,
                last_action=entry.last_action,
            )

    def update(self, handle: str, schedule: SchedulePlan, action: str) -> int:
        """Replace the stored schedule, returning the new version number."""
        now = self._clock()
        with self._lock:
            entry = self._live_entry(handle)
            entry.schedule = schedule.model_copy(deep=True)
            entry.version += 1
            entry.last_modified = now
            entry.last_action = action
            entry.expires_at = now + self._ttl
            version = entry.version
        logger.debug("Updated schedule %s to version %s via %s", handle, version, action)
        emit_event("schedule_updated", handle=handle, action=action, version=version)
        return version

    def delete(self, handle: str) -> None:
        with self._lock:
            self._entries.pop(handle, None)
            self._handle_locks.pop(handle, None)

    def purge_expired(self) -> List[str]:
        now = self._clock()
        with self._lock:
            expired = [handle for handle, entry in self._entries.items() if entry.expires_at <= now]
            for handle in expired:
                self._evict(handle)
        return expired

    def active_count(self) -> int:
        self.purge_expired()
        with self._lock:
            return len(self._entries)

    @contextmanager
    def lock(self, handle: str) -> Iterator[None]:
        with self._lock:
            self._live_entry(handle)
            handle_lock = self._handle_locks.setdefault(handle, RLock())
        with handle_lock:
            yield

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._handle_locks.clear()


@lru_cache
def get_schedule_store() -> ScheduleStore:
    return ScheduleStore(ttl_seconds=get_settings().schedule_ttl_seconds)


__all__ = [
    "SCHEDULE_NOT_FOUND_MESSAGE",
    "ScheduleNotFoundError",
    "ScheduleStore",
    "StoredSchedule",
    "get_schedule_store",
]
