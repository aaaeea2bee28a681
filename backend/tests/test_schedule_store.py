"""Schedule store expiry, isolation and locking."""

from __future__ import annotations

import threading
from typing import List

import pytest

from planner.cache.schedule_store import (
    SCHEDULE_NOT_FOUND_MESSAGE,
    ScheduleNotFoundError,
    ScheduleStore,
)
from planner.schedule_models import AcademicSemester, Course, SchedulePlan
from planner.telemetry import TelemetryEvent, clear_listeners, register_listener


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _plan() -> SchedulePlan:
    return SchedulePlan(
        school="Northeastern University",
        major="Computer Science",
        total_credits=8,
        semesters=[
            AcademicSemester(
                term="Fall 2025",
                courses=[
                    Course(code="CS 1800", name="Discrete Structures", credits=4),
                    Course(code="CS 2500", name="Fundamentals of CS 1", credits=4),
                ],
            )
        ],
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> ScheduleStore:
    return ScheduleStore(ttl_seconds=60, clock=clock)


@pytest.fixture
def events() -> List[TelemetryEvent]:
    collected: List[TelemetryEvent] = []
    register_listener(collected.append)
    yield collected
    clear_listeners()


def test_create_returns_distinct_handles(store: ScheduleStore) -> None:
    first = store.create(_plan())
    second = store.create(_plan())

    assert first != second
    assert store.active_count() == 2


def test_get_returns_isolated_copies(store: ScheduleStore) -> None:
    handle = store.create(_plan())

    copy = store.get(handle)
    copy.semesters[0].courses.clear()
    copy.school = "Elsewhere"

    fresh = store.get(handle)
    assert fresh.school == "Northeastern University"
    assert len(fresh.semesters[0].courses) == 2


def test_create_copies_the_input(store: ScheduleStore) -> None:
    plan = _plan()
    handle = store.create(plan)
    plan.major = "Changed"

    assert store.get(handle).major == "Computer Science"


def test_unknown_handle_raises_not_found(store: ScheduleStore) -> None:
    with pytest.raises(ScheduleNotFoundError) as excinfo:
        store.get("missing")

    assert str(excinfo.value) == SCHEDULE_NOT_FOUND_MESSAGE
    assert excinfo.value.status_code == 404


def test_entries_expire_after_ttl(store: ScheduleStore, clock: FakeClock, events: List[TelemetryEvent]) -> None:
    handle = store.create(_plan())

    clock.advance(60)

    with pytest.raises(ScheduleNotFoundError):
        store.get(handle)
    assert [event.payload["handle"] for event in events if event.name == "schedule_expired"] == [handle]


def test_reads_extend_expiry(store: ScheduleStore, clock: FakeClock) -> None:
    handle = store.create(_plan())

    clock.advance(36)
    store.get(handle)
    clock.advance(36)

    assert store.get(handle).school == "Northeastern University"

    clock.advance(60)
    with pytest.raises(ScheduleNotFoundError):
        store.get(handle)


def test_meta_reads_and_locks_extend_expiry(store: ScheduleStore, clock: FakeClock) -> None:
    handle = store.create(_plan())

    clock.advance(50)
    store.get_with_meta(handle)
    clock.advance(50)
    with store.lock(handle):
        pass
    clock.advance(50)

    assert store.get_with_meta(handle).version == 1


def test_update_bumps_version_and_extends_expiry(store: ScheduleStore, clock: FakeClock) -> None:
    handle = store.create(_plan())
    clock.advance(50)

    plan = store.get(handle)
    plan.major = "Data Science"
    version = store.update(handle, plan, "set_major")
    clock.advance(50)

    meta = store.get_with_meta(handle)
    assert version == 2
    assert meta.version == 2
    assert meta.last_action == "set_major"
    assert meta.schedule.major == "Data Science"


def test_update_of_expired_handle_fails(store: ScheduleStore, clock: FakeClock) -> None:
    handle = store.create(_plan())
    clock.advance(61)

    with pytest.raises(ScheduleNotFoundError):
        store.update(handle, _plan(), "late_write")


def test_purge_expired_removes_only_stale_entries(store: ScheduleStore, clock: FakeClock) -> None:
    stale = store.create(_plan())
    clock.advance(30)
    fresh = store.create(_plan())
    clock.advance(31)

    assert store.purge_expired() == [stale]
    assert store.active_count() == 1
    assert store.get(fresh).school == "Northeastern University"


def test_delete_and_lock_on_missing_handle(store: ScheduleStore) -> None:
    handle = store.create(_plan())
    store.delete(handle)

    with pytest.raises(ScheduleNotFoundError):
        with store.lock(handle):
            pass


def test_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ScheduleStore(ttl_seconds=0)


def test_concurrent_locked_updates_are_not_lost() -> None:
    store = ScheduleStore(ttl_seconds=600)
    handle = store.create(SchedulePlan(semesters=[AcademicSemester(term="Fall 2025")]))
    start = threading.Barrier(20)

    def add(index: int) -> None:
        start.wait()
        with store.lock(handle):
            plan = store.get(handle)
            semester = plan.semesters[0]
            plan.semesters[0] = semester.with_courses(
                [*semester.courses, Course(code=f"CS {1000 + index}", name="Course", credits=1)]
            )
            store.update(handle, plan, "add_course")

    threads = [threading.Thread(target=add, args=(index,)) for index in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    meta = store.get_with_meta(handle)
    assert len(meta.schedule.semesters[0].courses) == 20
    assert meta.schedule.semesters[0].total_credits == 20
    assert meta.version == 21


def test_lifecycle_events_are_emitted(store: ScheduleStore, events: List[TelemetryEvent]) -> None:
    handle = store.create(_plan())
    store.update(handle, store.get(handle), "noop")

    names = [event.name for event in events]
    assert names == ["schedule_created", "schedule_updated"]
    assert events[1].payload == {"handle": handle, "action": "noop", "version": 2}
