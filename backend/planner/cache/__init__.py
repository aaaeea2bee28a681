"""In-memory schedule state shared across tool calls."""

from .schedule_store import ScheduleNotFoundError, ScheduleStore, StoredSchedule, get_schedule_store

__all__ = ["ScheduleNotFoundError", "ScheduleStore", "StoredSchedule", "get_schedule_store"]
