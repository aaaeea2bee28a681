"""Persistence repositories."""

from .saved_schedules import SavedSchedule, SavedScheduleRepository, normalize_email, saved_schedule_repository

__all__ = ["SavedSchedule", "SavedScheduleRepository", "normalize_email", "saved_schedule_repository"]
