"""Database-backed store of users' finished schedules, keyed by email."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..db.models import SavedScheduleModel
from ..schedule_models import SchedulePlan
from ..telemetry import emit_event


def normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    if not normalized:
        raise ValueError("Email cannot be empty.")
    return normalized


@dataclass(frozen=True)
class SavedSchedule:
    email: str
    schedule: SchedulePlan
    school: str
    major: str
    saved_at: datetime


class SavedScheduleRepository:
    def get(self, session: Session, email: str) -> SavedSchedule | None:
        normalized = normalize_email(email)
        stmt = select(SavedScheduleModel).where(SavedScheduleModel.email == normalized)
        model = session.execute(stmt).scalar_one_or_none()
        if model is None:
            return None
        return self._to_domain(model)

    def upsert(self, session: Session, email: str, schedule: SchedulePlan) -> SavedSchedule:
        normalized = normalize_email(email)
        stmt = select(SavedScheduleModel).where(SavedScheduleModel.email == normalized)
        model = session.execute(stmt).scalar_one_or_none()
        payload = schedule.to_payload()
        if model is None:
            model = SavedScheduleModel(email=normalized, schedule=payload)
            session.add(model)
        else:
            model.schedule = payload
        model.school = schedule.school
        model.major = schedule.major
        session.flush()
        emit_event("saved_schedule_upserted", email=normalized, semesters=len(schedule.semesters))
        return self._to_domain(model)

    def delete(self, session: Session, email: str) -> bool:
        normalized = normalize_email(email)
        result = session.execute(delete(SavedScheduleModel).where(SavedScheduleModel.email == normalized))
        return bool(result.rowcount)

    @staticmethod
    def _to_domain(model: SavedScheduleModel) -> SavedSchedule:
        return SavedSchedule(
            email=model.email,
            schedule=SchedulePlan.model_validate(model.schedule),
            school=model.school,
            major=model.major,
            saved_at=model.updated_at,
        )


saved_schedule_repository = SavedScheduleRepository()

__all__ = ["SavedSchedule", "SavedScheduleRepository", "normalize_email", "saved_schedule_repository"]
