"""ORM models backing saved schedules."""

from __future__ import annotations

import uuid

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin


class SavedScheduleModel(TimestampMixin, Base):
    __tablename__ = "saved_schedules"
    __table_args__ = (Index("ix_saved_schedules_email", "email", unique=True),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    school: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    major: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    schedule: Mapped[dict] = mapped_column(JSON, nullable=False)


__all__ = ["SavedScheduleModel"]
