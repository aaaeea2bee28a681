"""Saved-schedule endpoints keyed by the user's email."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .agent_models import SavedScheduleRequest, SavedScheduleResponse
from .config import Settings, get_settings
from .db.session import database_configured, session_scope
from .normalizer import normalize_schedule
from .repositories.saved_schedules import saved_schedule_repository

router = APIRouter(prefix="/api/user", tags=["user"])
debug_router = APIRouter(prefix="/api/debug", tags=["debug"])
logger = logging.getLogger(__name__)


def _response(saved: Any) -> Dict[str, Any]:
    payload = SavedScheduleResponse(
        exists=True,
        schedule=saved.schedule.to_payload(),
        school=saved.school,
        major=saved.major,
        saved_at=saved.saved_at.isoformat(),
    )
    return payload.model_dump(by_alias=True, exclude_none=True)


@router.get("/schedule")
def get_saved_schedule(
    email: Optional[str] = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    if not email or not email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email is required")
    if not database_configured(settings):
        return {"exists": False}
    with session_scope(commit=False) as session:
        saved = saved_schedule_repository.get(session, email)
    if saved is None:
        return {"exists": False}
    return _response(saved)


@router.put("/schedule")
def save_schedule(
    request: SavedScheduleRequest,
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    if not database_configured(settings):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Schedule storage is not configured")
    schedule = normalize_schedule(request.schedule, default_target=settings.default_target_credits)
    with session_scope() as session:
        saved = saved_schedule_repository.upsert(session, request.email, schedule)
    logger.info("Saved schedule for %s", saved.email)
    return {"success": True, **_response(saved)}


@debug_router.get("/schedule")
def debug_saved_schedule(
    email: Optional[str] = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Summarize what is actually persisted for an email."""
    if not settings.debug_endpoints:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    if not email or not email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="email is required")
    if not database_configured(settings):
        return {"configured": False}
    with session_scope(commit=False) as session:
        saved = saved_schedule_repository.get(session, email)
    if saved is None:
        return {"configured": True, "exists": False}
    plan = saved.schedule
    return {
        "configured": True,
        "exists": True,
        "email": saved.email,
        "savedAt": saved.saved_at.isoformat(),
        "semesterCount": len(plan.semesters),
        "courseCount": sum(len(semester.courses) for semester in plan.academic_semesters()),
        "currentCredits": plan.current_credits(),
        "totalCredits": plan.total_credits,
    }


__all__ = ["debug_router", "debug_saved_schedule", "get_saved_schedule", "router", "save_schedule"]
