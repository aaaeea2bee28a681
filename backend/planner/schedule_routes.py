"""Schedule generation, normalization and edit endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from .agent_models import (
    EditScheduleRequest,
    EditScheduleResponse,
    GenerateScheduleRequest,
    NormalizeScheduleRequest,
    PatchScheduleRequest,
    ScheduleEnvelope,
)
from .cache.schedule_store import ScheduleNotFoundError, ScheduleStore, get_schedule_store
from .config import Settings, get_settings
from .normalizer import normalize_schedule
from .operations import ScheduleOperations
from .schedule_agent import ScheduleAgentError, edit_schedule, generate_schedule, patch_schedule

router = APIRouter(prefix="/api/schedule", tags=["schedule"])
logger = logging.getLogger(__name__)


def _envelope(**fields: Any) -> Dict[str, Any]:
    return ScheduleEnvelope(**fields).model_dump(by_alias=True, exclude_none=True)


@router.post("/generate")
async def generate(
    request: GenerateScheduleRequest,
    settings: Settings = Depends(get_settings),
    store: ScheduleStore = Depends(get_schedule_store),
) -> Dict[str, Any]:
    try:
        plan = await generate_schedule(request, settings)
    except ScheduleAgentError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    handle = store.create(plan)
    logger.info("Generated schedule %s for %s / %s", handle, plan.school, plan.major)
    return _envelope(schedule_id=handle, schedule=plan.to_payload(), version=1)


@router.post("/normalize")
def normalize(
    request: NormalizeScheduleRequest,
    settings: Settings = Depends(get_settings),
    store: ScheduleStore = Depends(get_schedule_store),
) -> Dict[str, Any]:
    defaults = {"school": request.school, "major": request.major}
    plan = normalize_schedule(request.raw, defaults=defaults, default_target=settings.default_target_credits)
    if not request.store:
        return _envelope(schedule=plan.to_payload())
    handle = store.create(plan)
    return _envelope(schedule_id=handle, schedule=plan.to_payload(), version=1)


@router.post("/patch")
async def patch(request: PatchScheduleRequest, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    try:
        plan = await patch_schedule(request.current_schedule, request.edit_request, settings)
    except ScheduleAgentError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return {"schedule": plan.to_payload()}


@router.post("/edit")
async def edit(
    request: EditScheduleRequest,
    settings: Settings = Depends(get_settings),
    store: ScheduleStore = Depends(get_schedule_store),
) -> Dict[str, Any]:
    if request.current_schedule is not None:
        plan = normalize_schedule(request.current_schedule, default_target=settings.default_target_credits)
        handle = store.create(plan)
    else:
        handle = str(request.schedule_id)

    operations = ScheduleOperations(store)
    try:
        answer = await edit_schedule(handle, request.edit_request, operations, settings)
        stored = store.get_with_meta(handle)
    except ScheduleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    except ScheduleAgentError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    response = EditScheduleResponse(
        schedule_id=handle,
        answer=answer,
        schedule=stored.schedule.to_payload(),
        version=stored.version,
        last_action=stored.last_action,
    )
    return response.model_dump(by_alias=True, exclude_none=True)


@router.get("/{schedule_id}")
def get_stored_schedule(schedule_id: str, store: ScheduleStore = Depends(get_schedule_store)) -> Dict[str, Any]:
    try:
        stored = store.get_with_meta(schedule_id)
    except ScheduleNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc
    return _envelope(
        schedule_id=stored.handle,
        schedule=stored.schedule.to_payload(),
        version=stored.version,
        last_action=stored.last_action,
    )


__all__ = ["router"]
