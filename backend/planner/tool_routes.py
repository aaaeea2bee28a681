"""HTTP surface for schedule tools invoked by agents or clients."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends
from starlette.responses import JSONResponse

from .cache.schedule_store import get_schedule_store
from .operations import ScheduleOperations
from .tools import TOOL_HANDLERS, invoke_tool

router = APIRouter(prefix="/api/tools", tags=["tools"])
logger = logging.getLogger(__name__)


def get_schedule_operations() -> ScheduleOperations:
    return ScheduleOperations(get_schedule_store())


@router.get("")
def list_tools() -> Dict[str, List[str]]:
    return {"tools": sorted(name.replace("_", "-") for name in TOOL_HANDLERS)}


# Must stay sync: store locks are threading locks and this runs in the threadpool.
@router.post("/{tool_name}")
def call_tool(
    tool_name: str,
    body: Any = Body(default=None),
    operations: ScheduleOperations = Depends(get_schedule_operations),
) -> JSONResponse:
    status_code, response = invoke_tool(tool_name, body, operations)
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json", exclude_none=True))


__all__ = ["call_tool", "get_schedule_operations", "list_tools", "router"]
