"""Name-based dispatch of schedule operations for HTTP and agent tool calls."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .agent_models import ToolResponse
from .errors import ToolError
from .operations import OperationResult, ScheduleOperations
from .telemetry import emit_event

logger = logging.getLogger(__name__)

ToolHandler = Callable[[ScheduleOperations, Any, Dict[str, Any]], OperationResult]

_ENVELOPE_KEYS = {"parameters", "tool_name", "request_id"}

TOOL_HANDLERS: Dict[str, ToolHandler] = {}


def canonical_tool_name(name: str) -> str:
    return name.strip().lower().replace("-", "_")


def _tool(name: str) -> Callable[[ToolHandler], ToolHandler]:
    def register(handler: ToolHandler) -> ToolHandler:
        TOOL_HANDLERS[name] = handler
        return handler

    return register


def extract_parameters(body: Any) -> Dict[str, Any]:
    """Merge nested ``parameters`` over flat top-level keys.

    Agent platforms post ``{"tool_name": ..., "parameters": {...}}`` while direct callers
    send the arguments flat; a nested value wins whenever it is present.
    """
    if not isinstance(body, Mapping):
        return {}
    merged = {key: value for key, value in body.items() if key not in _ENVELOPE_KEYS}
    nested = body.get("parameters")
    if isinstance(nested, str):
        try:
            nested = json.loads(nested)
        except ValueError:
            logger.warning("Ignoring tool parameters that are not valid JSON")
            nested = None
    if isinstance(nested, Mapping):
        for key, value in nested.items():
            if value is not None and value != "":
                merged[key] = value
            else:
                merged.setdefault(key, value)
    return merged


def _param(params: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = params.get(name)
        if value is not None and value != "":
            return value
    return None


def _handle(params: Mapping[str, Any]) -> Any:
    return _param(params, "scheduleId", "schedule_id")


@_tool("add_course")
def _add_course(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.add_course(
        handle,
        to_term=_param(params, "toSemester", "toTerm", "term"),
        code=_param(params, "courseCode", "code"),
        name=_param(params, "courseName", "name"),
        credits=_param(params, "credits"),
        options=_param(params, "options"),
    )


@_tool("remove_course")
def _remove_course(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.remove_course(handle, code=_param(params, "courseCode", "code"))


@_tool("move_course")
def _move_course(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.move_course(
        handle,
        code=_param(params, "courseCode", "code"),
        to_term=_param(params, "toSemester", "toTerm", "term"),
    )


@_tool("swap_courses")
def _swap_courses(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.swap_courses(
        handle,
        code1=_param(params, "courseCode1", "code1"),
        code2=_param(params, "courseCode2", "code2"),
    )


@_tool("remove_semester")
def _remove_semester(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.remove_semester(handle, term=_param(params, "term"), force=_param(params, "force") or False)


@_tool("set_semester_type")
def _set_semester_type(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.set_semester_type(
        handle,
        term=_param(params, "term"),
        new_type=_param(params, "newType", "type"),
        coop_number=_param(params, "coopNumber"),
    )


@_tool("get_semester")
def _get_semester(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.get_semester(handle, term=_param(params, "term"))


@_tool("find_courses_in_schedule")
def _find_courses(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.find_courses_in_schedule(handle, search_term=_param(params, "searchTerm", "query"))


@_tool("get_credit_summary")
def _credit_summary(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.get_credit_summary(handle)


@_tool("get_schedule")
def _get_schedule(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.get_schedule(handle)


@_tool("add_semester")
def _add_semester(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.add_semester(
        handle,
        term=_param(params, "term"),
        semester_type=_param(params, "type", "semesterType") or "academic",
        coop_number=_param(params, "coopNumber"),
    )


@_tool("swap_semesters")
def _swap_semesters(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.swap_semesters(
        handle,
        term1=_param(params, "semester1", "term1"),
        term2=_param(params, "semester2", "term2"),
    )


@_tool("bulk_add_courses")
def _bulk_add(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.bulk_add_courses(
        handle,
        courses=_param(params, "courses"),
        courses_json=_param(params, "coursesJson"),
    )


@_tool("bulk_remove_courses")
def _bulk_remove(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.bulk_remove_courses(
        handle,
        course_codes=_param(params, "courseCodes"),
        course_codes_str=_param(params, "courseCodesStr"),
    )


@_tool("find_light_semesters")
def _find_light(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.find_light_semesters(handle, min_credits=_param(params, "minCredits"))


@_tool("count_courses_by_type")
def _count_by_type(ops: ScheduleOperations, handle: Any, params: Dict[str, Any]) -> OperationResult:
    return ops.count_courses_by_type(handle)


def _success(result: OperationResult) -> ToolResponse:
    return ToolResponse(
        success=True,
        message=result.message,
        data=result.data,
        schedule=result.schedule.to_payload() if result.schedule is not None else None,
    )


def invoke_tool(
    name: str,
    body: Any,
    operations: ScheduleOperations,
    *,
    handle: Optional[str] = None,
) -> Tuple[int, ToolResponse]:
    """Run the named tool and return ``(status_code, response)``.

    Expected failures become structured responses with the error's status code;
    anything else is logged and reported as a generic 500.
    """
    tool_name = canonical_tool_name(name)
    handler = TOOL_HANDLERS.get(tool_name)
    if handler is None:
        return 404, ToolResponse(success=False, message=f'Unknown tool "{name}"', error="not_found")

    params = extract_parameters(body)
    resolved_handle = handle or _handle(params)
    try:
        result = handler(operations, resolved_handle, params)
    except ToolError as exc:
        emit_event(
            "tool_failed",
            tool=tool_name,
            handle=resolved_handle,
            kind=exc.kind,
            message=exc.message,
        )
        return exc.status_code, ToolResponse(
            success=False,
            message=exc.message,
            data=exc.data,
            field=exc.field,
            error=exc.kind,
        )
    except Exception:  # noqa: BLE001
        logger.exception("Tool %s failed for schedule %s", tool_name, resolved_handle)
        emit_event("tool_failed", tool=tool_name, handle=resolved_handle, kind="internal")
        return 500, ToolResponse(
            success=False,
            message=f"Unexpected error while running {tool_name}",
            error="internal",
        )

    logger.info("Tool %s succeeded for schedule %s", tool_name, resolved_handle)
    return 200, _success(result)


__all__ = ["TOOL_HANDLERS", "canonical_tool_name", "extract_parameters", "invoke_tool"]
