"""Generator and editor agents for degree schedules."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Tuple, cast

from agents import Agent, ModelSettings, RunConfig, Runner, WebSearchTool
from openai.types.shared.reasoning import Reasoning
from openai.types.shared.reasoning_effort import ReasoningEffort
from pydantic import BaseModel

from .agent_models import GenerateScheduleRequest
from .agent_tools import build_schedule_tools
from .config import Settings
from .extraction import extract_schedule_from_content
from .normalizer import normalize_schedule
from .operations import ScheduleOperations
from .prompt_utils import build_edit_prompt, build_generation_prompt, build_patch_prompt
from .schedule_models import SchedulePlan

logger = logging.getLogger(__name__)

EDIT_FAILED_WARNING = "Edit could not be processed. Please try rephrasing."

GENERATOR_INSTRUCTIONS = (
    "You are a degree planning assistant. Research official degree requirements and produce complete, "
    "semester-by-semester plans as JSON. Never invent course codes."
)

EDITOR_INSTRUCTIONS = (
    "You edit degree schedules for students. Apply exactly the requested change, keep course codes unique, "
    "and never place courses in co-op semesters."
)


class ScheduleAgentError(RuntimeError):
    """Raised when the agent run itself fails (network, model or tool loop errors)."""


_agent_cache: Dict[Tuple[str, str, bool], Agent[Any]] = {}


def _reasoning_effort(value: str) -> ReasoningEffort:
    allowed = {"minimal", "low", "medium", "high"}
    effort = value if value in allowed else "medium"
    return cast(ReasoningEffort, effort)


def _run_config(settings: Settings) -> RunConfig:
    return RunConfig(
        model_settings=ModelSettings(
            reasoning=Reasoning(
                effort=_reasoning_effort(settings.planner_agent_reasoning),
                summary="auto",
            ),
        )
    )


def get_generator_agent(settings: Settings) -> Agent[Any]:
    key = ("generator", settings.planner_agent_model, settings.planner_agent_enable_web)
    if key not in _agent_cache:
        tools: list[Any] = [WebSearchTool(search_context_size="high")] if settings.planner_agent_enable_web else []
        _agent_cache[key] = Agent(
            name="Degree Schedule Generator",
            instructions=GENERATOR_INSTRUCTIONS,
            model=settings.planner_agent_model,
            tools=tools,
            model_settings=ModelSettings(store=False),
        )
    return _agent_cache[key]


def get_patch_agent(settings: Settings) -> Agent[Any]:
    key = ("patch", settings.planner_agent_model, False)
    if key not in _agent_cache:
        _agent_cache[key] = Agent(
            name="Degree Schedule Editor",
            instructions=EDITOR_INSTRUCTIONS,
            model=settings.planner_agent_model,
            tools=[],
            model_settings=ModelSettings(store=False),
        )
    return _agent_cache[key]


def _build_tool_editor(settings: Settings, handle: str, operations: ScheduleOperations) -> Agent[Any]:
    return Agent(
        name="Degree Schedule Tool Editor",
        instructions=EDITOR_INSTRUCTIONS,
        model=settings.planner_agent_model,
        tools=build_schedule_tools(handle, operations),
        model_settings=ModelSettings(store=False),
    )


def extract_structured_schedule(final_output: Any) -> Optional[Dict[str, Any]]:
    """Return the agent's final output as a schedule mapping when it already is one."""
    candidate: Any = final_output
    if isinstance(candidate, BaseModel):
        candidate = candidate.model_dump(by_alias=True)
    elif isinstance(candidate, str):
        try:
            candidate = json.loads(candidate)
        except ValueError:
            return None
    if isinstance(candidate, Mapping) and isinstance(candidate.get("answer"), (str, Mapping)):
        answer = candidate["answer"]
        if isinstance(answer, str):
            try:
                answer = json.loads(answer)
            except ValueError:
                return None
        candidate = answer
    if isinstance(candidate, Mapping) and "semesters" in candidate:
        return dict(candidate)
    return None


def _output_text(final_output: Any) -> str:
    if final_output is None:
        return ""
    if isinstance(final_output, str):
        return final_output
    if isinstance(final_output, BaseModel):
        return final_output.model_dump_json(by_alias=True)
    try:
        return json.dumps(final_output, default=str)
    except (TypeError, ValueError):
        return str(final_output)


async def _run(agent: Agent[Any], prompt: str, settings: Settings, label: str) -> Any:
    try:
        result = await Runner.run(
            agent,
            prompt,
            max_turns=settings.planner_agent_max_turns,
            run_config=_run_config(settings),
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s agent run failed", label)
        raise ScheduleAgentError(f"{label} agent run failed: {exc}") from exc
    return result.final_output


async def generate_schedule(request: GenerateScheduleRequest, settings: Settings) -> SchedulePlan:
    """Run the generator agent and normalize whatever it returns."""
    preferences = request.preferences
    prompt = build_generation_prompt(
        school_name=request.school.name,
        catalog_url=request.school.catalog_url,
        major=request.major,
        starting_semester=preferences.starting_semester,
        credits_per_semester=preferences.credits_per_semester,
        coop_plan=preferences.coop_plan,
        completed_courses=request.completed_courses,
        is_freshman=request.is_freshman,
        additional_notes=preferences.additional_notes,
    )
    final_output = await _run(get_generator_agent(settings), prompt, settings, "Generation")
    structured = extract_structured_schedule(final_output)
    source: Any = structured if structured is not None else _output_text(final_output)
    return normalize_schedule(
        source,
        defaults={
            "school": request.school.name,
            "major": request.major,
            "startTerm": preferences.starting_semester,
            "sourceUrl": request.school.catalog_url,
        },
        default_target=settings.default_target_credits,
    )


async def patch_schedule(current_schedule: Mapping[str, Any], edit_request: str, settings: Settings) -> SchedulePlan:
    """Ask the editor agent for a full replacement schedule.

    Falls back to the unchanged schedule plus a warning when no schedule can be
    recovered from the agent's answer.
    """
    prompt = build_patch_prompt(current_schedule, edit_request)
    final_output = await _run(get_patch_agent(settings), prompt, settings, "Patch")

    patched = extract_structured_schedule(final_output)
    if patched is None:
        patched = extract_schedule_from_content(_output_text(final_output))
    if patched is None:
        logger.warning("Patch agent returned no recoverable schedule; keeping the current one")
        original = normalize_schedule(current_schedule, default_target=settings.default_target_credits)
        return original.model_copy(update={"warnings": [*original.warnings, EDIT_FAILED_WARNING]})

    return normalize_schedule(
        patched,
        defaults={key: current_schedule.get(key) for key in ("school", "major", "degree", "startTerm", "sourceUrl")},
        default_target=settings.default_target_credits,
    )


async def edit_schedule(handle: str, edit_request: str, operations: ScheduleOperations, settings: Settings) -> str:
    """Let the editor agent mutate the stored schedule through tools; returns its answer."""
    overview = operations.get_schedule(handle).data or {}
    agent = _build_tool_editor(settings, handle, operations)
    final_output = await _run(agent, build_edit_prompt(handle, overview, edit_request), settings, "Edit")
    return _output_text(final_output)


__all__ = [
    "EDIT_FAILED_WARNING",
    "ScheduleAgentError",
    "edit_schedule",
    "extract_structured_schedule",
    "generate_schedule",
    "get_generator_agent",
    "get_patch_agent",
    "patch_schedule",
]
