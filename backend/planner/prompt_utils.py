"""Utilities that build planner agent prompts."""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Sequence

CREDIT_LOAD_LABELS = {
    "light": "12-15 credits (lighter load)",
    "standard": "16-18 credits (standard full-time)",
    "accelerated": "18-20 credits (accelerated)",
}

COOP_PLAN_LABELS = {
    "none": "0 co-ops (4 year plan)",
    "one": "1 co-op (4 year plan)",
    "two": "2 co-ops (4.5 year plan)",
    "three": "3 co-ops (5 year plan)",
}

COOP_COUNTS = {"none": 0, "one": 1, "two": 2, "three": 3}

SCHEDULE_JSON_SHAPE = (
    '{"school": str, "major": str, "degree": "BS", "startTerm": "Fall 2025", '
    '"graduationTerm": "Spring 2029", "totalCredits": int, '
    '"semesters": [{"term": "Fall 2025", "type": "academic", '
    '"courses": [{"code": "CS 1800", "name": "Discrete Structures", "credits": 4}], "totalCredits": int} '
    '| {"term": "Summer 2027", "type": "coop", "coopNumber": 1}], '
    '"warnings": [str], "sourceUrl": str}'
)

_YEAR = re.compile(r"\d{4}")


def _attr(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def expected_graduation_year(starting_semester: str, coop_plan: str) -> int:
    match = _YEAR.search(starting_semester or "")
    start_year = int(match.group(0)) if match else 2025
    return start_year + 4 + COOP_COUNTS.get(coop_plan, 0) // 2


def build_generation_prompt(
    *,
    school_name: str,
    catalog_url: str | None,
    major: str,
    starting_semester: str,
    credits_per_semester: str,
    coop_plan: str,
    completed_courses: Sequence[Any] = (),
    is_freshman: bool = False,
    additional_notes: str | None = None,
) -> str:
    """Compose the generator agent's instructions for a full degree plan."""
    coop_count = COOP_COUNTS.get(coop_plan, 0)
    sections: list[str] = [
        f"You are a strict academic advisor for {school_name}. Create a verified degree plan for {major}.",
        (
            "Search for the official sample plan of study and degree requirements before planning. "
            "Use exact catalog course codes for required courses. Use the code ELECTIVE only for true "
            "elective slots and list example courses in the options field. Never use placeholder names."
        ),
    ]
    if catalog_url:
        sections.append(f"Catalog: {catalog_url}")

    if is_freshman or not completed_courses:
        completed_text = "The student is a freshman with no completed courses."
    else:
        lines = ["The student has completed the following courses:"]
        for course in completed_courses:
            grade = _attr(course, "grade")
            suffix = f", {grade}" if grade else ""
            lines.append(f"- {_attr(course, 'code')}: {_attr(course, 'name')} ({_attr(course, 'credits')} credits{suffix})")
        lines.append("Do not schedule any completed course again.")
        completed_text = "\n".join(lines)

    student_lines = [
        "Student info:",
        f"- Starting: {starting_semester}",
        f"- Credit load: {CREDIT_LOAD_LABELS.get(credits_per_semester, credits_per_semester)}",
        f"- Co-op plan: {COOP_PLAN_LABELS.get(coop_plan, coop_plan)} (co-ops are full semesters with zero courses)",
        f"- Expected graduation year: {expected_graduation_year(starting_semester, coop_plan)}",
        f"- Expected semesters: {8 + coop_count} ({coop_count} co-op)",
    ]
    if additional_notes:
        student_lines.append(f"- Notes: {additional_notes.strip()}")
    sections.append("\n".join(student_lines))
    sections.append(completed_text)
    sections.append(
        "Each course code may appear only once in the whole plan. Find the exact total credits required "
        "for this degree rather than assuming 128."
    )
    sections.append(f"Respond only with JSON shaped like:\n{SCHEDULE_JSON_SHAPE}")
    return "\n\n".join(sections)


def build_patch_prompt(current_schedule: Mapping[str, Any], edit_request: str) -> str:
    """Ask the editor agent to return the full schedule with one edit applied."""
    return "\n\n".join(
        [
            "You are editing an existing degree schedule. Apply the student's requested change and keep "
            "everything else identical. Keep course codes unique and co-op semesters empty.",
            f"Requested change: {edit_request.strip()}",
            f"Current schedule:\n{json.dumps(current_schedule, ensure_ascii=False, indent=2)}",
            f"Respond only with the complete updated schedule as JSON shaped like:\n{SCHEDULE_JSON_SHAPE}",
        ]
    )


def build_edit_prompt(schedule_id: str, overview: Mapping[str, Any], edit_request: str) -> str:
    """Ask the editor agent to apply a change through the schedule tools."""
    return "\n\n".join(
        [
            "You are editing a stored degree schedule through tools. Every change must be made with a tool "
            "call; never describe an edit without performing it. Check get_credit_summary before adding "
            "courses and stop adding once the target is met.",
            f"scheduleId: {schedule_id}",
            f"Requested change: {edit_request.strip()}",
            f"Current overview:\n{json.dumps(overview, ensure_ascii=False, indent=2)}",
            "When finished, reply with a short summary of what changed.",
        ]
    )


__all__ = [
    "COOP_PLAN_LABELS",
    "CREDIT_LOAD_LABELS",
    "build_edit_prompt",
    "build_generation_prompt",
    "build_patch_prompt",
    "expected_graduation_year",
]
