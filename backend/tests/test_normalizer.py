"""Normalizer repairs for agent output."""

from __future__ import annotations

import json
from typing import Any, Dict, List

import pytest

from planner.normalizer import (
    UNPARSEABLE_SEMESTERS_WARNING,
    UNSTRUCTURED_RESPONSE_WARNING,
    normalize_schedule,
    normalize_warnings,
)
from planner.schedule_models import AcademicSemester, CoopSemester
from planner.telemetry import TelemetryEvent, clear_listeners, register_listener


def _course(code: str, credits: int = 4, name: str = "") -> Dict[str, Any]:
    return {"code": code, "name": name or f"Course {code}", "credits": credits}


@pytest.fixture
def events() -> List[TelemetryEvent]:
    collected: List[TelemetryEvent] = []
    register_listener(collected.append)
    yield collected
    clear_listeners()


def test_coop_with_courses_is_corrected_to_academic() -> None:
    plan = normalize_schedule(
        {
            "school": "NEU",
            "semesters": [
                {"term": "Fall 2026", "type": "Co-op", "courses": [_course("CS 3500")]},
                {"term": "Spring 2027", "type": "co-op", "coopNumber": 2},
            ],
        }
    )

    fall, spring = plan.semesters
    assert isinstance(fall, AcademicSemester)
    assert fall.total_credits == 4
    assert isinstance(spring, CoopSemester)
    assert spring.coop_number == 2


def test_unknown_types_are_inferred() -> None:
    plan = normalize_schedule(
        {
            "semesters": [
                {"term": "Fall 2025", "type": "lecture", "courses": [_course("CS 1800")]},
                {"term": "Summer 2026", "coopNumber": 1},
                {"term": "Fall 2026", "type": "unknown"},
                {"term": "Spring 2027"},
            ]
        }
    )

    assert [semester.type for semester in plan.semesters] == ["academic", "coop", "academic", "academic"]


def test_missing_coop_number_uses_running_count() -> None:
    plan = normalize_schedule(
        {
            "semesters": [
                {"term": "Summer 2026", "type": "coop", "coopNumber": 1},
                {"term": "Summer 2027", "type": "coop"},
            ]
        }
    )

    assert [semester.coop_number for semester in plan.coop_semesters()] == [1, 2]


def test_duplicates_removed_across_semesters_first_wins(events: List[TelemetryEvent]) -> None:
    plan = normalize_schedule(
        {
            "semesters": [
                {"term": "Fall 2025", "type": "academic", "courses": [_course("CS 2500"), _course("ELECTIVE", 4, "Science")]},
                {
                    "term": "Spring 2026",
                    "type": "academic",
                    "courses": [_course("cs  2500 "), _course("ELECTIVE", 4, "Arts"), _course("CS 2510")],
                    "totalCredits": 99,
                },
            ]
        }
    )

    fall, spring = plan.semesters
    assert [course.code for course in fall.courses] == ["CS 2500", "ELECTIVE"]
    assert [course.code for course in spring.courses] == ["ELECTIVE", "CS 2510"]
    assert spring.total_credits == 8

    normalized_events = [event for event in events if event.name == "schedule_normalized"]
    assert normalized_events[-1].payload["duplicates_removed"] == 1


def test_normalization_is_idempotent() -> None:
    first = normalize_schedule(
        {
            "school": "NEU",
            "major": "CS",
            "semesters": [
                {"term": "fall 2025", "type": "academic", "courses": [_course("CS 1800"), _course("CS 1800")]},
                {"term": "Summer 2026", "type": "co-op", "coopNumber": 1},
            ],
            "warnings": "- check prerequisites",
        }
    )

    second = normalize_schedule(first.to_payload())

    assert second.to_payload() == first.to_payload()


def test_every_academic_total_matches_its_courses() -> None:
    plan = normalize_schedule(
        {
            "semesters": [
                {"term": "Fall 2025", "type": "academic", "courses": [_course("CS 1800", 4), _course("CS 1802", 1)], "totalCredits": 16},
                {"term": "Spring 2026", "type": "academic", "courses": [], "totalCredits": 12},
            ]
        }
    )

    assert [semester.total_credits for semester in plan.academic_semesters()] == [5, 0]


def test_stringified_semesters_with_trailing_comma() -> None:
    semesters = json.dumps([{"term": "Fall 2025", "type": "academic", "courses": [_course("CS 1800")]}]) + ",\n"

    plan = normalize_schedule({"school": "NEU", "semesters": semesters})

    assert plan.terms() == ["Fall 2025"]
    assert plan.total_credits == 4


def test_markdown_semesters_string_uses_markdown_parser() -> None:
    markdown = "- Fall 2025 (5 credits):\n  - CS 1800: Discrete Structures (4)\n  - CS 1802: Seminar (1)\n"

    plan = normalize_schedule({"school": "NEU", "semesters": markdown})

    assert plan.terms() == ["Fall 2025"]
    assert plan.current_credits() == 5


def test_raw_text_with_embedded_schedule() -> None:
    text = 'Done! {"school": "NEU", "major": "CS", "semesters": [{"term": "Fall 2025", "type": "academic", "courses": []}]}'

    plan = normalize_schedule(text)

    assert plan.school == "NEU"
    assert plan.warnings == []


def test_raw_markdown_text_adds_warning_and_uses_defaults() -> None:
    text = "**Year 1**\n- Fall 2025 (4 credits):\n  - CS 1800: Discrete Structures (4)\n"

    plan = normalize_schedule(text, defaults={"school": "NEU", "major": "CS"})

    assert plan.school == "NEU"
    assert plan.major == "CS"
    assert plan.terms() == ["Fall 2025"]
    assert UNSTRUCTURED_RESPONSE_WARNING in plan.warnings


def test_unusable_semesters_degrade_to_defaults() -> None:
    plan = normalize_schedule({"school": "NEU", "semesters": 42})

    assert plan.semesters == []
    assert plan.total_credits == 128
    assert plan.degree == "BS"
    assert UNPARSEABLE_SEMESTERS_WARNING in plan.warnings


@pytest.mark.parametrize(
    ("total", "expected"),
    [
        (None, 12),
        ("", 12),
        ("n/a", 12),
        ("132 credits", 132),
        (120, 120),
    ],
)
def test_total_credits_resolution(total: Any, expected: int) -> None:
    raw: Dict[str, Any] = {
        "semesters": [
            {"term": "Fall 2025", "type": "academic", "courses": [_course("CS 1800", 4), _course("CS 2500", 4)]},
            {"term": "Summer 2026", "type": "coop", "coopNumber": 1},
            {"term": "Fall 2026", "type": "academic", "courses": [_course("CS 3500", 4)]},
        ]
    }
    if total is not None:
        raw["totalCredits"] = total

    assert normalize_schedule(raw).total_credits == expected


def test_total_credits_default_without_semesters() -> None:
    assert normalize_schedule({"school": "NEU"}).total_credits == 128


def test_course_fields_are_coerced() -> None:
    plan = normalize_schedule(
        {
            "semesters": [
                {
                    "term": "Fall 2025",
                    "type": "academic",
                    "courses": [
                        {"code": "CS 1800", "name": "Discrete", "credits": "4"},
                        {"code": "ELECTIVE", "name": "Science", "credits": 4.0, "options": ["PHYS 1151", "CHEM 1211"]},
                        {"name": "No code", "credits": 4},
                    ],
                }
            ]
        }
    )

    courses = plan.academic_semesters()[0].courses
    assert [course.code for course in courses] == ["CS 1800", "ELECTIVE"]
    assert courses[0].credits == 4
    assert courses[1].options == "PHYS 1151, CHEM 1211"


@pytest.mark.parametrize(
    ("warnings", "expected"),
    [
        (None, []),
        ("", []),
        (["a", "b"], ["a", "b"]),
        ('["first", "second"]', ["first", "second"]),
        ("- one\n2. two\n\n• three\n* four", ["one", "two", "three", "four"]),
        ("single warning", ["single warning"]),
        ("-", ["-"]),
    ],
)
def test_normalize_warnings(warnings: Any, expected: List[str]) -> None:
    assert normalize_warnings(warnings) == expected


def test_non_finite_numbers_fall_back_to_defaults() -> None:
    plan = normalize_schedule(
        {
            "totalCredits": float("inf"),
            "semesters": [
                {"term": "Fall 2025", "type": "academic", "courses": [{"code": "CS 1800", "name": "Discrete", "credits": 1e400}]},
                {"term": "Summer 2026", "type": "coop", "coopNumber": float("nan")},
            ],
        }
    )

    academic, coop = plan.semesters
    assert isinstance(academic, AcademicSemester)
    assert academic.courses[0].credits == 0
    assert isinstance(coop, CoopSemester)
    assert coop.coop_number == 1
    assert plan.total_credits == 128


def test_unreadable_semesters_text_adds_warning() -> None:
    plan = normalize_schedule({"school": "NEU", "semesters": "garbage text"})

    assert plan.semesters == []
    assert plan.school == "NEU"
    assert plan.warnings == [UNPARSEABLE_SEMESTERS_WARNING]


def test_malformed_json_semesters_text_adds_warning() -> None:
    plan = normalize_schedule({"semesters": '[{"term": "Fall 2025", "type": '})

    assert plan.semesters == []
    assert plan.warnings.count(UNPARSEABLE_SEMESTERS_WARNING) == 1
