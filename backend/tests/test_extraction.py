from __future__ import annotations

import json

import pytest

from planner.extraction import extract_schedule_from_content


def test_answer_envelope_with_stringified_schedule() -> None:
    schedule = {"school": "Northeastern University", "semesters": [{"term": "Fall 2025", "type": "academic"}]}
    content = json.dumps({"answer": json.dumps(schedule), "reasoning": []})

    assert extract_schedule_from_content(content) == schedule


def test_escaped_answer_inside_surrounding_text() -> None:
    content = 'event: done data: {"answer": "{\\"school\\": \\"NEU\\", \\"semesters\\": []}", "usage": 12}'

    assert extract_schedule_from_content(content) == {"school": "NEU", "semesters": []}


def test_embedded_object_found_by_brace_matching() -> None:
    content = 'Here is the result: {"school":"X","semesters":[]} Thanks!'

    assert extract_schedule_from_content(content) == {"school": "X", "semesters": []}


def test_embedded_object_with_spaced_opening_brace() -> None:
    content = 'Result -> { "school": "X", "major": "CS", "semesters": [{"term": "Fall 2025"}] } done'

    extracted = extract_schedule_from_content(content)

    assert extracted is not None
    assert extracted["major"] == "CS"


@pytest.mark.parametrize(
    "content",
    [
        "",
        "no schedule here",
        '{"answer": {"semesters": []}}',
        'truncated {"school": "X", "semesters": [',
        '{"school": "X", "semesters": [}',
    ],
)
def test_returns_none_when_nothing_matches(content: str) -> None:
    assert extract_schedule_from_content(content) is None
