"""Parse prose-formatted schedules returned by the planning agent.

The agent's markdown convention looks like::

    **Year 1**
    - Fall 2025 (16 credits):
      - CS 1800: Discrete Structures (4)
      - CS 1802: Seminar for CS 1800 (1)
      - General Elective (4)
    - **Summer 2027: Co-op 1**

Unrecognized lines are dropped; the parser never raises on bad input.
"""

from __future__ import annotations

import re
from typing import List, Optional, Union

from .fallbacks import first_success
from .schedule_models import AcademicSemester, CoopSemester, Course
from .terms import normalize_term

GENERIC_ELECTIVE_CODE = "ELEC"

_YEAR_HEADER = re.compile(r"^\*\*Year \d+\*\*")
_COOP_LINE = re.compile(r"\*\*([A-Za-z/]+\s+\d{4}):\s*Co-op\s*(\d+)\*\*")
_SEMESTER_HEADER = re.compile(r"^-\s*([A-Za-z]+\s+\d{4})\s*\((\d+)\s*credits?\):", re.IGNORECASE)
_STRICT_COURSE = re.compile(r"^\s+-\s*([A-Z]{2,4}\s*\d{4}[A-Z]?):\s*(.+?)\s*\((\d+)\)")
_LOOSE_COURSE = re.compile(r"^\s+-\s*([A-Z]{2,5}\s*\d{3,4}[A-Z]?):\s*(.+?)\s*\((\d+)\)")
_GENERIC_COURSE = re.compile(r"^\s+-\s*([^(]+)\s*\((\d+)\)\s*$")
_LOOKS_LIKE_CODE = re.compile(r"^[A-Z]{2,5}\s*\d{3,4}")

ParsedSemester = Union[AcademicSemester, CoopSemester]


class _SkipLine(Exception):
    """Raised by a course matcher that consumed a line without producing a course."""


def _coded_course(pattern: re.Pattern[str]):
    def _match(line: str) -> Optional[Course]:
        match = pattern.match(line)
        if match is None:
            return None
        return Course(code=match.group(1).strip(), name=match.group(2).strip(), credits=int(match.group(3)))

    _match.__name__ = f"match_{pattern.pattern[:16]}"
    return _match


def _generic_course(line: str) -> Optional[Course]:
    match = _GENERIC_COURSE.match(line)
    if match is None:
        return None
    label = match.group(1).strip()
    if _LOOKS_LIKE_CODE.match(label):
        raise _SkipLine(label)
    return Course(code=GENERIC_ELECTIVE_CODE, name=label, credits=int(match.group(2)))


_COURSE_MATCHERS = (
    _coded_course(_STRICT_COURSE),
    _coded_course(_LOOSE_COURSE),
    _generic_course,
)


class _Accumulator:
    def __init__(self, term: str, claimed_credits: int) -> None:
        self.term = term
        self.claimed_credits = claimed_credits
        self.courses: List[Course] = []

    def build(self) -> AcademicSemester:
        # The header's claimed total is discarded in favour of the parsed courses.
        return AcademicSemester(term=self.term, courses=self.courses)


def parse_schedule_markdown(markdown: str) -> List[ParsedSemester]:
    """Convert the agent's markdown plan into an ordered list of semesters."""
    semesters: List[ParsedSemester] = []
    current: Optional[_Accumulator] = None

    def _flush() -> None:
        nonlocal current
        if current is not None:
            semesters.append(current.build())
            current = None

    for line in markdown.splitlines():
        stripped = line.strip()
        if _YEAR_HEADER.match(stripped):
            continue

        coop_match = _COOP_LINE.search(line)
        if coop_match:
            _flush()
            semesters.append(
                CoopSemester(
                    term=normalize_term(coop_match.group(1)),
                    coop_number=max(int(coop_match.group(2)), 1),
                )
            )
            continue

        header_match = _SEMESTER_HEADER.match(line)
        if header_match:
            _flush()
            current = _Accumulator(normalize_term(header_match.group(1)), int(header_match.group(2)))
            continue

        if current is None:
            continue

        try:
            course = first_success(line, _COURSE_MATCHERS, recoverable=(ValueError,))
        except _SkipLine:
            continue
        if course is not None:
            current.courses.append(course)

    _flush()
    return semesters


__all__ = ["GENERIC_ELECTIVE_CODE", "ParsedSemester", "parse_schedule_markdown"]
