from __future__ import annotations

from planner.markdown_parser import GENERIC_ELECTIVE_CODE, parse_schedule_markdown
from planner.schedule_models import AcademicSemester, CoopSemester


PLAN_MARKDOWN = """Here is your plan.

**Year 1**
- fall 2025 (16 credits):
  - CS 1800: Discrete Structures (4)
  - CS 1802: Seminar for CS 1800 (1)
- Spring 2026 (8 credits):
  - General Elective (4)
  - MATH 1341 (4)
  - ENGW 110: First-Year Writing (4)
  this line is ignored
**Year 2**
- **Summer/Fall 2027: Co-op 1**
"""


def test_parses_semesters_courses_and_coops_in_order() -> None:
    semesters = parse_schedule_markdown(PLAN_MARKDOWN)

    assert [semester.term for semester in semesters] == ["Fall 2025", "Spring 2026", "Summer 2027"]
    fall, spring, coop = semesters

    assert isinstance(fall, AcademicSemester)
    assert [(course.code, course.name, course.credits) for course in fall.courses] == [
        ("CS 1800", "Discrete Structures", 4),
        ("CS 1802", "Seminar for CS 1800", 1),
    ]
    # Header claims 16, parsed courses sum to 5.
    assert fall.total_credits == 5

    assert isinstance(spring, AcademicSemester)
    codes = [course.code for course in spring.courses]
    assert codes == [GENERIC_ELECTIVE_CODE, "ENGW 110"]
    assert spring.courses[0].name == "General Elective"
    assert spring.total_credits == 8

    assert isinstance(coop, CoopSemester)
    assert coop.coop_number == 1


def test_course_lines_outside_a_semester_are_dropped() -> None:
    markdown = "  - CS 1800: Discrete Structures (4)\n- Fall 2025 (0 credits):\n"
    semesters = parse_schedule_markdown(markdown)

    assert len(semesters) == 1
    assert semesters[0].courses == []
    assert semesters[0].total_credits == 0


def test_unparseable_text_yields_no_semesters() -> None:
    assert parse_schedule_markdown("no schedule here\n* just prose") == []
