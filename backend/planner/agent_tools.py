"""Function tools handed to the editor agent, bound to one stored schedule."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from agents import function_tool

from .operations import ScheduleOperations
from .tools import invoke_tool


def build_schedule_tools(handle: str, operations: ScheduleOperations) -> List[Any]:
    """Return function tools that operate on the schedule stored under ``handle``.

    The agent never sees the handle; every call is routed through the same dispatcher
    as the HTTP tool endpoint, so validation and locking are identical.
    """

    def _run(name: str, **params: Any) -> Dict[str, Any]:
        _, response = invoke_tool(name, params, operations, handle=handle)
        # Tool output never carries the full schedule.
        return response.model_dump(mode="json", exclude_none=True, exclude={"schedule"})

    @function_tool(strict_mode=False)
    def get_schedule() -> Dict[str, Any]:
        """Overview of every semester with its courses and credit totals."""
        return _run("get_schedule")

    @function_tool(strict_mode=False)
    def get_semester(term: str) -> Dict[str, Any]:
        """Full details for one semester, e.g. "Fall 2025"."""
        return _run("get_semester", term=term)

    @function_tool(strict_mode=False)
    def get_credit_summary() -> Dict[str, Any]:
        """Current credits against the degree target. Call before adding courses."""
        return _run("get_credit_summary")

    @function_tool(strict_mode=False)
    def find_courses_in_schedule(search_term: str) -> Dict[str, Any]:
        """Find courses whose code or name contains the search term."""
        return _run("find_courses_in_schedule", searchTerm=search_term)

    @function_tool(strict_mode=False)
    def find_light_semesters(min_credits: int = 16) -> Dict[str, Any]:
        """List academic semesters carrying fewer than ``min_credits`` credits."""
        return _run("find_light_semesters", minCredits=min_credits)

    @function_tool(strict_mode=False)
    def count_courses_by_type() -> Dict[str, Any]:
        """Count scheduled courses per department prefix."""
        return _run("count_courses_by_type")

    @function_tool(strict_mode=False)
    def add_course(
        to_semester: str,
        course_code: str,
        course_name: str,
        credits: int,
        options: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Add a course (1-6 credits) to an academic semester."""
        return _run(
            "add_course",
            toSemester=to_semester,
            courseCode=course_code,
            courseName=course_name,
            credits=credits,
            options=options,
        )

    @function_tool(strict_mode=False)
    def remove_course(course_code: str) -> Dict[str, Any]:
        """Remove a course from whichever semester holds it."""
        return _run("remove_course", courseCode=course_code)

    @function_tool(strict_mode=False)
    def move_course(course_code: str, to_semester: str) -> Dict[str, Any]:
        """Move a course to another academic semester."""
        return _run("move_course", courseCode=course_code, toSemester=to_semester)

    @function_tool(strict_mode=False)
    def swap_courses(course_code1: str, course_code2: str) -> Dict[str, Any]:
        """Exchange the positions of two scheduled courses."""
        return _run("swap_courses", courseCode1=course_code1, courseCode2=course_code2)

    @function_tool(strict_mode=False)
    def bulk_add_courses(courses_json: str) -> Dict[str, Any]:
        """Add several courses at once.

        ``courses_json`` is a JSON array of objects with term, courseCode, courseName,
        credits and optional options.
        """
        return _run("bulk_add_courses", coursesJson=courses_json)

    @function_tool(strict_mode=False)
    def bulk_remove_courses(course_codes: List[str]) -> Dict[str, Any]:
        """Remove every listed course code."""
        return _run("bulk_remove_courses", courseCodes=course_codes)

    @function_tool(strict_mode=False)
    def add_semester(term: str, semester_type: str = "academic", coop_number: Optional[int] = None) -> Dict[str, Any]:
        """Insert a new semester; it is placed chronologically."""
        return _run("add_semester", term=term, type=semester_type, coopNumber=coop_number)

    @function_tool(strict_mode=False)
    def remove_semester(term: str, force: bool = False) -> Dict[str, Any]:
        """Remove a semester. Non-empty academic semesters need force=true."""
        return _run("remove_semester", term=term, force=force)

    @function_tool(strict_mode=False)
    def set_semester_type(term: str, new_type: str, coop_number: Optional[int] = None) -> Dict[str, Any]:
        """Convert a semester to "academic" or "coop". Converting to coop drops its courses."""
        return _run("set_semester_type", term=term, newType=new_type, coopNumber=coop_number)

    @function_tool(strict_mode=False)
    def swap_semesters(semester1: str, semester2: str) -> Dict[str, Any]:
        """Exchange the contents of two semesters; each keeps its term label."""
        return _run("swap_semesters", semester1=semester1, semester2=semester2)

    return [
        get_schedule,
        get_semester,
        get_credit_summary,
        find_courses_in_schedule,
        find_light_semesters,
        count_courses_by_type,
        add_course,
        remove_course,
        move_course,
        swap_courses,
        bulk_add_courses,
        bulk_remove_courses,
        add_semester,
        remove_semester,
        set_semester_type,
        swap_semesters,
    ]


__all__ = ["build_schedule_tools"]
