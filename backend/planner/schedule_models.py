"""Canonical degree schedule model shared by the normalizer, store and tools."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

ELECTIVE_PLACEHOLDER_CODES = frozenset({"ELEC", "ELECTIVE"})
DEFAULT_TARGET_CREDITS = 128
MIN_COURSE_CREDITS = 1
MAX_COURSE_CREDITS = 6


def normalize_course_code(code: str) -> str:
    """Comparison key for course codes: uppercased, whitespace collapsed."""
    return " ".join(str(code).upper().split())


def is_elective_placeholder(code: str) -> bool:
    return normalize_course_code(code) in ELECTIVE_PLACEHOLDER_CODES


def terms_match(left: str, right: str) -> bool:
    return left.strip().lower() == right.strip().lower()


class Course(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    name: str = ""
    credits: int = Field(default=0, ge=0)
    options: Optional[str] = None

    @property
    def key(self) -> str:
        return normalize_course_code(self.code)

    def label(self) -> str:
        return f"{self.code}: {self.name} ({self.credits}cr)"


class AcademicSemester(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["academic"] = "academic"
    term: str
    courses: List[Course] = Field(default_factory=list)
    total_credits: int = Field(default=0, alias="totalCredits")

    @model_validator(mode="after")
    def _derive_total_credits(self) -> "AcademicSemester":
        self.total_credits = sum(course.credits for course in self.courses)
        return self

    def with_courses(self, courses: Sequence[Course]) -> "AcademicSemester":
        """Return a copy holding ``courses`` with the credit total recomputed."""
        return AcademicSemester(term=self.term, courses=[course.model_copy() for course in courses])


class CoopSemester(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["coop"] = "coop"
    term: str
    coop_number: int = Field(default=1, ge=1, alias="coopNumber")


Semester = Annotated[Union[AcademicSemester, CoopSemester], Field(discriminator="type")]


class SchedulePlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    school: str = ""
    major: str = ""
    degree: str = "BS"
    start_term: str = Field(default="", alias="startTerm")
    graduation_term: str = Field(default="", alias="graduationTerm")
    total_credits: int = Field(default=DEFAULT_TARGET_CREDITS, ge=0, alias="totalCredits")
    semesters: List[Semester] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    source_url: str = Field(default="", alias="sourceUrl")

    def academic_semesters(self) -> List[AcademicSemester]:
        return [semester for semester in self.semesters if isinstance(semester, AcademicSemester)]

    def coop_semesters(self) -> List[CoopSemester]:
        return [semester for semester in self.semesters if isinstance(semester, CoopSemester)]

    def current_credits(self) -> int:
        return sum(semester.total_credits for semester in self.academic_semesters())

    def find_semester_index(self, term: str) -> Optional[int]:
        for index, semester in enumerate(self.semesters):
            if terms_match(semester.term, term):
                return index
        return None

    def terms(self) -> List[str]:
        return [semester.term for semester in self.semesters]

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation using the camelCase field vocabulary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def semester_payload(semester: Union[AcademicSemester, CoopSemester]) -> Dict[str, Any]:
    return semester.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "AcademicSemester",
    "CoopSemester",
    "Course",
    "DEFAULT_TARGET_CREDITS",
    "ELECTIVE_PLACEHOLDER_CODES",
    "MAX_COURSE_CREDITS",
    "MIN_COURSE_CREDITS",
    "SchedulePlan",
    "Semester",
    "is_elective_placeholder",
    "normalize_course_code",
    "semester_payload",
    "terms_match",
]
