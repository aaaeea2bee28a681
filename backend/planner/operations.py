"""Atomic schedule mutations and read-only queries over stored schedules.

Every mutation runs under the store's per-handle lock as a single
read, apply, write-back sequence. The apply step never touches the fetched snapshot;
it builds a new ``SchedulePlan`` and either returns it for persistence or raises a
``ToolError`` subclass, in which case nothing is written.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union, cast

from .cache.schedule_store import ScheduleStore
from .errors import ConflictError, ConstraintError, NotFoundError, ValidationError
from .schedule_models import (
    DEFAULT_TARGET_CREDITS,
    MAX_COURSE_CREDITS,
    MIN_COURSE_CREDITS,
    AcademicSemester,
    CoopSemester,
    Course,
    SchedulePlan,
    normalize_course_code,
    semester_payload,
    terms_match,
)
from .terms import term_sort_key

logger = logging.getLogger(__name__)

DEFAULT_LIGHT_SEMESTER_CREDITS = 16
SEMESTER_TYPES = ("academic", "coop")

_NEW_TERM_PATTERN = re.compile(r"^(Fall|Spring|Summer(\s*[12])?)\s+\d{4}$", re.IGNORECASE)

SemesterModel = Union[AcademicSemester, CoopSemester]


@dataclass
class OperationResult:
    message: str
    data: Optional[Dict[str, Any]] = None
    schedule: Optional[SchedulePlan] = None
    persist: bool = True


@dataclass
class _CourseLocation:
    semester_index: int
    course_index: int
    course: Course
    term: str


@dataclass
class _BulkCourse:
    term: str
    code: str
    name: str
    credits: Any
    options: Optional[str] = None


def _require_text(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()


def _validate_credits(value: Any, field_name: str = "credits") -> int:
    message = f"{field_name} must be a number between {MIN_COURSE_CREDITS} and {MAX_COURSE_CREDITS}"
    if value is None or isinstance(value, bool):
        raise ValidationError(message, field=field_name)
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        raise ValidationError(message, field=field_name) from None
    if math.isnan(numeric) or numeric < MIN_COURSE_CREDITS or numeric > MAX_COURSE_CREDITS:
        raise ValidationError(message, field=field_name)
    return int(round(numeric))


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        value = ", ".join(str(item) for item in value)
    text = str(value).strip()
    return text or None


def _semester_index(plan: SchedulePlan, term: str) -> Optional[int]:
    return plan.find_semester_index(term)


def _require_semester(plan: SchedulePlan, term: str, *, field_name: str = "term", label: str = "Semester",
                      list_available: bool = False) -> int:
    index = _semester_index(plan, term)
    if index is None:
        message = f'{label} "{term}" not found'
        if list_available:
            message += f". Available: {', '.join(plan.terms())}"
        raise NotFoundError(message, field=field_name)
    return index


def _locate_course(plan: SchedulePlan, code: str) -> Optional[_CourseLocation]:
    key = normalize_course_code(code)
    for semester_index, semester in enumerate(plan.semesters):
        if not isinstance(semester, AcademicSemester):
            continue
        for course_index, course in enumerate(semester.courses):
            if course.key == key:
                return _CourseLocation(semester_index, course_index, course, semester.term)
    return None


def _require_course(plan: SchedulePlan, code: str, field_name: str = "courseCode") -> _CourseLocation:
    location = _locate_course(plan, code)
    if location is None:
        raise NotFoundError(f'Course "{code}" not found in schedule', field=field_name)
    return location


def _replace_semesters(plan: SchedulePlan, semesters: Sequence[SemesterModel], *, retarget: bool = False) -> SchedulePlan:
    update: Dict[str, Any] = {"semesters": list(semesters)}
    if retarget:
        update["total_credits"] = academic_credit_total(semesters)
    return plan.model_copy(update=update)


def _relabel(semester: SemesterModel, term: str) -> SemesterModel:
    if isinstance(semester, CoopSemester):
        return CoopSemester(term=term, coop_number=semester.coop_number)
    return AcademicSemester(term=term, courses=[course.model_copy() for course in semester.courses])


def _canonical_new_term(term: str) -> str:
    parts = term.split()
    return " ".join([parts[0].capitalize(), *parts[1:]])


def academic_credit_total(semesters: Iterable[SemesterModel]) -> int:
    return sum(semester.total_credits for semester in semesters if isinstance(semester, AcademicSemester))


def _describe_semester(semester: SemesterModel) -> str:
    if isinstance(semester, CoopSemester):
        return f"Co-op {semester.coop_number}"
    return f"Academic ({semester.total_credits} credits, {len(semester.courses)} courses)"


def _parse_json_list(raw: Any, field_name: str) -> List[Any]:
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid JSON in {field_name}: {exc}", field=field_name) from exc
    if not isinstance(parsed, list):
        raise ValidationError(f"{field_name} must be a JSON array", field=field_name)
    return parsed


class ScheduleOperations:
    """Operations over schedules held in a ``ScheduleStore``."""

    def __init__(self, store: ScheduleStore) -> None:
        self._store = store

    @property
    def store(self) -> ScheduleStore:
        return self._store

    def _mutate(self, handle: Any, action: str, apply: Callable[[SchedulePlan], OperationResult]) -> OperationResult:
        handle = _require_text(handle, "scheduleId")
        with self._store.lock(handle):
            current = self._store.get(handle)
            result = apply(current)
            if result.persist and result.schedule is not None:
                self._store.update(handle, result.schedule, action)
        return result

    def _read(self, handle: Any) -> SchedulePlan:
        return self._store.get(_require_text(handle, "scheduleId"))

    # -- core mutations -------------------------------------------------

    def add_course(
        self,
        handle: Any,
        to_term: Any,
        code: Any,
        name: Any,
        credits: Any,
        options: Any = None,
    ) -> OperationResult:
        to_term = _require_text(to_term, "toSemester")
        code = _require_text(code, "courseCode")
        name = _require_text(name, "courseName")
        credit_value = _validate_credits(credits)
        options_text = _optional_text(options)

        def apply(plan: SchedulePlan) -> OperationResult:
            index = _require_semester(plan, to_term, field_name="toSemester", list_available=True)
            target = plan.semesters[index]
            if isinstance(target, CoopSemester):
                raise ConstraintError(f'Cannot add course to co-op semester "{to_term}"', field="toSemester")
            existing = _locate_course(plan, code)
            if existing is not None:
                raise ConflictError(f'Course "{code}" already exists in {existing.term}', field="courseCode")

            course = Course(code=code, name=name, credits=credit_value, options=options_text)
            semesters = list(plan.semesters)
            semesters[index] = target.with_courses([*target.courses, course])
            return OperationResult(
                message=f'Added "{code}: {name}" ({credit_value}cr) to {target.term}',
                data={"term": target.term, "course": course.model_dump(exclude_none=True)},
                schedule=_replace_semesters(plan, semesters),
            )

        return self._mutate(handle, "add_course", apply)

    def remove_course(self, handle: Any, code: Any) -> OperationResult:
        code = _require_text(code, "courseCode")

        def apply(plan: SchedulePlan) -> OperationResult:
            location = _require_course(plan, code)
            semester = cast(AcademicSemester, plan.semesters[location.semester_index])
            remaining = [course for i, course in enumerate(semester.courses) if i != location.course_index]
            semesters = list(plan.semesters)
            semesters[location.semester_index] = semester.with_courses(remaining)
            return OperationResult(
                message=f'Removed "{code}: {location.course.name}" from {location.term}',
                data={"term": location.term, "course": location.course.model_dump(exclude_none=True)},
                schedule=_replace_semesters(plan, semesters),
            )

        return self._mutate(handle, "remove_course", apply)

    def move_course(self, handle: Any, code: Any, to_term: Any) -> OperationResult:
        code = _require_text(code, "courseCode")
        to_term = _require_text(to_term, "toSemester")

        def apply(plan: SchedulePlan) -> OperationResult:
            location = _require_course(plan, code)
            target_index = _require_semester(
                plan, to_term, field_name="toSemester", label="Target semester", list_available=True
            )
            target = plan.semesters[target_index]
            if isinstance(target, CoopSemester):
                raise ConstraintError(f'Cannot move course to co-op semester "{to_term}"', field="toSemester")
            if target_index == location.semester_index:
                return OperationResult(
                    message=f'Course "{code}" is already in {target.term}',
                    schedule=plan,
                    persist=False,
                )

            source = cast(AcademicSemester, plan.semesters[location.semester_index])
            semesters = list(plan.semesters)
            semesters[location.semester_index] = source.with_courses(
                [course for i, course in enumerate(source.courses) if i != location.course_index]
            )
            semesters[target_index] = target.with_courses([*target.courses, location.course])
            return OperationResult(
                message=f'Moved "{code}" from {location.term} to {target.term}',
                data={"fromTerm": location.term, "toTerm": target.term},
                schedule=_replace_semesters(plan, semesters),
            )

        return self._mutate(handle, "move_course", apply)

    def swap_courses(self, handle: Any, code1: Any, code2: Any) -> OperationResult:
        code1 = _require_text(code1, "courseCode1")
        code2 = _require_text(code2, "courseCode2")

        def apply(plan: SchedulePlan) -> OperationResult:
            first = _require_course(plan, code1, "courseCode1")
            second = _require_course(plan, code2, "courseCode2")
            semesters = list(plan.semesters)

            if first.semester_index == second.semester_index:
                semester = cast(AcademicSemester, semesters[first.semester_index])
                courses = list(semester.courses)
                courses[first.course_index], courses[second.course_index] = second.course, first.course
                semesters[first.semester_index] = semester.with_courses(courses)
                message = f'Swapped "{code1}" and "{code2}" within {first.term}'
            else:
                for location, replacement in ((first, second.course), (second, first.course)):
                    semester = cast(AcademicSemester, semesters[location.semester_index])
                    courses = list(semester.courses)
                    courses[location.course_index] = replacement
                    semesters[location.semester_index] = semester.with_courses(courses)
                message = f'Swapped "{code1}" ({first.term}) with "{code2}" ({second.term})'

            return OperationResult(
                message=message,
                data={"terms": sorted({first.term, second.term}, key=term_sort_key)},
                schedule=_replace_semesters(plan, semesters),
            )

        return self._mutate(handle, "swap_courses", apply)

    def remove_semester(self, handle: Any, term: Any, force: Any = False) -> OperationResult:
        term = _require_text(term, "term")
        forced = _as_flag(force)

        def apply(plan: SchedulePlan) -> OperationResult:
            index = _require_semester(plan, term)
            semester = plan.semesters[index]
            if isinstance(semester, AcademicSemester) and semester.courses and not forced:
                count = len(semester.courses)
                raise ConstraintError(
                    f'Cannot remove "{term}" - it has {count} course(s). Remove courses first or use force=true.',
                    field="force",
                    data={"courseCount": count},
                )
            semesters = [s for i, s in enumerate(plan.semesters) if i != index]
            return OperationResult(
                message=f'Removed semester "{semester.term}" from schedule',
                data={
                    "removedTerm": semester.term,
                    "removedType": semester.type,
                    "remainingSemesters": len(semesters),
                },
                schedule=_replace_semesters(plan, semesters, retarget=True),
            )

        return self._mutate(handle, "remove_semester", apply)

    def set_semester_type(self, handle: Any, term: Any, new_type: Any, coop_number: Any = None) -> OperationResult:
        term = _require_text(term, "term")
        resolved_type = _require_text(new_type, "newType").lower().replace("-", "")
        if resolved_type not in SEMESTER_TYPES:
            raise ValidationError('newType must be "academic" or "coop"', field="newType")
        number = _coop_number(coop_number)

        def apply(plan: SchedulePlan) -> OperationResult:
            index = _require_semester(plan, term)
            current = plan.semesters[index]
            if current.type == resolved_type:
                return OperationResult(
                    message=f'Semester "{current.term}" is already of type "{resolved_type}"',
                    data={"term": current.term, "type": resolved_type},
                    persist=False,
                )

            note = ""
            replacement: SemesterModel
            if resolved_type == "coop":
                if isinstance(current, AcademicSemester) and current.courses:
                    note = f" Warning: {len(current.courses)} course(s) were removed."
                replacement = CoopSemester(term=current.term, coop_number=number)
            else:
                replacement = AcademicSemester(term=current.term)

            semesters = list(plan.semesters)
            semesters[index] = replacement
            data: Dict[str, Any] = {"term": current.term, "oldType": current.type, "newType": resolved_type}
            if resolved_type == "coop":
                data["coopNumber"] = number
            return OperationResult(
                message=f'Changed "{current.term}" from {current.type} to {resolved_type}.{note}',
                data=data,
                schedule=_replace_semesters(plan, semesters, retarget=True),
            )

        return self._mutate(handle, "set_semester_type", apply)

    # -- supplemental mutations -----------------------------------------

    def add_semester(self, handle: Any, term: Any, semester_type: Any = "academic", coop_number: Any = None) -> OperationResult:
        term = _require_text(term, "term")
        if not _NEW_TERM_PATTERN.match(term):
            raise ValidationError(
                'term must be in format "Season YYYY" (e.g., "Fall 2025", "Summer 1 2027", "Summer 2 2027")',
                field="term",
            )
        term = _canonical_new_term(term)
        resolved_type = str(semester_type or "academic").strip().lower().replace("-", "")
        if resolved_type not in SEMESTER_TYPES:
            raise ValidationError('type must be "academic" or "coop"', field="type")
        number = _coop_number(coop_number)

        def apply(plan: SchedulePlan) -> OperationResult:
            if _semester_index(plan, term) is not None:
                raise ConflictError(f'Semester "{term}" already exists in schedule', field="term")
            semester: SemesterModel
            if resolved_type == "coop":
                semester = CoopSemester(term=term, coop_number=number)
            else:
                semester = AcademicSemester(term=term)
            semesters = sorted([*plan.semesters, semester], key=lambda s: term_sort_key(s.term))
            data: Dict[str, Any] = {"term": term, "type": resolved_type}
            if resolved_type == "coop":
                data["coopNumber"] = number
            return OperationResult(
                message=f'Added {resolved_type} semester "{term}" to schedule',
                data=data,
                schedule=_replace_semesters(plan, semesters),
            )

        return self._mutate(handle, "add_semester", apply)

    def swap_semesters(self, handle: Any, term1: Any, term2: Any) -> OperationResult:
        term1 = _require_text(term1, "semester1")
        term2 = _require_text(term2, "semester2")

        def apply(plan: SchedulePlan) -> OperationResult:
            first_index = _require_semester(plan, term1, field_name="semester1")
            second_index = _require_semester(plan, term2, field_name="semester2")
            if first_index == second_index:
                return OperationResult(message=f'"{term1}" and "{term2}" are the same semester', persist=False)

            first = plan.semesters[first_index]
            second = plan.semesters[second_index]
            new_first = _relabel(second, first.term)
            new_second = _relabel(first, second.term)
            semesters = list(plan.semesters)
            semesters[first_index] = new_first
            semesters[second_index] = new_second
            return OperationResult(
                message=(
                    f"Swapped {first.term} (now {new_first.type}) with {second.term} (now {new_second.type})"
                ),
                data={first.term: _describe_semester(new_first), second.term: _describe_semester(new_second)},
                schedule=_replace_semesters(plan, semesters, retarget=True),
            )

        return self._mutate(handle, "swap_semesters", apply)

    def bulk_add_courses(self, handle: Any, courses: Any = None, courses_json: Any = None) -> OperationResult:
        entries = courses
        if not entries and courses_json:
            entries = _parse_json_list(courses_json, "coursesJson") if isinstance(courses_json, str) else courses_json
        if not isinstance(entries, list) or not entries:
            raise ValidationError("courses array (or coursesJson) is required", field="courses")

        def apply(plan: SchedulePlan) -> OperationResult:
            errors: List[str] = []
            valid: List[Tuple[int, _BulkCourse]] = []
            batch_codes: Dict[str, str] = {}

            for position, entry in enumerate(entries, start=1):
                try:
                    candidate = _bulk_entry(entry)
                except ValidationError as exc:
                    errors.append(f"Course {position}: {exc.message}")
                    continue
                prefix = f"Course {position} ({candidate.code})"
                try:
                    candidate.credits = _validate_credits(candidate.credits)
                except ValidationError:
                    errors.append(f"{prefix}: credits must be between {MIN_COURSE_CREDITS} and {MAX_COURSE_CREDITS}")
                    continue
                index = _semester_index(plan, candidate.term)
                if index is None:
                    errors.append(f'{prefix}: Semester "{candidate.term}" not found')
                    continue
                if isinstance(plan.semesters[index], CoopSemester):
                    errors.append(f'{prefix}: Cannot add to co-op semester "{candidate.term}"')
                    continue
                existing = _locate_course(plan, candidate.code)
                if existing is not None:
                    errors.append(f"{prefix}: Already exists in {existing.term}")
                    continue
                key = normalize_course_code(candidate.code)
                if key in batch_codes:
                    errors.append(f"{prefix}: Duplicated in this request ({batch_codes[key]})")
                    continue
                batch_codes[key] = candidate.term
                valid.append((index, candidate))

            if not valid:
                raise ValidationError("No valid courses to add", field="courses", data={"errors": errors})

            semesters = list(plan.semesters)
            added: List[str] = []
            for index, candidate in valid:
                semester = cast(AcademicSemester, semesters[index])
                course = Course(
                    code=candidate.code,
                    name=candidate.name,
                    credits=candidate.credits,
                    options=candidate.options,
                )
                semesters[index] = semester.with_courses([*semester.courses, course])
                added.append(f"{candidate.code} to {semester.term}")

            data: Dict[str, Any] = {"addedCount": len(added), "added": added}
            if errors:
                data["errors"] = errors
            return OperationResult(
                message=f"Added {len(added)} course(s): {', '.join(added)}",
                data=data,
                schedule=_replace_semesters(plan, semesters),
            )

        return self._mutate(handle, "bulk_add_courses", apply)

    def bulk_remove_courses(self, handle: Any, course_codes: Any = None, course_codes_str: Any = None) -> OperationResult:
        codes = course_codes
        if not codes and course_codes_str:
            codes = [code.strip() for code in str(course_codes_str).split(",") if code.strip()]
        if isinstance(codes, str):
            codes = [code.strip() for code in codes.split(",") if code.strip()]
        if not isinstance(codes, list) or not codes:
            raise ValidationError("courseCodes array (or courseCodesStr) is required", field="courseCodes")
        requested = [str(code) for code in codes]
        wanted = {normalize_course_code(code) for code in requested}

        def apply(plan: SchedulePlan) -> OperationResult:
            removed: List[str] = []
            removed_keys = set()
            semesters: List[SemesterModel] = []
            for semester in plan.semesters:
                if not isinstance(semester, AcademicSemester):
                    semesters.append(semester)
                    continue
                kept = []
                for course in semester.courses:
                    if course.key in wanted:
                        removed.append(f"{course.code} from {semester.term}")
                        removed_keys.add(course.key)
                    else:
                        kept.append(course)
                semesters.append(semester.with_courses(kept) if len(kept) != len(semester.courses) else semester)

            not_found = [code for code in requested if normalize_course_code(code) not in removed_keys]
            if not removed:
                raise NotFoundError("No courses found to remove", field="courseCodes", data={"notFound": not_found})

            data: Dict[str, Any] = {"removedCount": len(removed), "removed": removed}
            message = f"Removed {len(removed)} course(s): {', '.join(removed)}"
            if not_found:
                data["notFound"] = not_found
                message += f". Not found: {', '.join(not_found)}"
            return OperationResult(message=message, data=data, schedule=_replace_semesters(plan, semesters))

        return self._mutate(handle, "bulk_remove_courses", apply)

    # -- reads ------------------------------------------------------------

    def get_semester(self, handle: Any, term: Any) -> OperationResult:
        term = _require_text(term, "term")
        plan = self._read(handle)
        index = _semester_index(plan, term)
        if index is None:
            raise NotFoundError(
                f'Semester "{term}" not found. Available terms: {", ".join(plan.terms())}',
                field="term",
            )
        semester = plan.semesters[index]
        return OperationResult(message=f"Retrieved details for {semester.term}", data=semester_payload(semester))

    def find_courses_in_schedule(self, handle: Any, search_term: Any) -> OperationResult:
        search = _require_text(search_term, "searchTerm")
        plan = self._read(handle)
        needle = search.lower()
        matches = [
            {"code": course.code, "name": course.name, "credits": course.credits, "term": semester.term}
            for semester in plan.academic_semesters()
            for course in semester.courses
            if needle in course.code.lower() or needle in course.name.lower()
        ]
        if matches:
            listing = "; ".join(f"{m['code']} ({m['name']}) in {m['term']}" for m in matches)
            message = f'Found {len(matches)} course(s) matching "{search}": {listing}'
        else:
            message = f'No courses found matching "{search}"'
        return OperationResult(
            message=message,
            data={"searchTerm": search, "matchCount": len(matches), "courses": matches},
        )

    def get_credit_summary(self, handle: Any) -> OperationResult:
        plan = self._read(handle)
        academic = plan.academic_semesters()
        current = academic_credit_total(academic)
        target = plan.total_credits or DEFAULT_TARGET_CREDITS
        remaining = target - current

        lightest = min(academic, key=lambda s: s.total_credits, default=None)
        heaviest = max(academic, key=lambda s: s.total_credits, default=None)
        if current > target:
            status = "over_target"
        elif current == target:
            status = "at_target"
        else:
            status = "under_target"

        summary = {
            "currentCredits": current,
            "targetCredits": target,
            "creditsRemaining": max(0, remaining),
            "creditsOver": max(0, current - target),
            "canAddCourses": remaining > 0,
            "status": status,
            "academicSemesters": len(academic),
            "coopSemesters": len(plan.coop_semesters()),
            "avgCreditsPerSemester": round(current / len(academic), 1) if academic else 0,
            "lightestSemester": f"{lightest.term} ({lightest.total_credits} credits)" if lightest else "N/A",
            "heaviestSemester": f"{heaviest.term} ({heaviest.total_credits} credits)" if heaviest else "N/A",
        }

        if remaining > 0:
            message = f"Schedule has {current}/{target} credits. You may add up to {remaining} more credits."
        else:
            message = f"Schedule has {current}/{target} credits. Do not add any courses."
            if current > target:
                message += f" Remove {current - target} credits."
        return OperationResult(message=message, data=summary)

    def get_schedule(self, handle: Any) -> OperationResult:
        plan = self._read(handle)
        overview: List[Dict[str, Any]] = []
        for semester in plan.semesters:
            if isinstance(semester, CoopSemester):
                overview.append({"term": semester.term, "type": "coop", "coopNumber": semester.coop_number})
            else:
                overview.append(
                    {
                        "term": semester.term,
                        "type": "academic",
                        "courseCount": len(semester.courses),
                        "totalCredits": semester.total_credits,
                        "courses": [course.label() for course in semester.courses],
                    }
                )
        return OperationResult(
            message="Schedule retrieved successfully",
            data={
                "school": plan.school,
                "major": plan.major,
                "degree": plan.degree,
                "startTerm": plan.start_term,
                "graduationTerm": plan.graduation_term,
                "totalCredits": plan.total_credits,
                "semesters": overview,
            },
        )

    def find_light_semesters(self, handle: Any, min_credits: Any = None) -> OperationResult:
        threshold = _positive_int(min_credits, DEFAULT_LIGHT_SEMESTER_CREDITS, "minCredits")
        plan = self._read(handle)
        light = [
            {
                "term": semester.term,
                "currentCredits": semester.total_credits,
                "courseCount": len(semester.courses),
                "creditsNeeded": threshold - semester.total_credits,
                "courses": [f"{course.code} ({course.credits}cr)" for course in semester.courses],
            }
            for semester in plan.academic_semesters()
            if semester.total_credits < threshold
        ]
        light.sort(key=lambda entry: entry["creditsNeeded"], reverse=True)
        if light:
            message = f"Found {len(light)} semester(s) with fewer than {threshold} credits"
        else:
            message = f"All academic semesters have at least {threshold} credits"
        return OperationResult(
            message=message,
            data={
                "minCreditsThreshold": threshold,
                "lightSemesterCount": len(light),
                "totalCreditsNeeded": sum(entry["creditsNeeded"] for entry in light),
                "semesters": light,
            },
        )

    def count_courses_by_type(self, handle: Any) -> OperationResult:
        plan = self._read(handle)
        counts: Dict[str, int] = {}
        for semester in plan.academic_semesters():
            for course in semester.courses:
                department = course.code.split()[0].upper() if course.code.split() else course.code.upper()
                counts[department] = counts.get(department, 0) + 1
        ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        breakdown = ", ".join(f"{department}: {count}" for department, count in ordered)
        total = sum(counts.values())
        return OperationResult(
            message=f"{total} courses: {breakdown}",
            data={
                "totalCourses": total,
                "departmentCount": len(ordered),
                "breakdown": breakdown,
                "counts": dict(ordered),
            },
        )


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _coop_number(value: Any) -> int:
    if value in (None, ""):
        return 1
    return _positive_int(value, 1, "coopNumber")


def _positive_int(value: Any, default: int, field_name: str) -> int:
    if value in (None, ""):
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive integer", field=field_name)
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be a positive integer", field=field_name) from None
    if number < 1:
        raise ValidationError(f"{field_name} must be a positive integer", field=field_name)
    return number


def _bulk_entry(entry: Any) -> _BulkCourse:
    if not isinstance(entry, Mapping):
        raise ValidationError("Each course must be an object")
    term = entry.get("term") or entry.get("toSemester")
    code = entry.get("courseCode") or entry.get("code")
    name = entry.get("courseName") or entry.get("name")
    credits = entry.get("credits")
    if not term or not code or not name or credits is None:
        raise ValidationError("Missing required fields (term, courseCode, courseName, credits)")
    return _BulkCourse(
        term=str(term).strip(),
        code=str(code).strip(),
        name=str(name).strip(),
        credits=credits,
        options=_optional_text(entry.get("options")),
    )


__all__ = [
    "DEFAULT_LIGHT_SEMESTER_CREDITS",
    "OperationResult",
    "SEMESTER_TYPES",
    "ScheduleOperations",
    "academic_credit_total",
]
