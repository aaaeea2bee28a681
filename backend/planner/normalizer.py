"""Turn loosely-shaped agent output into a canonical ``SchedulePlan``.

The agent answers with JSON most of the time, but semesters regularly arrive as a
stringified array, as markdown prose, or with co-op terms mislabeled. Everything here
degrades to defaults instead of raising; anything that had to be dropped is reported
through ``warnings`` or the log.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

from .extraction import extract_schedule_from_content
from .markdown_parser import parse_schedule_markdown
from .schedule_models import (
    DEFAULT_TARGET_CREDITS,
    AcademicSemester,
    CoopSemester,
    Course,
    SchedulePlan,
    is_elective_placeholder,
    normalize_course_code,
)
from .telemetry import emit_event
from .terms import canonical_term

logger = logging.getLogger(__name__)

UNPARSEABLE_SEMESTERS_WARNING = "Schedule semesters could not be parsed from the agent response."
UNSTRUCTURED_RESPONSE_WARNING = "Schedule details could not be extracted; semesters were read from prose."

_LEADING_INT = re.compile(r"^\s*(\d+)")
_WARNING_MARKER = re.compile(r"^[-•*]\s*")
_NUMBERED_MARKER = re.compile(r"^\d+\.\s*")
_TRAILING_COMMA = re.compile(r",\s*$")

RawSchedule = Union[Mapping[str, Any], BaseModel, str, None]
Semester = Union[AcademicSemester, CoopSemester]


@dataclass
class NormalizationReport:
    duplicates_removed: int = 0
    corrections: List[str] = field(default_factory=list)
    dropped_per_term: Dict[str, int] = field(default_factory=dict)


def normalize_warnings(warnings: Any) -> List[str]:
    """Coerce a warnings field into a list of strings.

    Accepts a list, a stringified JSON array, or a newline separated string that may
    carry bullet (``-``, ``*``, ``•``) or numbered (``1.``) markers.
    """
    if warnings is None or warnings == "":
        return []
    if isinstance(warnings, (list, tuple)):
        return [str(item) for item in warnings if item is not None]
    if not isinstance(warnings, str):
        return [str(warnings)]

    trimmed = warnings.strip()
    if trimmed.startswith("["):
        try:
            parsed = json.loads(trimmed)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item) for item in parsed if item is not None]

    parts = []
    for line in warnings.split("\n"):
        text = line.strip()
        if not text:
            continue
        text = _NUMBERED_MARKER.sub("", _WARNING_MARKER.sub("", text))
        if text:
            parts.append(text)
    return parts or [warnings]


def _coerce_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return default


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_semesters_text(text: str, warnings: List[str]) -> List[Any]:
    trimmed = text.strip()
    if trimmed.startswith("["):
        try:
            parsed = json.loads(_TRAILING_COMMA.sub("", trimmed))
        except ValueError:
            logger.info("Semesters looked like JSON but failed to parse; using the markdown parser")
        else:
            if isinstance(parsed, list):
                return parsed
    semesters = list(parse_schedule_markdown(trimmed))
    if not semesters and trimmed:
        logger.warning("Semesters text yielded no semesters: %.80s", trimmed)
        warnings.append(UNPARSEABLE_SEMESTERS_WARNING)
    return semesters


def _coerce_courses(raw: Any, term: str) -> List[Course]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.info("Dropping unparseable course list in %s", term)
            return []
    if not isinstance(raw, (list, tuple)):
        return []

    courses: List[Course] = []
    for entry in raw:
        if isinstance(entry, Course):
            courses.append(entry.model_copy())
            continue
        if isinstance(entry, BaseModel):
            entry = entry.model_dump(by_alias=True)
        if not isinstance(entry, Mapping):
            continue
        code = _coerce_text(entry.get("code"))
        if not code:
            logger.info("Dropping course without a code in %s", term)
            continue
        options = entry.get("options")
        if isinstance(options, (list, tuple)):
            options = ", ".join(str(item) for item in options)
        courses.append(
            Course(
                code=code,
                name=_coerce_text(entry.get("name")),
                credits=max(_coerce_int(entry.get("credits")), 0),
                options=str(options) if options not in (None, "") else None,
            )
        )
    return courses


def _reconcile_semester(raw: Any, coop_count: int, report: NormalizationReport) -> Optional[Semester]:
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, Mapping):
        return None

    term = canonical_term(_coerce_text(raw.get("term")))
    if not term:
        logger.info("Dropping semester without a term")
        return None

    courses = _coerce_courses(raw.get("courses"), term)
    semester_type = _coerce_text(raw.get("type")).lower().replace("-", "")
    coop_number = raw.get("coopNumber", raw.get("coop_number"))
    has_coop_number = isinstance(coop_number, int) and not isinstance(coop_number, bool)

    if semester_type == "coop":
        if courses:
            report.corrections.append(f"{term}: coop with courses treated as academic")
            logger.info('Semester "%s" marked as co-op but has courses, correcting to academic', term)
            semester_type = "academic"
    elif semester_type != "academic":
        if courses:
            resolved = "academic"
        elif has_coop_number:
            resolved = "coop"
        else:
            resolved = "academic"
        report.corrections.append(f"{term}: unknown type {raw.get('type')!r} treated as {resolved}")
        logger.info('Unknown semester type "%s" for %s, treating as %s', raw.get("type"), term, resolved)
        semester_type = resolved

    if semester_type == "coop":
        number = _coerce_int(coop_number, default=coop_count + 1)
        return CoopSemester(term=term, coop_number=max(number, 1))
    return AcademicSemester(term=term, courses=courses)


def deduplicate_courses(semesters: Iterable[Semester], report: Optional[NormalizationReport] = None) -> List[Semester]:
    """Drop repeated course codes across the plan, keeping the first occurrence.

    Elective placeholders are never treated as duplicates. Every academic semester is
    rebuilt so its credit total matches its remaining courses.
    """
    report = report if report is not None else NormalizationReport()
    seen: set[str] = set()
    result: List[Semester] = []
    for semester in semesters:
        if not isinstance(semester, AcademicSemester):
            result.append(semester)
            continue
        kept: List[Course] = []
        for course in semester.courses:
            if is_elective_placeholder(course.code):
                kept.append(course)
                continue
            key = normalize_course_code(course.code)
            if key in seen:
                report.duplicates_removed += 1
                report.dropped_per_term[semester.term] = report.dropped_per_term.get(semester.term, 0) + 1
                logger.info("Removed duplicate %s in %s", course.code, semester.term)
                continue
            seen.add(key)
            kept.append(course)
        result.append(semester.with_courses(kept))
    return result


def _resolve_target(raw_total: Any, semesters: List[Semester], semesters_available: bool, default_target: int) -> int:
    total = _coerce_int(raw_total)
    if total > 0:
        return total
    academic_sum = sum(s.total_credits for s in semesters if isinstance(s, AcademicSemester))
    if semesters_available and academic_sum > 0:
        return academic_sum
    return default_target


def _as_mapping(raw: RawSchedule, warnings: List[str]) -> Dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True)
    if isinstance(raw, str):
        extracted = extract_schedule_from_content(raw)
        if extracted is not None:
            return dict(extracted)
        warnings.append(UNSTRUCTURED_RESPONSE_WARNING)
        return {"semesters": raw}
    if isinstance(raw, Mapping):
        return dict(raw)
    warnings.append(UNPARSEABLE_SEMESTERS_WARNING)
    return {}


def normalize_schedule(
    raw: RawSchedule,
    *,
    defaults: Optional[Mapping[str, Any]] = None,
    default_target: int = DEFAULT_TARGET_CREDITS,
) -> SchedulePlan:
    """Normalize raw agent output into a ``SchedulePlan``.

    ``raw`` may be a mapping, a pydantic model, or the agent's raw text. ``defaults``
    fills top-level fields (``school``, ``major``...) the agent left empty.
    """
    added_warnings: List[str] = []
    data = _as_mapping(raw, added_warnings)
    report = NormalizationReport()

    raw_semesters = data.get("semesters")
    semesters_available = True
    if raw_semesters is None:
        raw_semesters = []
        semesters_available = False
    elif isinstance(raw_semesters, str):
        raw_semesters = _parse_semesters_text(raw_semesters, added_warnings)
    elif not isinstance(raw_semesters, (list, tuple)):
        added_warnings.append(UNPARSEABLE_SEMESTERS_WARNING)
        raw_semesters = []
        semesters_available = False

    reconciled: List[Semester] = []
    coop_count = 0
    for entry in raw_semesters:
        semester = _reconcile_semester(entry, coop_count, report)
        if semester is None:
            continue
        if isinstance(semester, CoopSemester):
            coop_count += 1
        reconciled.append(semester)

    semesters = deduplicate_courses(reconciled, report)
    if report.duplicates_removed:
        logger.info(
            "Total duplicates removed: %s (%s)",
            report.duplicates_removed,
            ", ".join(f"{term}={count}" for term, count in report.dropped_per_term.items()),
        )

    warnings = normalize_warnings(data.get("warnings")) + added_warnings

    merged_defaults = dict(defaults or {})

    def _field(wire: str, attribute: str) -> str:
        value = _coerce_text(data.get(wire, data.get(attribute)))
        return value or _coerce_text(merged_defaults.get(wire, merged_defaults.get(attribute)))

    plan = SchedulePlan(
        school=_field("school", "school"),
        major=_field("major", "major"),
        degree=_field("degree", "degree") or "BS",
        start_term=canonical_term(_field("startTerm", "start_term")),
        graduation_term=canonical_term(_field("graduationTerm", "graduation_term")),
        total_credits=_resolve_target(
            data.get("totalCredits", data.get("total_credits")),
            semesters,
            semesters_available,
            default_target,
        ),
        semesters=semesters,
        warnings=warnings,
        source_url=_field("sourceUrl", "source_url"),
    )

    emit_event(
        "schedule_normalized",
        semesters=len(plan.semesters),
        duplicates_removed=report.duplicates_removed,
        corrections=report.corrections,
    )
    return plan


__all__ = [
    "NormalizationReport",
    "UNPARSEABLE_SEMESTERS_WARNING",
    "UNSTRUCTURED_RESPONSE_WARNING",
    "deduplicate_courses",
    "normalize_schedule",
    "normalize_warnings",
]
