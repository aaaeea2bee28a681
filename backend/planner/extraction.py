"""Recover a schedule object from raw agent output.

Agents wrap their answer in several shapes: a JSON envelope with an ``answer`` field that
may itself be a JSON string, an escaped answer string embedded in surrounding log text,
or a bare schedule object mid-paragraph. Each shape has its own strategy; the first one
that yields a plausible schedule wins.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

from .fallbacks import first_success

logger = logging.getLogger(__name__)

_ANSWER_STRING = re.compile(r'"answer"\s*:\s*"(\{.*?\})"\s*[,}]', re.DOTALL)
_OBJECT_STARTS = ('{"school"', '{ "school"')


def _looks_like_schedule(candidate: Any) -> bool:
    return (
        isinstance(candidate, dict)
        and bool(candidate.get("school"))
        and candidate.get("semesters") is not None
    )


def _from_answer_envelope(content: str) -> Optional[Dict[str, Any]]:
    payload = json.loads(content)
    if not isinstance(payload, dict):
        return None
    answer = payload.get("answer")
    if answer is None:
        return payload if _looks_like_schedule(payload) else None
    if isinstance(answer, str):
        answer = json.loads(answer)
    return answer if _looks_like_schedule(answer) else None


def _from_escaped_answer(content: str) -> Optional[Dict[str, Any]]:
    match = _ANSWER_STRING.search(content)
    if match is None:
        return None
    unescaped = match.group(1).replace("\\n", "\n").replace('\\"', '"').replace("\\\\", "\\")
    parsed = json.loads(unescaped)
    return parsed if _looks_like_schedule(parsed) else None


def _balanced_object(content: str, start: int) -> Optional[str]:
    depth = 0
    for index in range(start, len(content)):
        char = content[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return content[start : index + 1]
    return None


def _from_embedded_object(content: str) -> Optional[Dict[str, Any]]:
    for pattern in _OBJECT_STARTS:
        start = content.find(pattern)
        if start == -1:
            continue
        fragment = _balanced_object(content, start)
        if fragment is None:
            continue
        try:
            parsed = json.loads(fragment)
        except ValueError as exc:
            logger.debug("Embedded schedule at offset %s is not valid JSON: %s", start, exc)
            continue
        if _looks_like_schedule(parsed):
            return parsed
    return None


_STRATEGIES = (_from_answer_envelope, _from_escaped_answer, _from_embedded_object)


def extract_schedule_from_content(content: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the first schedule-shaped object found in ``content``, or ``None``."""
    if not content or not isinstance(content, str):
        return None
    extracted = first_success(content, _STRATEGIES)
    if extracted is None:
        logger.debug("No schedule found in %s characters of agent output", len(content))
    return extracted


__all__ = ["extract_schedule_from_content"]
