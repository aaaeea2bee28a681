"""Canonical ``Season Year`` labels for semester terms."""

from __future__ import annotations

import re

_YEAR_PATTERN = re.compile(r"\d{4}")
_SIMPLE_TERM_PATTERN = re.compile(r"[A-Za-z]+(?:\s*/\s*[A-Za-z]+)*\s+\d{4}")

# Spring < Summer (1) < Summer 2 < Fall within a calendar year.
_SEASON_ORDER = {"winter": 0, "spring": 1, "summer": 2, "fall": 4, "autumn": 4}


def _capitalize(token: str) -> str:
    return token[:1].upper() + token[1:].lower()


def normalize_term(term: str) -> str:
    """Normalize a free-form label such as ``"Summer/Fall 2028"`` to ``"Summer 2028"``.

    Best effort only: malformed labels are passed through trimmed rather than rejected.
    """
    if "/" in term:
        season = term.split("/", 1)[0].strip()
        year_match = _YEAR_PATTERN.search(term)
        year = year_match.group(0) if year_match else ""
        return f"{_capitalize(season)} {year}"

    parts = term.split()
    if len(parts) >= 2:
        return f"{_capitalize(parts[0])} {parts[1]}"
    return term.strip()


def canonical_term(term: str) -> str:
    """Normalize simple ``Season Year`` labels and collapse whitespace on anything else.

    Multi-part labels like ``"Summer 1 2027"`` keep every token.
    """
    stripped = " ".join(str(term).split())
    if _SIMPLE_TERM_PATTERN.fullmatch(stripped):
        return normalize_term(stripped)
    return stripped


def term_sort_key(term: str) -> tuple[int, int]:
    """Chronological sort key; ``Summer 2`` sorts after plain ``Summer``/``Summer 1``."""
    parts = term.split()
    if not parts:
        return (0, 0)
    season = parts[0].lower()
    year_match = _YEAR_PATTERN.search(term)
    year = int(year_match.group(0)) if year_match else 0
    order = _SEASON_ORDER.get(season, 2)
    if season == "summer" and len(parts) == 3 and parts[1] == "2":
        order = 3
    return (year, order)


__all__ = ["canonical_term", "normalize_term", "term_sort_key"]
