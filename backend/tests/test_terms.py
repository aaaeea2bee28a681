from __future__ import annotations

import pytest

from planner.terms import canonical_term, normalize_term, term_sort_key


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Summer/Fall 2028", "Summer 2028"),
        ("summer / fall 2028", "Summer 2028"),
        ("fall 2025", "Fall 2025"),
        ("SPRING 2026", "Spring 2026"),
        ("  Fall  ", "Fall"),
        ("", ""),
    ],
)
def test_normalize_term(raw: str, expected: str) -> None:
    assert normalize_term(raw) == expected


def test_canonical_term_keeps_numbered_summer_sessions() -> None:
    assert canonical_term("Summer 1 2027") == "Summer 1 2027"
    assert canonical_term("summer   2027") == "Summer 2027"
    assert canonical_term("Summer/Fall  2028") == "Summer 2028"


def test_term_sort_key_orders_seasons_within_a_year() -> None:
    terms = ["Fall 2026", "Summer 2 2026", "Spring 2027", "Summer 2026", "Spring 2026", "Fall 2025"]
    assert sorted(terms, key=term_sort_key) == [
        "Fall 2025",
        "Spring 2026",
        "Summer 2026",
        "Summer 2 2026",
        "Fall 2026",
        "Spring 2027",
    ]
