"""Ordered "try in order, first success wins" helper for tolerant parsers."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")

DEFAULT_RECOVERABLE: Tuple[Type[BaseException], ...] = (ValueError, TypeError, KeyError, AttributeError)


def first_success(
    value: S,
    strategies: Sequence[Callable[[S], Optional[T]]],
    *,
    recoverable: Tuple[Type[BaseException], ...] = DEFAULT_RECOVERABLE,
) -> Optional[T]:
    """Apply each strategy to ``value`` and return the first non-``None`` result.

    A strategy that raises one of ``recoverable`` counts as a miss.
    """
    for strategy in strategies:
        try:
            result = strategy(value)
        except recoverable as exc:
            logger.debug("Strategy %s failed: %s", getattr(strategy, "__name__", strategy), exc)
            continue
        if result is not None:
            return result
    return None


__all__ = ["first_success"]
