"""Failure types raised by schedule operations and mapped onto tool responses."""

from __future__ import annotations

from typing import Any, Dict, Optional


class ToolError(Exception):
    """Base class for expected operation failures.

    ``field`` names the offending input parameter when there is one so clients can
    highlight it.
    """

    status_code = 400
    kind = "error"

    def __init__(self, message: str, *, field: Optional[str] = None, data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.data = data


class ValidationError(ToolError):
    kind = "validation"


class NotFoundError(ToolError):
    status_code = 404
    kind = "not_found"


class ConflictError(ToolError):
    kind = "conflict"


class ConstraintError(ToolError):
    kind = "constraint"


__all__ = ["ConflictError", "ConstraintError", "NotFoundError", "ToolError", "ValidationError"]
