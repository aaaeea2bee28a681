"""Database utilities for saved schedules."""

from .session import (
    database_configured,
    dispose_engine,
    get_engine,
    get_session_factory,
    session_scope,
)

__all__ = [
    "database_configured",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
