"""
Circulation core: policy, engine, queries and the overdue sweeper.

``get_engine()`` and ``get_query_service()`` return process-wide instances
bound to the global database manager; they share one lock registry.
"""

from ..database.session import get_db_manager
from .engine import CirculationEngine, Clock
from .locks import EntityLocks
from .queries import CirculationQueryService
from .sweeper import OverdueSweeper

_engine: CirculationEngine | None = None
_query_service: CirculationQueryService | None = None


def get_engine() -> CirculationEngine:
    """Get or create the global circulation engine."""
    global _engine  # noqa: PLW0603 - Singleton pattern, mirrors get_db_manager
    if _engine is None:
        _engine = CirculationEngine(get_db_manager())
    return _engine


def get_query_service() -> CirculationQueryService:
    """Get or create the global query service."""
    global _query_service  # noqa: PLW0603
    if _query_service is None:
        _query_service = CirculationQueryService(get_db_manager(), clock=get_engine().clock)
    return _query_service


def set_services(
    engine: CirculationEngine | None, query_service: CirculationQueryService | None
) -> None:
    """Install the global engine and query service (tests, embedding applications)."""
    global _engine, _query_service  # noqa: PLW0603
    _engine = engine
    _query_service = query_service


def reset_services() -> None:
    """Drop the global engine and query service (useful for testing)."""
    global _engine, _query_service  # noqa: PLW0603
    _engine = None
    _query_service = None


__all__ = [
    "CirculationEngine",
    "CirculationQueryService",
    "Clock",
    "EntityLocks",
    "OverdueSweeper",
    "get_engine",
    "get_query_service",
    "reset_services",
    "set_services",
]
