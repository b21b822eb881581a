"""
Library Circulation Package.

Tracks which member holds which copy of which book, enforces the lending
policy, and answers questions about the current state of the collection.

Key Components:
- models: Pydantic models for books, users and borrow records
- database: SQLAlchemy schema, session management and repositories
- circulation: lending policy, circulation engine, queries and overdue sweeper
- config: Configuration management with Pydantic v2
- resources: MCP resources (read-only circulation views)
- tools: MCP tools (circulation commands)
"""

__version__ = "0.1.0"

from . import database
from .errors import CirculationError

__all__ = [
    "CirculationError",
    "__version__",
    "database",
]
