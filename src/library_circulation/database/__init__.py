"""
Database package for the Library Circulation service.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Session management and transactional scopes (session.py)
- Repositories backing the catalog, membership and circulation ledger
"""

from .book_repository import BookCreateSchema, BookRepository
from .borrow_record_repository import BorrowRecordRepository
from .repository import (
    BaseRepository,
    CopyCountError,
    DuplicateError,
    NotFoundError,
    RepositoryException,
)
from .schema import Base
from .session import (
    DatabaseManager,
    get_db_manager,
    set_db_manager,
)
from .user_repository import UserCreateSchema, UserRepository

__all__ = [
    "Base",
    "BaseRepository",
    "BookCreateSchema",
    "BookRepository",
    "BorrowRecordRepository",
    "CopyCountError",
    "DatabaseManager",
    "DuplicateError",
    "NotFoundError",
    "RepositoryException",
    "UserCreateSchema",
    "UserRepository",
    "get_db_manager",
    "set_db_manager",
]
