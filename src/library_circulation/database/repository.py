"""
Repository pattern implementation for the Library Circulation service.

Repositories wrap a SQLAlchemy session and return Pydantic models. They never
commit: the caller's ``session_scope`` owns the transaction, so a circulation
command that touches several repositories still commits or rolls back as one
unit. Writes are flushed immediately so constraint failures surface inside the
command that caused them.
"""

import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .schema import Base

ModelType = TypeVar("ModelType", bound=Base)
ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)
T = TypeVar("T")


class RepositoryException(Exception):
    """Base exception for repository operations."""


class NotFoundError(RepositoryException):
    """Raised when an entity is not found."""


class DuplicateError(RepositoryException):
    """Raised when attempting to create a duplicate entity."""


class CopyCountError(RepositoryException):
    """Raised when a copy adjustment would leave ``0 <= available <= total``."""

    def __init__(self, book_id: str, available_copies: int, total_copies: int, delta: int):
        self.book_id = book_id
        self.available_copies = available_copies
        self.total_copies = total_copies
        self.delta = delta
        super().__init__(
            f"Cannot adjust copies of book {book_id} by {delta:+d} "
            f"(available={available_copies}, total={total_copies})"
        )


def generate_id(prefix: str) -> str:
    """Generate a prefixed unique identifier such as ``borrow_1a2b3c4d5e6f``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def safe_query(session: Session, query_func: Callable[[Session], T], error_msg: str) -> T:
    """
    Execute a query, converting driver errors into RepositoryException.

    Args:
        session: The database session
        query_func: Function that performs the query
        error_msg: Message prefix for the raised exception
    """
    try:
        return query_func(session)
    except SQLAlchemyError as e:
        raise RepositoryException(f"{error_msg}: {e!s}") from e


def safe_flush(session: Session, operation: str) -> None:
    """
    Flush pending changes so constraint violations surface immediately.

    Raises:
        DuplicateError: On unique constraint violations
        RepositoryException: On any other database error
    """
    try:
        session.flush()
    except IntegrityError as e:
        raise DuplicateError(f"Database operation '{operation}' violated a constraint: {e.orig}") from e
    except SQLAlchemyError as e:
        raise RepositoryException(f"Database operation '{operation}' failed: {e!s}") from e


class BaseRepository(ABC, Generic[ModelType, ResponseSchemaType]):
    """Abstract base repository providing common read operations."""

    def __init__(self, session: Session):
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[ModelType]:
        """Return the SQLAlchemy model class."""

    @property
    @abstractmethod
    def response_schema(self) -> type[ResponseSchemaType]:
        """Return the Pydantic response schema."""

    def _to_response_model(self, db_obj: ModelType) -> ResponseSchemaType:
        """Convert database model to Pydantic response model."""
        return self.response_schema.model_validate(db_obj, from_attributes=True)

    def _get_row(self, id: str, for_update: bool = False) -> ModelType | None:
        """Load the ORM row, optionally locking it for the rest of the transaction."""
        query = select(self.model_class).where(self.model_class.id == str(id))
        if for_update:
            query = query.with_for_update()
        return safe_query(
            self.session,
            lambda s: s.execute(query).scalar_one_or_none(),
            f"Failed to get {self.model_class.__name__} by ID",
        )

    def get_by_id(self, id: str) -> ResponseSchemaType | None:
        """Get entity by ID, or None if not found."""
        db_obj = self._get_row(id)
        if db_obj is None:
            return None
        return self._to_response_model(db_obj)

    def count(self, *criteria) -> int:
        """Count rows, optionally filtered by SQLAlchemy criteria."""
        query = select(func.count()).select_from(self.model_class)
        if criteria:
            query = query.where(*criteria)
        return safe_query(self.session, lambda s: s.execute(query).scalar(), "Failed to count") or 0
