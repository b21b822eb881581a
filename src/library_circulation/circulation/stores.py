"""
Collaborator interfaces the circulation core depends on.

The engine only ever talks to these protocols. ``open_stores`` binds the
SQL-backed repositories to one transactional session so every store used by
a command shares the same commit or rollback.
"""

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from ..database.book_repository import BookRepository
from ..database.borrow_record_repository import BorrowRecordRepository
from ..database.session import DatabaseManager
from ..database.user_repository import UserRepository
from ..models.book import Book
from ..models.borrow_record import BorrowRecord
from ..models.user import User


class CatalogStore(Protocol):
    def get_book(self, book_id: str) -> Book | None: ...

    def adjust_available_copies(self, book_id: str, delta: int) -> Book:
        """Must reject results outside ``[0, total_copies]``."""
        ...


class MembershipStore(Protocol):
    def get_user(self, user_id: str) -> User | None: ...


class BorrowRecordStore(Protocol):
    def add(self, record: BorrowRecord) -> BorrowRecord: ...

    def get(self, record_id: str, for_update: bool = False) -> BorrowRecord | None: ...

    def save(self, record: BorrowRecord) -> BorrowRecord: ...

    def list_all(self) -> list[BorrowRecord]: ...

    def list_open(self) -> list[BorrowRecord]: ...

    def list_for_user(self, user_id: str) -> list[BorrowRecord]: ...

    def list_for_book(self, book_id: str) -> list[BorrowRecord]: ...

    def list_open_for_user(self, user_id: str) -> list[BorrowRecord]: ...

    def has_open_record(self, user_id: str, book_id: str) -> bool: ...

    def list_overdue_candidate_ids(self, now: datetime) -> list[str]: ...


@dataclass
class CirculationStores:
    """The stores of a single transaction."""

    catalog: BookRepository
    members: UserRepository
    records: BorrowRecordRepository


@contextmanager
def open_stores(db: DatabaseManager) -> Generator[CirculationStores, None, None]:
    """Open a transaction and yield the stores bound to it."""
    with db.session_scope() as session:
        yield CirculationStores(
            catalog=BookRepository(session),
            members=UserRepository(session),
            records=BorrowRecordRepository(session),
        )
