"""Test configuration and fixtures for the Library Circulation service.

- Isolated test databases: each test gets its own SQLite file
- A controllable clock so due dates and fines are deterministic
- Seeded members (one per membership type plus an inactive one) and books
"""

from collections.abc import Generator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from library_circulation.circulation import (
    CirculationEngine,
    CirculationQueryService,
    reset_services,
    set_services,
)
from library_circulation.config import CirculationConfig, reset_config
from library_circulation.database import (
    BookCreateSchema,
    BookRepository,
    DatabaseManager,
    UserCreateSchema,
    UserRepository,
)
from library_circulation.models import Book, MembershipType, User

T0 = datetime(2024, 3, 1, 10, 0, 0)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now

    def set(self, when: datetime) -> None:
        self.now = when


# === Database Fixtures ===


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Each test gets its own database file."""
    return tmp_path / "test_circulation.db"


@pytest.fixture
def db_manager(test_db_path: Path) -> Generator[DatabaseManager, None, None]:
    """Initialized database manager on a file-backed SQLite database."""
    manager = DatabaseManager(f"sqlite:///{test_db_path}")
    manager.init_database()
    yield manager
    manager.close()


# === Configuration Fixtures ===


@pytest.fixture
def test_config(test_db_path: Path) -> Generator[CirculationConfig, None, None]:
    reset_config()
    config = CirculationConfig(
        server_name="test-library-circulation",
        database_path=test_db_path,
        debug=True,
        log_level="DEBUG",
        overdue_sweep_interval_seconds=0,
    )
    yield config
    reset_config()


# === Circulation Fixtures ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(db_manager, test_config, clock) -> CirculationEngine:
    return CirculationEngine(db_manager, config=test_config, clock=clock)


@pytest.fixture
def queries(db_manager, clock) -> CirculationQueryService:
    return CirculationQueryService(db_manager, clock=clock)


@pytest.fixture
def services(engine, queries) -> Generator[tuple[CirculationEngine, CirculationQueryService], None, None]:
    """Install the test engine and query service as the global ones used by MCP handlers."""
    set_services(engine, queries)
    yield engine, queries
    reset_services()


# === Test Data Fixtures ===


def create_user(
    db_manager: DatabaseManager,
    user_id: str,
    membership_type: MembershipType = MembershipType.REGULAR,
    is_active: bool = True,
) -> User:
    with db_manager.session_scope() as session:
        return UserRepository(session).create(
            UserCreateSchema(
                id=user_id,
                username=user_id,
                email=f"{user_id}@example.com",
                first_name="Test",
                last_name=user_id.title(),
                membership_type=membership_type,
                is_active=is_active,
            )
        )


def create_book(
    db_manager: DatabaseManager,
    book_id: str,
    isbn: str,
    total_copies: int = 1,
    title: str | None = None,
) -> Book:
    with db_manager.session_scope() as session:
        return BookRepository(session).create(
            BookCreateSchema(
                id=book_id,
                title=title or f"Title of {book_id}",
                author="Test Author",
                isbn=isbn,
                genre="fiction",
                publication_year=1999,
                total_copies=total_copies,
            )
        )


def get_book(db_manager: DatabaseManager, book_id: str) -> Book:
    with db_manager.session_scope() as session:
        return BookRepository(session).get_book(book_id)


@pytest.fixture
def make_user(db_manager):
    """Factory for extra members."""

    def _make(user_id: str, **kwargs) -> User:
        return create_user(db_manager, user_id, **kwargs)

    return _make


@pytest.fixture
def make_book(db_manager):
    """Factory for extra books."""

    def _make(book_id: str, isbn: str, total_copies: int = 1) -> Book:
        return create_book(db_manager, book_id, isbn, total_copies)

    return _make


@pytest.fixture
def available_copies(db_manager):
    """Read a book's current ``available_copies`` straight from the database."""

    def _read(book_id: str) -> int:
        return get_book(db_manager, book_id).available_copies

    return _read


@pytest.fixture
def users(db_manager) -> dict[str, User]:
    """One active member per membership type plus an inactive regular member."""
    return {
        "regular": create_user(db_manager, "user_regular01", MembershipType.REGULAR),
        "student": create_user(db_manager, "user_student01", MembershipType.STUDENT),
        "premium": create_user(db_manager, "user_premium01", MembershipType.PREMIUM),
        "inactive": create_user(db_manager, "user_inactive01", is_active=False),
    }


@pytest.fixture
def books(db_manager) -> dict[str, Book]:
    """A single-copy title, a three-copy title and a two-copy title."""
    return {
        "single": create_book(db_manager, "book_gatsby01", "9780743273565", 1, "The Great Gatsby"),
        "triple": create_book(db_manager, "book_mocking01", "9780061120084", 3, "To Kill a Mockingbird"),
        "double": create_book(db_manager, "book_dune0001", "9780441172719", 2, "Dune"),
    }


# === Cleanup Fixtures ===


@pytest.fixture(autouse=True)
def cleanup_after_test():
    """Reset global singletons after each test."""
    yield

    reset_config()
    reset_services()
