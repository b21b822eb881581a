"""Tests for the sample catalog and membership data."""

import pytest

from library_circulation.database import BookRepository, UserRepository
from library_circulation.database.seed import SAMPLE_BOOKS, SAMPLE_USERS, seed_sample_data
from library_circulation.errors import UserInactive
from library_circulation.models import BorrowStatus


def _counts(db_manager) -> tuple[int, int]:
    with db_manager.session_scope() as session:
        return BookRepository(session).count(), UserRepository(session).count()


def test_seed_fresh_database(db_manager):
    assert seed_sample_data(db_manager) == (len(SAMPLE_BOOKS), len(SAMPLE_USERS))
    assert _counts(db_manager) == (12, 9)


def test_seed_is_idempotent(db_manager):
    seed_sample_data(db_manager)
    assert seed_sample_data(db_manager) == (0, 0)
    assert _counts(db_manager) == (12, 9)


def test_existing_isbn_is_skipped(db_manager, make_book):
    make_book("book_mine0001", SAMPLE_BOOKS[0].isbn, total_copies=7)

    books_created, _ = seed_sample_data(db_manager)

    assert books_created == len(SAMPLE_BOOKS) - 1
    with db_manager.session_scope() as session:
        assert BookRepository(session).get_by_isbn(SAMPLE_BOOKS[0].isbn).total_copies == 7


def test_every_copy_starts_on_the_shelf(db_manager):
    seed_sample_data(db_manager)
    with db_manager.session_scope() as session:
        catalog = BookRepository(session)
        for book in SAMPLE_BOOKS:
            stored = catalog.get_by_isbn(book.isbn)
            assert stored.available_copies == stored.total_copies


def test_seeded_members_can_borrow(db_manager, engine):
    seed_sample_data(db_manager)

    record = engine.borrow("user_alice_johnson", "book_gatsby01")
    assert record.status == BorrowStatus.BORROWED

    with pytest.raises(UserInactive):
        engine.borrow("user_inactive_user", "book_gatsby01")
