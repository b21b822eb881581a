"""Tests for the Pydantic domain models."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from library_circulation.models import (
    Book,
    BorrowRecord,
    BorrowStats,
    BorrowStatus,
    MembershipType,
    User,
)

T0 = datetime(2024, 3, 1, 10, 0, 0)


class TestBook:
    def _book(self, **kwargs) -> Book:
        data = {
            "id": "book_gatsby01",
            "title": "The Great Gatsby",
            "author": "F. Scott Fitzgerald",
            "isbn": "978-0-7432-7356-5",
            "total_copies": 3,
            "available_copies": 2,
        }
        data.update(kwargs)
        return Book(**data)

    def test_valid_book(self):
        book = self._book(genre="  science fiction ")
        assert book.genre == "Science Fiction"
        assert book.is_available
        assert book.borrowed_copies == 1

    def test_available_cannot_exceed_total(self):
        with pytest.raises(ValidationError, match="Available copies cannot exceed total copies"):
            self._book(available_copies=4)

    def test_negative_available(self):
        with pytest.raises(ValidationError):
            self._book(available_copies=-1)

    def test_at_least_one_copy(self):
        with pytest.raises(ValidationError):
            self._book(total_copies=0, available_copies=0)

    def test_invalid_isbn(self):
        with pytest.raises(ValidationError):
            self._book(isbn="not-an-isbn")

    def test_future_publication_year(self):
        with pytest.raises(ValidationError, match="future"):
            self._book(publication_year=datetime.now().year + 1)

    def test_assignment_is_validated(self):
        book = self._book()
        with pytest.raises(ValidationError):
            book.available_copies = 10


class TestUser:
    def _user(self, **kwargs) -> User:
        data = {
            "id": "user_jsmith01",
            "username": "jsmith",
            "email": "john.smith@example.com",
            "first_name": "John",
            "last_name": "Smith",
        }
        data.update(kwargs)
        return User(**data)

    def test_defaults(self):
        user = self._user()
        assert user.membership_type == MembershipType.REGULAR
        assert user.is_active
        assert user.can_borrow
        assert user.full_name == "John Smith"

    def test_membership_type_case_insensitive(self):
        assert self._user(membership_type=" premium ").membership_type == MembershipType.PREMIUM

    def test_unknown_membership_type(self):
        with pytest.raises(ValidationError):
            self._user(membership_type="GOLD")

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            self._user(email="not-an-email")

    def test_inactive_user_cannot_borrow(self):
        assert not self._user(is_active=False).can_borrow


class TestBorrowRecord:
    def _record(self, **kwargs) -> BorrowRecord:
        data = {
            "id": "borrow_5d41402abc4b",
            "user_id": "user_jsmith01",
            "book_id": "book_gatsby01",
            "borrow_date": T0,
            "due_date": T0 + timedelta(days=14),
        }
        data.update(kwargs)
        return BorrowRecord(**data)

    def test_defaults(self):
        record = self._record()
        assert record.status == BorrowStatus.BORROWED
        assert record.fine_amount == Decimal("0.00")
        assert record.is_open
        assert record.loan_period_days == 14

    def test_overdue_is_open(self):
        assert self._record(status=BorrowStatus.OVERDUE).is_open

    def test_returned(self):
        record = self._record(status=BorrowStatus.RETURNED, return_date=T0 + timedelta(days=3))
        assert not record.is_open

    def test_due_date_after_borrow_date(self):
        with pytest.raises(ValidationError, match="Due date must be after borrow date"):
            self._record(due_date=T0)

    def test_return_date_not_before_borrow_date(self):
        with pytest.raises(ValidationError):
            self._record(status=BorrowStatus.RETURNED, return_date=T0 - timedelta(days=1))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"status": BorrowStatus.RETURNED},
            {"status": BorrowStatus.BORROWED, "return_date": T0 + timedelta(days=1)},
        ],
    )
    def test_return_date_set_exactly_when_returned(self, kwargs):
        with pytest.raises(ValidationError):
            self._record(**kwargs)

    def test_negative_fine(self):
        with pytest.raises(ValidationError):
            self._record(fine_amount=Decimal("-0.50"))

    def test_id_pattern(self):
        with pytest.raises(ValidationError):
            self._record(id="checkout_123456")

    def test_json_dump(self):
        data = self._record().model_dump(mode="json")
        assert data["status"] == "BORROWED"
        assert data["fine_amount"] == "0.00"
        assert data["due_date"] == "2024-03-15T10:00:00"


def test_stats_reject_negative_counts():
    with pytest.raises(ValidationError):
        BorrowStats(total_records=-1, currently_borrowed=0, overdue=0, returned=0)
