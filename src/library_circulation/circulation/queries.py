"""
Circulation query service: read-side projections over the ledger.

All projections are side-effect free. Overdue and due-today views are computed
live from ``due_date`` with the same policy functions the engine uses, so they
are correct whether or not the overdue sweep has run.
"""

import logging
from datetime import datetime

from ..database.session import DatabaseManager
from ..errors import RecordNotFound
from ..models.borrow_record import BorrowRecord, BorrowStats, BorrowStatus, DashboardStats
from . import policy
from .engine import Clock
from .stores import open_stores

logger = logging.getLogger(__name__)


class CirculationQueryService:
    """Read views built by filtering the circulation ledger."""

    def __init__(self, db: DatabaseManager, clock: Clock = datetime.now):
        self.db = db
        self.clock = clock

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.clock()

    def get_record(self, record_id: str) -> BorrowRecord:
        """
        Raises:
            RecordNotFound: If no record has this ID
        """
        with open_stores(self.db) as stores:
            record = stores.records.get(record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    def all_records(self) -> list[BorrowRecord]:
        """The whole ledger, most recent borrow first."""
        with open_stores(self.db) as stores:
            return stores.records.list_all()

    def currently_borrowed(self) -> list[BorrowRecord]:
        """Records whose stored status is BORROWED or OVERDUE."""
        with open_stores(self.db) as stores:
            return stores.records.list_open()

    def currently_borrowed_by_user(self, user_id: str) -> list[BorrowRecord]:
        with open_stores(self.db) as stores:
            return stores.records.list_open_for_user(user_id)

    def overdue(self, now: datetime | None = None) -> list[BorrowRecord]:
        """Open records past their due date, regardless of the cached status."""
        now = self._now(now)
        return [
            record
            for record in self.currently_borrowed()
            if policy.is_overdue(record.status, record.due_date, now)
        ]

    def due_today(self, now: datetime | None = None) -> list[BorrowRecord]:
        """Open records due on ``now``'s calendar date."""
        today = self._now(now).date()
        return [
            record
            for record in self.currently_borrowed()
            if policy.is_due_on(record.status, record.due_date, today)
        ]

    def history_for_user(self, user_id: str) -> list[BorrowRecord]:
        """Every record of a user, most recent borrow first."""
        with open_stores(self.db) as stores:
            return stores.records.list_for_user(user_id)

    def history_for_book(self, book_id: str) -> list[BorrowRecord]:
        """Every record of a book, most recent borrow first."""
        with open_stores(self.db) as stores:
            return stores.records.list_for_book(book_id)

    def stats(self, now: datetime | None = None) -> BorrowStats:
        """Aggregate counts from one pass over the ledger."""
        now = self._now(now)
        total = borrowed = overdue = returned = 0
        for record in self.all_records():
            total += 1
            if record.status == BorrowStatus.RETURNED:
                returned += 1
                continue
            borrowed += 1
            if policy.is_overdue(record.status, record.due_date, now):
                overdue += 1

        return BorrowStats(
            total_records=total,
            currently_borrowed=borrowed,
            overdue=overdue,
            returned=returned,
        )

    def dashboard(self, now: datetime | None = None) -> DashboardStats:
        """Library-wide counts for an overview screen."""
        stats = self.stats(now)
        with open_stores(self.db) as stores:
            total_books = stores.catalog.count()
            available_books = stores.catalog.count_available_titles()
            total_users = stores.members.count()
            active_users = stores.members.count_active()

        logger.debug("Dashboard computed: %d books, %d users", total_books, total_users)
        return DashboardStats(
            total_books=total_books,
            available_books=available_books,
            total_users=total_users,
            active_users=active_users,
            currently_borrowed=stats.currently_borrowed,
            overdue_books=stats.overdue,
        )
