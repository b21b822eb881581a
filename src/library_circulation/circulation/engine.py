"""
Circulation engine: the write side of the circulation lifecycle.

The engine owns four commands:

1. ``borrow``: take a copy off the shelf and open a borrow record
2. ``return_book``: close a record, finalize its fine and shelve the copy
3. ``extend_due_date``: push an open record's due date back
4. ``refresh_overdue_status``: persist OVERDUE on records past their due date

Each command runs under the per-entity locks of what it touches and inside a
single database transaction, so it either applies completely or not at all.
Fines are always derived from ``due_date`` and ``return_date`` at return time;
the stored OVERDUE status is only a cached projection for filtering.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

from ..config import CirculationConfig, get_config
from ..database.borrow_record_repository import new_record_id
from ..database.repository import CopyCountError, NotFoundError
from ..database.session import DatabaseManager
from ..errors import (
    AlreadyBorrowed,
    AlreadyReturned,
    BookNotFound,
    CirculationError,
    InvariantViolation,
    NoCopiesAvailable,
    RecordAlreadyReturned,
    RecordNotFound,
    ReturnBeforeBorrow,
    UserInactive,
    UserNotFound,
)
from ..models.book import Book
from ..models.borrow_record import BorrowRecord, BorrowStatus
from . import policy
from .locks import EntityLocks, book_key, record_key
from .stores import CatalogStore, open_stores

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class CirculationEngine:
    """
    Applies circulation commands against the catalog, membership and ledger.

    Args:
        db: Database manager providing transactional sessions
        config: Policy configuration; defaults to the global configuration
        clock: Source of "now" when a command is not given an explicit time
        locks: Lock registry; share one between engines on the same database
    """

    def __init__(
        self,
        db: DatabaseManager,
        config: CirculationConfig | None = None,
        clock: Clock = datetime.now,
        locks: EntityLocks | None = None,
    ):
        self.db = db
        self.config = config or get_config()
        self.clock = clock
        self.locks = locks or EntityLocks()

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.clock()

    @property
    def fine_per_day(self) -> Decimal:
        return self.config.fine_per_day

    # === Commands ===

    def borrow(
        self,
        user_id: str,
        book_id: str,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> BorrowRecord:
        """
        Lend one copy of a book to a user.

        Returns:
            The new BORROWED record

        Raises:
            UserNotFound, UserInactive, BookNotFound, NoCopiesAvailable,
            AlreadyBorrowed (only with ``prevent_duplicate_loans``),
            InvariantViolation
        """
        now = self._now(now)
        try:
            with self.locks.hold(book_key(book_id)), open_stores(self.db) as stores:
                user = stores.members.get_user(user_id)
                if user is None:
                    raise UserNotFound(user_id)
                if not user.is_active:
                    raise UserInactive(user_id)

                book = stores.catalog.get_book(book_id)
                if book is None:
                    raise BookNotFound(book_id)
                if book.available_copies <= 0:
                    raise NoCopiesAvailable(book_id, book.title)

                if self.config.prevent_duplicate_loans and stores.records.has_open_record(
                    user_id, book_id
                ):
                    raise AlreadyBorrowed(user_id, book_id)

                self._adjust_copies(stores.catalog, book_id, -1)

                record = stores.records.add(
                    BorrowRecord(
                        id=new_record_id(),
                        user_id=user_id,
                        book_id=book_id,
                        borrow_date=now,
                        due_date=policy.compute_due_date(
                            now, user.membership_type, self.config.loan_periods
                        ),
                        status=BorrowStatus.BORROWED,
                        fine_amount=Decimal("0.00"),
                        notes=notes,
                        created_at=now,
                    )
                )
        except InvariantViolation:
            raise
        except CirculationError as e:
            logger.info("Borrow of book %s by user %s rejected: %s", book_id, user_id, e)
            raise

        logger.info(
            "User %s borrowed book %s (record %s, due %s)",
            user_id,
            book_id,
            record.id,
            record.due_date.isoformat(),
        )
        return record

    def return_book(self, record_id: str, now: datetime | None = None) -> BorrowRecord:
        """
        Close an open record and put the copy back on the shelf.

        Returns:
            The RETURNED record with its final fine

        Raises:
            RecordNotFound, AlreadyReturned, ReturnBeforeBorrow, InvariantViolation
        """
        now = self._now(now)
        try:
            # book_id never changes, so it is safe to learn it before locking
            with open_stores(self.db) as stores:
                existing = stores.records.get(record_id)
            if existing is None:
                raise RecordNotFound(record_id)

            with (
                self.locks.hold(book_key(existing.book_id), record_key(record_id)),
                open_stores(self.db) as stores,
            ):
                record = stores.records.get(record_id, for_update=True)
                if record is None:
                    raise RecordNotFound(record_id)
                if record.status == BorrowStatus.RETURNED:
                    raise AlreadyReturned(record_id)
                if now < record.borrow_date:
                    raise ReturnBeforeBorrow(record_id, record.borrow_date, now)

                fine = policy.compute_fine(record.due_date, now, self.fine_per_day)
                self._adjust_copies(stores.catalog, record.book_id, +1)
                returned = stores.records.save(
                    record.model_copy(
                        update={
                            "status": BorrowStatus.RETURNED,
                            "return_date": now,
                            "fine_amount": fine,
                        }
                    )
                )
        except InvariantViolation:
            raise
        except CirculationError as e:
            logger.info("Return of record %s rejected: %s", record_id, e)
            raise

        if returned.fine_amount > 0:
            logger.info(
                "Record %s returned %d day(s) late, fine %s",
                record_id,
                policy.days_late(returned.due_date, now),
                returned.fine_amount,
            )
        else:
            logger.info("Record %s returned on time", record_id)
        return returned

    def extend_due_date(self, record_id: str, additional_days: int) -> BorrowRecord:
        """
        Push the due date of an open record back by ``additional_days``.

        The stored status is left alone even if the record was OVERDUE; readers
        derive overdue state from the new due date.

        Raises:
            RecordNotFound, InvalidExtension, RecordAlreadyReturned
        """
        try:
            with self.locks.hold(record_key(record_id)), open_stores(self.db) as stores:
                record = stores.records.get(record_id, for_update=True)
                if record is None:
                    raise RecordNotFound(record_id)

                policy.validate_extension(
                    additional_days,
                    self.config.min_extension_days,
                    self.config.max_extension_days,
                )
                if not record.is_open:
                    raise RecordAlreadyReturned(record_id)

                extended = stores.records.save(
                    record.model_copy(
                        update={"due_date": record.due_date + timedelta(days=additional_days)}
                    )
                )
        except CirculationError as e:
            logger.info("Extension of record %s rejected: %s", record_id, e)
            raise

        logger.info(
            "Record %s extended by %d day(s), now due %s",
            record_id,
            additional_days,
            extended.due_date.isoformat(),
        )
        return extended

    def refresh_overdue_status(self, now: datetime | None = None) -> int:
        """
        Mark BORROWED records past their due date as OVERDUE.

        Records already OVERDUE, returned, or not yet due are untouched, so
        running the sweep again changes nothing. Fines are not affected.

        Returns:
            Number of records updated by this sweep
        """
        now = self._now(now)
        with open_stores(self.db) as stores:
            candidate_ids = stores.records.list_overdue_candidate_ids(now)

        updated = 0
        for record_id in candidate_ids:
            with self.locks.hold(record_key(record_id)), open_stores(self.db) as stores:
                record = stores.records.get(record_id, for_update=True)
                # Re-check under the lock: a return or extension may have won the race
                if record is None or record.status != BorrowStatus.BORROWED:
                    continue
                if not policy.is_overdue(record.status, record.due_date, now):
                    continue
                stores.records.save(record.model_copy(update={"status": BorrowStatus.OVERDUE}))
                updated += 1

        if updated:
            logger.info("Overdue sweep marked %d record(s) overdue", updated)
        else:
            logger.debug("Overdue sweep found nothing to update")
        return updated

    # === Helpers ===

    def _adjust_copies(self, catalog: CatalogStore, book_id: str, delta: int) -> Book:
        """Move a book's available copies, escalating bound violations."""
        try:
            return catalog.adjust_available_copies(book_id, delta)
        except NotFoundError as e:
            raise BookNotFound(book_id) from e
        except CopyCountError as e:
            logger.error(
                "Copy count invariant violated for book %s: available=%d total=%d delta=%+d",
                e.book_id,
                e.available_copies,
                e.total_copies,
                e.delta,
            )
            raise InvariantViolation(
                e.book_id, e.available_copies, e.total_copies, e.delta
            ) from e
