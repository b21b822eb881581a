"""
Borrow record repository for the Library Circulation service.

The circulation ledger is append-only: records are inserted by ``add`` and
afterwards only their lifecycle columns (status, due date, return date, fine)
are written back by ``save``. There is no delete.
"""

from datetime import datetime

from sqlalchemy import and_, desc, select

from ..models.borrow_record import BorrowStatus
from ..models.borrow_record import BorrowRecord as BorrowRecordModel
from .repository import BaseRepository, NotFoundError, generate_id, safe_flush, safe_query
from .schema import BorrowRecord as BorrowRecordDB

OPEN_STATUS_LIST = [BorrowStatus.BORROWED, BorrowStatus.OVERDUE]

# Columns the engine may change after a record is created
LIFECYCLE_FIELDS = ("status", "due_date", "return_date", "fine_amount")


def new_record_id() -> str:
    return generate_id("borrow")


class BorrowRecordRepository(BaseRepository[BorrowRecordDB, BorrowRecordModel]):
    """Repository for the circulation ledger."""

    @property
    def model_class(self):
        return BorrowRecordDB

    @property
    def response_schema(self):
        return BorrowRecordModel

    def add(self, record: BorrowRecordModel) -> BorrowRecordModel:
        """Insert a new ledger entry."""
        db_record = BorrowRecordDB(**record.model_dump(exclude={"updated_at"}))
        self.session.add(db_record)
        safe_flush(self.session, "create borrow record")
        return self._to_response_model(db_record)

    def get(self, record_id: str, for_update: bool = False) -> BorrowRecordModel | None:
        db_record = self._get_row(record_id, for_update=for_update)
        return self._to_response_model(db_record) if db_record else None

    def save(self, record: BorrowRecordModel) -> BorrowRecordModel:
        """
        Write the lifecycle fields of an existing record.

        Raises:
            NotFoundError: If the record does not exist
        """
        db_record = self._get_row(record.id, for_update=True)
        if db_record is None:
            raise NotFoundError(f"Borrow record {record.id} not found")

        for field in LIFECYCLE_FIELDS:
            setattr(db_record, field, getattr(record, field))
        db_record.updated_at = datetime.now()

        safe_flush(self.session, "update borrow record")
        return self._to_response_model(db_record)

    def _select(self, *criteria, newest_first: bool = True) -> list[BorrowRecordModel]:
        query = select(BorrowRecordDB)
        if criteria:
            query = query.where(*criteria)
        if newest_first:
            query = query.order_by(desc(BorrowRecordDB.borrow_date), desc(BorrowRecordDB.id))
        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to list borrow records",
        )
        return [self._to_response_model(row) for row in results]

    def list_all(self) -> list[BorrowRecordModel]:
        """Every record, most recent borrow first."""
        return self._select()

    def list_open(self) -> list[BorrowRecordModel]:
        """Records still holding a copy (BORROWED or OVERDUE)."""
        return self._select(BorrowRecordDB.status.in_(OPEN_STATUS_LIST))

    def list_for_user(self, user_id: str) -> list[BorrowRecordModel]:
        return self._select(BorrowRecordDB.user_id == user_id)

    def list_for_book(self, book_id: str) -> list[BorrowRecordModel]:
        return self._select(BorrowRecordDB.book_id == book_id)

    def list_open_for_user(self, user_id: str) -> list[BorrowRecordModel]:
        return self._select(
            BorrowRecordDB.user_id == user_id,
            BorrowRecordDB.status.in_(OPEN_STATUS_LIST),
        )

    def has_open_record(self, user_id: str, book_id: str) -> bool:
        return (
            self.count(
                BorrowRecordDB.user_id == user_id,
                BorrowRecordDB.book_id == book_id,
                BorrowRecordDB.status.in_(OPEN_STATUS_LIST),
            )
            > 0
        )

    def list_overdue_candidate_ids(self, now: datetime) -> list[str]:
        """IDs of records still stored as BORROWED whose due date has passed."""
        query = select(BorrowRecordDB.id).where(
            and_(
                BorrowRecordDB.status == BorrowStatus.BORROWED,
                BorrowRecordDB.due_date < now,
            )
        )
        return list(
            safe_query(
                self.session,
                lambda s: s.execute(query).scalars().all(),
                "Failed to list overdue candidates",
            )
        )
