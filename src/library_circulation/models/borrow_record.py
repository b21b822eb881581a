"""
Borrow record models for the Library Circulation service.

A BorrowRecord is one entry in the append-only circulation ledger: it is
created when a borrow succeeds and afterwards only its ``status``,
``due_date``, ``return_date`` and ``fine_amount`` change, always through the
circulation engine.

    BORROWED --return--> RETURNED
    BORROWED --sweep---> OVERDUE --return--> RETURNED
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BorrowStatus(str, Enum):
    """Stored status of a borrow record."""

    BORROWED = "BORROWED"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"


OPEN_STATUSES = frozenset({BorrowStatus.BORROWED, BorrowStatus.OVERDUE})


class BorrowRecord(BaseModel):
    """Represents a single loan of one copy of a book to one user."""

    id: str = Field(
        ...,
        description="Unique identifier for the borrow record",
        pattern=r"^borrow_[a-zA-Z0-9]{6,}$",
        examples=["borrow_5d41402abc4b"],
    )

    user_id: str = Field(..., description="ID of the borrowing user")

    book_id: str = Field(..., description="ID of the borrowed book")

    borrow_date: datetime = Field(..., description="When the copy was borrowed")

    due_date: datetime = Field(..., description="When the copy must be returned")

    return_date: datetime | None = Field(
        None,
        description="When the copy was returned, if it has been",
    )

    status: BorrowStatus = Field(
        default=BorrowStatus.BORROWED,
        description="Stored status; OVERDUE is a cached projection refreshed by the sweep",
    )

    fine_amount: Decimal = Field(
        default=Decimal("0.00"),
        description="Fine finalized at return time",
        ge=0,
        decimal_places=2,
    )

    notes: str | None = Field(None, max_length=1000)

    created_at: datetime = Field(default_factory=datetime.now)

    updated_at: datetime | None = None

    @model_validator(mode="after")
    def validate_dates(self) -> "BorrowRecord":
        """Validate date relationships."""
        if self.due_date <= self.borrow_date:
            raise ValueError("Due date must be after borrow date")

        if self.return_date and self.return_date < self.borrow_date:
            raise ValueError("Return date cannot be before borrow date")

        if (self.status == BorrowStatus.RETURNED) != (self.return_date is not None):
            raise ValueError("Return date must be set exactly when the record is returned")

        return self

    @property
    def is_open(self) -> bool:
        """Open records still hold a copy of the book."""
        return self.status in OPEN_STATUSES

    @property
    def loan_period_days(self) -> int:
        return (self.due_date - self.borrow_date).days

    model_config = ConfigDict(
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "id": "borrow_5d41402abc4b",
                "user_id": "user_jsmith01",
                "book_id": "book_gatsby01",
                "borrow_date": "2024-03-01T10:30:00",
                "due_date": "2024-03-15T10:30:00",
                "status": "BORROWED",
                "fine_amount": "0.00",
            }
        },
    )


class BorrowStats(BaseModel):
    """Aggregate counts over the whole ledger."""

    total_records: int = Field(..., ge=0)
    currently_borrowed: int = Field(..., ge=0, description="Open records, overdue included")
    overdue: int = Field(..., ge=0, description="Open records past their due date")
    returned: int = Field(..., ge=0)


class DashboardStats(BaseModel):
    """Library-wide summary combining catalog, membership and circulation counts."""

    total_books: int = Field(..., ge=0)
    available_books: int = Field(..., ge=0, description="Titles with at least one copy on the shelf")
    total_users: int = Field(..., ge=0)
    active_users: int = Field(..., ge=0)
    currently_borrowed: int = Field(..., ge=0)
    overdue_books: int = Field(..., ge=0)
