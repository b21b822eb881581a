"""
Library Circulation Models.

Pydantic models for the entities the circulation engine works with:

- Book: catalog titles with copy counts
- User: library members with a membership type
- BorrowRecord: entries of the circulation ledger
"""

from .book import Book
from .borrow_record import (
    OPEN_STATUSES,
    BorrowRecord,
    BorrowStats,
    BorrowStatus,
    DashboardStats,
)
from .user import MembershipType, User

__all__ = [
    "OPEN_STATUSES",
    "Book",
    "BorrowRecord",
    "BorrowStats",
    "BorrowStatus",
    "DashboardStats",
    "MembershipType",
    "User",
]
