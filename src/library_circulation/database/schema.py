"""
SQLAlchemy database schema for the Library Circulation service.

These tables mirror the Pydantic models in ``library_circulation.models``.
The copy-count invariant is enforced twice: by the circulation engine before
it writes, and by CHECK constraints here as the last line.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from ..models.borrow_record import BorrowStatus
from ..models.user import MembershipType

Base = declarative_base()


class Book(Base):
    """
    Books table - the library catalog.

    ``available_copies`` is the only column circulation writes.
    """

    __tablename__ = "books"

    id = Column(String(50), primary_key=True)
    title = Column(String(500), nullable=False, index=True)
    author = Column(String(200), nullable=False)
    isbn = Column(String(17), nullable=False, unique=True)
    genre = Column(String(100), nullable=True)
    publication_year = Column(Integer, nullable=True)
    total_copies = Column(Integer, nullable=False, default=1)
    available_copies = Column(Integer, nullable=False, default=1)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=True, default=func.now(), onupdate=func.now())

    borrow_records = relationship("BorrowRecord", back_populates="book")

    __table_args__ = (
        Index("idx_book_availability", "available_copies"),
        CheckConstraint("available_copies >= 0", name="check_available_copies_non_negative"),
        CheckConstraint(
            "available_copies <= total_copies", name="check_available_not_exceed_total"
        ),
        CheckConstraint("total_copies > 0", name="check_total_copies_positive"),
    )


class User(Base):
    """Users table - library members."""

    __tablename__ = "users"

    id = Column(String(50), primary_key=True)
    username = Column(String(50), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    membership_type = Column(
        Enum(MembershipType), nullable=False, default=MembershipType.REGULAR
    )
    is_active = Column(Boolean, nullable=False, default=True)
    phone = Column(String(30), nullable=True)
    address = Column(String(500), nullable=True)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=True, default=func.now(), onupdate=func.now())

    borrow_records = relationship("BorrowRecord", back_populates="user")

    __table_args__ = (Index("idx_user_active", "is_active"),)


class BorrowRecord(Base):
    """
    Borrow records table - the circulation ledger.

    Rows are never deleted; returns and sweeps update them in place.
    """

    __tablename__ = "borrow_records"

    id = Column(String(50), primary_key=True)
    user_id = Column(String(50), ForeignKey("users.id"), nullable=False)
    book_id = Column(String(50), ForeignKey("books.id"), nullable=False)
    borrow_date = Column(DateTime, nullable=False)
    due_date = Column(DateTime, nullable=False)
    return_date = Column(DateTime, nullable=True)
    status = Column(Enum(BorrowStatus), nullable=False, default=BorrowStatus.BORROWED)
    fine_amount = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=True, default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="borrow_records")
    book = relationship("Book", back_populates="borrow_records")

    __table_args__ = (
        Index("idx_borrow_user", "user_id"),
        Index("idx_borrow_book", "book_id"),
        Index("idx_borrow_status", "status"),
        Index("idx_borrow_due_date", "due_date"),
        CheckConstraint("id LIKE 'borrow_%'", name="check_borrow_id_format"),
        CheckConstraint("fine_amount >= 0", name="check_fine_non_negative"),
    )
