"""
Book repository implementation for the Library Circulation service.

This is the SQL-backed Catalog Store. Circulation uses exactly two of its
methods, ``get_book`` and ``adjust_available_copies``; the rest exist so the
catalog can be populated and inspected.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import select

from ..models.book import Book as BookModel
from .repository import (
    BaseRepository,
    CopyCountError,
    DuplicateError,
    NotFoundError,
    generate_id,
    safe_flush,
    safe_query,
)
from .schema import Book as BookDB


class BookCreateSchema(BaseModel):
    """Schema for adding a book to the catalog."""

    id: str | None = None
    title: str
    author: str
    isbn: str
    genre: str | None = None
    publication_year: int | None = None
    total_copies: int = Field(default=1, ge=1)
    available_copies: int | None = Field(default=None, ge=0)
    description: str | None = None

    @model_validator(mode="after")
    def default_available_copies(self) -> "BookCreateSchema":
        """New titles start with every copy on the shelf unless told otherwise."""
        if self.available_copies is None:
            self.available_copies = self.total_copies
        return self


class BookRepository(BaseRepository[BookDB, BookModel]):
    """Repository for catalog data access."""

    @property
    def model_class(self):
        return BookDB

    @property
    def response_schema(self):
        return BookModel

    def create(self, data: BookCreateSchema) -> BookModel:
        """
        Add a book to the catalog.

        Raises:
            DuplicateError: If the ID or ISBN is already in the catalog
            ValidationError: If the data breaks a Book model rule
        """
        book = BookModel(id=data.id or generate_id("book"), **data.model_dump(exclude={"id"}))

        existing = safe_query(
            self.session,
            lambda s: s.execute(select(BookDB.id).where(BookDB.isbn == book.isbn)).first(),
            "Failed to check for duplicate ISBN",
        )
        if existing:
            raise DuplicateError(f"Book with ISBN {book.isbn} already exists")

        db_book = BookDB(**book.model_dump(exclude={"updated_at"}))
        self.session.add(db_book)
        safe_flush(self.session, "create book")
        return self._to_response_model(db_book)

    def get_book(self, book_id: str) -> BookModel | None:
        return self.get_by_id(book_id)

    def get_by_isbn(self, isbn: str) -> BookModel | None:
        db_book = safe_query(
            self.session,
            lambda s: s.execute(select(BookDB).where(BookDB.isbn == isbn)).scalar_one_or_none(),
            "Failed to get book by ISBN",
        )
        return self._to_response_model(db_book) if db_book else None

    def adjust_available_copies(self, book_id: str, delta: int) -> BookModel:
        """
        Move ``available_copies`` by ``delta`` inside the current transaction.

        The row is read FOR UPDATE so server databases hold it until commit.

        Raises:
            NotFoundError: If the book does not exist
            CopyCountError: If the result would leave ``[0, total_copies]``
        """
        book = self._get_row(book_id, for_update=True)
        if book is None:
            raise NotFoundError(f"Book {book_id} not found")

        new_available = book.available_copies + delta
        if new_available < 0 or new_available > book.total_copies:
            raise CopyCountError(book_id, book.available_copies, book.total_copies, delta)

        book.available_copies = new_available
        book.updated_at = datetime.now()
        safe_flush(self.session, "adjust available copies")
        return self._to_response_model(book)

    def count_available_titles(self) -> int:
        """Number of titles with at least one copy on the shelf."""
        return self.count(BookDB.available_copies > 0)
