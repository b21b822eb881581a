"""
Book model for the Library Circulation service.

A book is a catalog title with a number of physical copies. Circulation never
edits catalog fields; it only moves ``available_copies`` up or down by one as
copies are borrowed and returned.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Book(BaseModel):
    """
    Represents a book in the library catalog.

    The copy counts obey ``0 <= available_copies <= total_copies`` at all times.
    """

    id: str = Field(
        ...,
        description="Unique identifier for the book",
        min_length=1,
        max_length=50,
        examples=["book_7f3a9c2e", "book_gatsby01"],
    )

    title: str = Field(
        ...,
        description="The title of the book",
        min_length=1,
        max_length=500,
        examples=["The Great Gatsby", "To Kill a Mockingbird"],
    )

    author: str = Field(
        ...,
        description="Author of the book",
        min_length=1,
        max_length=200,
        examples=["F. Scott Fitzgerald", "Harper Lee"],
    )

    isbn: str = Field(
        ...,
        description="ISBN-10 or ISBN-13, hyphens allowed",
        pattern=r"^[\d\-X]{10,17}$",
        examples=["978-0-7432-7356-5", "0743273567"],
    )

    genre: str | None = Field(
        None,
        description="Literary genre or category of the book",
        max_length=100,
        examples=["Fiction", "Biography"],
    )

    publication_year: int | None = Field(
        None,
        description="Year the book was published",
        ge=-3000,
        examples=[1925, 1960, 2023],
    )

    total_copies: int = Field(
        default=1,
        description="Total number of copies owned by the library",
        ge=1,
        examples=[1, 3, 10],
    )

    available_copies: int = Field(
        default=1,
        description="Number of copies currently on the shelf",
        ge=0,
        examples=[0, 1, 5],
    )

    description: str | None = Field(
        None,
        description="Brief description or summary of the book",
        max_length=2000,
    )

    created_at: datetime = Field(
        default_factory=datetime.now,
        description="Timestamp when the book was added to the catalog",
    )

    updated_at: datetime | None = Field(
        None,
        description="Timestamp when the book record was last updated",
    )

    @field_validator("publication_year")
    @classmethod
    def validate_publication_year(cls, v: int | None) -> int | None:
        """Reject publication years in the future."""
        if v is not None and v > datetime.now().year:
            raise ValueError("Publication year cannot be in the future")
        return v

    @field_validator("genre")
    @classmethod
    def normalize_genre(cls, v: str | None) -> str | None:
        """Normalize genre to title case for consistency."""
        if v is None:
            return v
        return v.strip().title() or None

    @model_validator(mode="after")
    def validate_copies(self) -> "Book":
        """Ensure available copies doesn't exceed total copies."""
        if self.available_copies > self.total_copies:
            raise ValueError("Available copies cannot exceed total copies")
        return self

    @property
    def is_available(self) -> bool:
        """Check if the book has any copies on the shelf."""
        return self.available_copies > 0

    @property
    def borrowed_copies(self) -> int:
        """Number of copies currently out on loan."""
        return self.total_copies - self.available_copies

    model_config = ConfigDict(
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "id": "book_gatsby01",
                "title": "The Great Gatsby",
                "author": "F. Scott Fitzgerald",
                "isbn": "978-0-7432-7356-5",
                "genre": "Fiction",
                "publication_year": 1925,
                "total_copies": 3,
                "available_copies": 2,
            }
        },
    )
