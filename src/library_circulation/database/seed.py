"""
Sample catalog and membership data.

Loads a fixed set of titles and members so a fresh database can serve
circulation requests straight away. Every copy starts on the shelf: the
ledger is empty, and ``available_copies`` must equal ``total_copies`` minus
the open records.

Seeding is idempotent. Books already in the catalog (by ISBN) and members
already registered (by ID) are skipped, so running it twice adds nothing.
"""

import logging

from ..models.user import MembershipType
from .book_repository import BookCreateSchema, BookRepository
from .session import DatabaseManager
from .user_repository import UserCreateSchema, UserRepository

logger = logging.getLogger(__name__)

SAMPLE_BOOKS: list[BookCreateSchema] = [
    BookCreateSchema(
        id="book_mockingbird01",
        title="To Kill a Mockingbird",
        author="Harper Lee",
        isbn="9780061120084",
        genre="Fiction",
        publication_year=1960,
        total_copies=3,
    ),
    BookCreateSchema(
        id="book_orwell1984",
        title="1984",
        author="George Orwell",
        isbn="9780451524935",
        genre="Dystopian Fiction",
        publication_year=1949,
        total_copies=5,
    ),
    BookCreateSchema(
        id="book_prideprej01",
        title="Pride and Prejudice",
        author="Jane Austen",
        isbn="9780141439518",
        genre="Romance",
        publication_year=1813,
        total_copies=2,
    ),
    BookCreateSchema(
        id="book_gatsby01",
        title="The Great Gatsby",
        author="F. Scott Fitzgerald",
        isbn="9780743273565",
        genre="Classic Literature",
        publication_year=1925,
        total_copies=4,
        description="A classic American novel set in the Jazz Age on Long Island.",
    ),
    BookCreateSchema(
        id="book_dune0001",
        title="Dune",
        author="Frank Herbert",
        isbn="9780441172719",
        genre="Science Fiction",
        publication_year=1965,
        total_copies=3,
    ),
    BookCreateSchema(
        id="book_hitchhiker01",
        title="The Hitchhiker's Guide to the Galaxy",
        author="Douglas Adams",
        isbn="9780345391803",
        genre="Science Fiction",
        publication_year=1979,
        total_copies=2,
    ),
    BookCreateSchema(
        id="book_sapiens01",
        title="Sapiens",
        author="Yuval Noah Harari",
        isbn="9780062316097",
        genre="History",
        publication_year=2014,
        total_copies=3,
    ),
    BookCreateSchema(
        id="book_artofwar01",
        title="The Art of War",
        author="Sun Tzu",
        isbn="9781599869773",
        genre="Philosophy",
        publication_year=-500,
        total_copies=2,
    ),
    BookCreateSchema(
        id="book_cleancode01",
        title="Clean Code",
        author="Robert C. Martin",
        isbn="9780132350884",
        genre="Technology",
        publication_year=2008,
        total_copies=4,
    ),
    BookCreateSchema(
        id="book_gof0001",
        title="Design Patterns",
        author="Gang of Four",
        isbn="9780201633610",
        genre="Technology",
        publication_year=1994,
        total_copies=2,
    ),
    BookCreateSchema(
        id="book_dragontat01",
        title="The Girl with the Dragon Tattoo",
        author="Stieg Larsson",
        isbn="9780307454546",
        genre="Mystery",
        publication_year=2005,
        total_copies=3,
    ),
    BookCreateSchema(
        id="book_gonegirl01",
        title="Gone Girl",
        author="Gillian Flynn",
        isbn="9780307588371",
        genre="Thriller",
        publication_year=2012,
        total_copies=2,
    ),
]


def _member(
    username: str,
    first_name: str,
    last_name: str,
    membership: MembershipType,
    domain: str = "email.com",
    **kwargs,
) -> UserCreateSchema:
    return UserCreateSchema(
        id=f"user_{username}",
        username=username,
        email=f"{username.replace('_', '.')}@{domain}",
        first_name=first_name,
        last_name=last_name,
        membership_type=membership,
        **kwargs,
    )


SAMPLE_USERS: list[UserCreateSchema] = [
    _member("john_doe", "John", "Doe", MembershipType.REGULAR, phone="555-0101"),
    _member("jane_smith", "Jane", "Smith", MembershipType.PREMIUM, phone="555-0102"),
    _member(
        "alice_johnson", "Alice", "Johnson", MembershipType.STUDENT, domain="student.edu", phone="555-0103"
    ),
    _member(
        "bob_wilson", "Bob", "Wilson", MembershipType.STUDENT, domain="student.edu", phone="555-0104"
    ),
    _member("carol_brown", "Carol", "Brown", MembershipType.PREMIUM, phone="555-0105"),
    _member("david_davis", "David", "Davis", MembershipType.REGULAR, phone="555-0106"),
    _member("emma_wilson", "Emma", "Wilson", MembershipType.REGULAR, phone="555-0107"),
    _member("frank_miller", "Frank", "Miller", MembershipType.PREMIUM, phone="555-0108"),
    _member(
        "inactive_user", "Inactive", "User", MembershipType.REGULAR, phone="555-0109", is_active=False
    ),
]


def seed_sample_data(db: DatabaseManager) -> tuple[int, int]:
    """
    Add the sample books and members that are not already present.

    Returns:
        Number of books and number of members created
    """
    books_created = 0
    users_created = 0
    with db.session_scope() as session:
        catalog = BookRepository(session)
        for book in SAMPLE_BOOKS:
            if catalog.get_by_isbn(book.isbn) is None:
                catalog.create(book)
                books_created += 1

        members = UserRepository(session)
        for user in SAMPLE_USERS:
            if members.get_user(user.id) is None:
                members.create(user)
                users_created += 1

    logger.info("Seeded %d book(s) and %d member(s)", books_created, users_created)
    return books_created, users_created
