"""
Circulation error taxonomy.

Every rejected command raises a subclass of :class:`CirculationError`:

- ``NotFound``: the user, book or record does not exist
- ``PreconditionFailed``: the command is well formed but not allowed now
- ``InvariantViolation``: committing would break the copy-count bound

Errors carry the offending identifiers so transport layers can build their
own messages.
"""

from datetime import datetime


class CirculationError(Exception):
    """Base class for all circulation errors."""


class NotFound(CirculationError):
    """A referenced entity does not exist."""


class UserNotFound(NotFound):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class BookNotFound(NotFound):
    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book {book_id} not found")


class RecordNotFound(NotFound):
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Borrow record {record_id} not found")


class PreconditionFailed(CirculationError):
    """The command cannot be applied in the current state."""


class UserInactive(PreconditionFailed):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} is inactive and cannot borrow")


class NoCopiesAvailable(PreconditionFailed):
    def __init__(self, book_id: str, title: str | None = None):
        self.book_id = book_id
        label = f"'{title}'" if title else book_id
        super().__init__(f"No copies of {label} are available")


class AlreadyBorrowed(PreconditionFailed):
    def __init__(self, user_id: str, book_id: str):
        self.user_id = user_id
        self.book_id = book_id
        super().__init__(f"User {user_id} already has book {book_id} borrowed")


class AlreadyReturned(PreconditionFailed):
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Borrow record {record_id} has already been returned")


class RecordAlreadyReturned(AlreadyReturned):
    """Raised when extending a record that is no longer open."""


class ReturnBeforeBorrow(PreconditionFailed):
    def __init__(self, record_id: str, borrow_date: datetime, return_date: datetime):
        self.record_id = record_id
        self.borrow_date = borrow_date
        self.return_date = return_date
        super().__init__(
            f"Borrow record {record_id} cannot be returned at {return_date.isoformat()}, "
            f"before it was borrowed at {borrow_date.isoformat()}"
        )


class InvalidExtension(PreconditionFailed):
    def __init__(self, additional_days: int, min_days: int, max_days: int):
        self.additional_days = additional_days
        self.min_days = min_days
        self.max_days = max_days
        super().__init__(
            f"Extension of {additional_days} day(s) is outside the allowed range "
            f"[{min_days}, {max_days}]"
        )


class InvariantViolation(CirculationError):
    """Committing the command would break ``0 <= available <= total``."""

    def __init__(self, book_id: str, available_copies: int, total_copies: int, delta: int):
        self.book_id = book_id
        self.available_copies = available_copies
        self.total_copies = total_copies
        self.delta = delta
        super().__init__(
            f"Copy count invariant violated for book {book_id}: "
            f"available={available_copies}, total={total_copies}, delta={delta:+d}"
        )
