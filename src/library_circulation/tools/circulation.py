"""
Circulation tools for the Library Circulation MCP server.

Each tool wraps one command of the circulation engine:
1. borrow_book: lend a copy of a book to a member
2. return_book: close a borrow record and finalize its fine
3. extend_due_date: push an open record's due date back
4. refresh_overdue_status: persist OVERDUE on records past their due date

Rejected commands (unknown IDs, no copies left, already returned...) are
expected outcomes and come back as ``isError`` results carrying the engine's
message. Only unexpected failures are logged with a traceback.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..circulation import get_engine
from ..errors import CirculationError, InvariantViolation
from ..models.borrow_record import BorrowRecord

logger = logging.getLogger(__name__)


def _error(text: str) -> dict[str, Any]:
    return {
        "isError": True,
        "content": [{"type": "text", "text": text}],
    }


def _rejected(operation: str, error: CirculationError) -> dict[str, Any]:
    if isinstance(error, InvariantViolation):
        logger.error("%s aborted - invariant violation: %s", operation, error)
    else:
        logger.info("%s rejected: %s", operation, error)
    return _error(str(error))


def record_data(record: BorrowRecord) -> dict[str, Any]:
    """JSON-ready view of a borrow record (dates in ISO format, fine as a string)."""
    return record.model_dump(mode="json")


# =============================================================================
# BORROW TOOL
# =============================================================================


class BorrowBookInput(BaseModel):
    """Input schema for the borrow_book tool."""

    user_id: str = Field(
        ...,
        description="ID of the member borrowing the book",
        min_length=1,
        max_length=50,
        examples=["user_jsmith01"],
    )

    book_id: str = Field(
        ...,
        description="ID of the book to borrow",
        min_length=1,
        max_length=50,
        examples=["book_gatsby01"],
    )

    notes: str | None = Field(
        default=None,
        description="Optional notes stored on the borrow record",
        max_length=1000,
        examples=["Book club selection"],
    )


async def borrow_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the borrow_book tool.

    The due date is not an input: it always follows from the member's
    loan period.
    """
    try:
        try:
            params = BorrowBookInput.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid borrow parameters: %s", e)
            return _error(f"Invalid borrow parameters: {e}")

        try:
            record = get_engine().borrow(params.user_id, params.book_id, notes=params.notes)
        except CirculationError as e:
            return _rejected("Borrow", e)

        message = (
            f"Book '{record.book_id}' borrowed by user '{record.user_id}'. "
            f"Due date: {record.due_date.strftime('%B %d, %Y')} "
            f"({record.loan_period_days}-day loan)"
        )
        return {
            "content": [{"type": "text", "text": message}],
            "data": {"record": record_data(record)},
        }

    except Exception as e:
        logger.exception("Unexpected error in borrow_book tool")
        return _error(f"An unexpected error occurred: {e!s}")


# =============================================================================
# RETURN TOOL
# =============================================================================


class ReturnBookInput(BaseModel):
    """Input schema for the return_book tool."""

    record_id: str = Field(
        ...,
        description="ID of the borrow record to close",
        pattern=r"^borrow_[a-zA-Z0-9]{6,}$",
        examples=["borrow_5d41402abc4b"],
    )


async def return_book_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the return_book tool."""
    try:
        try:
            params = ReturnBookInput.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid return parameters: %s", e)
            return _error(f"Invalid return parameters: {e}")

        try:
            record = get_engine().return_book(params.record_id)
        except CirculationError as e:
            return _rejected("Return", e)

        message = f"Book '{record.book_id}' returned (record {record.id})."
        if record.fine_amount > 0:
            message += f" Returned late - fine assessed: ${record.fine_amount}"
        else:
            message += " Returned on time - no fine."

        return {
            "content": [{"type": "text", "text": message}],
            "data": {"record": record_data(record)},
        }

    except Exception as e:
        logger.exception("Unexpected error in return_book tool")
        return _error(f"An unexpected error occurred: {e!s}")


# =============================================================================
# EXTEND TOOL
# =============================================================================


class ExtendDueDateInput(BaseModel):
    """
    Input schema for the extend_due_date tool.

    The allowed range of ``additional_days`` is configuration, so it is
    checked by the engine rather than here.
    """

    record_id: str = Field(
        ...,
        description="ID of the open borrow record to extend",
        pattern=r"^borrow_[a-zA-Z0-9]{6,}$",
        examples=["borrow_5d41402abc4b"],
    )

    additional_days: int = Field(
        ...,
        description="Days to add to the current due date (1-30 by default)",
        examples=[7, 14],
    )


async def extend_due_date_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the extend_due_date tool."""
    try:
        try:
            params = ExtendDueDateInput.model_validate(arguments)
        except ValidationError as e:
            logger.warning("Invalid extension parameters: %s", e)
            return _error(f"Invalid extension parameters: {e}")

        try:
            record = get_engine().extend_due_date(params.record_id, params.additional_days)
        except CirculationError as e:
            return _rejected("Extension", e)

        message = (
            f"Record {record.id} extended by {params.additional_days} day(s). "
            f"New due date: {record.due_date.strftime('%B %d, %Y')}"
        )
        return {
            "content": [{"type": "text", "text": message}],
            "data": {"record": record_data(record)},
        }

    except Exception as e:
        logger.exception("Unexpected error in extend_due_date tool")
        return _error(f"An unexpected error occurred: {e!s}")


# =============================================================================
# OVERDUE SWEEP TOOL
# =============================================================================


class RefreshOverdueStatusInput(BaseModel):
    """The sweep takes no parameters; it always uses the current time."""


async def refresh_overdue_status_handler(arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """Handler for the refresh_overdue_status tool."""
    try:
        try:
            RefreshOverdueStatusInput.model_validate(arguments or {})
        except ValidationError as e:
            logger.warning("Invalid sweep parameters: %s", e)
            return _error(f"Invalid sweep parameters: {e}")

        updated = get_engine().refresh_overdue_status()
        return {
            "content": [{"type": "text", "text": f"Marked {updated} record(s) as overdue."}],
            "data": {"updated": updated},
        }

    except Exception as e:
        logger.exception("Unexpected error in refresh_overdue_status tool")
        return _error(f"An unexpected error occurred: {e!s}")


# =============================================================================
# TOOL REGISTRATION
# =============================================================================

borrow_book = {
    "name": "borrow_book",
    "description": (
        "Lend one copy of a book to a member. The member must exist and be active "
        "and the book must have a copy on the shelf. The due date follows from the "
        "member's loan period (REGULAR 14 days, STUDENT 21, PREMIUM 30 by default)."
    ),
    "inputSchema": BorrowBookInput.model_json_schema(),
    "handler": borrow_book_handler,
}

return_book = {
    "name": "return_book",
    "description": (
        "Return a borrowed copy. Closes the borrow record, puts the copy back on "
        "the shelf and finalizes the late fine (per started day past the due date)."
    ),
    "inputSchema": ReturnBookInput.model_json_schema(),
    "handler": return_book_handler,
}

extend_due_date = {
    "name": "extend_due_date",
    "description": (
        "Push the due date of an open borrow record back by a number of days. "
        "Returned records cannot be extended."
    ),
    "inputSchema": ExtendDueDateInput.model_json_schema(),
    "handler": extend_due_date_handler,
}

refresh_overdue_status = {
    "name": "refresh_overdue_status",
    "description": (
        "Mark every borrowed record past its due date as OVERDUE and report how "
        "many were updated. Safe to run repeatedly."
    ),
    "inputSchema": RefreshOverdueStatusInput.model_json_schema(),
    "handler": refresh_overdue_status_handler,
}

circulation_tools: list[dict[str, Any]] = [
    borrow_book,
    return_book,
    extend_due_date,
    refresh_overdue_status,
]
