"""Circulation Resources - Read-only views of the lending ledger

Exposes the query service over MCP. Overdue and due-today views are computed
from due dates at request time, so they are current even between sweeps.

Resources:
- library://circulation/current - Open borrow records
- library://circulation/overdue - Open records past their due date
- library://circulation/due-today - Open records due today
- library://circulation/stats - Ledger counts
- library://circulation/dashboard - Catalog, membership and circulation counts
- library://circulation/records/{record_id} - One borrow record
- library://users/{user_id}/borrow-history - Every record of a member
- library://users/{user_id}/current-loans - Open records of a member
- library://books/{book_id}/borrow-history - Every record of a book
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError

from ..circulation import get_query_service
from ..errors import RecordNotFound
from ..models.borrow_record import BorrowRecord

logger = logging.getLogger(__name__)


def _listing(records: list[BorrowRecord], **extra: Any) -> dict[str, Any]:
    return {
        **extra,
        "total": len(records),
        "records": [record.model_dump(mode="json") for record in records],
    }


async def get_current_handler() -> dict[str, Any]:
    """Returns every open record, overdue ones included."""
    try:
        logger.debug("MCP Resource Request - circulation/current")
        return _listing(get_query_service().currently_borrowed())
    except Exception as e:
        logger.exception("Error in circulation/current resource")
        raise ResourceError(f"Failed to retrieve current loans: {e!s}") from e


async def get_overdue_handler() -> dict[str, Any]:
    """Returns open records whose due date has passed."""
    try:
        service = get_query_service()
        now = service.clock()
        logger.debug("MCP Resource Request - circulation/overdue at %s", now.isoformat())
        return _listing(service.overdue(now), as_of=now.isoformat())
    except Exception as e:
        logger.exception("Error in circulation/overdue resource")
        raise ResourceError(f"Failed to retrieve overdue loans: {e!s}") from e


async def get_due_today_handler() -> dict[str, Any]:
    """Returns open records due on today's date."""
    try:
        service = get_query_service()
        now = service.clock()
        logger.debug("MCP Resource Request - circulation/due-today")
        return _listing(service.due_today(now), date=now.date().isoformat())
    except Exception as e:
        logger.exception("Error in circulation/due-today resource")
        raise ResourceError(f"Failed to retrieve loans due today: {e!s}") from e


async def get_stats_handler() -> dict[str, Any]:
    try:
        logger.debug("MCP Resource Request - circulation/stats")
        return get_query_service().stats().model_dump()
    except Exception as e:
        logger.exception("Error in circulation/stats resource")
        raise ResourceError(f"Failed to calculate circulation stats: {e!s}") from e


async def get_dashboard_handler() -> dict[str, Any]:
    try:
        logger.debug("MCP Resource Request - circulation/dashboard")
        service = get_query_service()
        now = service.clock()
        return {"timestamp": now.isoformat(), **service.dashboard(now).model_dump()}
    except Exception as e:
        logger.exception("Error in circulation/dashboard resource")
        raise ResourceError(f"Failed to build dashboard: {e!s}") from e


async def get_record_handler(record_id: str) -> dict[str, Any]:
    """Returns one borrow record by ID."""
    try:
        logger.debug("MCP Resource Request - circulation/records/%s", record_id)
        return get_query_service().get_record(record_id).model_dump(mode="json")
    except RecordNotFound as e:
        raise ResourceError(str(e)) from e
    except Exception as e:
        logger.exception("Error in circulation/records/{record_id} resource")
        raise ResourceError(f"Failed to retrieve borrow record: {e!s}") from e


async def get_user_history_handler(user_id: str) -> dict[str, Any]:
    """Returns a member's borrow history, most recent first."""
    try:
        logger.debug("MCP Resource Request - users/%s/borrow-history", user_id)
        return _listing(get_query_service().history_for_user(user_id), user_id=user_id)
    except Exception as e:
        logger.exception("Error in users/{user_id}/borrow-history resource")
        raise ResourceError(f"Failed to retrieve borrow history: {e!s}") from e


async def get_user_current_loans_handler(user_id: str) -> dict[str, Any]:
    """Returns the records a member still holds, overdue ones included."""
    try:
        logger.debug("MCP Resource Request - users/%s/current-loans", user_id)
        return _listing(get_query_service().currently_borrowed_by_user(user_id), user_id=user_id)
    except Exception as e:
        logger.exception("Error in users/{user_id}/current-loans resource")
        raise ResourceError(f"Failed to retrieve current loans: {e!s}") from e


async def get_book_history_handler(book_id: str) -> dict[str, Any]:
    """Returns a book's borrow history, most recent first."""
    try:
        logger.debug("MCP Resource Request - books/%s/borrow-history", book_id)
        return _listing(get_query_service().history_for_book(book_id), book_id=book_id)
    except Exception as e:
        logger.exception("Error in books/{book_id}/borrow-history resource")
        raise ResourceError(f"Failed to retrieve borrow history: {e!s}") from e


circulation_resources: list[dict[str, Any]] = [
    {
        "uri": "library://circulation/current",
        "name": "Current Loans",
        "description": "All borrow records that still hold a copy (BORROWED or OVERDUE)",
        "mime_type": "application/json",
        "handler": get_current_handler,
    },
    {
        "uri": "library://circulation/overdue",
        "name": "Overdue Loans",
        "description": "Open borrow records whose due date has passed",
        "mime_type": "application/json",
        "handler": get_overdue_handler,
    },
    {
        "uri": "library://circulation/due-today",
        "name": "Due Today",
        "description": "Open borrow records due today",
        "mime_type": "application/json",
        "handler": get_due_today_handler,
    },
    {
        "uri": "library://circulation/stats",
        "name": "Circulation Statistics",
        "description": "Total, currently borrowed, overdue and returned record counts",
        "mime_type": "application/json",
        "handler": get_stats_handler,
    },
    {
        "uri": "library://circulation/dashboard",
        "name": "Library Dashboard",
        "description": (
            "Library overview: titles, titles on the shelf, members, active members, "
            "current loans and overdue loans"
        ),
        "mime_type": "application/json",
        "handler": get_dashboard_handler,
    },
    {
        "uri_template": "library://circulation/records/{record_id}",
        "name": "Borrow Record",
        "description": "A single borrow record by ID",
        "mime_type": "application/json",
        "handler": get_record_handler,
    },
    {
        "uri_template": "library://users/{user_id}/borrow-history",
        "name": "Member Borrow History",
        "description": "Every borrow record of a member, most recent first",
        "mime_type": "application/json",
        "handler": get_user_history_handler,
    },
    {
        "uri_template": "library://users/{user_id}/current-loans",
        "name": "Member Current Loans",
        "description": "Borrow records a member still holds (BORROWED or OVERDUE)",
        "mime_type": "application/json",
        "handler": get_user_current_loans_handler,
    },
    {
        "uri_template": "library://books/{book_id}/borrow-history",
        "name": "Book Borrow History",
        "description": "Every borrow record of a book, most recent first",
        "mime_type": "application/json",
        "handler": get_book_history_handler,
    },
]
