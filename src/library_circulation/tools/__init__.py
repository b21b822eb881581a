"""
MCP tools for the Library Circulation server.

Tools are the commands with side effects; every one of them goes through the
circulation engine so the lending rules hold no matter who calls.
"""

from .circulation import (
    borrow_book,
    circulation_tools,
    extend_due_date,
    refresh_overdue_status,
    return_book,
)

# The server registers everything in this list
all_tools = circulation_tools

__all__ = [
    "all_tools",
    "borrow_book",
    "circulation_tools",
    "extend_due_date",
    "refresh_overdue_status",
    "return_book",
]
