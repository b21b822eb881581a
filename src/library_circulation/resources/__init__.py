"""Library Circulation MCP Resources Package

Resources are the read-only side of the server: they never change state
(use the tools for that) and are addressed by ``library://`` URIs.
"""

from .circulation import circulation_resources

all_resources = circulation_resources

__all__ = [
    "all_resources",
    "circulation_resources",
]
