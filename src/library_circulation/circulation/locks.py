"""
Per-entity exclusive locks.

Circulation commands are check-then-mutate sequences on a book's copy count
or a record's status. Each such sequence runs while holding the lock of every
entity it touches. Locks are always acquired in sorted key order so two
commands that need the same pair of entities cannot deadlock.

A lock lives in the registry only while some thread holds or waits on it, so
the registry stays as small as the set of entities currently in use.
"""

import threading
from collections.abc import Generator
from contextlib import contextmanager

EntityKey = tuple[str, str]


def book_key(book_id: str) -> EntityKey:
    return ("book", book_id)


def record_key(record_id: str) -> EntityKey:
    return ("record", record_id)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class EntityLocks:
    """Registry of reference-counted locks keyed by ``(kind, id)``."""

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._entries: dict[EntityKey, _Entry] = {}

    def _checkout(self, keys: list[EntityKey]) -> list[_Entry]:
        with self._registry_lock:
            entries = []
            for key in keys:
                entry = self._entries.get(key)
                if entry is None:
                    entry = self._entries[key] = _Entry()
                entry.users += 1
                entries.append(entry)
            return entries

    def _checkin(self, keys: list[EntityKey]) -> None:
        with self._registry_lock:
            for key in keys:
                entry = self._entries[key]
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    @contextmanager
    def hold(self, *keys: EntityKey) -> Generator[None, None, None]:
        """Hold the locks for ``keys`` for the duration of the block."""
        ordered = sorted(set(keys))
        entries = self._checkout(ordered)
        acquired: list[threading.Lock] = []
        try:
            for entry in entries:
                entry.lock.acquire()
                acquired.append(entry.lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            self._checkin(ordered)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)
