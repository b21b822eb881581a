"""Tests for the background overdue sweeper."""

import threading
import time

import pytest

from library_circulation.circulation import OverdueSweeper
from library_circulation.models import BorrowStatus


class FlakyEngine:
    """Stand-in engine whose first sweep fails."""

    def __init__(self):
        self.calls = 0
        self.recovered = threading.Event()

    def refresh_overdue_status(self) -> int:
        self.calls += 1
        if self.calls == 1:
            raise RuntimeError("database unavailable")
        self.recovered.set()
        return 0


def _wait_for(predicate, timeout=5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_interval_must_be_positive(engine):
    with pytest.raises(ValueError):
        OverdueSweeper(engine, 0)


def test_run_once(engine, users, books, clock):
    engine.borrow(users["regular"].id, books["single"].id)
    clock.advance(days=15)
    sweeper = OverdueSweeper(engine, interval_seconds=60)
    assert sweeper.run_once() == 1
    assert sweeper.run_once() == 0


def test_background_sweep_marks_overdue(engine, users, books, clock, queries):
    record = engine.borrow(users["regular"].id, books["single"].id)
    clock.advance(days=15)

    sweeper = OverdueSweeper(engine, interval_seconds=0.01)
    sweeper.start()
    try:
        assert sweeper.is_running
        assert _wait_for(lambda: queries.get_record(record.id).status == BorrowStatus.OVERDUE)
    finally:
        sweeper.stop()

    assert not sweeper.is_running


def test_failed_sweep_does_not_stop_the_loop(caplog):
    engine = FlakyEngine()
    sweeper = OverdueSweeper(engine, interval_seconds=0.01)
    sweeper.start()
    try:
        assert engine.recovered.wait(5)
    finally:
        sweeper.stop()

    assert "Overdue sweep failed" in caplog.text


def test_start_twice_keeps_one_thread(engine):
    sweeper = OverdueSweeper(engine, interval_seconds=60)
    sweeper.start()
    first = sweeper._thread
    sweeper.start()
    assert sweeper._thread is first
    sweeper.stop()
