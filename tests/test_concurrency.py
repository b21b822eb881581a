"""
Concurrency tests for the circulation engine.

Commands on the same book or record must behave as if they ran one after
another: the last copy is lent exactly once and a record is closed exactly once.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from library_circulation.circulation.locks import EntityLocks, book_key, record_key
from library_circulation.errors import AlreadyReturned, NoCopiesAvailable
from library_circulation.models import BorrowStatus

WORKERS = 8


def _race(fn, args_list):
    """Run ``fn`` for every args tuple at the same moment; collect results and errors."""
    barrier = threading.Barrier(len(args_list))

    def _call(args):
        barrier.wait()
        try:
            return fn(*args), None
        except Exception as e:
            return None, e

    with ThreadPoolExecutor(max_workers=len(args_list)) as pool:
        return list(pool.map(_call, args_list))


class TestLastCopyRace:
    def test_last_copy_is_lent_once(self, engine, make_user, books, available_copies, queries):
        members = [make_user(f"user_racer{i:02d}") for i in range(WORKERS)]

        outcomes = _race(engine.borrow, [(m.id, books["single"].id) for m in members])

        winners = [record for record, error in outcomes if error is None]
        losers = [error for record, error in outcomes if error is not None]
        assert len(winners) == 1
        assert len(losers) == WORKERS - 1
        assert all(isinstance(error, NoCopiesAvailable) for error in losers)
        assert available_copies(books["single"].id) == 0
        assert len(queries.currently_borrowed()) == 1

    def test_same_user_racing_for_last_copy(self, engine, users, books, available_copies):
        outcomes = _race(engine.borrow, [(users["regular"].id, books["single"].id)] * 2)

        errors = [error for _, error in outcomes if error is not None]
        assert len(errors) == 1
        assert isinstance(errors[0], NoCopiesAvailable)
        assert available_copies(books["single"].id) == 0

    def test_copies_never_go_negative(self, engine, make_user, books, available_copies):
        members = [make_user(f"user_racer{i:02d}") for i in range(WORKERS)]

        outcomes = _race(engine.borrow, [(m.id, books["triple"].id) for m in members])

        assert sum(1 for _, error in outcomes if error is None) == 3
        assert available_copies(books["triple"].id) == 0


class TestConcurrentReturns:
    def test_record_is_returned_once(self, engine, users, books, available_copies, queries):
        record = engine.borrow(users["regular"].id, books["triple"].id)

        outcomes = _race(engine.return_book, [(record.id,)] * 4)

        errors = [error for _, error in outcomes if error is not None]
        assert len(errors) == 3
        assert all(isinstance(error, AlreadyReturned) for error in errors)
        assert available_copies(books["triple"].id) == 3
        assert queries.get_record(record.id).status == BorrowStatus.RETURNED

    def test_return_racing_sweep(self, engine, users, books, clock, queries):
        record = engine.borrow(users["regular"].id, books["single"].id)
        clock.advance(days=20)

        outcomes = _race(
            lambda action: action(),
            [(lambda: engine.return_book(record.id),), (engine.refresh_overdue_status,)],
        )

        assert all(error is None for _, error in outcomes)
        stored = queries.get_record(record.id)
        assert stored.status == BorrowStatus.RETURNED
        assert stored.fine_amount > 0


class TestEntityLocks:
    def test_locks_live_only_while_held(self):
        locks = EntityLocks()
        assert len(locks) == 0

        with locks.hold(book_key("book_a")):
            assert len(locks) == 1
            with locks.hold(record_key("borrow_123456")):
                assert len(locks) == 2
            assert len(locks) == 1

        assert len(locks) == 0

    def test_registry_stays_empty_after_many_loans(self, engine, users, books):
        for _ in range(50):
            record = engine.borrow(users["regular"].id, books["single"].id)
            engine.return_book(record.id)

        assert len(engine.locks) == 0

    def test_duplicate_keys_do_not_deadlock(self):
        locks = EntityLocks()
        with locks.hold(book_key("book_a"), book_key("book_a")):
            pass

    def test_hold_is_exclusive(self):
        locks = EntityLocks()
        inside = threading.Event()
        release = threading.Event()
        acquired_second = threading.Event()

        def first():
            with locks.hold(book_key("book_a")):
                inside.set()
                release.wait(5)

        def second():
            with locks.hold(book_key("book_a")):
                acquired_second.set()

        t1 = threading.Thread(target=first)
        t1.start()
        inside.wait(5)
        t2 = threading.Thread(target=second)
        t2.start()

        assert not acquired_second.wait(0.2)
        assert len(locks) == 1
        release.set()
        t1.join(5)
        t2.join(5)
        assert acquired_second.is_set()

    def test_released_after_exception(self):
        locks = EntityLocks()
        try:
            with locks.hold(book_key("book_a")):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert len(locks) == 0
        with locks.hold(book_key("book_a")):
            pass
