"""tests/test_scheduler.py: Tests for the background FlushScheduler."""

import threading

import pytest
from botdb.catalog import Catalog
from botdb.scheduler import FlushScheduler


class CountingFlush:
    def __init__(self, fail_first: int = 0) -> None:
        self.calls = 0
        self.fail_first = fail_first
        self.called = threading.Event()

    def __call__(self) -> int:
        self.calls += 1
        if self.calls <= self.fail_first:
            raise RuntimeError("boom")
        self.called.set()
        return 1


class TestLifecycle:
    def test_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            FlushScheduler(lambda: 0, interval=0)

    def test_runs_periodically(self):
        flush = CountingFlush()
        with FlushScheduler(flush, interval=0.01) as sched:
            assert flush.called.wait(2.0)
            assert sched.running
        assert not sched.running
        assert flush.calls >= 1

    def test_stop_is_idempotent(self):
        sched = FlushScheduler(lambda: 0, interval=0.01)
        sched.start()
        sched.stop()
        sched.stop()
        assert not sched.running

    def test_stop_does_not_wait_for_interval(self):
        flush = CountingFlush()
        sched = FlushScheduler(flush, interval=60)
        sched.start()
        sched.stop(timeout=2.0)
        assert not sched.running
        assert flush.calls == 0

    def test_start_twice_keeps_one_thread(self):
        sched = FlushScheduler(lambda: 0, interval=60)
        sched.start()
        first = sched._thread
        sched.start()
        assert sched._thread is first
        sched.stop()

    def test_failure_does_not_stop_loop(self):
        flush = CountingFlush(fail_first=2)
        with FlushScheduler(flush, interval=0.01):
            assert flush.called.wait(2.0)
        assert flush.calls >= 3


class TestWithCatalog:
    def test_run_once_flushes_dirty_tables(self, tmp_path):
        catalog = Catalog(tmp_path)
        catalog.create_table("pets", ["name"])
        catalog.add_row("pets", ["Rex"])
        sched = FlushScheduler(catalog.flush_all, interval=50)
        assert sched.run_once() == 1
        assert sched.cycles == 1
        assert (tmp_path / "pets").exists()

    def test_background_flush(self, tmp_path):
        catalog = Catalog(tmp_path)
        catalog.create_table("pets", ["name"])
        catalog.add_row("pets", ["Rex"])
        done = threading.Event()

        def flush():
            n = catalog.flush_all()
            if n:
                done.set()
            return n

        with FlushScheduler(flush, interval=0.01):
            assert done.wait(2.0)
        assert catalog.is_dirty("pets") is False
