"""
botdb/scheduler.py
FlushScheduler: periodic background persistence.

A daemon thread waits on a stop event with the flush interval as
timeout; every time the wait times out it calls `flush` (normally
Catalog.flush_all). stop() sets the event, so shutdown never has to wait
out a full interval and never triggers an extra cycle.
"""

from __future__ import annotations
import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 50.0


class FlushScheduler:
    def __init__(self, flush: Callable[[], int], interval: float = DEFAULT_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self._flush = flush
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.cycles = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="botdb-flush", daemon=True
        )
        self._thread.start()
        logger.info("Flush scheduler started (every %.1fs)", self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the loop and wait for the thread. Safe to call twice."""
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        thread.join(timeout)
        self._thread = None
        logger.info("Flush scheduler stopped after %d cycles", self.cycles)

    def run_once(self) -> int:
        """Run a single flush cycle in the calling thread."""
        saved = self._flush()
        self.cycles += 1
        return saved

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.run_once()
            except Exception:
                logger.exception("Scheduled flush failed; retrying next cycle")

    def __enter__(self) -> FlushScheduler:
        self.start()
        return self

    def __exit__(self, *_: object) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"FlushScheduler(interval={self.interval}, running={self.running})"
