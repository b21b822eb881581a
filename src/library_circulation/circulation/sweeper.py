"""Background thread that periodically persists OVERDUE status."""

import logging
import threading

from .engine import CirculationEngine

logger = logging.getLogger(__name__)


class OverdueSweeper:
    """
    Runs ``engine.refresh_overdue_status()`` every ``interval_seconds``.

    A failed sweep is logged and the next one runs on schedule.
    """

    def __init__(self, engine: CirculationEngine, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.engine = engine
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        return self.engine.refresh_overdue_status()

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                logger.exception("Overdue sweep failed")

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="overdue-sweeper", daemon=True)
        self._thread.start()
        logger.info("Overdue sweeper started (every %ss)", self.interval_seconds)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Overdue sweeper stopped")
