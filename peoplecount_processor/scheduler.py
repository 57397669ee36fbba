"""
Cleanup Scheduler - periodic stale-track sweep.

Runs engine.cleanup_stale(clock()) on its own thread every
cleanup_interval_ms, independent of the detection loop. The engine's lock
serializes the sweep against process_detections.

Threading Model:
- One daemon thread, stopped via threading.Event
- The clock is injected (milliseconds, same clock as the detection loop)
"""

import threading
import time
from typing import Callable, Optional

from peoplecount_zone.engine import PeopleCountingEngine
from peoplecount_zone.logging import LogEvent, StructuredLogger, create_logger


def monotonic_ms() -> float:
    """Default clock: monotonic milliseconds."""
    return time.monotonic() * 1000.0


class CleanupScheduler:
    """
    Periodic cleanup owner for one engine.

    Usage:
        scheduler = CleanupScheduler(engine)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        engine: PeopleCountingEngine,
        interval_ms: Optional[float] = None,
        clock: Callable[[], float] = monotonic_ms,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            engine: Engine to sweep
            interval_ms: Sweep period (default: engine.config.cleanup_interval_ms)
            clock: Millisecond clock shared with the detection loop
            logger: Structured logger (default: component "scheduler")
        """
        self.engine = engine
        self.interval_ms = interval_ms if interval_ms is not None else engine.config.cleanup_interval_ms
        if self.interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {self.interval_ms}")

        self.clock = clock
        self.logger = logger or create_logger("scheduler")
        self.stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        """Sweep now; returns the number of people removed."""
        return self.engine.cleanup_stale(self.clock())

    def start(self) -> None:
        """Start the sweep thread (no-op if already running)."""
        if self.is_running:
            return

        self.stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="peoplecount-cleanup",
            daemon=True,
        )
        self._thread.start()

        self.logger.info(
            event=LogEvent.SCHEDULER_STARTED,
            message="Cleanup scheduler started",
            metadata={'interval_ms': self.interval_ms}
        )

    def stop(self, timeout: float = 2.0) -> None:
        """Signal the thread and wait for it to exit."""
        self.stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

            self.logger.info(
                event=LogEvent.SCHEDULER_STOPPED,
                message="Cleanup scheduler stopped",
            )

    def _run(self) -> None:
        while not self.stop_event.wait(self.interval_ms / 1000.0):
            self.run_once()
