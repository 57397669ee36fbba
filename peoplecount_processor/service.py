"""
People Counter Service - live counting loop.

This module provides the PeopleCounterService class which runs the live
counting loop: read a frame, detect, feed the engine with a wall-clock
timestamp, repeat. The cleanup sweep runs on its own scheduler thread.

Threading Model:
- Caller thread: frame loop (run())
- Cleanup thread: CleanupScheduler (engine lock serializes both)

Thread Safety:
- engine: Protected by its internal lock
- detector: only accessed from the frame loop
"""

from typing import Callable, Iterable, Iterator, Optional

import cv2
import numpy as np

from peoplecount_processor.config import CounterConfig
from peoplecount_processor.scheduler import CleanupScheduler, monotonic_ms
from peoplecount_zone.analytics.counter import AggregateCount
from peoplecount_zone.engine import PeopleCountingEngine
from peoplecount_zone.interfaces import CountObserver, Detector
from peoplecount_zone.logging import LogEvent, StructuredLogger, create_logger


def capture_frames(source: str) -> Iterator[np.ndarray]:
    """
    Yield frames from a file path, stream URL or camera index ("0").

    Raises:
        RuntimeError: If the source cannot be opened
    """
    reference = int(source) if source.isdigit() else source
    capture = cv2.VideoCapture(reference)
    if not capture.isOpened():
        raise RuntimeError(f"Could not open video source: {source}")

    try:
        while True:
            ok, frame = capture.read()
            if not ok:
                break
            yield frame
    finally:
        capture.release()


class PeopleCounterService:
    """
    Live people counting service.

    Responsibilities:
    1. Frame acquisition (OpenCV capture or any iterable of frames)
    2. Detection (injected Detector; failures skip the frame)
    3. Counting (PeopleCountingEngine)
    4. Stale-track cleanup (CleanupScheduler thread)

    Usage:
        config = CounterConfig.from_yaml(Path("config/people_counter.yaml"))
        service = PeopleCounterService(config, detector, on_count_changed=print)
        service.run()  # Blocks until the source ends or stop() is called
    """

    def __init__(
        self,
        config: CounterConfig,
        detector: Detector,
        on_count_changed: Optional[CountObserver] = None,
        clock: Callable[[], float] = monotonic_ms,
        engine: Optional[PeopleCountingEngine] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            config: Counter configuration
            detector: Frame detector
            on_count_changed: Count observer
            clock: Millisecond clock (shared with the scheduler)
            engine: Pre-built engine (default: built from config)
            logger: Structured logger (default: component "service")
        """
        self.config = config
        self.detector = detector
        self.clock = clock
        self.logger = logger or create_logger("service")

        self.engine = engine or PeopleCountingEngine(
            config=config.engine_config,
            crossing_line=config.line.to_crossing_line() if config.line else None,
            on_count_changed=on_count_changed,
        )
        if engine is not None and on_count_changed is not None:
            self.engine.set_count_observer(on_count_changed)

        self.scheduler = CleanupScheduler(self.engine, clock=clock)
        self.frames_processed = 0
        self.frames_skipped = 0
        self._stopped = False

    def stop(self) -> None:
        """Ask the frame loop to exit after the current frame."""
        self._stopped = True

    def run(self, frames: Optional[Iterable[np.ndarray]] = None) -> AggregateCount:
        """
        Run the frame loop until the source ends or stop() is called.

        Args:
            frames: Frame source (default: capture_frames(config.source))

        Returns:
            Final count
        """
        if frames is None:
            frames = capture_frames(self.config.source)

        self._stopped = False
        self.scheduler.start()
        self.logger.info(
            event=LogEvent.SERVICE_STARTED,
            message="People counter started",
            metadata={'service_id': self.config.service_id, 'source': self.config.source}
        )

        try:
            for frame in frames:
                if self._stopped:
                    break
                self.process_frame(frame)
        finally:
            self.scheduler.stop()
            count = self.engine.count
            self.logger.info(
                event=LogEvent.SERVICE_STOPPED,
                message="People counter stopped",
                metadata={
                    'service_id': self.config.service_id,
                    'frames_processed': self.frames_processed,
                    'frames_skipped': self.frames_skipped,
                    'count': count.to_dict(),
                }
            )

        return count

    def process_frame(self, frame: np.ndarray) -> bool:
        """
        Detect and count one frame.

        Returns:
            False if the detector failed and the frame was skipped
        """
        height, width = frame.shape[:2]

        try:
            detections = self.detector.detect(frame)
        except Exception as e:
            self.frames_skipped += 1
            self.logger.error(
                event=LogEvent.DETECTOR_FAILED,
                message="Detector failed, skipping frame",
                metadata={'service_id': self.config.service_id},
                exc_info=e,
            )
            return False

        self.engine.process_detections(detections, width, height, self.clock())
        self.frames_processed += 1
        return True
