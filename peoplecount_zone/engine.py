"""
Tracking & Counting Engine
==========================

Bounded Context: Frame-to-frame person association and line-crossing counts.

Design:
- Owns all tracked-person state (PersonTracker) and counts (CrossingCounter)
- Pure state transition over its inputs: never reads a clock, never does I/O
- Every mutating entry point holds one lock, so the periodic cleanup sweep
  and the detection loop are serialized
- Count observer is called synchronously inside the caller's thread

Per-batch algorithm (process_detections):
    1. Validate + filter (class == target, score > min_tracking_confidence)
    2. Greedy nearest-neighbour association (PersonTracker.find_match)
    3. Update matched people, then evaluate crossing on their movement
    4. Unmatched detections become new tracked people
    5. Notify observer with the post-batch count
"""

import dataclasses
import logging
import math
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Optional

from peoplecount_zone.analytics.counter import AggregateCount, CrossingCounter, CrossingDirection
from peoplecount_zone.analytics.tracker import PersonSnapshot, PersonTracker, TrackedPerson
from peoplecount_zone.geometry.intersection import SegmentIntersector
from peoplecount_zone.geometry.shapes import CrossingLine
from peoplecount_zone.interfaces import CountObserver
from peoplecount_zone.logging import LogEvent, StructuredLogger, create_logger
from peoplecount_zone.schemas.common import Point
from peoplecount_zone.schemas.detection import Detection, parse_detection


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine tuning (immutable, validated at construction).

    Timing values are milliseconds in the caller's clock.
    """

    detection_interval_ms: float = 50.0
    cleanup_interval_ms: float = 3000.0
    cleanup_horizon_ms: float = 5000.0
    min_tracking_confidence: float = 0.3
    min_crossing_confidence: float = 0.3
    position_history_limit: int = 20
    movement_noise_coefficient: float = 0.002  # × frame width
    crossing_confidence_step: float = 0.7
    match_distance_factor: float = 1.0  # × longest detection box side
    intersection_tolerance: float = 0.1
    target_class: str = "person"

    def __post_init__(self):
        """Validate engine configuration."""
        for name in ("detection_interval_ms", "cleanup_interval_ms", "cleanup_horizon_ms"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite value >= 0, got {value}")

        for name in ("min_tracking_confidence", "min_crossing_confidence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0.0, 1.0], got {value}")

        if not 0.0 < self.crossing_confidence_step <= 1.0:
            raise ValueError(
                f"crossing_confidence_step must be in (0.0, 1.0], got {self.crossing_confidence_step}"
            )

        if self.position_history_limit < 1:
            raise ValueError(
                f"position_history_limit must be >= 1, got {self.position_history_limit}"
            )

        if self.movement_noise_coefficient < 0:
            raise ValueError(
                f"movement_noise_coefficient must be >= 0, got {self.movement_noise_coefficient}"
            )

        if self.match_distance_factor <= 0:
            raise ValueError(
                f"match_distance_factor must be > 0, got {self.match_distance_factor}"
            )

        if self.intersection_tolerance < 0:
            raise ValueError(
                f"intersection_tolerance must be >= 0, got {self.intersection_tolerance}"
            )

        if not self.target_class:
            raise ValueError("target_class cannot be empty")


def default_person_id(now_ms: float) -> str:
    """``person_<timestamp>_<random suffix>``."""
    return f"person_{int(now_ms)}_{uuid.uuid4().hex[:9]}"


class PeopleCountingEngine:
    """
    Tracks people across detection batches and counts line crossings.

    Thread Safety:
    - process_detections(), cleanup_stale(), reset_count(),
      set_crossing_line(), configure(): acquire the engine lock
    - count, tracked_people(): acquire the lock briefly, return snapshots
    - The observer runs with the lock held and must not call back in

    Usage:
        engine = PeopleCountingEngine(on_count_changed=print)
        engine.set_crossing_line(320, 0, 320, 480)

        # Each frame
        engine.process_detections(detections, 640, 480, now_ms)

        # Periodically (independent schedule)
        engine.cleanup_stale(now_ms)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        crossing_line: Optional[CrossingLine] = None,
        on_count_changed: Optional[CountObserver] = None,
        logger: Optional[StructuredLogger] = None,
        id_factory: Optional[Callable[[float], str]] = None,
    ):
        """
        Args:
            config: Engine tuning (defaults to EngineConfig())
            crossing_line: Initial line; without one nothing is counted
            on_count_changed: Observer called with AggregateCount snapshots
            logger: Structured logger (default: component "engine")
            id_factory: Builds a fresh person id from the batch timestamp
        """
        self._config = config or EngineConfig()
        self._crossing_line = crossing_line
        self._on_count_changed = on_count_changed
        self._logger = logger or create_logger("engine")
        self._id_factory = id_factory or default_person_id

        self._tracker = PersonTracker(match_distance_factor=self._config.match_distance_factor)
        self._counter = CrossingCounter()
        self._last_batch_ms: Optional[float] = None

        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    def configure(self, **changes: Any) -> EngineConfig:
        """
        Replace configuration fields (validated like construction).

        A new position_history_limit applies to people created afterwards.

        Raises:
            ValueError: If the resulting configuration is invalid
            TypeError: If a field name is unknown
        """
        with self._lock:
            self._config = dataclasses.replace(self._config, **changes)
            self._tracker.match_distance_factor = self._config.match_distance_factor
            return self._config

    @property
    def crossing_line(self) -> Optional[CrossingLine]:
        return self._crossing_line

    def set_crossing_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        """
        Replace the crossing line atomically.

        Existing crossing states and counts are kept.

        Raises:
            ValueError: If both endpoints coincide or are not finite
        """
        line = CrossingLine.from_coords(x1, y1, x2, y2)
        with self._lock:
            self._crossing_line = line

        self._logger.info(
            event=LogEvent.LINE_CONFIGURED,
            message="Crossing line set",
            metadata={'line': list(line.as_tuple())}
        )

    def set_count_observer(self, callback: Optional[CountObserver]) -> None:
        """Register (or clear with None) the count observer."""
        with self._lock:
            self._on_count_changed = callback

    def set_debug_mode(self, enabled: bool) -> None:
        """Emit per-batch and per-track DEBUG events when enabled."""
        self._logger.set_level(logging.DEBUG if enabled else logging.INFO)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def count(self) -> AggregateCount:
        with self._lock:
            return self._counter.get_stats()

    def tracked_people(self) -> List[PersonSnapshot]:
        """Frozen snapshots of the live set, in insertion order."""
        with self._lock:
            return self._tracker.snapshot()

    @property
    def tracked_count(self) -> int:
        with self._lock:
            return len(self._tracker)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def process_detections(
        self,
        detections: Optional[Iterable[Any]],
        frame_width: float,
        frame_height: float,
        now_ms: float,
    ) -> None:
        """
        Consume one frame's detections.

        Calls arriving less than detection_interval_ms after the previous
        accepted call are ignored. Malformed detections are dropped.

        Args:
            detections: Detection values or {"class", "score", "bbox"} mappings
            frame_width: Frame width in pixels (scales the movement noise floor)
            frame_height: Frame height in pixels
            now_ms: Caller timestamp, monotonically non-decreasing
        """
        if not math.isfinite(now_ms):
            return

        with self._lock:
            if (
                self._last_batch_ms is not None
                and now_ms - self._last_batch_ms < self._config.detection_interval_ms
            ):
                self._logger.debug(
                    event=LogEvent.ENGINE_BATCH_THROTTLED,
                    message="Batch ignored (inside detection interval)",
                    metadata={'now_ms': now_ms, 'last_batch_ms': self._last_batch_ms}
                )
                return
            self._last_batch_ms = now_ms

            claimed: set[str] = set()
            matched = 0
            started = 0

            for detection in self._filter(detections or ()):
                person = self._tracker.find_match(detection, now_ms, exclude=claimed)

                if person is None:
                    person = self._start_track(detection, now_ms)
                    started += 1
                else:
                    previous = person.observe(detection, now_ms)
                    self._evaluate_crossing(person, previous, frame_width)
                    matched += 1

                claimed.add(person.id)

            count = self._counter.get_stats()
            self._logger.debug(
                event=LogEvent.ENGINE_BATCH_PROCESSED,
                message=f"Processed batch: {matched} matched, {started} new",
                metadata={
                    'now_ms': now_ms,
                    'frame_wh': [frame_width, frame_height],
                    'matched': matched,
                    'started': started,
                    'tracked': len(self._tracker),
                    'count': count.to_dict(),
                }
            )

            self._notify(count)

    def cleanup_stale(self, now_ms: float) -> int:
        """
        Forget people not seen for longer than cleanup_horizon_ms.

        Counts are unaffected and the observer is not notified.

        Returns:
            Number of people removed
        """
        with self._lock:
            removed = self._tracker.prune(now_ms, self._config.cleanup_horizon_ms)
            remaining = len(self._tracker)

        if removed:
            self._logger.info(
                event=LogEvent.TRACKS_CLEANED,
                message=f"Cleaned up {len(removed)} stale tracked people",
                metadata={'removed': len(removed), 'remaining': remaining, 'now_ms': now_ms}
            )
        return len(removed)

    def reset_count(self) -> None:
        """Zero the count, forget every tracked person, notify the observer."""
        with self._lock:
            self._counter.reset()
            self._tracker.reset()

            self._logger.info(
                event=LogEvent.COUNT_RESET,
                message="Count reset",
            )

            self._notify(self._counter.get_stats())

    # ------------------------------------------------------------------
    # Internals (lock held)
    # ------------------------------------------------------------------

    def _filter(self, detections: Iterable[Any]) -> Iterator[Detection]:
        for raw in detections:
            try:
                detection = parse_detection(raw)
            except ValueError as e:
                self._logger.debug(
                    event=LogEvent.DETECTION_DROPPED,
                    message="Dropped malformed detection",
                    metadata={'reason': str(e)}
                )
                continue

            if detection.class_name != self._config.target_class:
                continue
            if detection.score <= self._config.min_tracking_confidence:
                continue
            yield detection

    def _start_track(self, detection: Detection, now_ms: float) -> TrackedPerson:
        person_id = self._id_factory(now_ms)
        while person_id in self._tracker:
            person_id = self._id_factory(now_ms)

        person = TrackedPerson.create(
            person_id, detection, now_ms, self._config.position_history_limit
        )
        self._tracker.add(person)

        self._logger.debug(
            event=LogEvent.TRACK_STARTED,
            message="Started tracking new person",
            metadata={
                'person_id': person_id,
                'center': [round(person.last_center.x), round(person.last_center.y)],
            }
        )
        return person

    def _evaluate_crossing(self, person: TrackedPerson, previous: Point, frame_width: float) -> None:
        line = self._crossing_line
        if person.has_crossed or line is None:
            return

        current = person.last_center
        noise_floor = frame_width * self._config.movement_noise_coefficient
        if not math.isfinite(noise_floor) or noise_floor < 0:
            noise_floor = 0.0
        if previous.distance_to(current) < noise_floor:
            return

        crossed = SegmentIntersector.intersects(
            (previous.x, previous.y),
            (current.x, current.y),
            line,
            tolerance=self._config.intersection_tolerance,
        )
        if not crossed:
            return

        evidence = person.add_crossing_evidence(self._config.crossing_confidence_step)
        if evidence < self._config.min_crossing_confidence:
            return

        direction = CrossingDirection.from_motion(previous.x, current.x)
        if not person.mark_crossed(direction):
            return

        count = self._counter.record(direction)

        self._logger.info(
            event=LogEvent.LINE_CROSSED,
            message=f"Person crossed the line: {direction.value}",
            metadata={
                'person_id': person.id,
                'direction': direction.value,
                'count': count.to_dict(),
            }
        )

        self._notify(count)

    def _notify(self, count: AggregateCount) -> None:
        callback = self._on_count_changed
        if callback is None:
            return
        try:
            callback(count)
        except Exception as e:
            self._logger.error(
                event=LogEvent.OBSERVER_FAILED,
                message="Count observer raised",
                metadata={'count': count.to_dict()},
                exc_info=e,
            )
