"""
Person Tracker Module
=====================

Stateful arena of tracked people plus the greedy frame-to-frame
association used to keep their identities.

Design:
- Insertion-ordered dict {person_id: TrackedPerson} (stable tie-breaks)
- Explicit add/remove/clear API; only the engine mutates records
- Readers get frozen PersonSnapshot values
- Thread-safe via encapsulation (caller must synchronize)
"""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterator, List, Optional, Set, Tuple

from peoplecount_zone.analytics.counter import CrossingDirection
from peoplecount_zone.schemas.common import BBox, Point
from peoplecount_zone.schemas.detection import Detection


@dataclass(frozen=True)
class PositionSample:
    """One centroid observation."""
    x: float
    y: float
    timestamp_ms: float


@dataclass
class TrackedPerson:
    """
    Engine-owned identity of one person across frames.

    Invariants:
        - id never changes
        - has_crossed only goes False -> True
        - crossing_direction is set at most once
        - len(position_history) <= history limit (deque maxlen)
    """

    id: str
    bbox: BBox
    last_center: Point
    last_seen_ms: float
    confidence: float
    position_history: Deque[PositionSample]
    crossing_confidence: float = 0.0
    has_crossed: bool = False
    crossing_direction: CrossingDirection = CrossingDirection.NONE

    @classmethod
    def create(cls, person_id: str, detection: Detection, now_ms: float, history_limit: int) -> "TrackedPerson":
        center = detection.bbox.center
        history: Deque[PositionSample] = deque(maxlen=history_limit)
        history.append(PositionSample(center.x, center.y, now_ms))
        return cls(
            id=person_id,
            bbox=detection.bbox,
            last_center=center,
            last_seen_ms=now_ms,
            confidence=detection.score,
            position_history=history,
        )

    def observe(self, detection: Detection, now_ms: float) -> Point:
        """
        Apply a matched detection.

        Returns:
            The centroid before this update
        """
        previous = self.last_center
        center = detection.bbox.center
        self.position_history.append(PositionSample(center.x, center.y, now_ms))
        self.bbox = detection.bbox
        self.last_center = center
        self.last_seen_ms = now_ms
        self.confidence = max(self.confidence, detection.score)
        return previous

    def add_crossing_evidence(self, step: float) -> float:
        """Accumulate crossing evidence, saturating at 1.0."""
        self.crossing_confidence = min(1.0, self.crossing_confidence + step)
        return self.crossing_confidence

    def mark_crossed(self, direction: CrossingDirection) -> bool:
        """
        Record a completed crossing.

        Returns:
            False if the person had already crossed (no change)
        """
        if self.has_crossed:
            return False
        self.has_crossed = True
        self.crossing_direction = direction
        return True

    def snapshot(self) -> "PersonSnapshot":
        return PersonSnapshot(
            id=self.id,
            bbox=self.bbox,
            last_center=self.last_center,
            last_seen_ms=self.last_seen_ms,
            confidence=self.confidence,
            crossing_confidence=self.crossing_confidence,
            has_crossed=self.has_crossed,
            crossing_direction=self.crossing_direction,
            position_history=tuple(self.position_history),
        )


@dataclass(frozen=True)
class PersonSnapshot:
    """Read-only view of a tracked person (for renderers and tests)."""

    id: str
    bbox: BBox
    last_center: Point
    last_seen_ms: float
    confidence: float
    crossing_confidence: float
    has_crossed: bool
    crossing_direction: CrossingDirection
    position_history: Tuple[PositionSample, ...] = field(default_factory=tuple)


class PersonTracker:
    """
    Arena of tracked people with greedy nearest-neighbour association.

    Design Philosophy:
    - Single Responsibility: identities and matching only (no counting)
    - Stateful but encapsulated
    - Deterministic: candidates are visited in insertion order

    Usage:
        tracker = PersonTracker()
        claimed = set()
        person = tracker.find_match(detection, now_ms, exclude=claimed)
        if person is None:
            tracker.add(TrackedPerson.create(new_id, detection, now_ms, 20))
    """

    def __init__(self, match_distance_factor: float = 1.0):
        """
        Args:
            match_distance_factor: Association radius as a multiple of the
                detection's longest box side
        """
        self.match_distance_factor = match_distance_factor
        self._people: Dict[str, TrackedPerson] = {}

    @staticmethod
    def match_score(detection: Detection, person: TrackedPerson, now_ms: float) -> Tuple[float, float]:
        """
        Composite association cost.

        score = distance × (1 + 0.5·size_dissimilarity) × (1 + 0.5·time_factor)

        Returns:
            (raw_distance, score)
        """
        center = detection.bbox.center
        distance = center.distance_to(person.last_center)

        det_area = detection.bbox.area
        size_dissimilarity = abs(det_area - person.bbox.area) / det_area

        elapsed = max(0.0, now_ms - person.last_seen_ms)
        time_factor = min(1.0, elapsed / 1000.0)

        score = distance * (1 + 0.5 * size_dissimilarity) * (1 + 0.5 * time_factor)
        return distance, score

    def find_match(
        self,
        detection: Detection,
        now_ms: float,
        exclude: Optional[Set[str]] = None,
    ) -> Optional[TrackedPerson]:
        """
        Pick the eligible person with the lowest composite score.

        A person is eligible when the raw centroid distance is strictly
        below ``max(width, height) × match_distance_factor`` of the
        detection box and it was not already claimed in this batch.
        Ties keep the earliest-inserted person.
        """
        radius = detection.bbox.max_side * self.match_distance_factor
        best: Optional[TrackedPerson] = None
        best_score = math.inf

        for person_id, person in self._people.items():
            if exclude and person_id in exclude:
                continue

            distance, score = self.match_score(detection, person, now_ms)
            if distance < radius and score < best_score:
                best = person
                best_score = score

        return best

    def add(self, person: TrackedPerson) -> None:
        """
        Insert a new tracked person.

        Raises:
            ValueError: If the id is already live
        """
        if person.id in self._people:
            raise ValueError(f"Person '{person.id}' already tracked")
        self._people[person.id] = person

    def get(self, person_id: str) -> Optional[TrackedPerson]:
        return self._people.get(person_id)

    def remove(self, person_id: str) -> None:
        """
        Raises:
            KeyError: If person_id is not tracked
        """
        if person_id not in self._people:
            raise KeyError(f"Person '{person_id}' not found")
        del self._people[person_id]

    def prune(self, now_ms: float, horizon_ms: float) -> List[str]:
        """
        Remove people not seen for longer than ``horizon_ms``.

        Returns:
            Ids removed, in insertion order
        """
        stale_ids = [
            person_id
            for person_id, person in self._people.items()
            if now_ms - person.last_seen_ms > horizon_ms
        ]
        for person_id in stale_ids:
            del self._people[person_id]
        return stale_ids

    def reset(self) -> None:
        """Clear all tracked people."""
        self._people.clear()

    def snapshot(self) -> List[PersonSnapshot]:
        """Frozen copies of every live person, in insertion order."""
        return [person.snapshot() for person in self._people.values()]

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._people

    def __iter__(self) -> Iterator[TrackedPerson]:
        return iter(list(self._people.values()))

    def __len__(self) -> int:
        return len(self._people)

    def __repr__(self) -> str:
        return f"PersonTracker(tracked={len(self._people)})"
