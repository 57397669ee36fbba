"""
Collaborator Interfaces
=======================

Bounded Context: Engine boundary.

Design:
- Protocols, not base classes: any object with the right method fits
- Detector feeds the engine, CountObserver consumes its counts
"""

from typing import List, Protocol

import numpy as np

from peoplecount_zone.analytics.counter import AggregateCount
from peoplecount_zone.schemas.detection import Detection


class Detector(Protocol):
    """Protocol for frame detectors (interface)."""

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """
        Run detection on one frame.

        May raise; callers treat a failure as "no detections this cycle"
        and skip the engine call for that frame.
        """
        ...


class CountObserver(Protocol):
    """Protocol for count-change observers (plain callables also fit)."""

    def __call__(self, count: AggregateCount) -> None:
        ...
