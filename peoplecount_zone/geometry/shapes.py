"""
Geometric Shapes Module
========================

Pure geometric representations - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Thread-safe by design (immutability)
"""

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CrossingLine:
    """
    Immutable line segment whose traversal is counted.

    The segment partitions the frame into a "left" and a "right" side;
    crossing direction is decided from horizontal motion, not from the
    line orientation.

    Attributes:
        start: (x, y) line start point
        end: (x, y) line end point
    """

    start: Tuple[float, float]
    end: Tuple[float, float]

    def __post_init__(self):
        """Validate line segment."""
        coords = (*self.start, *self.end)
        if len(coords) != 4 or not all(math.isfinite(c) for c in coords):
            raise ValueError(f"Line endpoints must be finite (x, y) pairs, got {self.start}, {self.end}")
        if tuple(self.start) == tuple(self.end):
            raise ValueError("Line start and end must be different points")

        # Precompute line vector (using object.__setattr__ for frozen)
        vector = (self.end[0] - self.start[0], self.end[1] - self.start[1])
        object.__setattr__(self, '_vector', vector)

    @classmethod
    def from_coords(cls, x1: float, y1: float, x2: float, y2: float) -> "CrossingLine":
        """Build from four scalar coordinates."""
        return cls(start=(float(x1), float(y1)), end=(float(x2), float(y2)))

    @property
    def vector(self) -> Tuple[float, float]:
        """Direction vector end - start."""
        return self._vector

    @property
    def midpoint(self) -> Tuple[float, float]:
        """Segment midpoint."""
        return ((self.start[0] + self.end[0]) / 2, (self.start[1] + self.end[1]) / 2)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """(x1, y1, x2, y2)."""
        return (self.start[0], self.start[1], self.end[0], self.end[1])
