"""
Crossing Counter Module
=======================

Stateful accumulator for directional crossing counts.

Design:
- Mutable state (counters)
- Immutable snapshots (AggregateCount)
- Reset capability
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict


class CrossingDirection(str, Enum):
    """Direction of a completed line crossing (horizontal motion)."""
    LEFT_TO_RIGHT = "left_to_right"
    RIGHT_TO_LEFT = "right_to_left"
    NONE = "none"

    @classmethod
    def from_motion(cls, previous_x: float, current_x: float) -> "CrossingDirection":
        """Moving towards larger x is left-to-right, anything else right-to-left."""
        return cls.LEFT_TO_RIGHT if current_x > previous_x else cls.RIGHT_TO_LEFT


@dataclass(frozen=True)
class AggregateCount:
    """
    Immutable count snapshot.

    Design:
    - Frozen dataclass (thread-safe read)
    - Value object (no identity)
    - ``total`` always equals the sum of both directions
    """

    left_to_right: int = 0
    right_to_left: int = 0

    def __post_init__(self):
        if self.left_to_right < 0 or self.right_to_left < 0:
            raise ValueError(
                f"Counts must be >= 0, got {self.left_to_right}/{self.right_to_left}"
            )

    @property
    def total(self) -> int:
        return self.left_to_right + self.right_to_left

    def to_dict(self) -> Dict[str, int]:
        """Serialize to JSON-compatible dict (includes total)."""
        data = asdict(self)
        data["total"] = self.total
        return data

    def __str__(self) -> str:
        return f"L->R={self.left_to_right}, R->L={self.right_to_left}, Total={self.total}"


class CrossingCounter:
    """
    Stateful counter for directional crossings.

    Thread-safety via encapsulation (caller must synchronize if
    multi-threaded; the engine holds its lock around every call).

    Usage:
        counter = CrossingCounter()
        counter.record(CrossingDirection.LEFT_TO_RIGHT)
        stats = counter.get_stats()  # Immutable
    """

    def __init__(self):
        self._left_to_right = 0
        self._right_to_left = 0

    def record(self, direction: CrossingDirection) -> AggregateCount:
        """
        Count one completed crossing.

        Args:
            direction: LEFT_TO_RIGHT or RIGHT_TO_LEFT

        Returns:
            Snapshot after the increment

        Raises:
            ValueError: If direction is NONE
        """
        if direction == CrossingDirection.LEFT_TO_RIGHT:
            self._left_to_right += 1
        elif direction == CrossingDirection.RIGHT_TO_LEFT:
            self._right_to_left += 1
        else:
            raise ValueError(f"Cannot count a crossing with direction {direction}")
        return self.get_stats()

    def get_stats(self) -> AggregateCount:
        """Get immutable count snapshot."""
        return AggregateCount(
            left_to_right=self._left_to_right,
            right_to_left=self._right_to_left,
        )

    def reset(self) -> None:
        """Reset all counters to zero."""
        self._left_to_right = 0
        self._right_to_left = 0
