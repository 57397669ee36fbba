"""
Common Schema Types
==================

Bounded Context: Shared Data Structures

Design Principles:
- Immutability: frozen=True prevents accidental mutation
- Type Safety: All fields explicitly typed
- Validation: Constructor validates invariants

Types:
- BBox: Bounding box in absolute pixel coordinates
- Point: 2D point in frame coordinates
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict, Sequence


@dataclass(frozen=True)
class Point:
    """Immutable 2D point (pixels)."""
    x: float
    y: float

    def distance_to(self, other: 'Point') -> float:
        """Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class BBox:
    """
    Immutable bounding box representation.

    Coordinates are in absolute pixel values (not normalized).
    Origin is top-left corner of frame.

    Attributes:
        x: Left edge x-coordinate (pixels)
        y: Top edge y-coordinate (pixels)
        width: Box width (pixels)
        height: Box height (pixels)

    Invariants:
        - all coordinates finite
        - width > 0
        - height > 0
        - width × height is finite and > 0

    Example:
        >>> bbox = BBox(x=100.5, y=200.3, width=50.2, height=100.8)
        >>> bbox.to_dict()
        {'x': 100.5, 'y': 200.3, 'width': 50.2, 'height': 100.8}
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        """Validate invariants."""
        for name in ('x', 'y', 'width', 'height'):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"BBox {name} must be finite, got {getattr(self, name)}")
        if self.width <= 0:
            raise ValueError(f"BBox width must be > 0, got {self.width}")
        if self.height <= 0:
            raise ValueError(f"BBox height must be > 0, got {self.height}")
        area = self.width * self.height
        if not math.isfinite(area) or area <= 0:
            raise ValueError(f"BBox area must be finite and > 0, got {area}")

    def to_dict(self) -> Dict[str, float]:
        """Serialize to JSON-compatible dict."""
        return asdict(self)

    def to_list(self) -> list[float]:
        """Serialize as ``[x, y, width, height]`` (detector wire order)."""
        return [self.x, self.y, self.width, self.height]

    @classmethod
    def from_xywh(cls, values: Sequence[float]) -> 'BBox':
        """Build from a ``[x, y, width, height]`` sequence.

        Raises:
            ValueError: If the sequence does not hold four numbers or the
                resulting box is invalid
        """
        try:
            x, y, width, height = (float(v) for v in values)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid bbox sequence {values!r}: {e}") from e
        return cls(x=x, y=y, width=width, height=height)

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> 'BBox':
        """Build from corner coordinates (supervision / YOLO layout)."""
        return cls(x=float(x1), y=float(y1), width=float(x2 - x1), height=float(y2 - y1))

    @property
    def center(self) -> Point:
        """Box centroid."""
        return Point(x=self.x + self.width / 2, y=self.y + self.height / 2)

    @property
    def area(self) -> float:
        """Bounding box area in square pixels."""
        return self.width * self.height

    @property
    def max_side(self) -> float:
        """Longest side, used as the association radius."""
        return max(self.width, self.height)
