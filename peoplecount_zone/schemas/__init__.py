"""
Schemas
=======

Closed data types crossing the engine boundary.

Types:
- BBox, Point: frame geometry primitives
- Detection: one detector output entry
"""

from .common import BBox, Point
from .detection import Detection, parse_detection, from_supervision

__all__ = [
    "BBox",
    "Point",
    "Detection",
    "parse_detection",
    "from_supervision",
]
