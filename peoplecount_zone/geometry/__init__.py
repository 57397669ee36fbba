"""
Geometry Layer
==============

Bounded Context: Pure geometric shapes and spatial queries.

Responsibilities:
- Crossing line representation (immutable)
- Movement-vs-line segment intersection
- NO state, NO counting, NO visualization
"""

from peoplecount_zone.geometry.shapes import CrossingLine
from peoplecount_zone.geometry.intersection import SegmentIntersector

__all__ = [
    "CrossingLine",
    "SegmentIntersector",
]
