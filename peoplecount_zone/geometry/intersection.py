"""
Segment Intersection Module
===========================

Stateless crossing test - applies line geometry to a movement step.

Design:
- Pure functions (no state)
- Parametric form: P = p1 + t·(p2 - p1), Q = q1 + u·(q2 - q1)
- Tolerance widens the accepted parameter range to [-tol, 1 + tol]
  so near-endpoint crossings still count
"""

from typing import Optional, Tuple

from peoplecount_zone.geometry.shapes import CrossingLine

PointLike = Tuple[float, float]

DEFAULT_TOLERANCE = 0.1


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


class SegmentIntersector:
    """
    Stateless intersection tests between a movement segment and a line.

    All methods are static (no instance state).
    """

    @staticmethod
    def parameters(
        p1: PointLike,
        p2: PointLike,
        line: CrossingLine,
    ) -> Optional[Tuple[float, float]]:
        """
        Solve for the intersection parameters of the two supporting lines.

        Args:
            p1: Movement start (previous centroid)
            p2: Movement end (new centroid)
            line: Crossing line

        Returns:
            (t, u) where t runs along p1→p2 and u along the crossing line,
            or None when the segments are parallel
        """
        dx1, dy1 = p2[0] - p1[0], p2[1] - p1[1]
        dx2, dy2 = line.vector
        denominator = _cross(dx1, dy1, dx2, dy2)

        if denominator == 0:
            return None

        ox, oy = line.start[0] - p1[0], line.start[1] - p1[1]
        t = _cross(ox, oy, dx2, dy2) / denominator
        u = _cross(ox, oy, dx1, dy1) / denominator
        return t, u

    @staticmethod
    def intersects(
        p1: PointLike,
        p2: PointLike,
        line: CrossingLine,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> bool:
        """
        Check whether the movement p1→p2 crosses the line.

        Parallel segments intersect only when collinear with overlapping
        extents (movement along the line itself).

        Args:
            p1: Movement start
            p2: Movement end
            line: Crossing line
            tolerance: Parameter slack on both ends of both segments

        Returns:
            True if the segments intersect within tolerance
        """
        if p1[0] == p2[0] and p1[1] == p2[1]:
            return False

        params = SegmentIntersector.parameters(p1, p2, line)
        if params is None:
            return SegmentIntersector._collinear_overlap(p1, p2, line, tolerance)

        t, u = params
        low, high = -tolerance, 1.0 + tolerance
        return low <= t <= high and low <= u <= high

    @staticmethod
    def intersection_point(
        p1: PointLike,
        p2: PointLike,
        line: CrossingLine,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> Optional[PointLike]:
        """
        Point where the movement p1→p2 meets the line.

        Returns:
            (x, y) on the movement segment, or None if the segments do not
            intersect or are parallel
        """
        params = SegmentIntersector.parameters(p1, p2, line)
        if params is None:
            return None

        t, u = params
        low, high = -tolerance, 1.0 + tolerance
        if not (low <= t <= high and low <= u <= high):
            return None

        return (p1[0] + t * (p2[0] - p1[0]), p1[1] + t * (p2[1] - p1[1]))

    @staticmethod
    def _collinear_overlap(
        p1: PointLike,
        p2: PointLike,
        line: CrossingLine,
        tolerance: float,
    ) -> bool:
        dx1, dy1 = p2[0] - p1[0], p2[1] - p1[1]
        ox, oy = line.start[0] - p1[0], line.start[1] - p1[1]
        if _cross(ox, oy, dx1, dy1) != 0:
            return False

        # Project the line endpoints onto the movement direction (t units)
        length_sq = dx1 * dx1 + dy1 * dy1
        t_start = (ox * dx1 + oy * dy1) / length_sq
        t_end = ((line.end[0] - p1[0]) * dx1 + (line.end[1] - p1[1]) * dy1) / length_sq

        return max(min(t_start, t_end), -tolerance) <= min(max(t_start, t_end), 1.0 + tolerance)
