"""
Test Crossing Geometry
======================

CrossingLine validation and SegmentIntersector crossing tests.

Usage:
    pytest test_geometry.py
"""

import math

import pytest

from peoplecount_zone import CrossingLine, SegmentIntersector


VERTICAL = CrossingLine.from_coords(320, 0, 320, 480)
HORIZONTAL = CrossingLine.from_coords(0, 240, 640, 240)


# ─────────────────────────────────────────────────────────────────────────────
# CrossingLine
# ─────────────────────────────────────────────────────────────────────────────

def test_line_vector_and_midpoint():
    line = CrossingLine.from_coords(100, 50, 300, 250)

    assert line.vector == (200.0, 200.0)
    assert line.midpoint == (200.0, 150.0)
    assert line.as_tuple() == (100.0, 50.0, 300.0, 250.0)


def test_degenerate_line_rejected():
    with pytest.raises(ValueError):
        CrossingLine.from_coords(10, 10, 10, 10)


def test_non_finite_line_rejected():
    with pytest.raises(ValueError):
        CrossingLine.from_coords(0, 0, math.inf, 10)
    with pytest.raises(ValueError):
        CrossingLine(start=(math.nan, 0.0), end=(1.0, 1.0))


def test_line_is_immutable():
    with pytest.raises(Exception):
        VERTICAL.start = (0.0, 0.0)


# ─────────────────────────────────────────────────────────────────────────────
# SegmentIntersector
# ─────────────────────────────────────────────────────────────────────────────

def test_movement_across_line_intersects():
    assert SegmentIntersector.intersects((300, 240), (340, 240), VERTICAL)
    assert SegmentIntersector.intersects((340, 100), (300, 120), VERTICAL)


def test_movement_on_one_side_does_not_intersect():
    assert not SegmentIntersector.intersects((100, 240), (200, 240), VERTICAL)


def test_movement_past_line_end_does_not_intersect():
    assert not SegmentIntersector.intersects((300, 600), (340, 600), VERTICAL)


def test_tolerance_accepts_near_misses():
    # Step ends 2 px short of the line: t = 1.05
    assert SegmentIntersector.intersects((280, 240), (318, 240), VERTICAL)
    assert not SegmentIntersector.intersects((280, 240), (318, 240), VERTICAL, tolerance=0.0)

    # Crossing 20 px below the line end: u = 500 / 480
    assert SegmentIntersector.intersects((300, 500), (340, 500), VERTICAL)
    assert not SegmentIntersector.intersects((300, 500), (340, 500), VERTICAL, tolerance=0.0)


def test_zero_length_movement_never_intersects():
    assert not SegmentIntersector.intersects((320, 240), (320, 240), VERTICAL)


def test_parallel_disjoint_movement_does_not_intersect():
    assert not SegmentIntersector.intersects((100, 100), (400, 100), HORIZONTAL)
    assert SegmentIntersector.parameters((100, 100), (400, 100), HORIZONTAL) is None


def test_collinear_overlapping_movement_intersects():
    assert SegmentIntersector.intersects((100, 240), (400, 240), HORIZONTAL)
    assert SegmentIntersector.intersects((400, 240), (100, 240), HORIZONTAL)


def test_collinear_movement_beyond_line_does_not_intersect():
    short = CrossingLine.from_coords(0, 240, 100, 240)
    assert not SegmentIntersector.intersects((300, 240), (400, 240), short)


def test_parameters_for_perpendicular_segments():
    t, u = SegmentIntersector.parameters((300, 120), (340, 120), VERTICAL)

    assert t == pytest.approx(0.5)
    assert u == pytest.approx(0.25)


def test_intersection_point():
    point = SegmentIntersector.intersection_point((300, 100), (340, 140), VERTICAL)
    assert point == pytest.approx((320.0, 120.0))

    assert SegmentIntersector.intersection_point((100, 100), (200, 100), VERTICAL) is None
    assert SegmentIntersector.intersection_point((100, 240), (400, 240), HORIZONTAL) is None
