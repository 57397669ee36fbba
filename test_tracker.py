"""
Test Tracker & Counter
======================

PersonTracker association rules and CrossingCounter bookkeeping.

Usage:
    pytest test_tracker.py
"""

import pytest

from peoplecount_zone import (
    AggregateCount,
    BBox,
    CrossingCounter,
    CrossingDirection,
    Detection,
    PersonTracker,
    TrackedPerson,
)


def detection(cx, cy, width=40, height=100, score=0.9):
    return Detection(
        class_name="person",
        score=score,
        bbox=BBox(x=cx - width / 2, y=cy - height / 2, width=width, height=height),
    )


def tracked(person_id, cx, cy, now_ms=0, width=40, height=100, history_limit=20):
    return TrackedPerson.create(person_id, detection(cx, cy, width, height), now_ms, history_limit)


# ─────────────────────────────────────────────────────────────────────────────
# Association
# ─────────────────────────────────────────────────────────────────────────────

def test_match_score_combines_distance_size_and_age():
    person = tracked("a", 100, 100, now_ms=0)

    distance, score = PersonTracker.match_score(detection(130, 140), person, now_ms=0)
    assert distance == pytest.approx(50)
    assert score == pytest.approx(50)

    # Half the area (size dissimilarity 1.0) and 2 s old (time factor capped at 1.0)
    distance, score = PersonTracker.match_score(detection(130, 140, 20, 100), person, now_ms=2000)
    assert distance == pytest.approx(50)
    assert score == pytest.approx(50 * 1.5 * 1.5)


def test_find_match_respects_radius():
    tracker = PersonTracker()
    tracker.add(tracked("a", 100, 100))

    assert tracker.find_match(detection(150, 100), now_ms=50).id == "a"
    # Exactly max(width, height) away is not eligible
    assert tracker.find_match(detection(200, 100), now_ms=50) is None


def test_find_match_radius_scales_with_factor():
    tracker = PersonTracker(match_distance_factor=2.0)
    tracker.add(tracked("a", 100, 100))

    assert tracker.find_match(detection(250, 100), now_ms=50).id == "a"


def test_find_match_prefers_lowest_score():
    tracker = PersonTracker()
    tracker.add(tracked("far", 100, 100))
    tracker.add(tracked("near", 160, 100))

    assert tracker.find_match(detection(150, 100), now_ms=50).id == "near"


def test_find_match_skips_claimed_people():
    tracker = PersonTracker()
    tracker.add(tracked("a", 100, 100))
    tracker.add(tracked("b", 130, 100))

    assert tracker.find_match(detection(100, 100), 50, exclude={"a"}).id == "b"
    assert tracker.find_match(detection(100, 100), 50, exclude={"a", "b"}) is None


def test_find_match_ties_keep_insertion_order():
    tracker = PersonTracker()
    tracker.add(tracked("first", 90, 100))
    tracker.add(tracked("second", 110, 100))

    assert tracker.find_match(detection(100, 100), now_ms=0).id == "first"


def test_bbox_rejects_degenerate_area():
    with pytest.raises(ValueError):
        BBox(x=0, y=0, width=1e-200, height=1e-200)
    with pytest.raises(ValueError):
        BBox(x=0, y=0, width=1e200, height=1e200)

    assert BBox(x=0, y=0, width=1e-3, height=1e-3).area > 0


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────

def test_add_duplicate_id_rejected():
    tracker = PersonTracker()
    tracker.add(tracked("a", 100, 100))

    with pytest.raises(ValueError):
        tracker.add(tracked("a", 300, 100))


def test_remove_and_contains():
    tracker = PersonTracker()
    tracker.add(tracked("a", 100, 100))

    assert "a" in tracker
    tracker.remove("a")
    assert "a" not in tracker
    assert len(tracker) == 0
    with pytest.raises(KeyError):
        tracker.remove("a")


def test_prune_removes_stale_people_in_order():
    tracker = PersonTracker()
    tracker.add(tracked("old", 100, 100, now_ms=0))
    tracker.add(tracked("recent", 300, 100, now_ms=4000))
    tracker.add(tracked("older", 500, 100, now_ms=-100))

    assert tracker.prune(now_ms=6000, horizon_ms=5000) == ["old", "older"]
    assert [p.id for p in tracker] == ["recent"]


def test_history_is_bounded():
    person = tracked("a", 100, 100, history_limit=3)
    for i in range(1, 6):
        person.observe(detection(100 + i, 100), now_ms=i * 100)

    assert [s.x for s in person.position_history] == [103, 104, 105]
    assert person.last_seen_ms == 500


def test_observe_returns_previous_center():
    person = tracked("a", 100, 100)
    previous = person.observe(detection(120, 110), now_ms=100)

    assert (previous.x, previous.y) == (100, 100)
    assert (person.last_center.x, person.last_center.y) == (120, 110)


def test_crossing_state_is_one_way():
    person = tracked("a", 100, 100)

    assert person.add_crossing_evidence(0.7) == pytest.approx(0.7)
    assert person.add_crossing_evidence(0.7) == 1.0
    assert person.mark_crossed(CrossingDirection.LEFT_TO_RIGHT)
    assert not person.mark_crossed(CrossingDirection.RIGHT_TO_LEFT)
    assert person.crossing_direction == CrossingDirection.LEFT_TO_RIGHT


def test_snapshot_is_detached():
    tracker = PersonTracker()
    person = tracked("a", 100, 100)
    tracker.add(person)

    (snapshot,) = tracker.snapshot()
    person.observe(detection(110, 100), now_ms=100)

    assert len(snapshot.position_history) == 1
    assert snapshot.last_seen_ms == 0


# ─────────────────────────────────────────────────────────────────────────────
# Counter
# ─────────────────────────────────────────────────────────────────────────────

def test_counter_records_both_directions():
    counter = CrossingCounter()
    counter.record(CrossingDirection.LEFT_TO_RIGHT)
    counter.record(CrossingDirection.LEFT_TO_RIGHT)
    stats = counter.record(CrossingDirection.RIGHT_TO_LEFT)

    assert stats == AggregateCount(left_to_right=2, right_to_left=1)
    assert stats.total == 3
    assert stats.to_dict() == {"left_to_right": 2, "right_to_left": 1, "total": 3}
    assert str(stats) == "L->R=2, R->L=1, Total=3"


def test_counter_rejects_none_direction():
    with pytest.raises(ValueError):
        CrossingCounter().record(CrossingDirection.NONE)


def test_counter_reset():
    counter = CrossingCounter()
    counter.record(CrossingDirection.RIGHT_TO_LEFT)
    counter.reset()

    assert counter.get_stats() == AggregateCount()


def test_aggregate_count_rejects_negative():
    with pytest.raises(ValueError):
        AggregateCount(left_to_right=-1)


def test_direction_from_motion():
    assert CrossingDirection.from_motion(100, 200) == CrossingDirection.LEFT_TO_RIGHT
    assert CrossingDirection.from_motion(200, 100) == CrossingDirection.RIGHT_TO_LEFT
    # Purely vertical motion is treated as right-to-left
    assert CrossingDirection.from_motion(100, 100) == CrossingDirection.RIGHT_TO_LEFT
