"""
peoplecount zone engine v1.0
============================

Bounded Context: Directional people counting across a line.

Design Philosophy:
- Separation of Concerns: Geometry, Analytics, Rendering separated
- The engine is a pure state transition over (detections, timestamp)
- Detector, renderer and count observer are external collaborators

Architecture:

    peoplecount_zone/
    ├── schemas/           # Closed boundary types (BBox, Detection)
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # CrossingLine
    │   └── intersection.py  # SegmentIntersector
    │
    ├── analytics/         # Identities & counting (stateful)
    │   ├── counter.py     # CrossingCounter, AggregateCount
    │   └── tracker.py     # PersonTracker, TrackedPerson
    │
    ├── rendering/         # Visualization (stateless drawing)
    │   └── visualizer.py  # CountVisualizer
    │
    ├── logging/           # Structured JSON logging
    ├── engine.py          # PeopleCountingEngine (tracking + counting)
    └── pipeline.py        # Offline video orchestration

Usage:

    from peoplecount_zone import PeopleCountingEngine

    engine = PeopleCountingEngine(on_count_changed=print)
    engine.set_crossing_line(320, 0, 320, 480)

    engine.process_detections(
        [{"class": "person", "score": 0.9, "bbox": [80, 200, 40, 80]}],
        frame_width=640, frame_height=480, now_ms=0,
    )
    engine.cleanup_stale(now_ms=6000)
    print(engine.count)
"""

# Boundary types
from peoplecount_zone.schemas import BBox, Point, Detection

# Geometry Layer (immutable, stateless)
from peoplecount_zone.geometry.shapes import CrossingLine
from peoplecount_zone.geometry.intersection import SegmentIntersector

# Analytics Layer (stateful)
from peoplecount_zone.analytics.counter import AggregateCount, CrossingCounter, CrossingDirection
from peoplecount_zone.analytics.tracker import PersonSnapshot, PersonTracker, TrackedPerson

# Engine
from peoplecount_zone.engine import EngineConfig, PeopleCountingEngine

# Rendering Layer (stateless)
from peoplecount_zone.rendering.visualizer import CountVisualizer

# Pipeline (orchestration)
from peoplecount_zone.pipeline import CountingPipeline, PipelineBuilder

__all__ = [
    # Boundary
    "BBox",
    "Point",
    "Detection",
    # Geometry
    "CrossingLine",
    "SegmentIntersector",
    # Analytics
    "AggregateCount",
    "CrossingCounter",
    "CrossingDirection",
    "PersonSnapshot",
    "PersonTracker",
    "TrackedPerson",
    # Engine
    "EngineConfig",
    "PeopleCountingEngine",
    # Rendering
    "CountVisualizer",
    # Pipeline
    "CountingPipeline",
    "PipelineBuilder",
]

__version__ = "1.0.0"
