"""
Analytics Layer
===============

Bounded Context: Stateful tracking and counting.

Responsibilities:
- Keep persistent identities for people across frames
- Accumulate directional crossing counts
- Generate immutable snapshots

Design Philosophy:
- Mutable accumulators (PersonTracker, CrossingCounter)
- Immutable outputs (AggregateCount, PersonSnapshot)
"""

from peoplecount_zone.analytics.counter import (
    AggregateCount,
    CrossingCounter,
    CrossingDirection,
)
from peoplecount_zone.analytics.tracker import (
    PersonSnapshot,
    PersonTracker,
    PositionSample,
    TrackedPerson,
)

__all__ = [
    "AggregateCount",
    "CrossingCounter",
    "CrossingDirection",
    "PersonSnapshot",
    "PersonTracker",
    "PositionSample",
    "TrackedPerson",
]
