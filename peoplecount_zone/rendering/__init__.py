"""
Rendering Layer
===============

Bounded Context: Counting overlay visualization.

Responsibilities:
- Draw the crossing line and the running count
- Draw tracked people (boxes, ids, trails, crossing points)
- Pure rendering - no logic, no state

Non-responsibilities:
- Association and counting (handled by the engine)
- Detection (external detector)
"""

from peoplecount_zone.rendering.visualizer import CountVisualizer

__all__ = [
    "CountVisualizer",
]
