"""
peoplecount_processor - Runtime wiring for the people counting engine

This package connects the engine to the outside world: YAML configuration,
YOLO model loading, the detector adapter, the periodic cleanup scheduler
and the live counting loop.

Architecture:
- CounterConfig: Configuration management
- ModelLoader: YOLO model loading and caching
- YoloPersonDetector: Detector protocol over an ultralytics model
- CleanupScheduler: Periodic stale-track sweep thread
- PeopleCounterService: Live frame loop

Threading Model:
- Frame loop thread (caller of PeopleCounterService.run)
- Cleanup thread (CleanupScheduler)
"""

from peoplecount_processor.config import CounterConfig, DetectorConfig, LineConfig
from peoplecount_processor.model_loader import ModelLoader
from peoplecount_processor.detector import YoloPersonDetector
from peoplecount_processor.scheduler import CleanupScheduler
from peoplecount_processor.service import PeopleCounterService

__all__ = [
    "CounterConfig",
    "DetectorConfig",
    "LineConfig",
    "ModelLoader",
    "YoloPersonDetector",
    "CleanupScheduler",
    "PeopleCounterService",
]
