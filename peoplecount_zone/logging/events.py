"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for the counting engine and its orchestration layer.

Event Naming Convention:
    <subject>.<action>[.<outcome>]

    subject: engine, track, line, count, detection, detector, pipeline, ...
    action: processed, started, crossed, reset, failed, ...

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, metadata.person_id, metadata.direction
    | filter event = "line.crossed"
    | stats count() by metadata.direction
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - engine/track/line/count.*: Tracking & counting engine
    - detection/detector/model.*: Detector boundary
    - pipeline/scheduler/service.*: Orchestration lifecycle
    - observer.*: Count observer callbacks
    """

    # ========== Engine Events ==========
    ENGINE_BATCH_PROCESSED = "engine.batch.processed"
    """Detection batch accepted and processed."""

    ENGINE_BATCH_THROTTLED = "engine.batch.throttled"
    """Detection batch arrived inside the detection interval (no-op)."""

    TRACK_STARTED = "track.started"
    """New tracked person created from an unmatched detection."""

    TRACKS_CLEANED = "tracks.cleaned"
    """Stale tracked people removed by the cleanup sweep."""

    LINE_CROSSED = "line.crossed"
    """Tracked person completed a line crossing."""

    LINE_CONFIGURED = "line.configured"
    """Crossing line replaced."""

    COUNT_RESET = "count.reset"
    """Aggregate count and tracked people cleared by operator."""

    # ========== Detection Events ==========
    DETECTION_DROPPED = "detection.dropped"
    """Malformed detection discarded at the engine boundary."""

    DETECTOR_FAILED = "detector.failed"
    """Detector raised while processing a frame (frame skipped)."""

    MODEL_LOADED = "model.loaded"
    """Detector weights loaded from disk."""

    # ========== Observer Events ==========
    OBSERVER_FAILED = "observer.failed"
    """Count observer raised while being notified."""

    # ========== Lifecycle Events ==========
    PIPELINE_STARTED = "pipeline.started"
    """Offline video pipeline started."""

    PIPELINE_COMPLETED = "pipeline.completed"
    """Offline video pipeline finished."""

    SCHEDULER_STARTED = "scheduler.started"
    """Cleanup scheduler thread started."""

    SCHEDULER_STOPPED = "scheduler.stopped"
    """Cleanup scheduler thread stopped."""

    SERVICE_STARTED = "service.started"
    """Live counting service started."""

    SERVICE_STOPPED = "service.stopped"
    """Live counting service stopped."""

