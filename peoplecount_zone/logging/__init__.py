"""
Structured Logging for peoplecount
==================================

Bounded Context: Observability

JSON-structured logging with typed event names.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from peoplecount_zone.logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="engine")
    >>> logger.info(
    ...     event=LogEvent.ENGINE_BATCH_PROCESSED,
    ...     message="Processed 3 detections",
    ...     metadata={'detection_count': 3, 'tracked': 2}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
