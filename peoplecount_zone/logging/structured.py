"""
Counting Event Logger
=====================

One JSON document per log record, keyed by a LogEvent, so counts, crossings
and detector failures can be grepped or shipped to an aggregator as-is.

Record shape:
    {"timestamp": <UTC ISO-8601>, "level": "INFO", "component": "engine",
     "event": "line.crossed", "message": "...", "metadata": {...},
     "exception": {"type": ..., "message": ...}}

``metadata`` and ``exception`` are present only when given. Values that are
not JSON-native (numpy scalars, enums, paths) are rendered with ``str``.

Loggers are named ``peoplecount.<component>``; engines sharing a component
share one stdlib logger, so debug mode applies to all of them.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .events import LogEvent

Metadata = Optional[Dict[str, Any]]


class StructuredLogger:
    """
    Event-keyed JSON logger over a stdlib ``logging.Logger``.

    Records below the logger's level are dropped before any JSON is built,
    so per-batch DEBUG events cost nothing outside debug mode.
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None
    ):
        self.component = component
        self.logger_name = logger_name or f"peoplecount.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _build(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Metadata,
        error: Optional[BaseException],
    ) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }
        if metadata:
            entry['metadata'] = metadata
        if error is not None:
            entry['exception'] = {'type': type(error).__name__, 'message': str(error)}
        return json.dumps(entry, default=str)

    def _log(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Metadata = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            self._build(level, event, message, metadata, exc_info),
            exc_info=exc_info,
        )

    def debug(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        self._log(logging.DEBUG, event, message, metadata)

    def info(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        self._log(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Metadata = None) -> None:
        self._log(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Metadata = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """Log at ERROR; ``exc_info`` adds an exception summary and traceback."""
        self._log(logging.ERROR, event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def is_debug(self) -> bool:
        return self.logger.isEnabledFor(logging.DEBUG)


class JSONFormatter(logging.Formatter):
    """Emits the prebuilt JSON message, with the traceback appended when present."""

    def format(self, record: logging.LogRecord) -> str:
        text = record.getMessage()
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def create_logger(component: str, level: int = logging.INFO) -> StructuredLogger:
    """Logger for one component, e.g. ``create_logger("engine")``."""
    return StructuredLogger(component=component, level=level)
