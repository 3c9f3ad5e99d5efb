"""
Logging event sink.
"""
from __future__ import annotations

import logging
from typing import Any

_LEVEL_BY_SEVERITY: dict[str, int] = {
    "low": logging.DEBUG,
    "medium": logging.INFO,
    "high": logging.WARNING,
    "critical": logging.CRITICAL,
}


class LoggingEventSink:
    """Logs security events using the standard logging module."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def on_event(self, event: Any) -> None:
        level = _LEVEL_BY_SEVERITY.get(getattr(event, "severity", ""), logging.INFO)
        self._logger.log(level, "security_event", extra={"event": event})
