"""
Simple synchronous event bus.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Iterable

from curve_guard.core.events.event_sink import EventSink

LOGGER = logging.getLogger(__name__)


class EventBus:
    """Dispatches events to registered sinks.

    Dispatch runs on the emitting thread. A failing sink is logged and skipped
    so that one broken consumer cannot block admission decisions.
    """

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._lock = threading.Lock()
        self._closed = False

    def register(self, sink: EventSink) -> None:
        """Register a new sink."""
        with self._lock:
            self._sinks = [*self._sinks, sink]

    def unregister(self, sink: EventSink) -> None:
        """Remove a previously registered sink (no-op if absent)."""
        with self._lock:
            self._sinks = [s for s in self._sinks if s is not sink]

    def emit(self, event: Any) -> None:
        """Emit an event to all sinks."""
        for sink in self._sinks:
            try:
                sink.on_event(event)
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception("Event sink failed", extra={"sink": type(sink).__name__})

    def close(self) -> None:
        """
        Finalize all sinks that expose a close() method.
        """
        if self._closed:
            return

        for sink in self._sinks:
            close_fn = getattr(sink, "close", None)
            if callable(close_fn):
                close_fn()

        self._closed = True
