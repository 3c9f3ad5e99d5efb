"""Bounded, append-only audit trail of security decisions.

The log is a ring buffer: once ``capacity`` events are held, each new event
evicts the oldest one. It bounds memory; it is not a durability mechanism.
Durable copies are the job of sinks registered on the event bus (e.g.
``FileRecorderSink``).
"""

from __future__ import annotations

import threading
import time
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from curve_guard.core.domain.reject_reasons import RejectReason
from curve_guard.core.events.events import SecurityEvent

if TYPE_CHECKING:
    from curve_guard.core.domain.types import EventCategory, RequestMetadata, Severity
    from curve_guard.core.events.event_bus import EventBus


@dataclass(frozen=True, slots=True)
class AuditSummary:
    total: int
    critical: int
    high: int
    rate_limit_violations: int
    by_severity: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, int] = field(default_factory=dict)


def _new_event_id() -> str:
    return f"evt_{uuid.uuid4().hex}"


class AuditLog:
    """Thread-safe ring buffer of SecurityEvents."""

    def __init__(
        self,
        capacity: int,
        *,
        enabled: bool = True,
        event_bus: EventBus | None = None,
        clock: Callable[[], int] = time.time_ns,
        id_factory: Callable[[], str] = _new_event_id,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.enabled = enabled
        self._event_bus = event_bus
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._events: deque[SecurityEvent] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._events.maxlen or 0

    def record(
        self,
        *,
        category: EventCategory,
        severity: Severity,
        actor: str,
        action: str,
        detail: str,
        amount: float | None = None,
        metadata: RequestMetadata | None = None,
    ) -> SecurityEvent | None:
        """Append a new event; returns it, or None when audit logging is disabled."""
        if not self.enabled:
            return None

        event = SecurityEvent(
            event_id=self._id_factory(),
            ts_ns=self._clock(),
            category=category,
            severity=severity,
            actor=actor,
            action=action,
            detail=detail,
            amount=amount,
            metadata=metadata,
        )
        with self._lock:
            self._events.append(event)

        # dispatch outside the lock: sinks may be slow or call back into the engine
        if self._event_bus is not None:
            self._event_bus.emit(event)
        return event

    def get_recent(self, limit: int = 50) -> list[SecurityEvent]:
        """Return up to ``limit`` events, newest first."""
        if limit <= 0:
            return []
        with self._lock:
            events = list(self._events)
        return events[::-1][:limit]

    def summarize(self) -> AuditSummary:
        with self._lock:
            events = list(self._events)

        by_severity = Counter(e.severity for e in events)
        by_category = Counter(e.category for e in events)
        return AuditSummary(
            total=len(events),
            critical=by_severity.get("critical", 0),
            high=by_severity.get("high", 0),
            rate_limit_violations=sum(
                1 for e in events if e.action == RejectReason.RATE_LIMIT_EXCEEDED
            ),
            by_severity=dict(by_severity),
            by_category=dict(by_category),
        )

    def resize(self, capacity: int) -> None:
        """Change the capacity, keeping the newest events."""
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        with self._lock:
            self._events = deque(self._events, maxlen=capacity)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
