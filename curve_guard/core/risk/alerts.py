"""Alert generation from the security event stream.

``AlertManager`` is an event sink: register it on the engine's event bus and
it raises alerts for

- every ``critical`` event
- a burst of ``high`` events sharing one action (more than
  ``HIGH_BURST_THRESHOLD`` within ``HIGH_BURST_WINDOW_NS``)
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import defaultdict, deque
from dataclasses import replace
from typing import Any, Callable

from curve_guard.core.events.events import SecurityAlert, SecurityEvent

LOGGER = logging.getLogger(__name__)

HIGH_BURST_THRESHOLD = 3
HIGH_BURST_WINDOW_NS = 3600 * 1_000_000_000
MAX_ALERTS = 1000


class AlertManager:
    def __init__(
        self,
        *,
        clock: Callable[[], int] = time.time_ns,
        max_alerts: int = MAX_ALERTS,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._alerts: deque[SecurityAlert] = deque(maxlen=max_alerts)
        self._high_seen: defaultdict[str, deque[int]] = defaultdict(deque)

    def on_event(self, event: Any) -> None:
        if not isinstance(event, SecurityEvent):
            return

        if event.severity == "critical":
            self._raise(
                event,
                severity="critical",
                title=f"Critical security event: {event.action}",
                description=event.detail,
            )
            return

        if event.severity == "high" and self._is_high_burst(event):
            self._raise(
                event,
                severity="high",
                title=f"Frequent high severity events: {event.action}",
                description=(
                    f"More than {HIGH_BURST_THRESHOLD} high severity '{event.action}' "
                    "events in the last hour"
                ),
            )

    def _is_high_burst(self, event: SecurityEvent) -> bool:
        cutoff = event.ts_ns - HIGH_BURST_WINDOW_NS
        with self._lock:
            seen = self._high_seen[event.action]
            seen.append(event.ts_ns)
            while seen and seen[0] <= cutoff:
                seen.popleft()
            return len(seen) > HIGH_BURST_THRESHOLD

    def _raise(self, event: SecurityEvent, *, severity: str, title: str, description: str) -> None:
        alert = SecurityAlert(
            alert_id=f"alert_{uuid.uuid4().hex}",
            event_id=event.event_id,
            ts_ns=self._clock(),
            severity=severity,  # type: ignore[arg-type]
            title=title,
            description=description,
        )
        with self._lock:
            self._alerts.append(alert)
        LOGGER.warning("Security alert raised", extra={"alert": alert})

    def get_alerts(self) -> list[SecurityAlert]:
        with self._lock:
            return list(self._alerts)

    def get_active_alerts(self) -> list[SecurityAlert]:
        """Unacknowledged alerts, oldest first."""
        return [a for a in self.get_alerts() if not a.acknowledged]

    def acknowledge_alert(self, alert_id: str, acknowledged_by: str) -> bool:
        """Mark an alert as acknowledged. Returns False if no such alert exists."""
        with self._lock:
            for idx, alert in enumerate(self._alerts):
                if alert.alert_id != alert_id:
                    continue
                self._alerts[idx] = replace(
                    alert,
                    acknowledged=True,
                    acknowledged_by=acknowledged_by,
                    acknowledged_at_ns=self._clock(),
                )
                return True
        return False
