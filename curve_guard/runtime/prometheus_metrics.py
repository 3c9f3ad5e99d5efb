from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Gauge, push_to_gateway

if TYPE_CHECKING:
    from curve_guard.core.risk.security_engine import SecurityStats

LOGGER = logging.getLogger(__name__)

METRIC_PREFIX = "curve_guard"


class PrometheusMetricsClient:
    """Minimal Prometheus Pushgateway client for security engine stats.

    Expected environment:
    - PROMETHEUS_PUSHGATEWAY_URL: URL to the Pushgateway.
      Example: http://pushgateway.monitoring.svc.cluster.local:9091

    Optional:
    - PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON: JSON object used as grouping key.
      If not set, metrics are grouped only by the 'job' argument, which often
      causes pushes from different processes to overwrite each other.

      Example:
        {"instance": "trade-api-0"}

    This client is intentionally best-effort: callers should treat it as a
    side-effect and never fail trade handling because of metrics delivery.
    """

    def __init__(self) -> None:
        self._pushgateway_url = os.environ.get("PROMETHEUS_PUSHGATEWAY_URL")
        self._grouping_key = self._load_grouping_key()
        self._registry = CollectorRegistry()
        self._gauges: dict[str, Gauge] = {}

    def is_enabled(self) -> bool:
        return self._pushgateway_url is not None

    @staticmethod
    def _load_grouping_key() -> dict[str, str]:
        raw = os.environ.get("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON")
        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning(
                "Invalid PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON; ignoring"
            )
            return {}

        if not isinstance(data, dict):
            return {}

        grouping: dict[str, str] = {}
        for key, value in data.items():
            if isinstance(key, str) and isinstance(value, str):
                grouping[key] = value
        return grouping

    def set_gauge(
        self,
        *,
        name: str,
        value: float,
        labels: dict[str, str],
    ) -> None:
        if not self._pushgateway_url:
            return

        gauge = self._gauges.get(name)
        if gauge is None:
            gauge = Gauge(
                name,
                documentation=name,
                labelnames=list(labels.keys()),
                registry=self._registry,
            )
            self._gauges[name] = gauge

        if labels:
            gauge.labels(**labels).set(value)
        else:
            gauge.set(value)

    def publish_security_stats(self, stats: SecurityStats, *, job: str) -> None:
        """Set one gauge per stats field and push them."""
        if not self._pushgateway_url:
            return

        scalars = {
            "events_total": stats.total_events,
            "critical_events": stats.critical_events,
            "high_severity_events": stats.high_severity_events,
            "emergency_paused": 1.0 if stats.emergency_paused else 0.0,
            "active_trades": stats.active_trades,
            "rate_limit_violations": stats.rate_limit_violations,
            "active_alerts": stats.active_alerts,
        }
        for key, value in scalars.items():
            self.set_gauge(name=f"{METRIC_PREFIX}_{key}", value=float(value), labels={})

        for severity, count in stats.events_by_severity.items():
            self.set_gauge(
                name=f"{METRIC_PREFIX}_events_by_severity",
                value=float(count),
                labels={"severity": severity},
            )

        self.push_all(job=job)

    def push_all(self, *, job: str) -> None:
        if not self._pushgateway_url:
            return

        push_to_gateway(
            gateway=self._pushgateway_url,
            job=job,
            registry=self._registry,
            grouping_key=self._grouping_key,
        )

        LOGGER.info(
            "Prometheus metrics pushed",
            extra={"job": job, "grouping_key": self._grouping_key},
        )
