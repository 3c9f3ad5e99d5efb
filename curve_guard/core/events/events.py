"""
Security event models.

These events represent immutable facts about admission decisions and
administrative actions. They are appended to the audit log and fanned out to
loggers, recorders, and alerting through the event bus.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from curve_guard.core.domain.types import EventCategory, RequestMetadata, Severity


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    event_id: str
    ts_ns: int

    category: EventCategory
    severity: Severity

    actor: str
    action: str
    detail: str

    amount: float | None = None
    metadata: RequestMetadata | None = None

    def to_dict(self) -> dict[str, Any]:
        record = asdict(self)
        record["metadata"] = (
            None if self.metadata is None else self.metadata.model_dump(exclude_none=True)
        )
        return record


@dataclass(frozen=True, slots=True)
class SecurityAlert:
    alert_id: str
    event_id: str
    ts_ns: int

    severity: Severity
    title: str
    description: str

    acknowledged: bool = False
    acknowledged_by: str | None = None
    acknowledged_at_ns: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
