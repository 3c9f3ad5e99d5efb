"""Security configuration model for the trade admission engine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SecurityConfig(BaseModel):
    """Process-wide admission policy.

    Immutable once constructed; use ``TradeSecurityEngine.reconfigure`` to
    switch policies at runtime.
    """

    # Price movement
    max_price_impact: float = Field(default=0.05, gt=0, lt=1)
    emergency_pause_threshold: float = Field(default=0.25, gt=0, lt=1)

    # Trade size, as fractions of total pool liquidity
    max_trade_size_fraction: float = Field(default=0.1, gt=0, le=1)
    min_trade_size_fraction: float = Field(default=0.001, ge=0, lt=1)

    # Per-actor throttling
    rate_limit_per_minute: int = Field(default=10, gt=0)
    rate_limit_per_hour: int = Field(default=100, gt=0)
    max_concurrent_trades_per_actor: int = Field(default=3, gt=0)

    # Daily activity caps (None disables the check)
    max_daily_volume_per_actor: float | None = Field(default=None, gt=0)
    max_daily_trades_per_actor: int | None = Field(default=100, gt=0)

    # Seconds an actor must wait between large trades (0 disables the check)
    large_trade_cooldown_seconds: int = Field(default=300, ge=0)

    # Audit trail
    audit_logging: bool = True
    audit_log_capacity: int = Field(default=10_000, gt=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> SecurityConfig:
        """Create a SecurityConfig from a JSON-compatible object.

        Accepts either the flat config or a document with a ``"security"`` key.
        """
        if isinstance(obj, dict) and isinstance(obj.get("security"), dict):
            obj = obj["security"]
        return cls.model_validate(obj)

    @model_validator(mode="after")
    def validate_consistency(self) -> SecurityConfig:
        """Validate cross-field ordering of thresholds."""
        if self.max_price_impact >= self.emergency_pause_threshold:
            raise ValueError("emergency_pause_threshold must be greater than max_price_impact")
        if self.min_trade_size_fraction >= self.max_trade_size_fraction:
            raise ValueError("min_trade_size_fraction must be smaller than max_trade_size_fraction")
        return self


def load_security_config(path: str | Path) -> SecurityConfig:
    """Load a SecurityConfig from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    return SecurityConfig.from_json_obj(json.loads(path.read_text(encoding="utf-8")))
