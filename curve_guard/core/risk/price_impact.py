"""Price impact gate on the constant-product curve.

Two thresholds apply to the computed impact:

- above ``max_price_impact``: the trade is rejected
- above ``emergency_pause_threshold``: the trade is rejected *and* the global
  emergency pause is triggered

Both are evaluated; when the pause fires its reason replaces the plain
rejection message since it is the more severe outcome.

A post-trade price that is not a positive finite number raises ValueError
instead of being scored, so float overflow never reaches the pause.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from curve_guard.core.domain.curve import post_trade_reserves, price_impact
from curve_guard.core.domain.reject_reasons import (
    RejectReason,
    emergency_pause_message,
    price_impact_message,
)

if TYPE_CHECKING:
    from curve_guard.core.domain.types import Direction
    from curve_guard.core.risk.emergency_pause import EmergencyPauseController
    from curve_guard.core.risk.security_config import SecurityConfig


@dataclass(frozen=True, slots=True)
class PriceImpactCheck:
    price_impact: float
    new_price: float
    valid: bool
    reason: str | None = None
    code: str | None = None
    pause_triggered: bool = False


class PriceImpactCalculator:
    """Prices a trade on the curve and enforces impact thresholds."""

    def __init__(self, config: SecurityConfig, pause: EmergencyPauseController) -> None:
        self.config = config
        self._pause = pause

    def calculate_price_impact(
        self,
        amount: float,
        current_price: float,
        virtual_base_reserves: float,
        virtual_supply_reserves: float,
        direction: Direction,
        *,
        actor: str | None = None,
    ) -> PriceImpactCheck:
        after = post_trade_reserves(amount, virtual_base_reserves, virtual_supply_reserves, direction)
        if not math.isfinite(after.price) or after.price <= 0:
            raise ValueError(
                f"Post-trade price is not a positive finite number: {after.price!r}"
            )
        impact = price_impact(current_price, after.price)

        valid = True
        reason: str | None = None
        code: str | None = None

        if impact > self.config.max_price_impact:
            valid = False
            reason = price_impact_message(impact, self.config.max_price_impact)
            code = RejectReason.PRICE_IMPACT_TOO_HIGH

        if impact > self.config.emergency_pause_threshold:
            reason = emergency_pause_message(impact, self.config.emergency_pause_threshold)
            if actor is None:
                self._pause.trigger(reason)
            else:
                self._pause.trigger(f"{reason} ({direction} {amount:g})", actor=actor)
            return PriceImpactCheck(
                price_impact=impact,
                new_price=after.price,
                valid=False,
                reason=reason,
                code=RejectReason.EMERGENCY_PAUSE_TRIGGERED,
                pause_triggered=True,
            )

        return PriceImpactCheck(
            price_impact=impact,
            new_price=after.price,
            valid=valid,
            reason=reason,
            code=code,
        )
