"""Trade notional bounds relative to pool liquidity.

The lower bound guards against dust spam, the upper bound against a single
trade moving a thin pool. ``direction`` is accepted for interface symmetry but
the bounds are deliberately identical for buys and sells; asymmetric bounds
would change the security posture and need an explicit product decision.
"""

from __future__ import annotations

from dataclasses import dataclass

from curve_guard.core.domain.reject_reasons import (
    RejectReason,
    trade_too_large_message,
    trade_too_small_message,
)
from curve_guard.core.domain.types import Direction


@dataclass(frozen=True, slots=True)
class TradeSizeCheck:
    valid: bool
    min_size: float
    max_size: float
    reason: str | None = None
    code: str | None = None


# pylint: disable=unused-argument
def validate_trade_size(
    amount: float,
    total_liquidity: float,
    direction: Direction,
    *,
    min_fraction: float,
    max_fraction: float,
) -> TradeSizeCheck:
    """Check ``amount`` against ``[liquidity * min_fraction, liquidity * max_fraction]``."""
    min_size = total_liquidity * min_fraction
    max_size = total_liquidity * max_fraction

    if amount < min_size:
        return TradeSizeCheck(
            valid=False,
            min_size=min_size,
            max_size=max_size,
            reason=trade_too_small_message(amount, min_size),
            code=RejectReason.TRADE_TOO_SMALL,
        )
    if amount > max_size:
        return TradeSizeCheck(
            valid=False,
            min_size=min_size,
            max_size=max_size,
            reason=trade_too_large_message(amount, max_size),
            code=RejectReason.TRADE_TOO_LARGE,
        )
    return TradeSizeCheck(valid=True, min_size=min_size, max_size=max_size)
