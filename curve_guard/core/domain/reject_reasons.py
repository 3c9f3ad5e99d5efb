"""Stable rejection reason codes and their human-readable messages.

Reason codes double as audit ``action`` labels, so dashboards can count
rejections per family without parsing free text.
"""

from __future__ import annotations


class RejectReason:
    """Reason codes for trade admission decisions."""

    SYSTEM_PAUSED = "system_paused"
    INVALID_ADDRESS = "invalid_address"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    CONCURRENT_LIMIT_EXCEEDED = "concurrent_limit_exceeded"
    TRADE_TOO_SMALL = "trade_too_small"
    TRADE_TOO_LARGE = "trade_too_large"
    PRICE_IMPACT_TOO_HIGH = "price_impact_too_high"
    EMERGENCY_PAUSE_TRIGGERED = "emergency_pause_triggered"
    DAILY_VOLUME_EXCEEDED = "daily_volume_exceeded"
    DAILY_TRADES_EXCEEDED = "daily_trades_exceeded"
    LARGE_TRADE_COOLDOWN = "large_trade_cooldown"
    INTERNAL_ERROR = "internal_error"


SYSTEM_PAUSED_MESSAGE = "System is paused due to security concerns. Trading is temporarily disabled."
INTERNAL_ERROR_MESSAGE = "Internal validation error. Please try again later."


def _pct(value: float) -> str:
    return f"{value * 100:.2f}%"


def rate_limit_message(limit: int, period: str) -> str:
    return f"Rate limit exceeded: maximum {limit} trades per {period}"


def concurrent_limit_message(limit: int) -> str:
    return f"Too many concurrent trades: maximum {limit} in flight per wallet"


def trade_too_small_message(amount: float, min_size: float) -> str:
    return f"Trade size {amount:g} is below the minimum of {min_size:g}"


def trade_too_large_message(amount: float, max_size: float) -> str:
    return f"Trade size {amount:g} exceeds the maximum of {max_size:g}"


def price_impact_message(price_impact: float, max_price_impact: float) -> str:
    return f"Price impact {_pct(price_impact)} exceeds maximum allowed {_pct(max_price_impact)}"


def emergency_pause_message(price_impact: float, threshold: float) -> str:
    return (
        f"Extreme price impact {_pct(price_impact)} exceeds emergency threshold "
        f"{_pct(threshold)}; trading has been paused"
    )


def daily_volume_message(current: float, amount: float, limit: float) -> str:
    return (
        f"Daily volume limit exceeded: {current:g} traded today, "
        f"{amount:g} requested, limit {limit:g}"
    )


def daily_trades_message(limit: int) -> str:
    return f"Daily trade limit exceeded: maximum {limit} trades per day"


def large_trade_cooldown_message(remaining_seconds: int) -> str:
    return f"Large trade cooldown active. Wait {remaining_seconds} seconds"


def elevated_impact_warning(price_impact: float) -> str:
    return f"Elevated price impact: {_pct(price_impact)}"


def near_max_size_warning(amount: float, max_size: float) -> str:
    return f"Trade size {amount:g} is close to the maximum of {max_size:g}"
