"""Shared fixtures for the semantic test suites."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from curve_guard.core.domain.types import TradeRequest

ACTOR_A = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
ACTOR_B = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"

NS_PER_SECOND = 1_000_000_000

# 2026-01-01T00:00:00Z, well inside one UTC day for the default tests
START_TS_NS = 1_767_225_600 * NS_PER_SECOND


class ManualClock:
    """Deterministic nanosecond clock advanced explicitly by tests."""

    def __init__(self, start_ns: int = START_TS_NS) -> None:
        self.now_ns = start_ns

    def __call__(self) -> int:
        return self.now_ns

    def advance(self, seconds: float) -> None:
        self.now_ns += int(seconds * NS_PER_SECOND)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def make_request() -> Callable[..., TradeRequest]:
    """Factory for a small, admissible buy against a deep pool."""

    def _make(**overrides: Any) -> TradeRequest:
        fields: dict[str, Any] = {
            "actor": ACTOR_A,
            "amount": 1.0,
            "direction": "buy",
            "current_price": 1.0,
            "virtual_base_reserves": 1_000_000.0,
            "virtual_supply_reserves": 1_000_000.0,
            "total_liquidity": 1000.0,
        }
        fields.update(overrides)
        return TradeRequest(**fields)

    return _make
