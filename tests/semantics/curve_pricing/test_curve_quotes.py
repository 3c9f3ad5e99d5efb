"""
Semantic test: exact constant-product quotes and price-at-supply.

These are the precise curve outputs; the engine's estimated_output is a
spot-price approximation and is expected to differ from them.
"""

from __future__ import annotations

import pytest

from curve_guard.core.domain.curve import (
    CurveFees,
    price_at_supply,
    price_chart,
    quote_buy,
    quote_sell,
)
from curve_guard.core.risk.security_config import SecurityConfig
from curve_guard.core.risk.security_engine import TradeSecurityEngine


def test_buy_quote_output_and_fees() -> None:
    quote = quote_buy(10.0, 100.0, 100.0, 1.0)

    assert quote.output_amount == pytest.approx(100 - 10_000 / 110)
    assert quote.price_after == pytest.approx(1.21)
    assert quote.price_impact == pytest.approx(0.21)
    assert quote.fee == pytest.approx(0.1)
    assert quote.creator_fee == pytest.approx(0.05)
    assert quote.platform_fee == pytest.approx(0.05)
    assert quote.net_amount == pytest.approx(9.8)


def test_sell_quote_charges_fees_on_output() -> None:
    quote = quote_sell(10.0, 100.0, 100.0, 1.0, CurveFees(fee=0.02, creator_fee=0.0, platform_fee=0.0))

    output = 100 - 10_000 / 110
    assert quote.output_amount == pytest.approx(output)
    assert quote.fee == pytest.approx(output * 0.02)
    assert quote.net_amount == pytest.approx(output * 0.98)


def test_price_at_supply_and_chart() -> None:
    assert price_at_supply(100.0, 100.0, 0.0) == pytest.approx(1.0)
    assert price_at_supply(100.0, 100.0, 50.0) == pytest.approx(4.0)

    chart = price_chart(100.0, 100.0, 50.0, points=4)
    assert len(chart) == 5
    assert chart[0] == (0.0, pytest.approx(1.0))
    assert chart[-1] == (50.0, pytest.approx(4.0))
    prices = [p for _, p in chart]
    assert prices == sorted(prices)

    with pytest.raises(ValueError):
        price_at_supply(100.0, 100.0, 100.0)


def test_engine_estimate_differs_from_exact_quote(make_request) -> None:
    engine = TradeSecurityEngine(
        SecurityConfig(max_price_impact=0.3, emergency_pause_threshold=0.5)
    )
    request = make_request(
        amount=10.0,
        virtual_base_reserves=100.0,
        virtual_supply_reserves=100.0,
    )

    result = engine.validate_trade(request)
    quote = engine.quote(request)

    assert result.estimated_output == pytest.approx(10.0)
    assert quote.output_amount == pytest.approx(100 - 10_000 / 110)
    assert quote.output_amount < result.estimated_output
