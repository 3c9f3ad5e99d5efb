"""Constant-product bonding curve math.

The curve holds ``k = base_reserves * supply_reserves`` invariant across a
trade and prices the asset as ``base_reserves / supply_reserves``.

- buy:  base reserves grow by the amount, supply reserves shrink to keep k
- sell: supply reserves grow by the amount, base reserves shrink to keep k

Everything here is pure and side-effect free. Policy (limits, pauses) lives
in ``curve_guard.core.risk``.
"""

from __future__ import annotations

from dataclasses import dataclass

from curve_guard.core.domain.types import Direction


@dataclass(frozen=True, slots=True)
class PostTradeReserves:
    """Curve state after applying a trade."""

    base_reserves: float
    supply_reserves: float
    price: float


@dataclass(frozen=True, slots=True)
class CurveFees:
    """Fee fractions charged on the trade's base-asset side."""

    fee: float = 0.01
    creator_fee: float = 0.005
    platform_fee: float = 0.005

    def total(self) -> float:
        return self.fee + self.creator_fee + self.platform_fee


@dataclass(frozen=True, slots=True)
class CurveQuote:
    """Exact constant-product quote for one trade."""

    direction: Direction
    input_amount: float
    output_amount: float
    price_before: float
    price_after: float
    price_impact: float

    fee: float
    creator_fee: float
    platform_fee: float
    net_amount: float


def _check_reserves(base_reserves: float, supply_reserves: float) -> None:
    if base_reserves <= 0 or supply_reserves <= 0:
        raise ValueError("virtual reserves must be positive")


def post_trade_reserves(
    amount: float,
    base_reserves: float,
    supply_reserves: float,
    direction: Direction,
) -> PostTradeReserves:
    """Apply ``amount`` to the curve and return the resulting reserves and price."""
    _check_reserves(base_reserves, supply_reserves)

    # scale by the reserve ratio instead of forming k, which overflows for huge reserves
    if direction == "buy":
        new_base = base_reserves + amount
        new_supply = supply_reserves * (base_reserves / new_base)
    elif direction == "sell":
        new_supply = supply_reserves + amount
        new_base = base_reserves * (supply_reserves / new_supply)
    else:
        raise ValueError(f"Invalid direction: {direction}")

    return PostTradeReserves(
        base_reserves=new_base,
        supply_reserves=new_supply,
        price=new_base / new_supply,
    )


def price_impact(current_price: float, new_price: float) -> float:
    """Fractional absolute price move relative to ``current_price``."""
    if current_price <= 0:
        raise ValueError("current_price must be positive")
    return abs(new_price - current_price) / current_price


def _split_fees(gross: float, fees: CurveFees) -> tuple[float, float, float, float]:
    fee = gross * fees.fee
    creator_fee = gross * fees.creator_fee
    platform_fee = gross * fees.platform_fee
    return fee, creator_fee, platform_fee, gross - fee - creator_fee - platform_fee


def quote_buy(
    amount: float,
    base_reserves: float,
    supply_reserves: float,
    current_price: float,
    fees: CurveFees | None = None,
) -> CurveQuote:
    """Quote spending ``amount`` of the base asset.

    Fees are charged on the base-asset input; ``net_amount`` is the input left
    after fees.
    """
    fees = fees or CurveFees()
    after = post_trade_reserves(amount, base_reserves, supply_reserves, "buy")
    fee, creator_fee, platform_fee, net = _split_fees(amount, fees)

    return CurveQuote(
        direction="buy",
        input_amount=amount,
        output_amount=supply_reserves - after.supply_reserves,
        price_before=current_price,
        price_after=after.price,
        price_impact=price_impact(current_price, after.price),
        fee=fee,
        creator_fee=creator_fee,
        platform_fee=platform_fee,
        net_amount=net,
    )


def quote_sell(
    amount: float,
    base_reserves: float,
    supply_reserves: float,
    current_price: float,
    fees: CurveFees | None = None,
) -> CurveQuote:
    """Quote selling ``amount`` of the asset back into the curve.

    Fees are charged on the base-asset output; ``net_amount`` is what the
    seller receives.
    """
    fees = fees or CurveFees()
    after = post_trade_reserves(amount, base_reserves, supply_reserves, "sell")
    output = base_reserves - after.base_reserves
    fee, creator_fee, platform_fee, net = _split_fees(output, fees)

    return CurveQuote(
        direction="sell",
        input_amount=amount,
        output_amount=output,
        price_before=current_price,
        price_after=after.price,
        price_impact=price_impact(current_price, after.price),
        fee=fee,
        creator_fee=creator_fee,
        platform_fee=platform_fee,
        net_amount=net,
    )


def price_at_supply(base_reserves: float, supply_reserves: float, minted: float) -> float:
    """Spot price once ``minted`` units have left the virtual supply."""
    _check_reserves(base_reserves, supply_reserves)
    remaining = supply_reserves - minted
    if remaining <= 0:
        raise ValueError("minted must be smaller than the virtual supply")
    return base_reserves * (supply_reserves / remaining) / remaining


def price_chart(
    base_reserves: float,
    supply_reserves: float,
    max_supply: float,
    points: int = 100,
) -> list[tuple[float, float]]:
    """Return ``points + 1`` evenly spaced ``(supply, price)`` samples."""
    if points <= 0:
        raise ValueError("points must be positive")
    step = max_supply / points
    return [
        (i * step, price_at_supply(base_reserves, supply_reserves, i * step))
        for i in range(points + 1)
    ]
