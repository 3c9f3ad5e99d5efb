"""Core shared data models and schemas.

This module defines the canonical Pydantic models exchanged with the trade
execution path: the trade request consumed by the security engine and the
verdict returned to the caller. These types are treated as schema definitions
and mirror the JSON Schemas under ``curve_guard/core/schemas``.
"""

# pylint: disable=line-too-long,missing-class-docstring,missing-function-docstring
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Common aliases
# ---------------------------------------------------------------------------

Direction = Literal["buy", "sell"]

EventCategory = Literal["trade", "mint", "reveal", "admin", "error", "security"]
Severity = Literal["low", "medium", "high", "critical"]

SEVERITY_RANK: dict[str, int] = {
    "low": 0,
    "medium": 1,
    "high": 2,
    "critical": 3,
}


# ---------------------------------------------------------------------------
# Trade request (caller supplied, read-only for the engine)
# ---------------------------------------------------------------------------


class RequestMetadata(BaseModel):
    """Optional request provenance attached to audit events."""

    origin_address: str | None = Field(
        default=None,
        min_length=1,
        description="Network origin of the request (e.g. client IP address).",
    )
    client_signature: str | None = Field(
        default=None,
        min_length=1,
        description="Client identification string (e.g. user agent).",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class TradeRequest(BaseModel):
    """
    A proposed trade against the bonding curve, together with the pool snapshot
    it should be evaluated against.

    Notes:
    - actor is validated by the engine (address alphabet/length), not here, so
      that a malformed address produces a readable rejection instead of a
      construction error.
    - amount is expressed in the pool's base unit for both directions.
    """

    actor: str = Field(
        ...,
        description="Actor (wallet) identifier submitting the trade.",
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Trade amount in the pool's base unit.",
    )
    direction: Direction = Field(..., description="Trade direction.")
    current_price: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Spot price before the trade.",
    )
    virtual_base_reserves: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Virtual base-asset reserves feeding the constant-product curve.",
    )
    virtual_supply_reserves: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Virtual asset-supply reserves feeding the constant-product curve.",
    )
    total_liquidity: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Total pool liquidity used to bound trade size.",
    )
    metadata: RequestMetadata | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    def is_buy(self) -> bool:
        return self.direction == "buy"


# ---------------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------------


class TradeValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    price_impact: float = Field(default=0.0, ge=0)
    # Slippage equals price impact in the constant-product model.
    slippage: float = Field(default=0.0, ge=0)
    # Spot-price estimate, not the exact curve output.
    estimated_output: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def rejected(cls, error: str) -> TradeValidationResult:
        """Single-error rejection with zeroed numeric fields."""
        return cls(
            is_valid=False,
            errors=[error],
            warnings=[],
            price_impact=0.0,
            slippage=0.0,
            estimated_output=0.0,
        )
