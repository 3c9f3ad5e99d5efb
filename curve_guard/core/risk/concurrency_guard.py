"""Per-actor in-flight trade accounting.

``check_concurrent_trades`` only inspects the counter. Callers bracket every
admitted trade with ``start_trade`` / ``end_trade`` (success, failure, or
cancellation alike); ``end_trade`` never drives a counter below zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from curve_guard.core.domain.keyed_store import KeyedStore
from curve_guard.core.domain.reject_reasons import concurrent_limit_message

if TYPE_CHECKING:
    from curve_guard.core.risk.security_config import SecurityConfig


@dataclass(frozen=True, slots=True)
class ConcurrencyCheck:
    allowed: bool
    in_flight: int
    reason: str | None = None


class ConcurrencyGuard:
    """Bounded count of simultaneously in-flight trades per actor."""

    def __init__(
        self,
        config: SecurityConfig,
        *,
        store: KeyedStore[str, int] | None = None,
    ) -> None:
        self.config = config
        self._store: KeyedStore[str, int] = store if store is not None else KeyedStore()

    def check_concurrent_trades(self, actor: str) -> ConcurrencyCheck:
        in_flight = self.in_flight(actor)
        limit = self.config.max_concurrent_trades_per_actor
        if in_flight >= limit:
            return ConcurrencyCheck(
                allowed=False,
                in_flight=in_flight,
                reason=concurrent_limit_message(limit),
            )
        return ConcurrencyCheck(allowed=True, in_flight=in_flight)

    def start_trade(self, actor: str) -> int:
        """Increment the actor's in-flight count; return the new value."""
        return self._store.compute(actor, lambda cur: ((cur or 0) + 1, (cur or 0) + 1))

    def end_trade(self, actor: str) -> int:
        """Decrement the actor's in-flight count (floored at zero); return the new value."""

        def _dec(cur: int | None) -> tuple[int | None, int]:
            remaining = max(0, (cur or 0) - 1)
            # zero counters are dropped so idle actors cost no memory
            return (remaining or None), remaining

        return self._store.compute(actor, _dec)

    def in_flight(self, actor: str) -> int:
        return self._store.get(actor) or 0

    def total_in_flight(self) -> int:
        return sum(self._store.snapshot().values())
