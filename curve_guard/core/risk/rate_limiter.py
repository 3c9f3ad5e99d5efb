"""Per-actor fixed-window rate limiting.

Every actor has two independent windows: 60 seconds capped at
``rate_limit_per_minute`` and 3600 seconds capped at ``rate_limit_per_hour``.
A call must pass both. Windows are checked in order (minute, then hour) and the
increments are committed only when every window allows the call, so a
rejected call charges neither window.

Once a window is at its cap, further calls are rejected without incrementing
the count. An expired window is replaced by a fresh one (count 1) on the next
call, so expiry needs no background task; ``cleanup`` only bounds memory.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from curve_guard.core.domain.keyed_store import KeyedStore
from curve_guard.core.domain.reject_reasons import rate_limit_message

if TYPE_CHECKING:
    from curve_guard.core.risk.security_config import SecurityConfig

NS_PER_SECOND = 1_000_000_000

MINUTE_WINDOW = "minute"
HOUR_WINDOW = "hour"

WINDOW_SECONDS: dict[str, int] = {
    MINUTE_WINDOW: 60,
    HOUR_WINDOW: 3600,
}


@dataclass(frozen=True, slots=True)
class RateLimitWindow:
    count: int
    reset_at_ns: int


@dataclass(frozen=True, slots=True)
class RateLimitCheck:
    allowed: bool
    reason: str | None = None
    window: str | None = None


ActorWindows = dict[str, RateLimitWindow]


class RateLimiter:
    """Fixed-window attempt counter keyed by actor."""

    def __init__(
        self,
        config: SecurityConfig,
        *,
        clock: Callable[[], int] = time.time_ns,
        store: KeyedStore[str, ActorWindows] | None = None,
    ) -> None:
        self.config = config
        self._clock = clock
        self._store: KeyedStore[str, ActorWindows] = store if store is not None else KeyedStore()

    def _caps(self) -> tuple[tuple[str, int], ...]:
        return (
            (MINUTE_WINDOW, self.config.rate_limit_per_minute),
            (HOUR_WINDOW, self.config.rate_limit_per_hour),
        )

    def check_rate_limit(self, actor: str) -> RateLimitCheck:
        """Count one attempt by ``actor`` and report whether it is allowed."""
        now = self._clock()
        caps = self._caps()

        def _apply(current: ActorWindows | None) -> tuple[ActorWindows | None, RateLimitCheck]:
            windows = dict(current) if current is not None else {}
            for name, cap in caps:
                window = windows.get(name)
                if window is None or now >= window.reset_at_ns:
                    windows[name] = RateLimitWindow(
                        count=1,
                        reset_at_ns=now + WINDOW_SECONDS[name] * NS_PER_SECOND,
                    )
                    continue

                if window.count >= cap:
                    return current, RateLimitCheck(
                        allowed=False,
                        reason=rate_limit_message(cap, name),
                        window=name,
                    )

                windows[name] = RateLimitWindow(count=window.count + 1, reset_at_ns=window.reset_at_ns)
            return windows, RateLimitCheck(allowed=True)

        return self._store.compute(actor, _apply)

    def get_window(self, actor: str, window: str) -> RateLimitWindow | None:
        """Current window state for inspection (None if absent)."""
        windows = self._store.get(actor)
        return None if windows is None else windows.get(window)

    def reset(self, actor: str) -> None:
        """Forget all windows of ``actor``."""
        self._store.pop(actor)

    def cleanup(self) -> int:
        """Evict actors whose windows have all expired. Returns the number evicted."""
        now = self._clock()
        return self._store.remove_if(
            lambda _actor, windows: all(now >= w.reset_at_ns for w in windows.values())
        )

    def tracked_actors(self) -> int:
        return len(self._store)
