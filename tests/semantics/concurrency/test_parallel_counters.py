"""
Semantic test: shared counters survive parallel request handlers.

Invariant:
start_trade / end_trade and rate-limit checks from many threads lose no
updates.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from curve_guard.core.domain.keyed_store import KeyedStore
from curve_guard.core.risk.concurrency_guard import ConcurrencyGuard
from curve_guard.core.risk.rate_limiter import MINUTE_WINDOW, RateLimiter
from curve_guard.core.risk.security_config import SecurityConfig

ACTOR = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
WORKERS = 8
PER_WORKER = 500


def test_parallel_start_then_end_balances() -> None:
    guard = ConcurrencyGuard(SecurityConfig())

    def _start(_: int) -> None:
        for _ in range(PER_WORKER):
            guard.start_trade(ACTOR)

    def _end(_: int) -> None:
        for _ in range(PER_WORKER):
            guard.end_trade(ACTOR)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(_start, range(WORKERS)))
    assert guard.in_flight(ACTOR) == WORKERS * PER_WORKER

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(_end, range(WORKERS)))
    assert guard.in_flight(ACTOR) == 0
    assert guard.total_in_flight() == 0


def test_parallel_rate_checks_admit_exactly_the_cap(clock) -> None:
    cap = 50
    limiter = RateLimiter(
        SecurityConfig(rate_limit_per_minute=cap, rate_limit_per_hour=10 * cap),
        clock=clock,
    )

    def _hit(_: int) -> int:
        return sum(1 for _ in range(20) if limiter.check_rate_limit(ACTOR).allowed)

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        allowed = sum(pool.map(_hit, range(WORKERS)))

    assert allowed == cap
    window = limiter.get_window(ACTOR, MINUTE_WINDOW)
    assert window is not None and window.count == cap


def test_keyed_store_compute_is_atomic() -> None:
    store: KeyedStore[str, int] = KeyedStore(shards=4)

    def _bump(_: int) -> None:
        for i in range(PER_WORKER):
            store.compute(f"k{i % 3}", lambda cur: ((cur or 0) + 1, None))

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        list(pool.map(_bump, range(WORKERS)))

    assert sum(store.snapshot().values()) == WORKERS * PER_WORKER
    assert len(store) == 3
    assert store.remove_if(lambda key, _value: key == "k0") == 1
    assert store.get("k0") is None
