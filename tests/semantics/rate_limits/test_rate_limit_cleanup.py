"""
Semantic test: cleanup only evicts fully expired actors.

Invariant:
cleanup() bounds memory without changing admission outcomes.
"""

from __future__ import annotations

from curve_guard.core.risk.rate_limiter import RateLimiter
from curve_guard.core.risk.security_config import SecurityConfig

ACTOR_A = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
ACTOR_B = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


def test_cleanup_evicts_only_expired_actors(clock) -> None:
    limiter = RateLimiter(SecurityConfig(), clock=clock)

    limiter.check_rate_limit(ACTOR_A)
    clock.advance(3000)
    limiter.check_rate_limit(ACTOR_B)

    # A's hour window expires at t=3600, B's at t=6600.
    clock.advance(700)
    assert limiter.cleanup() == 1
    assert limiter.tracked_actors() == 1
    assert limiter.get_window(ACTOR_A, "minute") is None
    assert limiter.get_window(ACTOR_B, "hour") is not None


def test_cleanup_does_not_change_outcomes(clock) -> None:
    limiter = RateLimiter(
        SecurityConfig(rate_limit_per_minute=1, rate_limit_per_hour=100),
        clock=clock,
    )

    assert limiter.check_rate_limit(ACTOR_A).allowed
    assert limiter.cleanup() == 0
    assert not limiter.check_rate_limit(ACTOR_A).allowed
