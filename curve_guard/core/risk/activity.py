"""Per-actor daily trading activity and suspicious-actor scoring.

Activity is recorded by the caller once a trade settles (``record_trade``);
validation only reads it. Days are UTC calendar days; the first trade of a new
day resets the counters and clears the large-trade cooldown flag.

A settled large trade arms the actor's cooldown. While armed, further large
trades are refused until the cooldown period has elapsed since the actor's
last recorded trade. ``force_cooldown`` arms it administratively.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from curve_guard.core.domain.keyed_store import KeyedStore

NS_PER_DAY = 86_400 * 1_000_000_000

# (threshold, points), checked highest first
VOLUME_SCORE_STEPS: tuple[tuple[float, int], ...] = ((50_000.0, 3), (25_000.0, 2), (10_000.0, 1))
TRADE_COUNT_SCORE_STEPS: tuple[tuple[int, int], ...] = ((50, 2), (20, 1))
COOLDOWN_SCORE = 1
SUSPICIOUS_SCORE = 3


@dataclass(frozen=True, slots=True)
class ActorActivity:
    actor: str
    day: int
    daily_volume: float
    daily_trade_count: int
    last_trade_ts_ns: int
    cooldown_active: bool = False


@dataclass(frozen=True, slots=True)
class SuspiciousActor:
    actor: str
    risk_score: int
    activity: ActorActivity


def _day(ts_ns: int) -> int:
    return ts_ns // NS_PER_DAY


def _score(activity: ActorActivity) -> int:
    score = 0
    for threshold, points in VOLUME_SCORE_STEPS:
        if activity.daily_volume > threshold:
            score += points
            break
    for count_threshold, points in TRADE_COUNT_SCORE_STEPS:
        if activity.daily_trade_count > count_threshold:
            score += points
            break
    if activity.cooldown_active:
        score += COOLDOWN_SCORE
    return score


class ActivityTracker:
    def __init__(
        self,
        *,
        clock: Callable[[], int] = time.time_ns,
        store: KeyedStore[str, ActorActivity] | None = None,
    ) -> None:
        self._clock = clock
        self._store: KeyedStore[str, ActorActivity] = store if store is not None else KeyedStore()

    def record_trade(self, actor: str, amount: float, *, large: bool = False) -> ActorActivity:
        """Add a settled trade of ``amount`` to today's totals for ``actor``.

        ``large`` arms the actor's cooldown for the rest of the day.
        """
        now = self._clock()
        today = _day(now)

        def _add(cur: ActorActivity | None) -> tuple[ActorActivity, ActorActivity]:
            if cur is None or cur.day != today:
                volume, count, cooldown = 0.0, 0, False
            else:
                volume, count, cooldown = cur.daily_volume, cur.daily_trade_count, cur.cooldown_active
            updated = ActorActivity(
                actor=actor,
                day=today,
                daily_volume=volume + amount,
                daily_trade_count=count + 1,
                last_trade_ts_ns=now,
                cooldown_active=cooldown or large,
            )
            return updated, updated

        return self._store.compute(actor, _add)

    def force_cooldown(self, actor: str) -> ActorActivity:
        """Arm ``actor``'s cooldown as if a large trade had just settled."""
        now = self._clock()
        today = _day(now)

        def _arm(cur: ActorActivity | None) -> tuple[ActorActivity, ActorActivity]:
            if cur is None or cur.day != today:
                volume, count = 0.0, 0
            else:
                volume, count = cur.daily_volume, cur.daily_trade_count
            armed = ActorActivity(
                actor=actor,
                day=today,
                daily_volume=volume,
                daily_trade_count=count,
                last_trade_ts_ns=now,
                cooldown_active=True,
            )
            return armed, armed

        return self._store.compute(actor, _arm)

    def cooldown_remaining_ns(self, actor: str, cooldown_ns: int) -> int:
        """Nanoseconds left on ``actor``'s large-trade cooldown; 0 when not active."""
        activity = self.get(actor)
        if activity is None or not activity.cooldown_active:
            return 0
        return max(0, activity.last_trade_ts_ns + cooldown_ns - self._clock())

    def get(self, actor: str) -> ActorActivity | None:
        """Today's activity for ``actor``; None if the actor has not traded today."""
        activity = self._store.get(actor)
        if activity is None or activity.day != _day(self._clock()):
            return None
        return activity

    def daily_totals(self, actor: str) -> tuple[float, int]:
        activity = self.get(actor)
        if activity is None:
            return 0.0, 0
        return activity.daily_volume, activity.daily_trade_count

    def reset(self, actor: str) -> None:
        self._store.pop(actor)

    def suspicious_actors(self) -> list[SuspiciousActor]:
        """Actors whose activity today scores at least ``SUSPICIOUS_SCORE``, highest first."""
        today = _day(self._clock())
        flagged: list[SuspiciousActor] = []
        for actor, activity in self._store.snapshot().items():
            if activity.day != today:
                continue
            score = _score(activity)
            if score >= SUSPICIOUS_SCORE:
                flagged.append(SuspiciousActor(actor=actor, risk_score=score, activity=activity))
        flagged.sort(key=lambda s: (-s.risk_score, s.actor))
        return flagged
