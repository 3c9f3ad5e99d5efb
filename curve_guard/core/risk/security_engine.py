"""Trade security engine: the admission gate in front of trade execution.

The engine decides, for every proposed buy/sell against the bonding curve,
whether it may proceed. It must NOT submit trades or move funds itself.

Caller contract:

1. ``validate_trade(request)``; stop if ``is_valid`` is False.
2. Bracket the actual submission with ``start_trade`` / ``end_trade``
   (or ``with engine.trade_slot(actor):``), including on failure or
   cancellation.
3. Optionally ``record_trade(actor, amount, total_liquidity=...)`` once the
   trade settles, which feeds the daily activity limits and arms the
   large-trade cooldown.

All state is in memory. A process restart resets rate limits, in-flight
counters, daily activity, alerts and the pause flag to their permissive
initial state; integrators that need the pause to survive restarts must
persist it themselves and re-trigger on boot.
"""

# pylint: disable=too-many-instance-attributes,too-many-public-methods
from __future__ import annotations

import logging
import math
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator

from curve_guard.core.domain import inputs
from curve_guard.core.domain.address import validate_wallet_address
from curve_guard.core.domain.curve import CurveFees, CurveQuote, quote_buy, quote_sell
from curve_guard.core.domain.reject_reasons import (
    INTERNAL_ERROR_MESSAGE,
    SYSTEM_PAUSED_MESSAGE,
    RejectReason,
    daily_trades_message,
    daily_volume_message,
    elevated_impact_warning,
    large_trade_cooldown_message,
    near_max_size_warning,
)
from curve_guard.core.domain.types import TradeValidationResult
from curve_guard.core.events.event_bus import EventBus
from curve_guard.core.risk.activity import ActivityTracker, ActorActivity, SuspiciousActor
from curve_guard.core.risk.alerts import AlertManager
from curve_guard.core.risk.audit_log import AuditLog
from curve_guard.core.risk.concurrency_guard import ConcurrencyGuard
from curve_guard.core.risk.emergency_pause import ADMIN_ACTOR, EmergencyPauseController
from curve_guard.core.risk.price_impact import PriceImpactCalculator
from curve_guard.core.risk.rate_limiter import NS_PER_SECOND, RateLimiter
from curve_guard.core.risk.security_config import SecurityConfig
from curve_guard.core.risk.trade_size import validate_trade_size

if TYPE_CHECKING:
    from curve_guard.core.domain.inputs import NumericCheck, TextCheck
    from curve_guard.core.domain.types import TradeRequest
    from curve_guard.core.events.events import SecurityAlert, SecurityEvent

LOGGER = logging.getLogger(__name__)

# Non-blocking warning thresholds, as fractions of the corresponding hard limit.
ELEVATED_IMPACT_FRACTION = 0.5
NEAR_MAX_SIZE_FRACTION = 0.8
# Trades above this fraction of the maximum size are subject to the cooldown.
LARGE_TRADE_FRACTION = 0.5


@dataclass(frozen=True, slots=True)
class SecurityStats:
    total_events: int
    critical_events: int
    high_severity_events: int
    emergency_paused: bool
    pause_reason: str | None
    active_trades: int
    rate_limit_violations: int
    active_alerts: int
    events_by_severity: dict[str, int] = field(default_factory=dict)
    events_by_category: dict[str, int] = field(default_factory=dict)


class TradeSecurityEngine:
    """Composes address, rate, concurrency, size, daily-activity and price-impact checks."""

    def __init__(
        self,
        config: SecurityConfig | None = None,
        *,
        event_bus: EventBus | None = None,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self._config = config if config is not None else SecurityConfig()
        self._event_bus = event_bus if event_bus is not None else EventBus()
        self._config_lock = threading.Lock()

        self.alerts = AlertManager(clock=clock)
        self._event_bus.register(self.alerts)

        self.audit_log = AuditLog(
            self._config.audit_log_capacity,
            enabled=self._config.audit_logging,
            event_bus=self._event_bus,
            clock=clock,
        )
        self.pause_controller = EmergencyPauseController(self.audit_log, clock=clock)
        self.rate_limiter = RateLimiter(self._config, clock=clock)
        self.concurrency_guard = ConcurrencyGuard(self._config)
        self.price_impact_calculator = PriceImpactCalculator(self._config, self.pause_controller)
        self.activity = ActivityTracker(clock=clock)

    # ---------------------------------------------------------------------
    # Configuration
    # ---------------------------------------------------------------------

    @property
    def config(self) -> SecurityConfig:
        return self._config

    def reconfigure(self, config: SecurityConfig) -> None:
        """Switch every component to ``config``. Per-actor state is kept."""
        with self._config_lock:
            self._config = config
            self.rate_limiter.config = config
            self.concurrency_guard.config = config
            self.price_impact_calculator.config = config
            self.audit_log.enabled = config.audit_logging
            if config.audit_log_capacity != self.audit_log.capacity:
                self.audit_log.resize(config.audit_log_capacity)

        self.audit_log.record(
            category="admin",
            severity="medium",
            actor=ADMIN_ACTOR,
            action="config_updated",
            detail="Security configuration updated",
        )

    # ---------------------------------------------------------------------
    # Validation
    # ---------------------------------------------------------------------

    def validate_trade(self, request: TradeRequest) -> TradeValidationResult:
        """Decide whether ``request`` may proceed. Never raises."""
        try:
            return self._validate(request)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Trade validation failed", extra={"actor": getattr(request, "actor", None)})
            self._record_internal_error(request, exc)
            return TradeValidationResult.rejected(INTERNAL_ERROR_MESSAGE)

    # pylint: disable=too-many-locals,too-many-branches
    def _validate(self, request: TradeRequest) -> TradeValidationResult:
        cfg = self._config
        actor = request.actor

        # --- Emergency pause short-circuit ---
        if self.pause_controller.is_paused:
            self.audit_log.record(
                category="trade",
                severity="high",
                actor=actor,
                action=RejectReason.SYSTEM_PAUSED,
                detail=SYSTEM_PAUSED_MESSAGE,
                amount=request.amount,
                metadata=request.metadata,
            )
            return TradeValidationResult.rejected(SYSTEM_PAUSED_MESSAGE)

        errors: list[str] = []
        warnings: list[str] = []

        # 1) Address
        address = validate_wallet_address(actor)
        if not address.valid:
            errors.append(address.reason or "Invalid wallet address")
            self._record_rejection(request, RejectReason.INVALID_ADDRESS, address.reason, severity="medium")

        # 2) Rate limits
        rate = self.rate_limiter.check_rate_limit(actor)
        if not rate.allowed:
            errors.append(rate.reason or "Rate limit exceeded")
            self._record_rejection(request, RejectReason.RATE_LIMIT_EXCEEDED, rate.reason)

        # 3) Concurrency (inspect only; start_trade increments)
        concurrency = self.concurrency_guard.check_concurrent_trades(actor)
        if not concurrency.allowed:
            errors.append(concurrency.reason or "Too many concurrent trades")
            self._record_rejection(request, RejectReason.CONCURRENT_LIMIT_EXCEEDED, concurrency.reason)

        # 4) Trade size
        size = validate_trade_size(
            request.amount,
            request.total_liquidity,
            request.direction,
            min_fraction=cfg.min_trade_size_fraction,
            max_fraction=cfg.max_trade_size_fraction,
        )
        if not size.valid:
            errors.append(size.reason or "Invalid trade size")
        elif size.max_size > 0 and request.amount >= size.max_size * NEAR_MAX_SIZE_FRACTION:
            warnings.append(near_max_size_warning(request.amount, size.max_size))

        # 5) Daily activity and large-trade cooldown
        cooldown_ns = cfg.large_trade_cooldown_seconds * NS_PER_SECOND
        if size.valid and cooldown_ns > 0 and request.amount > size.max_size * LARGE_TRADE_FRACTION:
            remaining_ns = self.activity.cooldown_remaining_ns(actor, cooldown_ns)
            if remaining_ns > 0:
                cooldown_reason = large_trade_cooldown_message(math.ceil(remaining_ns / NS_PER_SECOND))
                errors.append(cooldown_reason)
                self._record_rejection(
                    request, RejectReason.LARGE_TRADE_COOLDOWN, cooldown_reason, severity="medium"
                )

        volume_today, trades_today = self.activity.daily_totals(actor)
        if cfg.max_daily_volume_per_actor is not None:
            if volume_today + request.amount > cfg.max_daily_volume_per_actor:
                errors.append(
                    daily_volume_message(volume_today, request.amount, cfg.max_daily_volume_per_actor)
                )
        if cfg.max_daily_trades_per_actor is not None:
            if trades_today >= cfg.max_daily_trades_per_actor:
                errors.append(daily_trades_message(cfg.max_daily_trades_per_actor))

        # 6) Price impact (may trigger the global pause)
        impact = self.price_impact_calculator.calculate_price_impact(
            request.amount,
            request.current_price,
            request.virtual_base_reserves,
            request.virtual_supply_reserves,
            request.direction,
            actor=actor,
        )
        if not impact.valid:
            errors.append(impact.reason or "Price impact too high")
        elif impact.price_impact > cfg.max_price_impact * ELEVATED_IMPACT_FRACTION:
            warnings.append(elevated_impact_warning(impact.price_impact))

        # 7) Outcome record
        is_valid = not errors
        self.audit_log.record(
            category="trade",
            severity="medium" if is_valid else "high",
            actor=actor,
            action="trade_validated" if is_valid else "trade_rejected",
            detail=(
                f"{request.direction} {request.amount:g} "
                f"impact={impact.price_impact:.4f} "
                + ("accepted" if is_valid else "rejected: " + "; ".join(errors))
            ),
            amount=request.amount,
            metadata=request.metadata,
        )

        # 8) Spot-price estimate (not the exact curve output; see quote())
        if request.is_buy():
            estimated_output = request.amount / request.current_price
        else:
            estimated_output = request.amount * request.current_price

        return TradeValidationResult(
            is_valid=is_valid,
            errors=errors,
            warnings=warnings,
            price_impact=impact.price_impact,
            slippage=impact.price_impact,
            estimated_output=estimated_output,
        )

    def _record_rejection(
        self,
        request: TradeRequest,
        action: str,
        detail: str | None,
        *,
        severity: str = "high",
    ) -> None:
        self.audit_log.record(
            category="security",
            severity=severity,  # type: ignore[arg-type]
            actor=request.actor,
            action=action,
            detail=detail or action,
            amount=request.amount,
            metadata=request.metadata,
        )

    def _record_internal_error(self, request: object, exc: Exception) -> None:
        try:
            self.audit_log.record(
                category="error",
                severity="critical",
                actor=str(getattr(request, "actor", "unknown")),
                action=RejectReason.INTERNAL_ERROR,
                detail=f"{type(exc).__name__}: {exc}",
                amount=getattr(request, "amount", None),
            )
        except Exception:  # pylint: disable=broad-exception-caught
            LOGGER.exception("Failed to audit internal validation error")

    def quote(self, request: TradeRequest, fees: CurveFees | None = None) -> CurveQuote:
        """Exact constant-product quote for ``request`` (pure, no admission checks)."""
        quote_fn = quote_buy if request.is_buy() else quote_sell
        return quote_fn(
            request.amount,
            request.virtual_base_reserves,
            request.virtual_supply_reserves,
            request.current_price,
            fees,
        )

    # ---------------------------------------------------------------------
    # In-flight accounting
    # ---------------------------------------------------------------------

    def start_trade(self, actor: str) -> int:
        return self.concurrency_guard.start_trade(actor)

    def end_trade(self, actor: str) -> int:
        return self.concurrency_guard.end_trade(actor)

    @contextmanager
    def trade_slot(self, actor: str) -> Iterator[None]:
        """Hold one in-flight slot for ``actor`` for the duration of the block."""
        self.start_trade(actor)
        try:
            yield
        finally:
            self.end_trade(actor)

    # ---------------------------------------------------------------------
    # Emergency pause (administrative)
    # ---------------------------------------------------------------------

    @property
    def is_paused(self) -> bool:
        return self.pause_controller.is_paused

    def trigger_emergency_pause(self, reason: str) -> bool:
        return self.pause_controller.trigger(inputs.sanitize_input(reason) or "manual trigger")

    def release_emergency_pause(self, reason: str) -> bool:
        return self.pause_controller.release(inputs.sanitize_input(reason) or "manual release")

    # ---------------------------------------------------------------------
    # Daily activity
    # ---------------------------------------------------------------------

    def record_trade(
        self,
        actor: str,
        amount: float,
        total_liquidity: float | None = None,
    ) -> ActorActivity:
        """Register a settled trade against the actor's daily totals.

        With ``total_liquidity`` given, a trade above half the maximum trade
        size for that pool arms the actor's large-trade cooldown.
        """
        large = (
            total_liquidity is not None
            and amount > self._config.max_trade_size_fraction * total_liquidity * LARGE_TRADE_FRACTION
        )
        return self.activity.record_trade(actor, amount, large=large)

    def pause_actor(self, actor: str, reason: str = "manual pause") -> ActorActivity:
        """Arm ``actor``'s large-trade cooldown starting now.

        Large trades by the actor are refused for the configured cooldown
        period; the flag itself lasts until the end of the UTC day or
        ``reset_actor_limits``.
        """
        detail = inputs.sanitize_input(reason) or "manual pause"
        activity = self.activity.force_cooldown(actor)
        LOGGER.warning("Actor paused", extra={"actor": actor, "reason": detail})
        self.audit_log.record(
            category="admin",
            severity="high",
            actor=actor,
            action="actor_paused",
            detail=detail,
        )
        return activity

    def get_actor_activity(self, actor: str) -> ActorActivity | None:
        return self.activity.get(actor)

    def get_suspicious_actors(self) -> list[SuspiciousActor]:
        return self.activity.suspicious_actors()

    def reset_actor_limits(self, actor: str, reason: str = "manual reset") -> None:
        """Clear rate-limit windows and daily activity for ``actor``.

        In-flight counters are left alone: they track trades that are still
        executing.
        """
        self.rate_limiter.reset(actor)
        self.activity.reset(actor)
        self.audit_log.record(
            category="admin",
            severity="medium",
            actor=actor,
            action="actor_limits_reset",
            detail=inputs.sanitize_input(reason) or "manual reset",
        )

    def cleanup_rate_limits(self) -> int:
        evicted = self.rate_limiter.cleanup()
        LOGGER.debug("Rate limit cleanup", extra={"evicted": evicted})
        return evicted

    # ---------------------------------------------------------------------
    # Audit and monitoring
    # ---------------------------------------------------------------------

    def get_security_events(self, limit: int = 50) -> list[SecurityEvent]:
        return self.audit_log.get_recent(limit)

    def get_security_stats(self) -> SecurityStats:
        summary = self.audit_log.summarize()
        pause = self.pause_controller.state
        return SecurityStats(
            total_events=summary.total,
            critical_events=summary.critical,
            high_severity_events=summary.high,
            emergency_paused=pause.paused,
            pause_reason=pause.reason,
            active_trades=self.concurrency_guard.total_in_flight(),
            rate_limit_violations=summary.rate_limit_violations,
            active_alerts=len(self.alerts.get_active_alerts()),
            events_by_severity=summary.by_severity,
            events_by_category=summary.by_category,
        )

    def get_active_alerts(self) -> list[SecurityAlert]:
        return self.alerts.get_active_alerts()

    def acknowledge_alert(self, alert_id: str, acknowledged_by: str) -> bool:
        return self.alerts.acknowledge_alert(alert_id, acknowledged_by)

    # ---------------------------------------------------------------------
    # Input hygiene
    # ---------------------------------------------------------------------

    @staticmethod
    def sanitize_input(text: str, max_length: int = inputs.DEFAULT_MAX_TEXT_LENGTH) -> str:
        return inputs.sanitize_input(text, max_length)

    @staticmethod
    def validate_numeric_input(value: object, min_value: float, max_value: float) -> NumericCheck:
        return inputs.validate_numeric_input(value, min_value, max_value)

    @staticmethod
    def validate_text_input(text: str, max_length: int = inputs.DEFAULT_MAX_TEXT_LENGTH) -> TextCheck:
        return inputs.validate_text_input(text, max_length)

    def close(self) -> None:
        """Finalize event sinks (e.g. flush file recorders)."""
        self._event_bus.close()
