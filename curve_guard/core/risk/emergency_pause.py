"""Global emergency pause (kill switch).

Once triggered, every trade is refused until an administrator explicitly
releases the pause. There is no automatic resume.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from curve_guard.core.risk.audit_log import AuditLog

LOGGER = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"
ADMIN_ACTOR = "admin"


@dataclass(frozen=True, slots=True)
class PauseState:
    paused: bool
    reason: str | None = None
    since_ns: int | None = None


class EmergencyPauseController:
    """Holds the process-wide pause flag and writes its transitions to the audit log."""

    def __init__(
        self,
        audit_log: AuditLog,
        *,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self._audit_log = audit_log
        self._clock = clock
        self._lock = threading.Lock()
        self._state = PauseState(paused=False)

    @property
    def is_paused(self) -> bool:
        return self._state.paused

    @property
    def state(self) -> PauseState:
        return self._state

    def trigger(self, reason: str, *, actor: str = SYSTEM_ACTOR) -> bool:
        """Set the pause flag. Returns False if the system was already paused.

        A repeated trigger keeps the original reason but is still audited.
        """
        with self._lock:
            newly_paused = not self._state.paused
            if newly_paused:
                self._state = PauseState(paused=True, reason=reason, since_ns=self._clock())

        LOGGER.critical("Emergency pause triggered", extra={"reason": reason, "actor": actor})
        self._audit_log.record(
            category="security",
            severity="critical",
            actor=actor,
            action="emergency_pause",
            detail=reason,
        )
        return newly_paused

    def release(self, reason: str, *, actor: str = ADMIN_ACTOR) -> bool:
        """Clear the pause flag. Returns False if the system was not paused.

        A release while not paused changes nothing but is still audited at
        ``low`` severity.
        """
        with self._lock:
            was_paused = self._state.paused
            self._state = PauseState(paused=False)

        if not was_paused:
            LOGGER.info("Emergency pause release requested while not paused", extra={"reason": reason})
            self._audit_log.record(
                category="admin",
                severity="low",
                actor=actor,
                action="emergency_pause_release_ignored",
                detail=reason,
            )
            return False

        LOGGER.warning("Emergency pause released", extra={"reason": reason, "actor": actor})
        self._audit_log.record(
            category="admin",
            severity="high",
            actor=actor,
            action="emergency_pause_released",
            detail=reason,
        )
        return True
