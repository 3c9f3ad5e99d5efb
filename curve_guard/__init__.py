"""Public API for the curve_guard package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Domain Types (used by the trade execution path)
# ----------------------------------------------------------------------
from curve_guard.core.domain.address import AddressCheck, validate_wallet_address
from curve_guard.core.domain.curve import CurveFees, CurveQuote
from curve_guard.core.domain.inputs import (
    NumericCheck,
    TextCheck,
    sanitize_input,
    validate_numeric_input,
    validate_text_input,
)
from curve_guard.core.domain.reject_reasons import RejectReason
from curve_guard.core.domain.types import (
    RequestMetadata,
    TradeRequest,
    TradeValidationResult,
)

# ----------------------------------------------------------------------
# Events API (used by consumers)
# ----------------------------------------------------------------------
from curve_guard.core.events.event_bus import EventBus
from curve_guard.core.events.events import SecurityAlert, SecurityEvent
from curve_guard.core.events.sinks.file_recorder import FileRecorderSink
from curve_guard.core.events.sinks.sink_logging import LoggingEventSink

# ----------------------------------------------------------------------
# Engine + Config API
# ----------------------------------------------------------------------
from curve_guard.core.risk.security_config import SecurityConfig, load_security_config
from curve_guard.core.risk.security_engine import SecurityStats, TradeSecurityEngine

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Engine
    "TradeSecurityEngine",
    "SecurityStats",

    # Config
    "SecurityConfig",
    "load_security_config",

    # Request / verdict
    "TradeRequest",
    "RequestMetadata",
    "TradeValidationResult",
    "RejectReason",
    "CurveFees",
    "CurveQuote",

    # Events
    "EventBus",
    "SecurityEvent",
    "SecurityAlert",
    "LoggingEventSink",
    "FileRecorderSink",

    # Input hygiene
    "AddressCheck",
    "validate_wallet_address",
    "NumericCheck",
    "TextCheck",
    "sanitize_input",
    "validate_numeric_input",
    "validate_text_input",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("curve-guard")
except PackageNotFoundError:
    __version__ = "0.0.0"
