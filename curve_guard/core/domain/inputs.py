"""Free-text and numeric input hygiene for values that reach audit records or UIs."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

DEFAULT_MAX_TEXT_LENGTH = 1000

# Removed before whitelisting so that e.g. "javascript:" does not survive as
# plain "javascript".
_STRIP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
)

# Everything outside this set is dropped. Excludes < > & " ' ` and backslash.
_DISALLOWED_CHARS = re.compile(r"[^A-Za-z0-9\s\-_.,:;!?@#()/+=%$*\[\]]")

_MALICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    # script injection
    re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<(iframe|object|embed|link|meta)[^>]*>", re.IGNORECASE),
    # sql injection
    re.compile(r"\b(UNION\s+SELECT|DROP\s+TABLE|DELETE\s+FROM|INSERT\s+INTO)\b", re.IGNORECASE),
    re.compile(r"\b(OR|AND)\s+\d+\s*=\s*\d+", re.IGNORECASE),
    re.compile(r"\b(OR|AND)\s+'[^']*'\s*=\s*'[^']*'", re.IGNORECASE),
    # command injection
    re.compile(r"(\$\(|`|\|\||&&)"),
    # path traversal
    re.compile(r"\.\./|\.\.\\|%2e%2e%2f|%2e%2e%5c", re.IGNORECASE),
    # markup
    re.compile(r"<[^>]*>"),
    re.compile(r"&#x?[0-9a-f]+;", re.IGNORECASE),
)


@dataclass(frozen=True, slots=True)
class NumericCheck:
    valid: bool
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class TextCheck:
    is_valid: bool
    sanitized: str
    errors: list[str] = field(default_factory=list)


def sanitize_input(text: str, max_length: int = DEFAULT_MAX_TEXT_LENGTH) -> str:
    """Strip markup-significant and non-whitelisted characters, then truncate."""
    if max_length < 0:
        raise ValueError("max_length must be non-negative")
    if not text:
        return ""

    cleaned = str(text)
    for pattern in _STRIP_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = _DISALLOWED_CHARS.sub("", cleaned).strip()
    return cleaned[:max_length]


def validate_numeric_input(value: object, min_value: float, max_value: float) -> NumericCheck:
    """Check that ``value`` is a finite real number within ``[min_value, max_value]``."""
    if isinstance(value, bool):
        return NumericCheck(valid=False, reason="Value must be a number")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return NumericCheck(valid=False, reason="Value must be a number")

    if not math.isfinite(number):
        return NumericCheck(valid=False, reason="Value must be a finite number")
    if number < min_value:
        return NumericCheck(valid=False, reason=f"Value {number:g} is below minimum {min_value:g}")
    if number > max_value:
        return NumericCheck(valid=False, reason=f"Value {number:g} exceeds maximum {max_value:g}")
    return NumericCheck(valid=True)


def validate_text_input(text: str, max_length: int = DEFAULT_MAX_TEXT_LENGTH) -> TextCheck:
    """Flag oversized or malicious-looking input and return its sanitized form."""
    errors: list[str] = []
    raw = "" if text is None else str(text)

    if len(raw) > max_length:
        errors.append(f"Input exceeds maximum length of {max_length} characters")

    if any(p.search(raw) for p in _MALICIOUS_PATTERNS):
        errors.append("Input contains potentially malicious content")

    return TextCheck(
        is_valid=not errors,
        sanitized=sanitize_input(raw, max_length),
        errors=errors,
    )
