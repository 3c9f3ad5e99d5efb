"""Syntactic validation of actor (wallet) addresses.

Only the alphabet and length are checked. Addresses are base58 strings of
32 to 44 characters; no decoding or checksum verification is performed.
"""

from __future__ import annotations

from dataclasses import dataclass

BASE58_ALPHABET: frozenset[str] = frozenset(
    "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
)

MIN_ADDRESS_LENGTH = 32
MAX_ADDRESS_LENGTH = 44


@dataclass(frozen=True, slots=True)
class AddressCheck:
    """Outcome of an address validation."""

    valid: bool
    reason: str | None = None


def validate_wallet_address(address: str) -> AddressCheck:
    """Return whether ``address`` is a syntactically valid wallet address."""
    if not isinstance(address, str) or not address:
        return AddressCheck(valid=False, reason="Wallet address is required")

    if not MIN_ADDRESS_LENGTH <= len(address) <= MAX_ADDRESS_LENGTH:
        return AddressCheck(
            valid=False,
            reason=(
                f"Invalid wallet address length {len(address)} "
                f"(expected {MIN_ADDRESS_LENGTH}-{MAX_ADDRESS_LENGTH})"
            ),
        )

    bad = sorted({ch for ch in address if ch not in BASE58_ALPHABET})
    if bad:
        return AddressCheck(
            valid=False,
            reason=f"Invalid characters in wallet address: {''.join(bad)!r}",
        )

    return AddressCheck(valid=True)
