"""Helpers for validating and normalizing Sui wallet addresses."""

from __future__ import annotations

import re

_SUI_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


def is_valid_sui_address(address: str) -> bool:
    """Return True for ``0x`` followed by exactly 64 hex characters."""

    if not isinstance(address, str) or not address:
        return False
    return bool(_SUI_ADDRESS_RE.fullmatch(address.strip()))


def normalize_sui_address(address: str) -> str:
    """Canonical form of a valid address: trimmed, lowercase hex."""

    return address.strip().lower()


class SuiAddressValidator:
    """Address capability handed to the resolver for the Sui chain."""

    chain = "sui"

    def is_valid_address(self, address: str) -> bool:
        return is_valid_sui_address(address)

    def normalize_address(self, address: str) -> str:
        return normalize_sui_address(address)


__all__ = [
    "SuiAddressValidator",
    "is_valid_sui_address",
    "normalize_sui_address",
]
