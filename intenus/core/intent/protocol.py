"""Capabilities the resolver depends on but does not implement.

Chain-specific address rules, token metadata and the clock are supplied by
the caller so the resolver stays free of I/O and hidden global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenInfo:
    """Token registry entry."""

    symbol: str
    asset_id: str
    decimals: int
    name: str
    price_id: Optional[str] = None


class AddressValidator(Protocol):
    """Chain address rules: validation and canonical form."""

    def is_valid_address(self, address: str) -> bool:
        ...

    def normalize_address(self, address: str) -> str:
        ...


class TokenRegistry(Protocol):
    """Lookup of supported tokens by symbol."""

    def lookup(self, symbol: str) -> Optional[TokenInfo]:
        """Return the token for a symbol or alias, None if unsupported."""
        ...

    def supported_symbols(self) -> List[str]:
        ...
