"""Static Sui token registry and amount conversion helpers."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..core.intent.amounts import format_base_units, parse_human_amount, parse_token_amount, to_base_units
from ..core.intent.protocol import TokenInfo

# Popular swap tokens on Sui keyed by canonical symbol.
SUI_TOKENS: Dict[str, Dict[str, object]] = {
    'SUI': {
        'symbol': 'SUI',
        'asset_id': '0x2::sui::SUI',
        'decimals': 9,
        'name': 'Sui',
        'price_id': 'coingecko:sui',
        'aliases': {'sui'},
    },
    'WAL': {
        'symbol': 'WAL',
        'asset_id': '0x356a26eb9e012a68958082340d4c4116e7f55615cf27affcff209cf0ae544f59::wal::WAL',
        'decimals': 9,
        'name': 'Walrus',
        'price_id': 'coingecko:walrus-protocol',
        'aliases': {'wal', 'walrus'},
    },
    'USDC': {
        'symbol': 'USDC',
        'asset_id': '0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC',
        'decimals': 6,
        'name': 'USD Coin',
        'price_id': 'coingecko:usd-coin',
        'aliases': {'usdc'},
    },
    'USDT': {
        'symbol': 'USDT',
        'asset_id': '0x375f70cf2ae4c00bf37117d0c85a2c71545e6ee05c4a5c7d282cd66a4504b068::usdt::USDT',
        'decimals': 6,
        'name': 'Tether USD',
        'price_id': 'coingecko:tether',
        'aliases': {'usdt', 'tether'},
    },
    'WETH': {
        'symbol': 'WETH',
        'asset_id': '0xaf8cd5edc19c4512f4259f0bee101a40d41ebed738ade5874359610ef8eeced5::coin::COIN',
        'decimals': 8,
        'name': 'Wrapped Ether',
        'price_id': 'coingecko:weth',
        'aliases': {'weth', 'eth'},
    },
}


class StaticTokenRegistry:
    """In-memory token registry with alias lookup."""

    def __init__(self, entries: Optional[Dict[str, Dict[str, object]]] = None):
        self._tokens: Dict[str, TokenInfo] = {}
        self._aliases: Dict[str, str] = {}
        for symbol, metadata in (entries if entries is not None else SUI_TOKENS).items():
            self._tokens[symbol] = TokenInfo(
                symbol=str(metadata['symbol']),
                asset_id=str(metadata['asset_id']),
                decimals=int(metadata['decimals']),  # type: ignore[arg-type]
                name=str(metadata.get('name', symbol)),
                price_id=metadata.get('price_id'),  # type: ignore[arg-type]
            )
            self._aliases[symbol.lower()] = symbol
            for alias in metadata.get('aliases', set()):  # type: ignore[union-attr]
                self._aliases.setdefault(str(alias).lower(), symbol)

    def lookup(self, symbol: str) -> Optional[TokenInfo]:
        if not symbol:
            return None
        canonical = self._aliases.get(symbol.strip().lower())
        return self._tokens.get(canonical) if canonical else None

    def supported_symbols(self) -> List[str]:
        return list(self._tokens)

    def tokens(self) -> Iterable[TokenInfo]:
        return self._tokens.values()


def format_token_amount(raw: str, decimals: int) -> str:
    """Render base units as a human amount ("2500000000", 9 -> "2.5")."""
    return format_base_units(raw, decimals)


default_token_registry = StaticTokenRegistry()


__all__ = [
    "SUI_TOKENS",
    "StaticTokenRegistry",
    "default_token_registry",
    "format_token_amount",
    "parse_human_amount",
    "parse_token_amount",
    "to_base_units",
]
