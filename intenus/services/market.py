"""
Market context for intent resolution.

Summarizes a DEX overview payload (24h volume, volume changes, per-protocol
volumes) and derives the coarse MarketSnapshot consumed by the adjustment
pipeline and the analysis heuristics.

The network client is not part of this package: MarketSnapshotService
takes an async fetcher and a TTLCache from its owner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..cache import TTLCache
from ..core.intent.models import LiquidityClass, MarketSnapshot, VolatilityClass

logger = logging.getLogger(__name__)

OverviewFetcher = Callable[[str], Awaitable[Mapping[str, Any]]]

TOP_PROTOCOL_COUNT = 5


class ProtocolVolume(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    display_name: Optional[str] = Field(default=None, alias="displayName")
    total24h: float = 0.0


class DexOverview(BaseModel):
    """Subset of a DEX volume overview response that the summary needs."""

    model_config = ConfigDict(extra="ignore")

    total24h: float = 0.0
    change_1d: float = 0.0
    change_7d: float = 0.0
    protocols: List[ProtocolVolume] = Field(default_factory=list)


@dataclass
class ProtocolShare:
    name: str
    volume_24h: float
    market_share: float


@dataclass
class MarketOverview:
    market_health: str
    volume_trend: str
    liquidity: LiquidityClass
    top_protocols: List[ProtocolShare] = field(default_factory=list)
    key_metrics: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market_health": self.market_health,
            "volume_trend": self.volume_trend,
            "liquidity_assessment": self.liquidity.value,
            "top_protocols": [
                {"name": p.name, "volume_24h": p.volume_24h, "market_share": p.market_share}
                for p in self.top_protocols
            ],
            "key_metrics": dict(self.key_metrics),
        }


def classify_volatility(change_1d: float) -> VolatilityClass:
    """Daily volume swing as a volatility proxy: >10% high, >5% medium."""
    swing = abs(change_1d)
    if swing > 10:
        return VolatilityClass.HIGH
    if swing > 5:
        return VolatilityClass.MEDIUM
    return VolatilityClass.LOW


def _market_health(overview: DexOverview) -> str:
    if overview.total24h < 100_000:
        return "low_activity"
    if abs(overview.change_1d) > 20:
        return "volatile"
    if overview.change_7d < -30:
        return "declining"
    return "healthy"


def _volume_trend(change_1d: float) -> str:
    if change_1d > 10:
        return "growing"
    if change_1d < -10:
        return "declining"
    return "stable"


def _liquidity(overview: DexOverview, top: List[ProtocolShare]) -> LiquidityClass:
    if overview.total24h <= 0:
        return LiquidityClass.UNKNOWN
    concentration = sum(p.volume_24h for p in top[:3]) / overview.total24h
    if concentration > 0.9:
        return LiquidityClass.CONCENTRATED
    if concentration < 0.5 and len(overview.protocols) > 5:
        return LiquidityClass.WELL_DISTRIBUTED
    if overview.total24h > 5_000_000:
        return LiquidityClass.EXCELLENT
    return LiquidityClass.ADEQUATE


def summarize_dex_overview(payload: Mapping[str, Any]) -> MarketOverview:
    """Summarize a raw DEX overview payload.

    Raises:
        pydantic.ValidationError: Payload has the wrong shape
    """
    overview = DexOverview.model_validate(payload)
    ranked = sorted(overview.protocols, key=lambda p: p.total24h, reverse=True)
    top = [
        ProtocolShare(
            name=p.display_name or p.name,
            volume_24h=p.total24h,
            market_share=(p.total24h / overview.total24h * 100) if overview.total24h > 0 else 0.0,
        )
        for p in ranked[:TOP_PROTOCOL_COUNT]
    ]
    return MarketOverview(
        market_health=_market_health(overview),
        volume_trend=_volume_trend(overview.change_1d),
        liquidity=_liquidity(overview, top),
        top_protocols=top,
        key_metrics={
            "total_volume_24h": overview.total24h,
            "volume_change_24h": overview.change_1d,
            "volume_change_7d": overview.change_7d,
            "active_protocols": len(overview.protocols),
        },
    )


def snapshot_from_overview(overview: MarketOverview) -> MarketSnapshot:
    return MarketSnapshot(
        volatility=classify_volatility(overview.key_metrics.get("volume_change_24h", 0.0)),
        liquidity=overview.liquidity,
    )


class MarketSnapshotService:
    """
    Cached market snapshots per chain.

    A failed or malformed fetch yields None: market context is optional and
    the resolver treats its absence as a no-op.
    """

    def __init__(self, fetch_overview: OverviewFetcher, cache: TTLCache):
        self._fetch_overview = fetch_overview
        self._cache = cache

    @classmethod
    def from_settings(cls, fetch_overview: OverviewFetcher, settings: Any) -> "MarketSnapshotService":
        cache = TTLCache(
            default_ttl=settings.market_cache_ttl_seconds,
            max_size=settings.market_cache_max_size,
        )
        return cls(fetch_overview, cache)

    async def get_overview(self, chain: str = "sui") -> Optional[MarketOverview]:
        key = f"dex_overview:{chain.lower()}"
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        try:
            payload = await self._fetch_overview(chain)
            overview = summarize_dex_overview(payload)
        except ValidationError as exc:
            logger.warning("Malformed DEX overview for %s: %s", chain, exc)
            return None
        except Exception as exc:
            logger.warning("Failed to fetch DEX overview for %s: %s", chain, exc)
            return None

        await self._cache.set(key, overview)
        return overview

    async def get_snapshot(self, chain: str = "sui") -> Optional[MarketSnapshot]:
        overview = await self.get_overview(chain)
        if overview is None:
            return None
        return snapshot_from_overview(overview)
