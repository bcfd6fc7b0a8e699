"""
Tests for DEX overview summarization, the snapshot service and its cache.
"""

import asyncio
import logging

import pytest
from pydantic import ValidationError

from intenus.cache import TTLCache
from intenus.config import Settings
from intenus.core.intent import LiquidityClass, VolatilityClass
from intenus.services.market import (
    MarketSnapshotService,
    classify_volatility,
    snapshot_from_overview,
    summarize_dex_overview,
)


def overview_payload(total=10_000_000.0, change_1d=2.0, change_7d=-5.0, volumes=None):
    volumes = volumes if volumes is not None else [1_250_000.0] * 8
    return {
        "total24h": total,
        "change_1d": change_1d,
        "change_7d": change_7d,
        "protocols": [
            {"name": f"dex-{i}", "displayName": f"Dex {i}", "total24h": volume}
            for i, volume in enumerate(volumes)
        ],
    }


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


# =============================================================================
# Summarization
# =============================================================================

class TestSummarize:

    @pytest.mark.parametrize(
        "change,volatility",
        [(12, "high"), (-12, "high"), (10, "medium"), (-7, "medium"), (5, "low"), (0, "low")],
    )
    def test_volatility_from_daily_change(self, change, volatility):
        assert classify_volatility(change) == VolatilityClass(volatility)

    def test_well_distributed_market(self):
        overview = summarize_dex_overview(overview_payload())
        assert overview.liquidity == LiquidityClass.WELL_DISTRIBUTED
        assert overview.market_health == "healthy"
        assert overview.volume_trend == "stable"
        assert len(overview.top_protocols) == 5
        assert overview.top_protocols[0].name == "Dex 0"
        assert overview.top_protocols[0].market_share == pytest.approx(12.5)
        assert overview.key_metrics["active_protocols"] == 8

    def test_concentrated_market(self):
        overview = summarize_dex_overview(
            overview_payload(total=1_000_000.0, volumes=[600_000.0, 300_000.0, 50_000.0, 50_000.0])
        )
        assert overview.liquidity == LiquidityClass.CONCENTRATED
        assert [p.volume_24h for p in overview.top_protocols] == [600_000.0, 300_000.0, 50_000.0, 50_000.0]

    def test_excellent_and_adequate_liquidity(self):
        excellent = summarize_dex_overview(overview_payload(total=6_000_000.0, volumes=[1_500_000.0] * 4))
        adequate = summarize_dex_overview(overview_payload(total=1_000_000.0, volumes=[250_000.0] * 4))
        assert excellent.liquidity == LiquidityClass.EXCELLENT
        assert adequate.liquidity == LiquidityClass.ADEQUATE

    def test_sorts_protocols_by_volume(self):
        overview = summarize_dex_overview(
            overview_payload(total=1_000_000.0, volumes=[100_000.0, 500_000.0, 400_000.0])
        )
        assert [p.name for p in overview.top_protocols] == ["Dex 1", "Dex 2", "Dex 0"]

    @pytest.mark.parametrize(
        "kwargs,health,trend",
        [
            ({"total": 50_000.0, "volumes": [50_000.0]}, "low_activity", "stable"),
            ({"change_1d": 25.0}, "volatile", "growing"),
            ({"change_1d": -15.0}, "healthy", "declining"),
            ({"change_7d": -40.0}, "declining", "stable"),
        ],
    )
    def test_health_and_trend(self, kwargs, health, trend):
        overview = summarize_dex_overview(overview_payload(**kwargs))
        assert overview.market_health == health
        assert overview.volume_trend == trend

    def test_empty_market(self):
        overview = summarize_dex_overview({"total24h": 0, "protocols": []})
        assert overview.liquidity == LiquidityClass.UNKNOWN
        assert overview.top_protocols == []

    def test_malformed_payload(self):
        with pytest.raises(ValidationError):
            summarize_dex_overview({"total24h": "lots", "protocols": "none"})

    def test_snapshot(self):
        snapshot = snapshot_from_overview(summarize_dex_overview(overview_payload(change_1d=-11.0)))
        assert snapshot.volatility == VolatilityClass.HIGH
        assert snapshot.liquidity == LiquidityClass.WELL_DISTRIBUTED
        assert snapshot.to_dict() == {"volatility": "high", "liquidity": "well_distributed"}


# =============================================================================
# Cache and service
# =============================================================================

class TestTTLCache:

    def test_expiry_follows_injected_clock(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl=60, clock=clock)

        async def scenario():
            await cache.set("k", "v")
            clock.now += 59
            assert await cache.get("k") == "v"
            clock.now += 1
            assert await cache.get("k") is None

        asyncio.run(scenario())
        assert cache.size() == 0

    def test_lru_eviction(self):
        cache = TTLCache(max_size=2, clock=FakeClock())

        async def scenario():
            await cache.set("a", 1)
            await cache.set("b", 2)
            await cache.get("a")
            await cache.set("c", 3)
            return await cache.get("a"), await cache.get("b"), await cache.get("c")

        assert asyncio.run(scenario()) == (1, None, 3)

    def test_invalidate_and_clear(self):
        cache = TTLCache(clock=FakeClock())

        async def scenario():
            await cache.set("a", 1)
            await cache.set("b", 2, ttl=5)
            await cache.invalidate("a")
            assert await cache.get("a") is None
            await cache.clear()

        asyncio.run(scenario())
        assert cache.size() == 0

    def test_rejects_bad_configuration(self):
        with pytest.raises(ValueError):
            TTLCache(default_ttl=0)
        with pytest.raises(ValueError):
            TTLCache(max_size=0)


class TestMarketSnapshotService:

    def test_fetches_once_within_ttl(self):
        calls = []
        clock = FakeClock()

        async def fetch(chain):
            calls.append(chain)
            return overview_payload(change_1d=7.0)

        service = MarketSnapshotService(fetch, TTLCache(default_ttl=300, clock=clock))

        async def scenario():
            first = await service.get_snapshot("SUI")
            second = await service.get_snapshot("sui")
            clock.now += 301
            third = await service.get_snapshot("sui")
            return first, second, third

        first, second, third = asyncio.run(scenario())
        assert first == second == third
        assert first.volatility == VolatilityClass.MEDIUM
        assert len(calls) == 2

    def test_fetch_failure_yields_none(self, caplog):
        async def fetch(chain):
            raise ConnectionError("upstream down")

        service = MarketSnapshotService(fetch, TTLCache(clock=FakeClock()))
        with caplog.at_level(logging.WARNING):
            assert asyncio.run(service.get_snapshot()) is None
        assert "upstream down" in caplog.text

    def test_malformed_payload_yields_none(self):
        async def fetch(chain):
            return {"protocols": "nope"}

        service = MarketSnapshotService(fetch, TTLCache(clock=FakeClock()))
        assert asyncio.run(service.get_overview()) is None

    def test_cache_sized_from_settings(self, monkeypatch):
        monkeypatch.setenv("INTENUS_MARKET_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("INTENUS_MARKET_CACHE_MAX_SIZE", "2")

        async def fetch(chain):
            return overview_payload()

        service = MarketSnapshotService.from_settings(fetch, Settings(_env_file=None))

        assert service._cache.default_ttl == 60
        assert service._cache.max_size == 2
