"""Shared fixtures for the intent resolver tests."""

from datetime import datetime, timezone

import pytest

from intenus.core.intent import (
    InputAsset,
    IntentOverrides,
    IntentRequest,
    IntentResolver,
    IntentType,
    OutputAsset,
)
from intenus.services.address import SuiAddressValidator
from intenus.services.tokens import StaticTokenRegistry

VALID_ADDRESS = "0x2ccd4a37d0ac0ed8fb45a9ec7fa5cd6d10bd7d06bc6e2e31aa6a2d19f7aa0e4f"

SUI_VALIDATOR = SuiAddressValidator()

FIXED_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)
FIXED_MS = 1_735_689_600_000

SUI = InputAsset(
    asset_id="0x2::sui::SUI",
    symbol="SUI",
    decimals=9,
    amount="100000000000",
    name="Sui",
)
USDC = OutputAsset(
    asset_id="0xdba34672e30cb065b1f93e3ab55318768fd6fef66c15942c9f7cb846e2f900e7::usdc::USDC",
    symbol="USDC",
    decimals=6,
    name="USD Coin",
)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_request(**overrides) -> IntentRequest:
    """Build a SUI -> USDC request; keyword arguments replace fields."""
    fields = dict(
        user_address=VALID_ADDRESS,
        description="Swap 100 SUI to USDC",
        input_asset=SUI,
        output_asset=USDC,
        priority="maximize_output",
        risk_tolerance="medium",
        urgency="normal",
        intent_type=IntentType.SWAP_EXACT_INPUT,
        output_amount=None,
        overrides=IntentOverrides(),
    )
    fields.update(overrides)
    return IntentRequest(**fields)


@pytest.fixture
def registry() -> StaticTokenRegistry:
    return StaticTokenRegistry()


@pytest.fixture
def resolver(registry) -> IntentResolver:
    """Resolver with a frozen clock and the static Sui registry."""
    return IntentResolver(fixed_clock, SUI_VALIDATOR, token_registry=registry)


@pytest.fixture
def resolve(resolver):
    """Resolve a request built by make_request and assert it succeeded."""

    def _resolve(market=None, **fields):
        result = resolver.resolve(make_request(**fields), market)
        assert result.ok, result.to_dict()
        return result

    return _resolve
