"""
Request Validation

Fail-fast checks run before any Intent is constructed. The order is fixed:
address, amounts, symbols, registry lookup, overrides. The first failure
is raised as a tagged ``IntentError``.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from .defaults import coerce_intent_type
from .errors import (
    InvalidAddress,
    InvalidAmount,
    InvalidSymbol,
    OverrideOutOfRange,
    UnsupportedAsset,
)
from .models import (
    MAX_AMOUNT_DIGITS,
    MAX_TOKEN_DECIMALS,
    IntentOverrides,
    IntentRequest,
    IntentType,
)
from .protocol import AddressValidator, TokenRegistry

_DIGITS_RE = re.compile(r"^[0-9]+$")
_SYMBOL_RE = re.compile(r"^[A-Za-z0-9]{1,20}$")

MAX_OVERRIDE_SLIPPAGE_BPS = 10_000
# One year
MAX_OVERRIDE_DEADLINE_MINUTES = 525_600


def validate_address(address: Any, validator: AddressValidator) -> str:
    """Validate and return the normalized address."""
    if not isinstance(address, str) or not validator.is_valid_address(address):
        raise InvalidAddress(str(address))
    return validator.normalize_address(address)


def validate_raw_amount(amount: Any, field_name: str = "amount") -> str:
    """Raw amounts are non-negative digit strings in the smallest unit."""
    if not isinstance(amount, str) or not _DIGITS_RE.fullmatch(amount):
        raise InvalidAmount(amount, field_name)
    if len(amount) > MAX_AMOUNT_DIGITS:
        raise InvalidAmount(
            f"{amount[:12]}...",
            field_name,
            message=f"Amount has {len(amount)} digits; at most {MAX_AMOUNT_DIGITS} are supported",
        )
    return amount


def validate_decimals(decimals: Any, field_name: str = "decimals") -> int:
    if not _is_int(decimals) or not 0 <= decimals <= MAX_TOKEN_DECIMALS:
        raise InvalidAmount(
            decimals,
            field_name,
            message=f"Token decimals must be an integer between 0 and {MAX_TOKEN_DECIMALS}",
        )
    return decimals


def validate_symbol(symbol: Any, field_name: str = "symbol") -> str:
    if not isinstance(symbol, str) or not _SYMBOL_RE.fullmatch(symbol):
        raise InvalidSymbol(symbol, field_name)
    return symbol


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_overrides(overrides: Optional[IntentOverrides]) -> None:
    """Overrides bypass clamping but must still be structurally sound."""
    if overrides is None:
        return
    slippage = overrides.slippage_bps
    if slippage is not None and (
        not _is_int(slippage) or not 0 <= slippage <= MAX_OVERRIDE_SLIPPAGE_BPS
    ):
        raise OverrideOutOfRange(
            "slippage_bps", slippage, f"an integer between 0 and {MAX_OVERRIDE_SLIPPAGE_BPS}"
        )
    deadline = overrides.deadline_minutes
    if deadline is not None and (
        not _is_int(deadline) or not 0 < deadline <= MAX_OVERRIDE_DEADLINE_MINUTES
    ):
        raise OverrideOutOfRange(
            "deadline_minutes",
            deadline,
            f"a positive integer number of minutes up to {MAX_OVERRIDE_DEADLINE_MINUTES}",
        )


def validate_request(
    request: IntentRequest,
    address_validator: AddressValidator,
    token_registry: Optional[TokenRegistry] = None,
) -> str:
    """Run every check in order and return the normalized user address."""
    normalized = validate_address(request.user_address, address_validator)

    validate_raw_amount(request.input_asset.amount, "input_amount")
    validate_decimals(request.input_asset.decimals, "input_decimals")
    validate_decimals(request.output_asset.decimals, "output_decimals")
    if request.output_amount is not None:
        validate_raw_amount(request.output_amount, "output_amount")
    elif coerce_intent_type(request.intent_type) is IntentType.SWAP_EXACT_OUTPUT:
        raise InvalidAmount(
            None,
            "output_amount",
            message="Exact-output swaps require a target output amount",
        )

    validate_symbol(request.input_asset.symbol, "input_asset")
    validate_symbol(request.output_asset.symbol, "output_asset")

    if token_registry is not None:
        for field_name, symbol in (
            ("input_asset", request.input_asset.symbol),
            ("output_asset", request.output_asset.symbol),
        ):
            if token_registry.lookup(symbol) is None:
                raise UnsupportedAsset(symbol, token_registry.supported_symbols(), field_name)

    validate_overrides(request.overrides)
    return normalized
