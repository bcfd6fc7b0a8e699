"""
Intent Errors

Tagged error taxonomy for intent resolution. Every error carries a closed
``IntentErrorCode`` so callers (API layer, chat UI) can map it to a short
corrective prompt instead of surfacing raw messages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class IntentErrorCode(str, Enum):
    """Closed set of resolution failures."""

    INVALID_ADDRESS = "InvalidAddress"
    INVALID_AMOUNT = "InvalidAmount"
    INVALID_SYMBOL = "InvalidSymbol"
    UNSUPPORTED_ASSET = "UnsupportedAsset"
    OVERRIDE_OUT_OF_RANGE = "OverrideOutOfRange"


@dataclass
class ErrorContext:
    """Additional context about a rejected request."""

    field_name: Optional[str] = None
    value: Any = None
    suggested_action: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class IntentError(Exception):
    """
    Base class for intent resolution failures.

    Raised by the validation helpers and converted into a ``Rejected``
    result by the resolver. Never raised by the analysis engine.
    """

    code: IntentErrorCode

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.context.field_name:
            data["field"] = self.context.field_name
        if self.context.suggested_action:
            data["suggestion"] = self.context.suggested_action
        if self.context.details:
            data["details"] = self.context.details
        return data


class InvalidAddress(IntentError):
    """Address fails the chain format check."""

    code = IntentErrorCode.INVALID_ADDRESS

    def __init__(self, address: str, message: Optional[str] = None):
        super().__init__(
            message or "Invalid Sui address format. Must be 0x followed by 64 hex characters.",
            context=ErrorContext(
                field_name="user_address",
                value=address,
                suggested_action="Double-check the wallet address and paste it again",
            ),
        )
        self.address = address


class InvalidAmount(IntentError):
    """Amount is not a valid non-negative integer in the asset's smallest unit."""

    code = IntentErrorCode.INVALID_AMOUNT

    def __init__(self, amount: Any, field_name: str = "amount", message: Optional[str] = None):
        super().__init__(
            message or f"Invalid amount {amount!r}: expected a non-negative whole number of base units",
            context=ErrorContext(
                field_name=field_name,
                value=amount,
                suggested_action="Provide a positive number such as 100 or 2.5",
            ),
        )
        self.amount = amount


class InvalidSymbol(IntentError):
    """Asset symbol is empty, too long, or not alphanumeric."""

    code = IntentErrorCode.INVALID_SYMBOL

    def __init__(self, symbol: Any, field_name: str = "symbol"):
        super().__init__(
            f"Invalid asset symbol {symbol!r}: expected 1-20 alphanumeric characters",
            context=ErrorContext(field_name=field_name, value=symbol),
        )
        self.symbol = symbol


class UnsupportedAsset(IntentError):
    """Token registry has no entry for the requested symbol."""

    code = IntentErrorCode.UNSUPPORTED_ASSET

    def __init__(self, symbol: str, supported_symbols: Sequence[str] = (), field_name: str = "asset"):
        supported: List[str] = list(supported_symbols)
        super().__init__(
            f"Unsupported token: {symbol}",
            context=ErrorContext(
                field_name=field_name,
                value=symbol,
                suggested_action=(
                    f"Choose one of: {', '.join(supported)}" if supported else None
                ),
                details={"supported_tokens": supported},
            ),
        )
        self.symbol = symbol
        self.supported_symbols = supported


class OverrideOutOfRange(IntentError):
    """An explicit slippage or deadline override is structurally invalid."""

    code = IntentErrorCode.OVERRIDE_OUT_OF_RANGE

    def __init__(self, field_name: str, value: Any, expected: str):
        super().__init__(
            f"Override {field_name}={value!r} is invalid: expected {expected}",
            context=ErrorContext(field_name=field_name, value=value, details={"expected": expected}),
        )
