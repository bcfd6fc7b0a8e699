"""Exact conversions between human token amounts and base units."""

from __future__ import annotations

from decimal import Decimal, Inexact, InvalidOperation, localcontext

from .errors import InvalidAmount
from .models import MAX_AMOUNT_DIGITS, MAX_TOKEN_DECIMALS

# Longer human input is rejected before any decimal parsing
MAX_HUMAN_AMOUNT_LENGTH = 128


def parse_human_amount(amount: str, field_name: str = "amount") -> Decimal:
    """Parse a human amount ("2.5", "1,000") without regard to token decimals.

    Raises ``InvalidAmount`` for non-numeric, negative, non-finite or
    oversized input.
    """
    text = str(amount).strip().replace(",", "").replace("_", "")
    if len(text) > MAX_HUMAN_AMOUNT_LENGTH:
        raise InvalidAmount(f"{text[:12]}...", field_name, message="Amount is too long")
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise InvalidAmount(amount, field_name) from None
    if not value.is_finite() or value < 0:
        raise InvalidAmount(amount, field_name)
    # Integer part alone would overflow a u256
    if value and value.adjusted() >= MAX_AMOUNT_DIGITS:
        raise InvalidAmount(amount, field_name, message=f"Amount {amount!r} is too large")
    return value


def to_base_units(value: Decimal, decimals: int, field_name: str = "amount") -> str:
    """Scale a parsed amount by the token's decimals into an exact integer string."""
    with localcontext() as ctx:
        ctx.prec = MAX_AMOUNT_DIGITS + MAX_TOKEN_DECIMALS
        ctx.clear_flags()
        scaled = value.scaleb(decimals)
        inexact = ctx.flags[Inexact]
    if inexact or scaled != scaled.to_integral_value():
        raise InvalidAmount(
            str(value),
            field_name,
            message=f"Amount {value} has more than {decimals} decimal places",
        )
    if scaled and scaled.adjusted() >= MAX_AMOUNT_DIGITS:
        raise InvalidAmount(str(value), field_name, message=f"Amount {value} is too large")
    return str(int(scaled))


def parse_token_amount(amount: str, decimals: int, field_name: str = "amount") -> str:
    """Convert a human amount ("2.5") into base units ("2500000000" for 9 decimals).

    Negative values, non-numeric input, amounts beyond a u256 and more
    fractional digits than the token supports raise ``InvalidAmount``.
    """
    return to_base_units(parse_human_amount(amount, field_name), decimals, field_name)


def format_base_units(raw: str, decimals: int) -> str:
    """Render base units as a human amount without trailing zeros."""
    value = Decimal(raw).scaleb(-decimals)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
