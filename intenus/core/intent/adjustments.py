"""
Adjustment Pipeline

Transforms a priority baseline into the final ParameterBundle:

1. Risk tolerance scales slippage and solver stake in opposite directions
   and decides the TEE attestation requirement.
2. Urgency scales the deadline and the slippage allowance.
3. Optional market volatility scales slippage once more.
4. Results are rounded half-up and clamped; explicit overrides win.

Every step is total: out-of-domain enum values fall back to their
medium/normal equivalents and the stage never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import Dict, Optional

from .defaults import baseline_for, coerce_priority, coerce_risk, coerce_urgency
from .models import (
    IntentOverrides,
    MarketSnapshot,
    ParameterBundle,
    Priority,
    PriorityLike,
    RiskLike,
    RiskTolerance,
    Urgency,
    UrgencyLike,
    VolatilityClass,
)

logger = logging.getLogger(__name__)

MIN_SLIPPAGE_BPS = 10
MAX_SLIPPAGE_BPS = 1000
MIN_DEADLINE_MINUTES = 1
MAX_DEADLINE_MINUTES = 120


@dataclass(frozen=True)
class RiskAdjustment:
    slippage_multiplier: Decimal
    stake_multiplier: Fraction
    # None inherits the priority's own attestation default
    requires_tee: Optional[bool]


@dataclass(frozen=True)
class UrgencyAdjustment:
    deadline_multiplier: Decimal
    slippage_multiplier: Decimal


RISK_ADJUSTMENTS: Dict[RiskTolerance, RiskAdjustment] = {
    RiskTolerance.LOW: RiskAdjustment(Decimal("0.5"), Fraction(2), True),
    RiskTolerance.MEDIUM: RiskAdjustment(Decimal("1"), Fraction(1), None),
    RiskTolerance.HIGH: RiskAdjustment(Decimal("1.5"), Fraction(1, 2), False),
}

URGENCY_ADJUSTMENTS: Dict[Urgency, UrgencyAdjustment] = {
    Urgency.LOW: UrgencyAdjustment(Decimal("2"), Decimal("0.8")),
    Urgency.NORMAL: UrgencyAdjustment(Decimal("1"), Decimal("1")),
    Urgency.URGENT: UrgencyAdjustment(Decimal("0.3"), Decimal("1.5")),
}

VOLATILITY_SLIPPAGE_MULTIPLIERS: Dict[VolatilityClass, Decimal] = {
    VolatilityClass.LOW: Decimal("0.8"),
    VolatilityClass.MEDIUM: Decimal("1"),
    VolatilityClass.HIGH: Decimal("1.25"),
}


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def scale_stake(stake: int, multiplier: Fraction) -> int:
    """Scale an integer stake by an exact rational multiplier, flooring."""
    return stake * multiplier.numerator // multiplier.denominator


def market_slippage_multiplier(market: Optional[MarketSnapshot]) -> Decimal:
    if market is None or market.volatility is None:
        return Decimal("1")
    return VOLATILITY_SLIPPAGE_MULTIPLIERS.get(market.volatility, Decimal("1"))


def apply_adjustments(
    baseline: ParameterBundle,
    risk_tolerance: Optional[RiskLike] = None,
    urgency: Optional[UrgencyLike] = None,
    market: Optional[MarketSnapshot] = None,
) -> ParameterBundle:
    """Apply risk, urgency and market multipliers to a baseline bundle."""
    risk_adj = RISK_ADJUSTMENTS[coerce_risk(risk_tolerance)]
    urgency_adj = URGENCY_ADJUSTMENTS[coerce_urgency(urgency)]

    slippage = (
        Decimal(baseline.slippage_bps)
        * risk_adj.slippage_multiplier
        * urgency_adj.slippage_multiplier
        * market_slippage_multiplier(market)
    )
    deadline = Decimal(baseline.deadline_minutes) * urgency_adj.deadline_multiplier

    requires_tee = (
        baseline.requires_tee if risk_adj.requires_tee is None else risk_adj.requires_tee
    )

    return replace(
        baseline,
        slippage_bps=clamp(round_half_up(slippage), MIN_SLIPPAGE_BPS, MAX_SLIPPAGE_BPS),
        deadline_minutes=clamp(round_half_up(deadline), MIN_DEADLINE_MINUTES, MAX_DEADLINE_MINUTES),
        min_solver_stake=scale_stake(baseline.min_solver_stake, risk_adj.stake_multiplier),
        requires_tee=requires_tee,
        should_encrypt=baseline.priority is Priority.MAXIMUM_SAFETY or requires_tee,
    )


def apply_overrides(bundle: ParameterBundle, overrides: Optional[IntentOverrides]) -> ParameterBundle:
    """Replace computed slippage/deadline with explicit caller values, verbatim."""
    if overrides is None:
        return bundle
    changes = {}
    if overrides.slippage_bps is not None:
        changes["slippage_bps"] = overrides.slippage_bps
    if overrides.deadline_minutes is not None:
        changes["deadline_minutes"] = overrides.deadline_minutes
    if changes:
        logger.debug("Applying explicit overrides: %s", changes)
        return replace(bundle, **changes)
    return bundle


def resolve_parameters(
    priority: Optional[PriorityLike] = None,
    risk_tolerance: Optional[RiskLike] = None,
    urgency: Optional[UrgencyLike] = None,
    market: Optional[MarketSnapshot] = None,
    overrides: Optional[IntentOverrides] = None,
) -> ParameterBundle:
    """Resolve the full parameter bundle for a request.

    Args:
        priority: Optimization priority (unknown → balanced)
        risk_tolerance: low/medium/high (unknown → medium)
        urgency: low/normal/urgent (unknown → normal)
        market: Optional market snapshot; absence is a no-op
        overrides: Explicit slippage/deadline used verbatim

    Returns:
        ParameterBundle with bounded slippage and deadline
    """
    baseline = baseline_for(coerce_priority(priority))
    adjusted = apply_adjustments(baseline, risk_tolerance, urgency, market)
    return apply_overrides(adjusted, overrides)
