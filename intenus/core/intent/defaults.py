"""Baseline execution parameters per optimization priority."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Type, TypeVar, Union

from .models import (
    IntentType,
    ParameterBundle,
    Priority,
    PriorityLike,
    RankingWeights,
    RiskLike,
    RiskTolerance,
    Urgency,
    UrgencyLike,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", Priority, RiskTolerance, Urgency, IntentType)


DEFAULTS_TABLE: Dict[Priority, ParameterBundle] = {
    Priority.MAXIMIZE_OUTPUT: ParameterBundle(
        priority=Priority.MAXIMIZE_OUTPUT,
        slippage_bps=100,
        deadline_minutes=30,
        max_hops=4,
        min_solver_stake=1_000_000_000_000,
        requires_tee=False,
        ranking_weights=RankingWeights(70, 10, 10, 10),
    ),
    Priority.MINIMIZE_GAS: ParameterBundle(
        priority=Priority.MINIMIZE_GAS,
        slippage_bps=200,
        deadline_minutes=60,
        max_hops=2,
        min_solver_stake=500_000_000_000,
        requires_tee=False,
        ranking_weights=RankingWeights(20, 60, 10, 10),
    ),
    Priority.FASTEST_EXECUTION: ParameterBundle(
        priority=Priority.FASTEST_EXECUTION,
        slippage_bps=300,
        deadline_minutes=5,
        max_hops=2,
        min_solver_stake=2_000_000_000_000,
        requires_tee=False,
        ranking_weights=RankingWeights(20, 20, 50, 10),
    ),
    Priority.MAXIMUM_SAFETY: ParameterBundle(
        priority=Priority.MAXIMUM_SAFETY,
        slippage_bps=50,
        deadline_minutes=60,
        max_hops=3,
        min_solver_stake=5_000_000_000_000,
        requires_tee=True,
        ranking_weights=RankingWeights(25, 25, 25, 25),
    ),
    Priority.BALANCED: ParameterBundle(
        priority=Priority.BALANCED,
        slippage_bps=100,
        deadline_minutes=15,
        max_hops=3,
        min_solver_stake=1_000_000_000_000,
        requires_tee=False,
        ranking_weights=RankingWeights(40, 30, 20, 10),
    ),
}

# Max gas budget (SUI) and display range per priority
MAX_GAS_COST: Dict[Priority, str] = {
    Priority.MINIMIZE_GAS: "0.01",
    Priority.FASTEST_EXECUTION: "0.1",
    Priority.MAXIMIZE_OUTPUT: "0.05",
    Priority.BALANCED: "0.03",
    Priority.MAXIMUM_SAFETY: "0.05",
}

ESTIMATED_GAS_RANGE: Dict[Priority, str] = {
    Priority.MINIMIZE_GAS: "$0.01-0.03",
    Priority.FASTEST_EXECUTION: "$0.05-0.15",
    Priority.MAXIMIZE_OUTPUT: "$0.03-0.08",
    Priority.BALANCED: "$0.02-0.06",
    Priority.MAXIMUM_SAFETY: "$0.03-0.10",
}


def _coerce(enum_cls: Type[E], value: object, fallback: E, label: str) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    logger.warning("Unknown %s %r, falling back to %s", label, value, fallback.value)
    return fallback


def coerce_priority(value: Optional[PriorityLike]) -> Priority:
    """Map any caller value onto a Priority; unknown values become balanced."""
    return _coerce(Priority, value, Priority.BALANCED, "priority")


def coerce_risk(value: Optional[RiskLike]) -> RiskTolerance:
    return _coerce(RiskTolerance, value, RiskTolerance.MEDIUM, "risk tolerance")


def coerce_urgency(value: Optional[UrgencyLike]) -> Urgency:
    return _coerce(Urgency, value, Urgency.NORMAL, "urgency")


def coerce_intent_type(value: Optional[Union[IntentType, str]]) -> IntentType:
    return _coerce(IntentType, value, IntentType.SWAP_EXACT_INPUT, "intent type")


def baseline_for(priority: Optional[PriorityLike]) -> ParameterBundle:
    """Return the baseline bundle for a priority. Never fails."""
    return DEFAULTS_TABLE[coerce_priority(priority)]
