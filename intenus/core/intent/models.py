"""Core data models for intent resolution.

This module defines:
- Enumerations: Priority, RiskTolerance, Urgency, IntentType, market classes
- IntentRequest: Caller input (already-resolved assets, raw amounts)
- ParameterBundle: Resolved execution parameters (intermediate, never persisted)
- MarketSnapshot: Optional market context supplied by the caller
- Analysis: Read-only diagnostics derived from a finished Intent
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class Priority(str, Enum):
    """Optimization priority chosen by the user."""

    MAXIMIZE_OUTPUT = "maximize_output"
    MINIMIZE_GAS = "minimize_gas"
    FASTEST_EXECUTION = "fastest_execution"
    BALANCED = "balanced"
    MAXIMUM_SAFETY = "maximum_safety"


class RiskTolerance(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Urgency(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    URGENT = "urgent"


class IntentType(str, Enum):
    """IGS intent classification."""

    SWAP_EXACT_INPUT = "swap.exact_input"
    SWAP_EXACT_OUTPUT = "swap.exact_output"
    LIMIT_SELL = "limit.sell"
    LIMIT_BUY = "limit.buy"

    @property
    def operation_mode(self) -> str:
        if self is IntentType.SWAP_EXACT_OUTPUT:
            return "exact_output"
        if self in (IntentType.LIMIT_SELL, IntentType.LIMIT_BUY):
            return "limit_order"
        return "exact_input"


class AmountType(str, Enum):
    EXACT = "exact"
    RANGE = "range"
    ALL = "all"


class VolatilityClass(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class LiquidityClass(str, Enum):
    EXCELLENT = "excellent"
    WELL_DISTRIBUTED = "well_distributed"
    ADEQUATE = "adequate"
    CONCENTRATED = "concentrated"
    UNKNOWN = "unknown"


class ComplexityLevel(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    ADVANCED = "advanced"


# Raw amounts and stakes are u256 values: at most 78 decimal digits
MAX_AMOUNT_DIGITS = 78
# Coin metadata stores decimals as a u8
MAX_TOKEN_DECIMALS = 255

# Accept either the enum member or its raw string value from callers
PriorityLike = Union[Priority, str]
RiskLike = Union[RiskTolerance, str]
UrgencyLike = Union[Urgency, str]


@dataclass(frozen=True)
class InputAsset:
    """Resolved input asset with the raw amount in its smallest unit."""

    asset_id: str
    symbol: str
    decimals: int
    amount: str
    name: str = ""


@dataclass(frozen=True)
class OutputAsset:
    """Resolved output asset."""

    asset_id: str
    symbol: str
    decimals: int
    name: str = ""


@dataclass(frozen=True)
class IntentOverrides:
    """Explicit caller choices that bypass the smart defaults.

    Attributes:
        slippage_bps: Used verbatim as max slippage (no clamping)
        deadline_minutes: Used verbatim as the deadline (no clamping)
        protocol_whitelist: Protocols the solver may route through
        protocol_blacklist: Protocols the solver must avoid
    """

    slippage_bps: Optional[int] = None
    deadline_minutes: Optional[int] = None
    protocol_whitelist: Tuple[str, ...] = ()
    protocol_blacklist: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MarketSnapshot:
    """Market context for an asset pair, resolved by the caller."""

    volatility: Optional[VolatilityClass] = None
    liquidity: Optional[LiquidityClass] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "volatility": self.volatility.value if self.volatility else None,
            "liquidity": self.liquidity.value if self.liquidity else None,
        }


@dataclass(frozen=True)
class IntentRequest:
    """Structured request handed to the resolver.

    Attributes:
        user_address: Owner wallet address (Sui format)
        description: Natural-language description, never parsed here
        input_asset: Asset and raw amount to spend
        output_asset: Asset to receive
        priority: Optimization priority (unknown values fall back to balanced)
        risk_tolerance: Risk tolerance (unknown values fall back to medium)
        urgency: Urgency (unknown values fall back to normal)
        intent_type: IGS classification
        output_amount: Raw output target for exact_output, minimum otherwise
        overrides: Optional explicit choices
    """

    user_address: str
    description: str
    input_asset: InputAsset
    output_asset: OutputAsset
    priority: PriorityLike = Priority.BALANCED
    risk_tolerance: RiskLike = RiskTolerance.MEDIUM
    urgency: UrgencyLike = Urgency.NORMAL
    intent_type: IntentType = IntentType.SWAP_EXACT_INPUT
    output_amount: Optional[str] = None
    overrides: IntentOverrides = field(default_factory=IntentOverrides)


@dataclass(frozen=True)
class RankingWeights:
    """Relative weights used to score solver solutions."""

    surplus_weight: int
    gas_cost_weight: int
    execution_speed_weight: int
    reputation_weight: int

    def __post_init__(self) -> None:
        if min(self.as_tuple()) < 0:
            raise ValueError("Ranking weights must be non-negative")

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (
            self.surplus_weight,
            self.gas_cost_weight,
            self.execution_speed_weight,
            self.reputation_weight,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "surplus_weight": self.surplus_weight,
            "gas_cost_weight": self.gas_cost_weight,
            "execution_speed_weight": self.execution_speed_weight,
            "reputation_weight": self.reputation_weight,
        }


@dataclass(frozen=True)
class ParameterBundle:
    """Resolved execution parameters.

    Numeric fields produced by the adjustment pipeline are always within
    bounds (slippage 10-1000 bps, deadline 1-120 minutes); overrides are
    carried verbatim.
    """

    priority: Priority
    slippage_bps: int
    deadline_minutes: int
    max_hops: int
    min_solver_stake: int
    requires_tee: bool
    ranking_weights: RankingWeights
    should_encrypt: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priority": self.priority.value,
            "slippage_bps": self.slippage_bps,
            "deadline_minutes": self.deadline_minutes,
            "max_hops": self.max_hops,
            "min_solver_stake": str(self.min_solver_stake),
            "requires_tee": self.requires_tee,
            "ranking_weights": self.ranking_weights.to_dict(),
            "should_encrypt": self.should_encrypt,
        }


@dataclass(frozen=True)
class Analysis:
    """Read-only diagnostics for an Intent. Recomputable, never stored."""

    complexity: ComplexityLevel
    complexity_score: int
    complexity_factors: List[str]
    estimated_gas_impact: str
    estimated_solver_pool: int
    solver_competition: str
    execution_probability: int
    access_window_hours: float
    risk_factors: List[str]
    optimization_opportunities: List[str]
    routing: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complexity": {
                "level": self.complexity.value,
                "score": self.complexity_score,
                "factors": list(self.complexity_factors),
                "estimated_gas_impact": self.estimated_gas_impact,
            },
            "solver_requirements": {
                "estimated_solver_pool": self.estimated_solver_pool,
                "solver_competition": self.solver_competition,
                "access_window_hours": self.access_window_hours,
            },
            "execution_outlook": {
                "probability_estimate": self.execution_probability,
                "key_risks": list(self.risk_factors),
                "optimization_opportunities": list(self.optimization_opportunities),
            },
            "routing": dict(self.routing),
        }
