"""
Intent Analysis

Read-only heuristics over a finished Intent: complexity classification,
solver-pool estimate, execution-probability score, risk flags and
optimization hints. Everything here is a pure function of the Intent and an
optional MarketSnapshot, so an Analysis can be recomputed at any time.

The coefficients are tunable policy, not calibrated statistics. They are
grouped in AnalysisPolicy so deployments can adjust them via settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, List, Optional

from .adjustments import clamp, round_half_up
from .document import Intent, RoutingConstraints
from .models import (
    Analysis,
    ComplexityLevel,
    LiquidityClass,
    MarketSnapshot,
    VolatilityClass,
)

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE

STANDARD_RISK = "Standard execution risk"
WELL_OPTIMIZED = "Intent is well-optimized for current parameters"
STANDARD_SWAP = "Standard single-asset swap"


@dataclass(frozen=True)
class AnalysisPolicy:
    """Tunable coefficients for the analysis heuristics."""

    # Solver pool
    solver_pool_base: int = 50
    solver_pool_floor: int = 3
    tee_pool_factor: Fraction = Fraction(3, 10)
    high_stake_threshold: int = 5_000_000_000_000
    high_stake_pool_factor: Fraction = Fraction(1, 5)
    elevated_stake_threshold: int = 2_000_000_000_000
    elevated_stake_pool_factor: Fraction = Fraction(1, 2)

    # Execution probability
    probability_base: int = 85
    probability_floor: int = 60
    probability_ceiling: int = 95
    low_volatility_bonus: int = 10
    excellent_liquidity_bonus: int = 5
    tee_penalty: int = 10
    tight_slippage_penalty: int = 5
    long_window_bonus: int = 5

    # Thresholds shared by complexity, risks and opportunities
    tight_slippage_bps: int = 100
    very_tight_slippage_bps: int = 50
    loose_slippage_bps: int = 200
    long_window_minutes: int = 30
    short_window_minutes: int = 5
    extended_window_minutes: int = 60
    small_solver_pool: int = 10
    multi_hop_threshold: int = 2
    max_efficient_hops: int = 3

    # Solver competition labels
    base_stake: int = 1_000_000_000_000

    @classmethod
    def from_settings(cls, settings: Any) -> "AnalysisPolicy":
        return cls(
            solver_pool_base=settings.solver_pool_base,
            solver_pool_floor=settings.solver_pool_floor,
            probability_base=settings.execution_probability_base,
            probability_floor=settings.execution_probability_floor,
            probability_ceiling=settings.execution_probability_ceiling,
        )


DEFAULT_POLICY = AnalysisPolicy()


# =============================================================================
# Intent accessors
# =============================================================================


def _max_hops(intent: Intent) -> Optional[int]:
    routing = intent.routing
    return routing.max_hops if routing else None


def _window_minutes(intent: Intent) -> Decimal:
    """Execution window measured from creation, never from the wall clock."""
    window_ms = intent.deadline_window_ms
    if window_ms is None:
        window_ms = intent.access_window_ms
    return Decimal(window_ms) / Decimal(MS_PER_MINUTE)


# =============================================================================
# Complexity
# =============================================================================


def complexity_score(intent: Intent, policy: AnalysisPolicy = DEFAULT_POLICY) -> int:
    score = 0
    if len(intent.operation.inputs) > 1:
        score += 2 * (len(intent.operation.inputs) - 1)
    if len(intent.operation.outputs) > 1:
        score += 2 * (len(intent.operation.outputs) - 1)

    hops = _max_hops(intent)
    if hops is not None and hops > policy.multi_hop_threshold:
        score += 1
    routing = intent.routing
    if routing and routing.whitelist_protocols:
        score += 1

    if intent.requires_tee:
        score += 2

    slippage = intent.max_slippage_bps
    if slippage is not None and slippage < policy.tight_slippage_bps:
        score += 1
    return score


def classify_complexity(score: int) -> ComplexityLevel:
    if score == 0:
        return ComplexityLevel.SIMPLE
    if score <= 3:
        return ComplexityLevel.MODERATE
    if score <= 6:
        return ComplexityLevel.COMPLEX
    return ComplexityLevel.ADVANCED


def calculate_complexity(intent: Intent, policy: AnalysisPolicy = DEFAULT_POLICY) -> ComplexityLevel:
    return classify_complexity(complexity_score(intent, policy))


def complexity_factors(intent: Intent, policy: AnalysisPolicy = DEFAULT_POLICY) -> List[str]:
    factors = []
    if len(intent.operation.inputs) > 1:
        factors.append("Multiple input assets")
    if len(intent.operation.outputs) > 1:
        factors.append("Multiple output assets")
    hops = _max_hops(intent)
    if hops is not None and hops > policy.multi_hop_threshold:
        factors.append("Multi-hop routing")
    routing = intent.routing
    if routing and routing.whitelist_protocols:
        factors.append("Protocol whitelist")
    if intent.requires_tee:
        factors.append("TEE attestation required")
    slippage = intent.max_slippage_bps
    if slippage is not None and slippage < policy.tight_slippage_bps:
        factors.append("Tight slippage tolerance")
    if intent.encrypts_intent:
        factors.append("Privacy encryption")
    return factors or [STANDARD_SWAP]


def estimate_gas_impact(intent: Intent, policy: AnalysisPolicy = DEFAULT_POLICY) -> str:
    """Coarse gas bucket: low, medium or high."""
    level = calculate_complexity(intent, policy)
    hops = _max_hops(intent) or policy.multi_hop_threshold
    if level is ComplexityLevel.SIMPLE and hops <= policy.multi_hop_threshold:
        return "low"
    if level is ComplexityLevel.ADVANCED or hops > policy.max_efficient_hops:
        return "high"
    return "medium"


# =============================================================================
# Solver requirements
# =============================================================================


def estimate_solver_pool(intent: Intent, policy: AnalysisPolicy = DEFAULT_POLICY) -> int:
    """Estimate how many registered solvers can serve the intent.

    TEE scales the base pool by 0.3. The higher stake tier is checked
    first so a stake above 5e12 narrows the pool more than one above 2e12.
    """
    pool = Fraction(policy.solver_pool_base)
    if intent.requires_tee:
        pool *= policy.tee_pool_factor

    stake = intent.min_solver_stake
    if stake > policy.high_stake_threshold:
        pool *= policy.high_stake_pool_factor
    elif stake > policy.elevated_stake_threshold:
        pool *= policy.elevated_stake_pool_factor

    rounded = round_half_up(Decimal(pool.numerator) / Decimal(pool.denominator))
    return max(policy.solver_pool_floor, rounded)


def solver_competition(min_solver_stake: int, policy: AnalysisPolicy = DEFAULT_POLICY) -> str:
    if min_solver_stake > policy.base_stake * 3:
        return "low - high barriers"
    if min_solver_stake > policy.base_stake:
        return "moderate"
    return "high - competitive"


def access_window_hours(intent: Intent) -> float:
    return round(intent.access_window_ms / MS_PER_HOUR, 2)


# =============================================================================
# Execution outlook
# =============================================================================


def execution_probability(
    intent: Intent,
    market: Optional[MarketSnapshot] = None,
    policy: AnalysisPolicy = DEFAULT_POLICY,
) -> int:
    """Bounded heuristic score in [floor, ceiling]."""
    probability = policy.probability_base

    if market is not None:
        if market.volatility is VolatilityClass.LOW:
            probability += policy.low_volatility_bonus
        if market.liquidity is LiquidityClass.EXCELLENT:
            probability += policy.excellent_liquidity_bonus

    if intent.requires_tee:
        probability -= policy.tee_penalty
    slippage = intent.max_slippage_bps
    if slippage is not None and slippage < policy.tight_slippage_bps:
        probability -= policy.tight_slippage_penalty
    if _window_minutes(intent) > policy.long_window_minutes:
        probability += policy.long_window_bonus

    return clamp(probability, policy.probability_floor, policy.probability_ceiling)


def identify_risks(intent: Intent, policy: AnalysisPolicy = DEFAULT_POLICY) -> List[str]:
    """Ordered risk flags; never empty."""
    risks = []
    if _window_minutes(intent) < policy.short_window_minutes:
        risks.append(f"Very tight deadline (<{policy.short_window_minutes} min)")
    slippage = intent.max_slippage_bps
    if slippage is not None and slippage < policy.very_tight_slippage_bps:
        risks.append("Very tight slippage tolerance - may fail to execute")
    if intent.requires_tee:
        risks.append("TEE requirement significantly reduces solver pool")
    if estimate_solver_pool(intent, policy) < policy.small_solver_pool:
        risks.append("Small eligible solver pool - limited competition")
    return risks or [STANDARD_RISK]


def find_optimization_opportunities(
    intent: Intent, policy: AnalysisPolicy = DEFAULT_POLICY
) -> List[str]:
    """Advisory hints; never empty and never blocking."""
    opportunities = []
    slippage = intent.max_slippage_bps
    if slippage is not None and slippage > policy.loose_slippage_bps:
        opportunities.append("Consider tightening slippage tolerance for better price execution")
    hops = _max_hops(intent)
    if hops is None or hops > policy.max_efficient_hops:
        opportunities.append("Limit max hops to reduce gas costs")
    if _window_minutes(intent) > policy.extended_window_minutes:
        opportunities.append("Long deadline allows for better solver competition")
    if intent.min_solver_stake > policy.high_stake_threshold:
        opportunities.append("Consider lowering min solver stake to increase competition")
    return opportunities or [WELL_OPTIMIZED]


def summarize_routing(routing: Optional[RoutingConstraints]) -> Dict[str, Any]:
    if routing is None:
        return {"type": "unrestricted"}
    return {
        "type": "constrained",
        "max_hops": routing.max_hops if routing.max_hops is not None else "unlimited",
        "whitelisted_protocols": len(routing.whitelist_protocols or []),
        "blacklisted_protocols": len(routing.blacklist_protocols or []),
    }


def analyze_intent(
    intent: Intent,
    market: Optional[MarketSnapshot] = None,
    policy: Optional[AnalysisPolicy] = None,
) -> Analysis:
    """Compute the full Analysis for an Intent. Never raises for a valid Intent."""
    policy = policy or DEFAULT_POLICY
    score = complexity_score(intent, policy)
    return Analysis(
        complexity=classify_complexity(score),
        complexity_score=score,
        complexity_factors=complexity_factors(intent, policy),
        estimated_gas_impact=estimate_gas_impact(intent, policy),
        estimated_solver_pool=estimate_solver_pool(intent, policy),
        solver_competition=solver_competition(intent.min_solver_stake, policy),
        execution_probability=execution_probability(intent, market, policy),
        access_window_hours=access_window_hours(intent),
        risk_factors=identify_risks(intent, policy),
        optimization_opportunities=find_optimization_opportunities(intent, policy),
        routing=summarize_routing(intent.routing),
    )


# =============================================================================
# Document quality
# =============================================================================


def compliance_score(intent: Intent) -> int:
    """100 minus penalties for missing or risky fields, floored at 0."""
    score = 100
    if not intent.igs_version:
        score -= 10
    if not intent.user_address:
        score -= 10
    if not intent.operation.mode:
        score -= 10

    if intent.constraints is None:
        score -= 5
    if intent.preferences is None:
        score -= 5
    if intent.metadata is None:
        score -= 5

    slippage = intent.max_slippage_bps
    if slippage is not None and slippage > 500:
        score -= 10
    if intent.operation.inputs[0].asset_info is None:
        score -= 5
    return max(0, score)


def improvement_recommendations(intent: Intent) -> List[str]:
    recommendations = []
    if intent.metadata is None:
        recommendations.append("Add metadata for better intent tracking")
    if intent.routing is None:
        recommendations.append("Add routing constraints for more predictable execution")
    if intent.preferences is None or intent.preferences.execution is None:
        recommendations.append("Specify execution preferences for better solver selection")
    if compliance_score(intent) < 90:
        recommendations.append("Review compliance score - some required fields may be missing")
    return recommendations or ["Intent is well-structured"]
