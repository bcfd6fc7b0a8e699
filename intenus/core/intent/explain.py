"""
Intent explanation, comparison and document validation.

Human-facing views built on top of the analysis heuristics. None of these
change an Intent; they only read it.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from .analysis import (
    STANDARD_RISK,
    AnalysisPolicy,
    analyze_intent,
    compliance_score,
    improvement_recommendations,
)
from .defaults import ESTIMATED_GAS_RANGE, coerce_priority
from .document import Intent
from .models import Analysis, MarketSnapshot

logger = logging.getLogger(__name__)

MIN_COMPARED_INTENTS = 2
MAX_COMPARED_INTENTS = 5

COMPARISON_CRITERIA = (
    "expected_gas_cost",
    "slippage_tolerance",
    "execution_speed",
    "solver_requirements",
    "success_probability",
    "privacy_level",
)


def format_slippage(slippage_bps: int) -> str:
    """100 bps -> "1.00%"."""
    return f"{Decimal(slippage_bps) / 100:.2f}%"


def _gas_range(intent: Intent) -> str:
    goal = intent.preferences.optimization_goal if intent.preferences else None
    return ESTIMATED_GAS_RANGE[coerce_priority(goal)]


# =============================================================================
# Explanation
# =============================================================================


@dataclass
class IntentExplanation:
    summary: str
    execution_plan: Dict[str, Any]
    cost_analysis: Dict[str, Any]
    risk_assessment: Dict[str, Any]
    optimization_notes: Dict[str, Any]
    technical_details: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def risk_level(risks: Sequence[str]) -> str:
    real_risks = [risk for risk in risks if risk != STANDARD_RISK]
    if len(real_risks) > 2:
        return "high"
    if real_risks:
        return "medium"
    return "low"


def explain_intent(
    intent: Intent,
    analysis: Optional[Analysis] = None,
    market: Optional[MarketSnapshot] = None,
    policy: Optional[AnalysisPolicy] = None,
) -> IntentExplanation:
    """Describe what the intent will do, what it costs and what can go wrong."""
    analysis = analysis or analyze_intent(intent, market, policy)
    access_condition = intent.object.policy.access_condition
    preferences = intent.preferences
    weights = preferences.ranking_weights if preferences else None
    goal = preferences.optimization_goal if preferences else "unspecified"

    slippage = intent.max_slippage_bps
    slippage_text = format_slippage(slippage) if slippage is not None else "unbounded"
    window_minutes = intent.access_window_ms // 60_000
    deadline_ms = intent.deadline_window_ms
    hops = intent.routing.max_hops if intent.routing and intent.routing.max_hops else "unlimited"
    revoke_hours = intent.object.policy.auto_revoke_time // 3600
    gas_range = _gas_range(intent)

    steps = [
        f"1. Solver discovers intent during {window_minutes}-minute window",
        f"2. Solver routes through {hops} max hops on recommended protocols",
    ]
    if weights is not None:
        steps.append(f"3. Execution completes with {weights.surplus_weight:g}% focus on best price")
    else:
        steps.append("3. Execution completes with the solver's default ranking")
    steps.append(f"4. Intent auto-revokes after {revoke_hours} hours if unexecuted")

    trade_offs = []
    if weights is not None:
        trade_offs = [
            f"Gas cost vs. execution speed: {weights.gas_cost_weight:g}% vs "
            f"{weights.execution_speed_weight:g}%",
            f"Price optimization: {weights.surplus_weight:g}% weight",
        ]

    return IntentExplanation(
        summary=f"{intent.description or 'Intent'} - optimized for {goal} "
        f"with {slippage_text} expected slippage",
        execution_plan={
            "steps": steps,
            "estimated_time": (
                f"{deadline_ms // 60_000} minutes" if deadline_ms is not None else "no deadline"
            ),
            "solver_selection": (
                f"{analysis.estimated_solver_pool} eligible solvers with min stake "
                f"{access_condition.min_solver_stake}"
            ),
        },
        cost_analysis={
            "gas_estimate": gas_range,
            "protocol_fees": "0.1-0.3%",
            "total_cost_range": gas_range,
        },
        risk_assessment={
            "risk_level": risk_level(analysis.risk_factors),
            "main_risks": list(analysis.risk_factors),
            "mitigation_strategies": [
                "Intent includes slippage protection",
                "Multiple solvers compete for best execution",
                "Auto-revoke prevents stale intent execution",
            ],
        },
        optimization_notes={
            "current_optimization": goal,
            "alternative_approaches": [
                "Could increase slippage tolerance for higher execution probability",
                "Could extend deadline for better solver competition",
                "Could reduce max hops to save gas costs",
            ],
            "trade_offs": trade_offs,
        },
        technical_details={
            "igs_version": intent.igs_version,
            "validation_status": "compliant",
            "compliance_score": compliance_score(intent),
            "compliance_notes": improvement_recommendations(intent),
        },
    )


# =============================================================================
# Document validation
# =============================================================================


@dataclass
class ValidationReport:
    """Outcome of validating an externally supplied Intent payload."""

    valid: bool
    compliance_score: int = 0
    analysis: Optional[Analysis] = None
    recommendations: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    fix_suggestions: List[str] = field(default_factory=list)
    intent: Optional[Intent] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"valid": self.valid}
        if self.valid:
            result["compliance_score"] = self.compliance_score
            result["analysis"] = self.analysis.to_dict() if self.analysis else None
            result["recommendations"] = list(self.recommendations)
        else:
            result["errors"] = list(self.errors)
            result["fix_suggestions"] = list(self.fix_suggestions)
        return result


def fix_suggestions(payload: Mapping[str, Any]) -> List[str]:
    suggestions = []
    if not payload.get("igs_version"):
        suggestions.append('Add igs_version: "1.0.0"')
    if not payload.get("user_address"):
        suggestions.append("Add valid user_address")
    if not payload.get("operation"):
        suggestions.append("Add operation object with mode, inputs, and outputs")
    obj = payload.get("object")
    if not isinstance(obj, Mapping) or not obj.get("policy"):
        suggestions.append("Add object.policy with access conditions")
    return suggestions


def _format_validation_error(exc: ValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return messages


def validate_intent_document(
    payload: Mapping[str, Any],
    market: Optional[MarketSnapshot] = None,
    policy: Optional[AnalysisPolicy] = None,
) -> ValidationReport:
    """Validate an arbitrary Intent payload and grade it.

    Structural problems produce an invalid report with fix suggestions;
    they are never raised.
    """
    if not isinstance(payload, Mapping):
        return ValidationReport(
            valid=False,
            errors=["Intent payload must be a JSON object"],
            fix_suggestions=fix_suggestions({}),
        )
    try:
        intent = Intent.model_validate(dict(payload))
    except ValidationError as exc:
        errors = _format_validation_error(exc)
        logger.info("Intent document failed validation with %d error(s)", len(errors))
        return ValidationReport(
            valid=False,
            errors=errors,
            fix_suggestions=fix_suggestions(payload),
        )

    return ValidationReport(
        valid=True,
        compliance_score=compliance_score(intent),
        analysis=analyze_intent(intent, market, policy),
        recommendations=improvement_recommendations(intent),
        intent=intent,
    )


# =============================================================================
# Comparison
# =============================================================================


@dataclass
class ComparisonItem:
    index: int
    intent_type: str
    metrics: Dict[str, str]
    pros: List[str]
    cons: List[str]


@dataclass
class IntentComparison:
    summary: str
    items: List[ComparisonItem]
    best_by_criterion: Dict[str, int]
    overall_best: int
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _gas_upper_bound(intent: Intent) -> Decimal:
    if intent.constraints and intent.constraints.max_gas_cost:
        return Decimal(intent.constraints.max_gas_cost)
    return Decimal(_gas_range(intent).split("-")[-1])


# Sort key per criterion; the smallest key wins
_RANKERS: Dict[str, Callable[[Intent, Analysis], Any]] = {
    "expected_gas_cost": lambda intent, analysis: _gas_upper_bound(intent),
    "slippage_tolerance": lambda intent, analysis: (
        intent.max_slippage_bps if intent.max_slippage_bps is not None else float("inf")
    ),
    "execution_speed": lambda intent, analysis: intent.access_window_ms,
    "solver_requirements": lambda intent, analysis: -analysis.estimated_solver_pool,
    "success_probability": lambda intent, analysis: -analysis.execution_probability,
    "privacy_level": lambda intent, analysis: 0 if intent.encrypts_intent else 1,
}


def _metric(criterion: str, intent: Intent, analysis: Analysis) -> str:
    if criterion == "expected_gas_cost":
        return _gas_range(intent)
    if criterion == "slippage_tolerance":
        return f"{intent.max_slippage_bps or 0} bps"
    if criterion == "execution_speed":
        return f"{analysis.access_window_hours:.1f} hours"
    if criterion == "solver_requirements":
        return f"{analysis.estimated_solver_pool} eligible solvers"
    if criterion == "success_probability":
        return f"{analysis.execution_probability}%"
    return "high" if intent.encrypts_intent else "standard"


def compare_intents(
    intents: Sequence[Intent],
    criteria: Optional[Sequence[str]] = None,
    market: Optional[MarketSnapshot] = None,
    policy: Optional[AnalysisPolicy] = None,
) -> IntentComparison:
    """Compare 2-5 intents and pick the best one per criterion.

    Ties go to the earlier intent. The overall pick is the intent that wins
    the most criteria.

    Raises:
        ValueError: Wrong number of intents or an unknown criterion
    """
    if not MIN_COMPARED_INTENTS <= len(intents) <= MAX_COMPARED_INTENTS:
        raise ValueError(
            f"Comparison needs between {MIN_COMPARED_INTENTS} and "
            f"{MAX_COMPARED_INTENTS} intents, got {len(intents)}"
        )
    selected = list(criteria) if criteria else list(COMPARISON_CRITERIA)
    unknown = [criterion for criterion in selected if criterion not in _RANKERS]
    if unknown:
        raise ValueError(f"Unknown comparison criteria: {', '.join(unknown)}")

    analyses = [analyze_intent(intent, market, policy) for intent in intents]

    items = [
        ComparisonItem(
            index=index,
            intent_type=intent.intent_type.value,
            metrics={criterion: _metric(criterion, intent, analysis) for criterion in selected},
            pros=analysis.optimization_opportunities[:2],
            cons=analysis.risk_factors[:2],
        )
        for index, (intent, analysis) in enumerate(zip(intents, analyses))
    ]

    best_by_criterion = {}
    for criterion in selected:
        ranker = _RANKERS[criterion]
        best_by_criterion[criterion] = min(
            range(len(intents)),
            key=lambda index: (ranker(intents[index], analyses[index]), index),
        )

    wins = [0] * len(intents)
    for index in best_by_criterion.values():
        wins[index] += 1
    overall_best = max(range(len(intents)), key=lambda index: (wins[index], -index))

    return IntentComparison(
        summary=f"Comparing {len(intents)} intents across {len(selected)} criteria",
        items=items,
        best_by_criterion=best_by_criterion,
        overall_best=overall_best,
        reasoning=(
            f"Intent #{overall_best} is best on {wins[overall_best]} of "
            f"{len(selected)} criteria"
        ),
    )
