"""
Intent API Endpoints

Build IGS intents from structured swap requests, validate externally
supplied intent documents, and compare alternatives side by side.
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field, StrictInt, ValidationError

from ..core.intent import (
    AnalysisPolicy,
    Intent,
    IntentError,
    IntentOverrides,
    IntentResolver,
    IntentType,
    LiquidityClass,
    MarketSnapshot,
    Rejected,
    UnsupportedAsset,
    VolatilityClass,
    build_request,
    compare_intents,
    explain_intent,
    validate_intent_document,
)
from ..core.intent.defaults import ESTIMATED_GAS_RANGE, MAX_GAS_COST
from ..core.intent.explain import COMPARISON_CRITERIA, MAX_COMPARED_INTENTS, MIN_COMPARED_INTENTS, format_slippage
from ..services.tokens import StaticTokenRegistry
from .dependencies import get_analysis_policy, get_resolver, get_token_registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/intents", tags=["Intents"])

Criterion = Literal[
    "expected_gas_cost",
    "slippage_tolerance",
    "execution_speed",
    "solver_requirements",
    "success_probability",
    "privacy_level",
]


# =============================================================================
# Request/Response Models
# =============================================================================


class MarketContextModel(BaseModel):
    """Caller-resolved market context for the pair."""
    volatility: Optional[VolatilityClass] = None
    liquidity: Optional[LiquidityClass] = None

    def to_snapshot(self) -> MarketSnapshot:
        return MarketSnapshot(volatility=self.volatility, liquidity=self.liquidity)


class BuildIntentRequest(BaseModel):
    """Structured swap request with human-readable amounts."""
    user_address: str
    description: str = Field(..., min_length=1)
    input_token: str
    input_amount: str = Field(..., description="Human amount, e.g. '2.5'")
    output_token: str
    output_amount: Optional[str] = Field(
        None, description="Exact target for exact_output, minimum to receive otherwise"
    )
    intent_type: IntentType = IntentType.SWAP_EXACT_INPUT
    # Plain strings: unknown values fall back to defaults instead of failing
    priority: str = "balanced"
    risk_tolerance: str = "medium"
    urgency: str = "normal"
    slippage_bps: Optional[StrictInt] = None
    deadline_minutes: Optional[StrictInt] = None
    protocol_whitelist: List[str] = Field(default_factory=list)
    protocol_blacklist: List[str] = Field(default_factory=list)
    market: Optional[MarketContextModel] = None
    include_explanation: bool = False


class CompareIntentsRequest(BaseModel):
    intents: List[Dict[str, Any]] = Field(
        ..., min_length=MIN_COMPARED_INTENTS, max_length=MAX_COMPARED_INTENTS
    )
    criteria: List[Criterion] = Field(default_factory=lambda: list(COMPARISON_CRITERIA))
    market: Optional[MarketContextModel] = None


def error_detail(error: IntentError) -> Dict[str, Any]:
    """Flatten a tagged error into the HTTP error body."""
    detail = error.to_dict()
    if isinstance(error, UnsupportedAsset):
        detail["supported_tokens"] = list(error.supported_symbols)
    return detail


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/build")
async def build_intent(
    body: BuildIntentRequest,
    resolver: IntentResolver = Depends(get_resolver),
    registry: StaticTokenRegistry = Depends(get_token_registry),
) -> Dict[str, Any]:
    """Resolve a swap request into an IGS intent with smart defaults."""
    try:
        request = build_request(
            registry,
            resolver.address_validator,
            user_address=body.user_address,
            description=body.description,
            input_symbol=body.input_token,
            input_amount=body.input_amount,
            output_symbol=body.output_token,
            output_amount=body.output_amount,
            priority=body.priority,
            risk_tolerance=body.risk_tolerance,
            urgency=body.urgency,
            intent_type=body.intent_type,
            overrides=IntentOverrides(
                slippage_bps=body.slippage_bps,
                deadline_minutes=body.deadline_minutes,
                protocol_whitelist=tuple(body.protocol_whitelist),
                protocol_blacklist=tuple(body.protocol_blacklist),
            ),
        )
    except IntentError as exc:
        logger.info("Intent build rejected: %s", exc.code.value)
        raise HTTPException(status_code=400, detail=error_detail(exc))

    market = body.market.to_snapshot() if body.market else None
    result = resolver.resolve(request, market)
    if isinstance(result, Rejected):
        raise HTTPException(status_code=400, detail=error_detail(result.error))

    bundle = result.parameters
    response = result.to_dict()
    response["smart_defaults"] = {
        "expected_slippage": format_slippage(bundle.slippage_bps),
        "estimated_gas_range": ESTIMATED_GAS_RANGE[bundle.priority],
        "max_gas_cost": MAX_GAS_COST[bundle.priority],
        "auto_revoke_hours": resolver.assembly_policy.auto_revoke.hours_for(bundle.deadline_minutes),
        "solver_competition": result.analysis.solver_competition,
    }
    if body.include_explanation:
        response["explanation"] = explain_intent(result.intent, result.analysis).to_dict()
    return response


@router.post("/validate")
async def validate_intent(
    payload: Dict[str, Any] = Body(...),
    explain: bool = False,
    policy: AnalysisPolicy = Depends(get_analysis_policy),
) -> Dict[str, Any]:
    """Grade an intent document. Invalid documents still return 200 with fixes."""
    report = validate_intent_document(payload, policy=policy)
    response = report.to_dict()
    if explain and report.intent is not None:
        response["explanation"] = explain_intent(report.intent, report.analysis).to_dict()
    return response


@router.post("/compare")
async def compare(
    body: CompareIntentsRequest,
    policy: AnalysisPolicy = Depends(get_analysis_policy),
) -> Dict[str, Any]:
    """Compare 2-5 intent documents across the selected criteria."""
    intents = []
    for index, payload in enumerate(body.intents):
        try:
            intents.append(Intent.model_validate(payload))
        except ValidationError as exc:
            raise HTTPException(
                status_code=422,
                detail={
                    "code": "InvalidIntentDocument",
                    "message": f"Intent #{index} is not a valid IGS document",
                    "index": index,
                    "errors": [
                        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                        for err in exc.errors()
                    ],
                },
            )

    market = body.market.to_snapshot() if body.market else None
    comparison = compare_intents(intents, body.criteria, market=market, policy=policy)
    return comparison.to_dict()
