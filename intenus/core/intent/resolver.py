"""
Intent Resolver

Entry point that runs the whole pipeline for one request:

    validate -> defaults -> adjustments -> overrides -> assemble -> analyze

Validation failures come back as ``Rejected``; nothing is raised to the
caller and no partial Intent is produced. Successful runs return
``Resolved`` carrying the Intent, its Analysis and the ParameterBundle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .adjustments import resolve_parameters
from .amounts import parse_human_amount, to_base_units
from .analysis import AnalysisPolicy, analyze_intent
from .assembler import AssemblyPolicy, assemble_intent
from .document import Intent
from .errors import IntentError, UnsupportedAsset
from .models import (
    Analysis,
    InputAsset,
    IntentOverrides,
    IntentRequest,
    IntentType,
    MarketSnapshot,
    OutputAsset,
    ParameterBundle,
    Priority,
    PriorityLike,
    RiskLike,
    RiskTolerance,
    Urgency,
    UrgencyLike,
)
from .protocol import AddressValidator, Clock, TokenRegistry, utc_now
from .validation import validate_address, validate_request, validate_symbol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolved:
    """Successful resolution."""

    intent: Intent
    analysis: Analysis
    parameters: ParameterBundle

    ok = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": True,
            "intent": self.intent.model_dump(mode="json", exclude_none=True),
            "analysis": self.analysis.to_dict(),
            "parameters": self.parameters.to_dict(),
        }


@dataclass(frozen=True)
class Rejected:
    """Validation failure; carries the first error found."""

    error: IntentError

    ok = False

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.error.to_dict()}


Resolution = Union[Resolved, Rejected]


class IntentResolver:
    """
    Resolves IntentRequests into IGS Intent documents.

    All collaborators are injected. The clock is read exactly once per
    resolution, so a fixed clock makes the output fully deterministic.
    """

    def __init__(
        self,
        clock: Clock,
        address_validator: AddressValidator,
        token_registry: Optional[TokenRegistry] = None,
        assembly_policy: Optional[AssemblyPolicy] = None,
        analysis_policy: Optional[AnalysisPolicy] = None,
    ):
        """
        Initialize the resolver.

        Args:
            clock: Returns the current time (timezone-aware UTC preferred)
            address_validator: Chain address rules
            token_registry: When given, both assets must be registered
            assembly_policy: Document constants (client info, revoke policy)
            analysis_policy: Heuristic coefficients
        """
        self.clock = clock
        self.address_validator = address_validator
        self.token_registry = token_registry
        self.assembly_policy = assembly_policy or AssemblyPolicy()
        self.analysis_policy = analysis_policy or AnalysisPolicy()

    def resolve(
        self,
        request: IntentRequest,
        market: Optional[MarketSnapshot] = None,
    ) -> Resolution:
        try:
            owner = validate_request(request, self.address_validator, self.token_registry)
        except IntentError as exc:
            logger.info("Intent request rejected: %s (%s)", exc.code.value, exc.message)
            return Rejected(exc)

        bundle = resolve_parameters(
            request.priority,
            request.risk_tolerance,
            request.urgency,
            market,
            request.overrides,
        )
        intent = assemble_intent(
            request,
            bundle,
            self.clock(),
            user_address=owner,
            policy=self.assembly_policy,
        )
        analysis = analyze_intent(intent, market, self.analysis_policy)

        logger.debug(
            "Resolved %s intent %s->%s: slippage=%dbps deadline=%dmin tee=%s",
            bundle.priority.value,
            request.input_asset.symbol,
            request.output_asset.symbol,
            bundle.slippage_bps,
            bundle.deadline_minutes,
            bundle.requires_tee,
        )
        return Resolved(intent=intent, analysis=analysis, parameters=bundle)


def resolve_intent(
    request: IntentRequest,
    address_validator: AddressValidator,
    market: Optional[MarketSnapshot] = None,
    clock: Clock = utc_now,
    token_registry: Optional[TokenRegistry] = None,
) -> Resolution:
    """One-shot convenience wrapper around IntentResolver.resolve."""
    resolver = IntentResolver(
        clock=clock,
        address_validator=address_validator,
        token_registry=token_registry,
    )
    return resolver.resolve(request, market)


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def build_request(
    registry: TokenRegistry,
    address_validator: AddressValidator,
    user_address: str,
    description: str,
    input_symbol: str,
    input_amount: str,
    output_symbol: str,
    output_amount: Optional[str] = None,
    priority: PriorityLike = Priority.BALANCED,
    risk_tolerance: RiskLike = RiskTolerance.MEDIUM,
    urgency: UrgencyLike = Urgency.NORMAL,
    intent_type: IntentType = IntentType.SWAP_EXACT_INPUT,
    overrides: Optional[IntentOverrides] = None,
) -> IntentRequest:
    """Build an IntentRequest from token symbols and human-readable amounts.

    Checks run in the resolver's order: address, amount syntax, symbol
    format, registry lookup. Precision against the token's decimals is
    checked once the token is known. Amounts such as "2.5" are converted to
    base units exactly.

    Raises:
        InvalidAddress: The owner address fails the chain format check
        InvalidAmount: An amount is malformed, too large or too precise
        InvalidSymbol: A symbol is not 1-20 alphanumeric characters
        UnsupportedAsset: A symbol is not in the registry
    """
    validate_address(user_address, address_validator)

    input_value = parse_human_amount(input_amount, "input_amount")
    output_value = None
    if output_amount is not None:
        output_value = parse_human_amount(output_amount, "output_amount")

    input_symbol = validate_symbol(_strip(input_symbol), "input_asset")
    output_symbol = validate_symbol(_strip(output_symbol), "output_asset")

    input_token = registry.lookup(input_symbol)
    if input_token is None:
        raise UnsupportedAsset(input_symbol, registry.supported_symbols(), "input_asset")
    output_token = registry.lookup(output_symbol)
    if output_token is None:
        raise UnsupportedAsset(output_symbol, registry.supported_symbols(), "output_asset")

    raw_output = None
    if output_value is not None:
        raw_output = to_base_units(output_value, output_token.decimals, "output_amount")

    return IntentRequest(
        user_address=user_address,
        description=description,
        input_asset=InputAsset(
            asset_id=input_token.asset_id,
            symbol=input_token.symbol,
            decimals=input_token.decimals,
            amount=to_base_units(input_value, input_token.decimals, "input_amount"),
            name=input_token.name,
        ),
        output_asset=OutputAsset(
            asset_id=output_token.asset_id,
            symbol=output_token.symbol,
            decimals=output_token.decimals,
            name=output_token.name,
        ),
        priority=priority,
        risk_tolerance=risk_tolerance,
        urgency=urgency,
        intent_type=intent_type,
        output_amount=raw_output,
        overrides=overrides or IntentOverrides(),
    )
