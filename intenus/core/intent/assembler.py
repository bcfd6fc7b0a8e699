"""
Document Assembler

Combines a validated IntentRequest with its resolved ParameterBundle into
a complete IGS Intent document. Pure: the caller supplies the current time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, List, Optional

from .adjustments import round_half_up
from .amounts import format_base_units
from .defaults import MAX_GAS_COST, coerce_intent_type, coerce_risk
from .document import (
    IGS_VERSION,
    AccessCondition,
    AmountSpec,
    AssetInfo,
    AssetLeg,
    ClientInfo,
    Constraints,
    ExecutionPreferences,
    Intent,
    IntentMetadata,
    IntentObject,
    IntentPolicy,
    Operation,
    OriginalInput,
    Preferences,
    PrivacyPreferences,
    RankingWeightsDoc,
    RoutingConstraints,
    SolverAccessWindow,
)
from .models import IntentRequest, IntentType, ParameterBundle

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MS_PER_MINUTE = 60 * 1000


def to_epoch_ms(moment: datetime) -> int:
    """Exact epoch milliseconds; naive datetimes are treated as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True)
class AutoRevokePolicy:
    """Maps a deadline to the auto-revoke delay.

    Default: one hour per 30 deadline minutes, never less than one hour.
    """

    minutes_per_hour: int = 30
    min_hours: int = 1

    def hours_for(self, deadline_minutes: int) -> int:
        hours = round_half_up(Decimal(deadline_minutes) / Decimal(self.minutes_per_hour))
        return max(self.min_hours, hours)

    def seconds_for(self, deadline_minutes: int) -> int:
        return self.hours_for(deadline_minutes) * 3600


@dataclass(frozen=True)
class AssemblyPolicy:
    """Document-level constants that are product decisions, not logic."""

    auto_revoke: AutoRevokePolicy = field(default_factory=AutoRevokePolicy)
    range_output_cap: str = "99999999999999999"
    client_name: str = "Intenus AI Assistant"
    client_version: str = "1.0.0"
    client_platform: str = "web"
    language: str = "en"
    input_confidence: float = 0.95
    show_top_n: int = 3

    @classmethod
    def from_settings(cls, settings: Any) -> "AssemblyPolicy":
        return cls(
            auto_revoke=AutoRevokePolicy(
                minutes_per_hour=settings.auto_revoke_minutes_per_hour,
                min_hours=settings.auto_revoke_min_hours,
            ),
            range_output_cap=settings.range_output_cap,
            client_name=settings.client_name,
            client_version=settings.client_version,
            client_platform=settings.client_platform,
            language=settings.original_input_language,
            input_confidence=settings.original_input_confidence,
            show_top_n=settings.show_top_n,
        )


def build_output_amount(
    intent_type: IntentType,
    output_amount: Optional[str],
    range_cap: str,
) -> AmountSpec:
    """exact for exact-output, range when a minimum is given, otherwise all."""
    if intent_type is IntentType.SWAP_EXACT_OUTPUT and output_amount is not None:
        return AmountSpec.exact(output_amount)
    if output_amount is not None:
        upper = max(int(output_amount), int(range_cap))
        return AmountSpec.range(output_amount, str(upper))
    return AmountSpec.all()


def generate_tags(request: IntentRequest, bundle: ParameterBundle) -> List[str]:
    intent_type = coerce_intent_type(request.intent_type)
    family = "limit" if intent_type.operation_mode == "limit_order" else "swap"
    return [
        family,
        f"{request.input_asset.symbol}-{request.output_asset.symbol}",
        bundle.priority.value,
        f"risk-{coerce_risk(request.risk_tolerance).value}",
        "ai-generated",
    ]


def expected_outcome(request: IntentRequest) -> str:
    amount = format_base_units(request.input_asset.amount, request.input_asset.decimals)
    return (
        f"Expected to receive {request.output_asset.symbol} in exchange for "
        f"{amount} {request.input_asset.symbol} with optimal routing"
    )


def assemble_intent(
    request: IntentRequest,
    bundle: ParameterBundle,
    now: datetime,
    user_address: Optional[str] = None,
    policy: Optional[AssemblyPolicy] = None,
) -> Intent:
    """Build the Intent document.

    Args:
        request: Validated request
        bundle: Resolved parameters (overrides already applied)
        now: Creation time, read once from the injected clock
        user_address: Normalized owner address (defaults to the request's)
        policy: Document constants (defaults to AssemblyPolicy())

    Returns:
        Frozen Intent document
    """
    policy = policy or AssemblyPolicy()
    owner = user_address or request.user_address
    intent_type = coerce_intent_type(request.intent_type)

    created_ms = to_epoch_ms(now)
    deadline_ms = created_ms + bundle.deadline_minutes * MS_PER_MINUTE

    input_leg = AssetLeg(
        asset_id=request.input_asset.asset_id,
        asset_info=AssetInfo(
            symbol=request.input_asset.symbol,
            decimals=request.input_asset.decimals,
            name=request.input_asset.name,
        ),
        amount=AmountSpec.exact(request.input_asset.amount),
    )
    output_leg = AssetLeg(
        asset_id=request.output_asset.asset_id,
        asset_info=AssetInfo(
            symbol=request.output_asset.symbol,
            decimals=request.output_asset.decimals,
            name=request.output_asset.name,
        ),
        amount=build_output_amount(intent_type, request.output_amount, policy.range_output_cap),
    )

    overrides = request.overrides
    routing = RoutingConstraints(
        max_hops=bundle.max_hops,
        whitelist_protocols=list(overrides.protocol_whitelist) or None,
        blacklist_protocols=list(overrides.protocol_blacklist) or None,
    )

    return Intent(
        igs_version=IGS_VERSION,
        object=IntentObject(
            user_address=owner,
            created_ts=created_ms,
            policy=IntentPolicy(
                solver_access_window=SolverAccessWindow(start_ms=created_ms, end_ms=deadline_ms),
                auto_revoke_time=policy.auto_revoke.seconds_for(bundle.deadline_minutes),
                access_condition=AccessCondition(
                    requires_solver_registration=True,
                    min_solver_stake=str(bundle.min_solver_stake),
                    requires_tee_attestation=bundle.requires_tee,
                    expected_measurement="latest" if bundle.requires_tee else "none",
                    purpose=f"{request.description} - optimized for {bundle.priority.value}",
                ),
            ),
        ),
        user_address=owner,
        intent_type=intent_type,
        description=request.description,
        operation=Operation(
            mode=intent_type.operation_mode,
            inputs=[input_leg],
            outputs=[output_leg],
            expected_outcome=expected_outcome(request),
        ),
        constraints=Constraints(
            max_slippage_bps=bundle.slippage_bps,
            deadline_ms=deadline_ms,
            max_gas_cost=MAX_GAS_COST[bundle.priority],
            routing=routing,
        ),
        preferences=Preferences(
            optimization_goal=bundle.priority.value,
            ranking_weights=RankingWeightsDoc(**bundle.ranking_weights.to_dict()),
            execution=ExecutionPreferences(mode="best_solution", show_top_n=policy.show_top_n),
            privacy=PrivacyPreferences(
                encrypt_intent=bundle.should_encrypt,
                anonymous_execution=False,
            ),
        ),
        metadata=IntentMetadata(
            original_input=OriginalInput(
                text=request.description,
                language=policy.language,
                confidence=policy.input_confidence,
            ),
            client=ClientInfo(
                name=policy.client_name,
                version=policy.client_version,
                platform=policy.client_platform,
            ),
            tags=generate_tags(request, bundle),
        ),
    )
