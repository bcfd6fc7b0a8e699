"""IGS v1.0.0 Intent document.

The Intent is the unit of exchange with the signing layer and the solver
network. Models are frozen: once the assembler returns a document it is
never mutated. The same models validate externally supplied payloads.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from .models import MAX_AMOUNT_DIGITS, MAX_TOKEN_DECIMALS, AmountType, IntentType

IGS_VERSION = "1.0.0"

MAX_U64 = 2**64 - 1

# Base-unit integers carried as decimal strings
RawAmount = Annotated[str, StringConstraints(pattern=r"^[0-9]+$", max_length=MAX_AMOUNT_DIGITS)]
EpochMs = Annotated[int, Field(ge=0, le=MAX_U64)]
GasAmount = Annotated[str, StringConstraints(pattern=r"^[0-9]+(\.[0-9]+)?$", max_length=40)]


class IGSModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class SolverAccessWindow(IGSModel):
    start_ms: EpochMs
    end_ms: EpochMs

    @model_validator(mode="after")
    def _check_order(self) -> "SolverAccessWindow":
        if self.end_ms < self.start_ms:
            raise ValueError("solver_access_window.end_ms must not precede start_ms")
        return self


class AccessCondition(IGSModel):
    requires_solver_registration: bool = True
    min_solver_stake: RawAmount
    requires_tee_attestation: bool = False
    expected_measurement: str = "none"
    purpose: str = ""


class IntentPolicy(IGSModel):
    solver_access_window: SolverAccessWindow
    auto_revoke_time: int = Field(ge=0, le=MAX_U64, description="Seconds until the intent auto-revokes")
    access_condition: AccessCondition


class IntentObject(IGSModel):
    user_address: str
    created_ts: EpochMs
    policy: IntentPolicy


class AssetInfo(IGSModel):
    symbol: str
    decimals: int = Field(ge=0, le=MAX_TOKEN_DECIMALS)
    name: str = ""


class AmountSpec(IGSModel):
    """Amount of a leg: ``exact`` needs value, ``range`` needs min and max."""

    type: AmountType
    value: Optional[RawAmount] = None
    min: Optional[RawAmount] = None
    max: Optional[RawAmount] = None

    @model_validator(mode="after")
    def _check_shape(self) -> "AmountSpec":
        if self.type is AmountType.EXACT and self.value is None:
            raise ValueError("exact amounts require a value")
        if self.type is AmountType.RANGE:
            if self.min is None or self.max is None:
                raise ValueError("range amounts require min and max")
            if int(self.min) > int(self.max):
                raise ValueError("range min must not exceed max")
        return self

    @classmethod
    def exact(cls, value: str) -> "AmountSpec":
        return cls(type=AmountType.EXACT, value=value)

    @classmethod
    def range(cls, minimum: str, maximum: str) -> "AmountSpec":
        return cls(type=AmountType.RANGE, min=minimum, max=maximum)

    @classmethod
    def all(cls) -> "AmountSpec":
        return cls(type=AmountType.ALL)


class AssetLeg(IGSModel):
    asset_id: str
    asset_info: Optional[AssetInfo] = None
    amount: AmountSpec

    @property
    def label(self) -> str:
        return self.asset_info.symbol if self.asset_info else self.asset_id


class Operation(IGSModel):
    mode: Literal["exact_input", "exact_output", "limit_order"]
    inputs: List[AssetLeg] = Field(min_length=1)
    outputs: List[AssetLeg] = Field(min_length=1)
    expected_outcome: Optional[str] = None


class RoutingConstraints(IGSModel):
    max_hops: Optional[int] = Field(default=None, ge=1)
    whitelist_protocols: Optional[List[str]] = None
    blacklist_protocols: Optional[List[str]] = None


class Constraints(IGSModel):
    max_slippage_bps: Optional[int] = Field(default=None, ge=0, le=10_000)
    deadline_ms: Optional[EpochMs] = None
    max_gas_cost: Optional[GasAmount] = None
    routing: Optional[RoutingConstraints] = None


class RankingWeightsDoc(IGSModel):
    surplus_weight: float = Field(ge=0)
    gas_cost_weight: float = Field(ge=0)
    execution_speed_weight: float = Field(ge=0)
    reputation_weight: float = Field(ge=0)


class ExecutionPreferences(IGSModel):
    mode: str = "best_solution"
    show_top_n: int = Field(default=3, ge=1)


class PrivacyPreferences(IGSModel):
    encrypt_intent: bool = False
    anonymous_execution: bool = False


class Preferences(IGSModel):
    optimization_goal: str
    ranking_weights: Optional[RankingWeightsDoc] = None
    execution: Optional[ExecutionPreferences] = None
    privacy: Optional[PrivacyPreferences] = None


class OriginalInput(IGSModel):
    text: str
    language: str = "en"
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class ClientInfo(IGSModel):
    name: str
    version: str
    platform: str


class IntentMetadata(IGSModel):
    original_input: Optional[OriginalInput] = None
    client: Optional[ClientInfo] = None
    tags: List[str] = Field(default_factory=list)


class Intent(IGSModel):
    """Complete IGS Intent document."""

    igs_version: Literal["1.0.0"]
    object: IntentObject
    user_address: str
    intent_type: IntentType
    description: Optional[str] = None
    operation: Operation
    constraints: Optional[Constraints] = None
    preferences: Optional[Preferences] = None
    metadata: Optional[IntentMetadata] = None

    @property
    def requires_tee(self) -> bool:
        return self.object.policy.access_condition.requires_tee_attestation

    @property
    def min_solver_stake(self) -> int:
        return int(self.object.policy.access_condition.min_solver_stake)

    @property
    def access_window_ms(self) -> int:
        window = self.object.policy.solver_access_window
        return window.end_ms - window.start_ms

    @property
    def deadline_window_ms(self) -> Optional[int]:
        """Time between creation and the absolute deadline, if one is set."""
        if not self.constraints or self.constraints.deadline_ms is None:
            return None
        return self.constraints.deadline_ms - self.object.created_ts

    @property
    def max_slippage_bps(self) -> Optional[int]:
        return self.constraints.max_slippage_bps if self.constraints else None

    @property
    def routing(self) -> Optional[RoutingConstraints]:
        return self.constraints.routing if self.constraints else None

    @property
    def encrypts_intent(self) -> bool:
        privacy = self.preferences.privacy if self.preferences else None
        return bool(privacy and privacy.encrypt_intent)
