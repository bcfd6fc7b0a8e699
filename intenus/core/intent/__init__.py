"""
Intent Resolution Module

Turns structured swap requests into IGS v1.0.0 Intent documents with
smart-default execution parameters and a derived analysis.
"""

from .adjustments import apply_adjustments, apply_overrides, resolve_parameters
from .amounts import format_base_units, parse_token_amount
from .analysis import AnalysisPolicy, analyze_intent, compliance_score
from .assembler import AssemblyPolicy, AutoRevokePolicy, assemble_intent
from .defaults import DEFAULTS_TABLE, baseline_for
from .document import IGS_VERSION, Intent
from .errors import (
    IntentError,
    IntentErrorCode,
    InvalidAddress,
    InvalidAmount,
    InvalidSymbol,
    OverrideOutOfRange,
    UnsupportedAsset,
)
from .explain import compare_intents, explain_intent, validate_intent_document
from .models import (
    Analysis,
    ComplexityLevel,
    InputAsset,
    IntentOverrides,
    IntentRequest,
    IntentType,
    LiquidityClass,
    MarketSnapshot,
    OutputAsset,
    ParameterBundle,
    Priority,
    RankingWeights,
    RiskTolerance,
    Urgency,
    VolatilityClass,
)
from .protocol import AddressValidator, Clock, TokenInfo, TokenRegistry, utc_now
from .resolver import IntentResolver, Rejected, Resolved, build_request, resolve_intent

__all__ = [
    # Resolver
    "IntentResolver",
    "Resolved",
    "Rejected",
    "resolve_intent",
    "build_request",
    # Pipeline stages
    "DEFAULTS_TABLE",
    "baseline_for",
    "apply_adjustments",
    "apply_overrides",
    "resolve_parameters",
    "parse_token_amount",
    "format_base_units",
    "assemble_intent",
    "AssemblyPolicy",
    "AutoRevokePolicy",
    "analyze_intent",
    "AnalysisPolicy",
    "compliance_score",
    "explain_intent",
    "compare_intents",
    "validate_intent_document",
    # Models
    "Analysis",
    "ComplexityLevel",
    "InputAsset",
    "Intent",
    "IGS_VERSION",
    "IntentOverrides",
    "IntentRequest",
    "IntentType",
    "LiquidityClass",
    "MarketSnapshot",
    "OutputAsset",
    "ParameterBundle",
    "Priority",
    "RankingWeights",
    "RiskTolerance",
    "Urgency",
    "VolatilityClass",
    # Capabilities
    "AddressValidator",
    "Clock",
    "TokenInfo",
    "TokenRegistry",
    "utc_now",
    # Errors
    "IntentError",
    "IntentErrorCode",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidSymbol",
    "OverrideOutOfRange",
    "UnsupportedAsset",
]
