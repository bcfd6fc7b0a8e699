"""FastAPI dependency providers. Tests swap them via ``app.dependency_overrides``."""

from ..config import settings
from ..core.intent import AnalysisPolicy, AssemblyPolicy, IntentResolver, utc_now
from ..services.address import SuiAddressValidator
from ..services.tokens import StaticTokenRegistry, default_token_registry


def get_token_registry() -> StaticTokenRegistry:
    return default_token_registry


def get_analysis_policy() -> AnalysisPolicy:
    return AnalysisPolicy.from_settings(settings)


def get_resolver() -> IntentResolver:
    return IntentResolver(
        clock=utc_now,
        address_validator=SuiAddressValidator(),
        token_registry=default_token_registry,
        assembly_policy=AssemblyPolicy.from_settings(settings),
        analysis_policy=get_analysis_policy(),
    )
