from typing import Any, Dict

from fastapi import APIRouter

from .. import __version__
from ..core.intent import IGS_VERSION
from ..services.tokens import default_token_registry

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Liveness probe. The resolver has no upstream dependencies to check."""
    return {
        "status": "healthy",
        "version": __version__,
        "igs_version": IGS_VERSION,
        "supported_tokens": len(default_token_registry.supported_symbols()),
    }
