from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from .dependencies import get_token_registry
from ..services.tokens import StaticTokenRegistry

router = APIRouter()


class TokenResponse(BaseModel):
    symbol: str
    asset_id: str
    decimals: int
    name: str
    price_id: Optional[str] = None


@router.get("/tokens", response_model=List[TokenResponse])
async def list_tokens(
    registry: StaticTokenRegistry = Depends(get_token_registry),
) -> List[TokenResponse]:
    """Tokens the resolver can build intents for."""
    return [
        TokenResponse(
            symbol=token.symbol,
            asset_id=token.asset_id,
            decimals=token.decimals,
            name=token.name,
            price_id=token.price_id,
        )
        for token in registry.tokens()
    ]
