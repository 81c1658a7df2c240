from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query

from cryptodash import config
from cryptodash.api.dependencies import get_market_provider
from cryptodash.data.market_provider import MarketProvider
from cryptodash.data.models import AssetSnapshot

router = APIRouter()


@router.get("/top", response_model=List[AssetSnapshot])
def get_top(
    limit: int = Query(config.TOP_ASSETS_LIMIT, ge=1, le=100, description="Number of assets by 24h volume"),
    provider: MarketProvider = Depends(get_market_provider),
):
    return provider.top_by_volume(limit)


@router.get("/{symbol}", response_model=AssetSnapshot)
def get_snapshot(symbol: str, provider: MarketProvider = Depends(get_market_provider)):
    snapshot = provider.get(symbol)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Unknown symbol {symbol}")
    return snapshot
