from typing import Literal
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from cryptodash import config
from cryptodash.api.dependencies import get_forecast_service
from cryptodash.data.models import AssetSnapshot
from cryptodash.predictive.errors import ForecastError
from cryptodash.predictive.models import BatchForecast, ForecastResult
from cryptodash.services.forecast_service import ForecastService

router = APIRouter()


class ForecastRequest(BaseModel):
    snapshot: AssetSnapshot
    preset: Literal["single", "batch"] = "single"


@router.get("/ping")
def ping():
    return {"message": "predictive router active"}


@router.get("/top", response_model=BatchForecast)
def get_top_forecasts(
    limit: int = Query(config.TOP_ASSETS_LIMIT, ge=1, le=100),
    service: ForecastService = Depends(get_forecast_service),
):
    return service.forecast_top(limit)


@router.post("/forecast", response_model=ForecastResult)
def post_forecast(request: ForecastRequest, service: ForecastService = Depends(get_forecast_service)):
    preset = service.single_config if request.preset == "single" else service.batch_config
    try:
        return service.engine.forecast(request.snapshot, preset)
    except ForecastError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/{symbol}", response_model=ForecastResult)
def get_forecast(symbol: str, service: ForecastService = Depends(get_forecast_service)):
    try:
        result = service.forecast_symbol(symbol)
    except ForecastError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail=f"Unknown symbol {symbol}")
    return result
