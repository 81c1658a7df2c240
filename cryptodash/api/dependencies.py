from typing import Optional

from cryptodash import config
from cryptodash.data.market_provider import MarketProvider, get_provider
from cryptodash.predictive.models import BATCH_CONFIG, SINGLE_ASSET_CONFIG
from cryptodash.services.forecast_service import ForecastService

_provider: Optional[MarketProvider] = None
_service: Optional[ForecastService] = None


def get_market_provider() -> MarketProvider:
    global _provider
    if _provider is None:
        _provider = get_provider()
    return _provider


def get_forecast_service() -> ForecastService:
    global _service
    if _service is None:
        overrides = {"seed": config.FORECAST_SEED, "initial_margin": config.INITIAL_MARGIN}
        _service = ForecastService(
            provider=get_market_provider(),
            single_config=SINGLE_ASSET_CONFIG.model_copy(update=overrides),
            batch_config=BATCH_CONFIG.model_copy(update=overrides),
        )
    return _service
