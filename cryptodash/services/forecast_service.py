"""
Forecast Service - joins a market provider with the forecast engine
"""
import logging
from typing import Dict, List, Optional

from cryptodash.data.market_provider import MarketProvider
from cryptodash.data.models import AssetSnapshot
from cryptodash.predictive.engine import ForecastEngine
from cryptodash.predictive.models import (
    BATCH_CONFIG,
    SINGLE_ASSET_CONFIG,
    BatchForecast,
    ForecastConfig,
    ForecastResult,
)
from cryptodash.signals.indicators import signals_from_bars
from cryptodash.signals.models import RecommendationMode, TechnicalSignals

logger = logging.getLogger(__name__)


class ForecastService:
    """Pulls snapshots from the injected provider and forecasts them.

    Holds no results between calls; every call builds fresh forecasts.
    """

    def __init__(
        self,
        provider: MarketProvider,
        engine: Optional[ForecastEngine] = None,
        single_config: ForecastConfig = SINGLE_ASSET_CONFIG,
        batch_config: ForecastConfig = BATCH_CONFIG,
        history_bars: int = 100,
    ):
        self.provider = provider
        self.engine = engine or ForecastEngine(single_config)
        self.single_config = single_config
        self.batch_config = batch_config
        self.history_bars = history_bars

    def technical_signals(self, snapshots: List[AssetSnapshot]) -> Dict[str, TechnicalSignals]:
        signals = {}
        for snapshot in snapshots:
            history = self.provider.price_history(snapshot, self.history_bars)
            if history:
                signals[snapshot.id] = signals_from_bars(history, snapshot.current_price)
        return signals

    def forecast_symbol(self, symbol: str) -> Optional[ForecastResult]:
        snapshot = self.provider.get(symbol)
        if snapshot is None:
            logger.info("Unknown symbol %s", symbol)
            return None
        return self.engine.forecast(snapshot, self.single_config)

    def forecast_top(self, limit: int = 20) -> BatchForecast:
        snapshots = self.provider.top_by_volume(limit)
        signals = None
        if self.batch_config.recommendation_mode == RecommendationMode.SIGNAL_VOTING:
            signals = self.technical_signals(snapshots)
        return self.engine.forecast_batch(snapshots, self.batch_config, signals)
