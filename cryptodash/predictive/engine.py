import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from cryptodash.data.models import AssetSnapshot
from cryptodash.predictive.confidence import aggregate_confidence
from cryptodash.predictive.errors import ForecastError, InvalidSnapshotError, SimulationError
from cryptodash.predictive.leverage import leverage_profit
from cryptodash.predictive.models import (
    BATCH_CONFIG,
    SINGLE_ASSET_CONFIG,
    BatchForecast,
    DriftSource,
    ForecastConfig,
    ForecastFailure,
    ForecastResult,
)
from cryptodash.predictive.paths import RandomSource, simulate_path
from cryptodash.predictive.volatility import estimate_volatility
from cryptodash.signals.engine import recommend
from cryptodash.signals.models import RecommendationMode, TechnicalSignals

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = (
    "current_price",
    "high_24h",
    "low_24h",
    "price_change_percentage_24h",
    "price_change_percentage_1h",
    "total_volume",
    "market_cap",
)


def validate_snapshot(snapshot: AssetSnapshot) -> None:
    """Reject snapshots the simulation cannot start from.

    High/low outside the current price is tolerated.
    """
    for name in NUMERIC_FIELDS:
        value = getattr(snapshot, name)
        if value is not None and not math.isfinite(value):
            raise InvalidSnapshotError(f"{snapshot.id}: {name} is not finite ({value})")
    if snapshot.current_price <= 0:
        raise InvalidSnapshotError(f"{snapshot.id}: current_price must be positive ({snapshot.current_price})")


def drift_per_hour(snapshot: AssetSnapshot, source: DriftSource) -> float:
    if DriftSource(source) == DriftSource.ONE_HOUR:
        return (snapshot.price_change_percentage_1h or 0.0) / 100
    return (snapshot.price_change_percentage_24h or 0.0) / 100 / 24


def rng_for(config: ForecastConfig, asset_id: str) -> random.Random:
    """Per-asset stream: same seed and asset give the same path in any batch order."""
    if config.seed is None:
        return random.Random()
    return random.Random(f"{config.seed}:{asset_id}")


class ForecastEngine:
    def __init__(self, config: ForecastConfig = SINGLE_ASSET_CONFIG):
        self.config = config

    def forecast(
        self,
        snapshot: AssetSnapshot,
        config: Optional[ForecastConfig] = None,
        rng: Optional[RandomSource] = None,
        signals: Optional[TechnicalSignals] = None,
    ) -> ForecastResult:
        config = config or self.config
        validate_snapshot(snapshot)
        rng = rng or rng_for(config, snapshot.id)

        hourly_vol = estimate_volatility(
            snapshot,
            default=config.default_volatility,
            use_range=config.use_range_volatility,
        )

        points = simulate_path(
            current_price=snapshot.current_price,
            drift_per_hour=drift_per_hour(snapshot, config.drift_source),
            hourly_volatility=hourly_vol,
            horizon_minutes=config.horizon_minutes,
            step_minutes=config.step_minutes,
            variant=config.path_variant,
            rng=rng,
            confidence_preset=config.confidence_preset,
            mean_reversion_weight=config.mean_reversion_weight,
        )

        final_price = points[-1].predicted
        expected_return = (final_price - snapshot.current_price) / snapshot.current_price * 100
        profit_10x = leverage_profit(expected_return, config.initial_margin, 10)
        profit_20x = leverage_profit(expected_return, config.initial_margin, 20)
        if not all(math.isfinite(v) for v in (expected_return, profit_10x, profit_20x)):
            raise SimulationError(f"non-finite return for {snapshot.id}: {expected_return}")

        mode = config.recommendation_mode
        if mode == RecommendationMode.SIGNAL_VOTING and signals is None:
            logger.debug("No technical signals for %s, using five-level thresholds", snapshot.id)
            mode = RecommendationMode.SIMPLE5
        recommendation = recommend(expected_return, mode, signals, config.thresholds)

        return ForecastResult(
            snapshot=snapshot,
            points=points,
            recommendation=recommendation,
            confidence=aggregate_confidence(points, config.confidence_aggregation),
            expected_return=expected_return,
            profit_at_10x=profit_10x,
            profit_at_20x=profit_20x,
            volatility=hourly_vol,
        )

    def forecast_batch(
        self,
        snapshots: List[AssetSnapshot],
        config: Optional[ForecastConfig] = None,
        signals: Optional[Dict[str, TechnicalSignals]] = None,
    ) -> BatchForecast:
        """
        Forecast every snapshot independently.

        Assets that fail validation or simulation are reported in
        ``failures``; the rest of the batch still runs.
        """
        config = config or self.config
        signals = signals or {}

        def run_one(snapshot: AssetSnapshot):
            try:
                return self.forecast(snapshot, config, signals=signals.get(snapshot.id))
            except ForecastError as e:
                logger.warning("Forecast failed for %s: %s", snapshot.id, e)
                return ForecastFailure(asset_id=snapshot.id, error=f"{type(e).__name__}: {e}")

        if config.max_workers > 1 and len(snapshots) > 1:
            with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
                outcomes = list(pool.map(run_one, snapshots))
        else:
            outcomes = [run_one(s) for s in snapshots]

        batch = BatchForecast()
        for outcome in outcomes:
            if isinstance(outcome, ForecastFailure):
                batch.failures.append(outcome)
            else:
                batch.results.append(outcome)
        logger.info("Batch forecast: %d ok, %d failed", len(batch.results), len(batch.failures))
        return batch


engine = ForecastEngine()


def forecast(
    snapshot: AssetSnapshot,
    config: ForecastConfig = SINGLE_ASSET_CONFIG,
    rng: Optional[RandomSource] = None,
    signals: Optional[TechnicalSignals] = None,
) -> ForecastResult:
    return engine.forecast(snapshot, config, rng=rng, signals=signals)


def forecast_batch(
    snapshots: List[AssetSnapshot],
    config: ForecastConfig = BATCH_CONFIG,
    signals: Optional[Dict[str, TechnicalSignals]] = None,
) -> BatchForecast:
    return engine.forecast_batch(snapshots, config, signals)
