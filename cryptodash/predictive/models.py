from pydantic import BaseModel, ConfigDict, Field, model_validator
from enum import Enum
from typing import List, Optional, Tuple

from cryptodash.data.models import AssetSnapshot
from cryptodash.signals.models import (
    Recommendation,
    RecommendationMode,
    RecommendationThresholds,
)


class PathVariant(str, Enum):
    ACCUMULATOR = "accumulator"
    MEAN_REVERTING = "mean_reverting"


class ConfidenceAggregation(str, Enum):
    LAST_POINT = "last_point"
    MEAN_OF_POINTS = "mean_of_points"


class DriftSource(str, Enum):
    ONE_HOUR = "1h"           # 1h % change, read as a per-hour rate
    DAY_AVERAGE = "24h"       # 24h % change spread evenly over 24 hours


# Heuristic blend toward the snapshot price, carried over from the dashboard,
# not estimated from data
MEAN_REVERSION_WEIGHT = 0.7


class ConfidencePreset(BaseModel):
    model_config = ConfigDict(frozen=True)

    floor: float
    ceiling: float = 95.0
    spread: float = 25.0


SINGLE_ASSET_CONFIDENCE = ConfidencePreset(floor=70.0)
BATCH_CONFIDENCE = ConfidencePreset(floor=50.0)


class ForecastConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    horizon_minutes: int = Field(60, gt=0)
    step_minutes: int = Field(3, gt=0)
    confidence_preset: ConfidencePreset = SINGLE_ASSET_CONFIDENCE
    path_variant: PathVariant = PathVariant.ACCUMULATOR
    recommendation_mode: RecommendationMode = RecommendationMode.SIMPLE3
    confidence_aggregation: ConfidenceAggregation = ConfidenceAggregation.LAST_POINT
    drift_source: DriftSource = DriftSource.ONE_HOUR
    mean_reversion_weight: float = Field(MEAN_REVERSION_WEIGHT, ge=0.0, le=1.0)
    default_volatility: float = Field(0.02, gt=0)
    use_range_volatility: bool = False
    initial_margin: float = 1050.0
    thresholds: RecommendationThresholds = RecommendationThresholds()
    seed: Optional[int] = None
    max_workers: int = Field(1, ge=1)

    @model_validator(mode="after")
    def check_horizon(self):
        if self.horizon_minutes % self.step_minutes != 0:
            raise ValueError("horizon_minutes must be a multiple of step_minutes")
        return self

    @property
    def steps(self) -> int:
        return self.horizon_minutes // self.step_minutes


# Highlighted single asset: 20 x 3-minute steps, pure random walk
SINGLE_ASSET_CONFIG = ForecastConfig()

# Top-volume list: same horizon, mean-reverting path, averaged confidence
BATCH_CONFIG = ForecastConfig(
    confidence_preset=BATCH_CONFIDENCE,
    path_variant=PathVariant.MEAN_REVERTING,
    recommendation_mode=RecommendationMode.SIMPLE5,
    confidence_aggregation=ConfidenceAggregation.MEAN_OF_POINTS,
    drift_source=DriftSource.DAY_AVERAGE,
)


class ForecastPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    minutes_ahead: int
    predicted: float
    upper_bound: float
    lower_bound: float
    confidence: float
    degenerate: bool = False  # values were clamped at zero


class ForecastResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    snapshot: AssetSnapshot
    points: Tuple[ForecastPoint, ...]
    recommendation: Recommendation
    confidence: float
    expected_return: float
    profit_at_10x: float
    profit_at_20x: float
    volatility: float


class ForecastFailure(BaseModel):
    asset_id: str
    error: str


class BatchForecast(BaseModel):
    results: List[ForecastResult] = []
    failures: List[ForecastFailure] = []
