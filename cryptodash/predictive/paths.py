import math
import random
from typing import List, Optional, Protocol

from cryptodash.predictive.confidence import decay_confidence
from cryptodash.predictive.errors import SimulationError
from cryptodash.predictive.models import (
    MEAN_REVERSION_WEIGHT,
    SINGLE_ASSET_CONFIDENCE,
    ConfidencePreset,
    ForecastPoint,
    PathVariant,
)

Z_95 = 1.96
MINUTES_PER_HOUR = 60


class RandomSource(Protocol):
    def random(self) -> float:
        ...


def _check_finite(*values: float) -> None:
    if not all(math.isfinite(v) for v in values):
        raise SimulationError(f"non-finite value in simulated path: {values}")


def simulate_path(
    current_price: float,
    drift_per_hour: float,
    hourly_volatility: float,
    horizon_minutes: int,
    step_minutes: int,
    variant: PathVariant = PathVariant.ACCUMULATOR,
    rng: Optional[RandomSource] = None,
    confidence_preset: ConfidencePreset = SINGLE_ASSET_CONFIDENCE,
    mean_reversion_weight: float = MEAN_REVERSION_WEIGHT,
) -> List[ForecastPoint]:
    """
    Random walk with drift, one point per ``step_minutes`` up to the horizon.

    Each step moves the seed price by ``drift + shock`` where the drift is the
    hourly rate scaled by elapsed time and the shock is uniform within one
    hourly volatility. The 95% band widens with sqrt(elapsed hours).

    ``accumulator`` seeds the next step with the predicted price;
    ``mean_reverting`` seeds it with a blend of the predicted and the current
    price. Negative values are clamped at zero and the point marked
    degenerate. A non-finite value anywhere fails the whole path.
    """
    if step_minutes <= 0 or horizon_minutes <= 0:
        raise ValueError("horizon_minutes and step_minutes must be positive")
    if horizon_minutes % step_minutes != 0:
        raise ValueError("horizon_minutes must be a multiple of step_minutes")

    rng = rng or random.Random()
    variant = PathVariant(variant)
    steps = horizon_minutes // step_minutes

    points: List[ForecastPoint] = []
    seed = current_price

    for step in range(1, steps + 1):
        minutes_ahead = step * step_minutes
        elapsed_hours = minutes_ahead / MINUTES_PER_HOUR

        drift = drift_per_hour * elapsed_hours
        shock = (rng.random() - 0.5) * 2 * hourly_volatility
        predicted = seed * (1 + drift + shock)

        half_width = Z_95 * predicted * hourly_volatility * math.sqrt(elapsed_hours)
        upper = predicted + half_width
        lower = predicted - half_width
        _check_finite(predicted, upper, lower)

        degenerate = predicted < 0 or upper < 0 or lower < 0
        predicted, upper, lower = max(0.0, predicted), max(0.0, upper), max(0.0, lower)
        # A negative predicted price inverts the band
        upper, lower = max(upper, predicted), min(lower, predicted)

        points.append(
            ForecastPoint(
                minutes_ahead=minutes_ahead,
                predicted=predicted,
                upper_bound=upper,
                lower_bound=lower,
                confidence=decay_confidence(minutes_ahead, horizon_minutes, confidence_preset),
                degenerate=degenerate,
            )
        )

        if variant == PathVariant.MEAN_REVERTING:
            seed = mean_reversion_weight * predicted + (1 - mean_reversion_weight) * current_price
        else:
            seed = predicted

    return points
