from typing import Sequence

from cryptodash.predictive.models import ConfidenceAggregation, ConfidencePreset, ForecastPoint


def decay_confidence(minutes_ahead: float, horizon_minutes: float, preset: ConfidencePreset) -> float:
    """Linear decay from ``ceiling`` toward ``floor`` across the horizon (0-100)."""
    if horizon_minutes <= 0:
        raise ValueError("horizon_minutes must be positive")
    value = preset.ceiling - (minutes_ahead / horizon_minutes) * preset.spread
    return max(preset.floor, value)


def aggregate_confidence(points: Sequence[ForecastPoint], rule: ConfidenceAggregation) -> float:
    if not points:
        raise ValueError("cannot aggregate confidence of an empty path")
    if ConfidenceAggregation(rule) == ConfidenceAggregation.LAST_POINT:
        return points[-1].confidence
    return sum(p.confidence for p in points) / len(points)
