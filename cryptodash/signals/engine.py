from typing import Optional

from cryptodash.signals.models import (
    Recommendation,
    RecommendationMode,
    RecommendationThresholds,
    TechnicalSignals,
)

DEFAULT_THRESHOLDS = RecommendationThresholds()


def _three_level(expected_return: float, t: RecommendationThresholds) -> Recommendation:
    if expected_return > t.neutral_band:
        return Recommendation.LONG
    if expected_return < -t.neutral_band:
        return Recommendation.SHORT
    return Recommendation.NEUTRAL


def _five_level(expected_return: float, t: RecommendationThresholds) -> Recommendation:
    if expected_return > t.strong:
        return Recommendation.STRONG_BUY
    if expected_return > t.neutral_band:
        return Recommendation.BUY
    if expected_return > -t.neutral_band:
        return Recommendation.HOLD
    if expected_return > -t.strong:
        return Recommendation.SELL
    return Recommendation.STRONG_SELL


def count_votes(
    expected_return: float,
    signals: TechnicalSignals,
    thresholds: RecommendationThresholds = DEFAULT_THRESHOLDS,
) -> tuple:
    """
    Count bullish and bearish votes among the four predicates:
    expected return strength, RSI extreme, MACD trend sign, Bollinger breach.

    Returns:
        (bullish, bearish)
    """
    bullish = sum([
        expected_return > thresholds.strong,
        signals.oversold,
        signals.trend_up,
        signals.below_lower_band,
    ])
    bearish = sum([
        expected_return < -thresholds.strong,
        signals.overbought,
        signals.trend_down,
        signals.above_upper_band,
    ])
    return bullish, bearish


def _signal_voting(
    expected_return: float,
    signals: TechnicalSignals,
    t: RecommendationThresholds,
) -> Recommendation:
    bullish, bearish = count_votes(expected_return, signals, t)

    if bullish >= 3:
        return Recommendation.STRONG_BUY
    if bullish >= 2:
        return Recommendation.BUY
    if bearish >= 3:
        return Recommendation.STRONG_SELL
    if bearish >= 2:
        return Recommendation.SELL
    return Recommendation.HOLD


def recommend(
    expected_return: float,
    mode: RecommendationMode = RecommendationMode.SIMPLE3,
    signals: Optional[TechnicalSignals] = None,
    thresholds: RecommendationThresholds = DEFAULT_THRESHOLDS,
) -> Recommendation:
    """Map an expected return (%) to a trading label.

    Comparisons are strict, so a return sitting exactly on a threshold takes
    the weaker label (0.5 is NEUTRAL/HOLD, 2.0 is BUY).
    """
    mode = RecommendationMode(mode)

    if mode == RecommendationMode.SIMPLE3:
        return _three_level(expected_return, thresholds)
    if mode == RecommendationMode.SIMPLE5:
        return _five_level(expected_return, thresholds)

    if signals is None:
        raise ValueError("signal_voting mode requires technical signals")
    return _signal_voting(expected_return, signals, thresholds)
