import math
import random

import pytest
from pydantic import ValidationError

from conftest import ScriptedRandom, make_snapshot
from cryptodash.predictive.engine import ForecastEngine, forecast, forecast_batch, validate_snapshot
from cryptodash.predictive.errors import InvalidSnapshotError, SimulationError
from cryptodash.predictive.models import (
    BATCH_CONFIG,
    SINGLE_ASSET_CONFIG,
    ForecastConfig,
)
from cryptodash.signals.models import Recommendation, RecommendationMode, TechnicalSignals

FIVE_LEVEL = {
    Recommendation.STRONG_BUY,
    Recommendation.BUY,
    Recommendation.HOLD,
    Recommendation.SELL,
    Recommendation.STRONG_SELL,
}


def test_forced_two_percent_move_is_long():
    # 24h change chosen so the hourly volatility is 0.04; draw 0.75 gives +2%
    snap = make_snapshot(price_change_percentage_24h=4.0 * math.sqrt(24), price_change_percentage_1h=None)
    config = ForecastConfig(horizon_minutes=3, step_minutes=3)

    result = forecast(snap, config, rng=ScriptedRandom([0.75]))

    assert result.points[-1].predicted == pytest.approx(102.0)
    assert result.expected_return == pytest.approx(2.0)
    assert result.recommendation == Recommendation.LONG
    assert result.profit_at_10x == pytest.approx(210.0)
    assert result.profit_at_20x == pytest.approx(420.0)
    assert result.confidence == pytest.approx(70.0)


def test_single_asset_defaults(snapshot, rng):
    result = forecast(snapshot, rng=rng)

    assert len(result.points) == 20
    assert result.points[-1].minutes_ahead == 60
    assert result.confidence == pytest.approx(70.0)
    assert result.recommendation in {Recommendation.LONG, Recommendation.SHORT, Recommendation.NEUTRAL}
    assert result.snapshot == snapshot


def test_batch_preset_averages_confidence(snapshot, rng):
    result = forecast(snapshot, BATCH_CONFIG, rng=rng)

    # mean of 95 - 25 * k / 20 for k = 1..20
    assert result.confidence == pytest.approx(81.875)
    assert result.recommendation in FIVE_LEVEL


def test_expected_return_sign_drives_profit(snapshot):
    result = forecast(snapshot, rng=random.Random(11))
    assert math.copysign(1, result.profit_at_10x) == math.copysign(1, result.expected_return)
    assert result.profit_at_20x == pytest.approx(2 * result.profit_at_10x)


def test_seeded_forecast_is_deterministic(snapshot):
    config = SINGLE_ASSET_CONFIG.model_copy(update={"seed": 7})
    assert forecast(snapshot, config) == forecast(snapshot, config)
    assert forecast(snapshot, rng=random.Random(5)) == forecast(snapshot, rng=random.Random(5))


def test_tolerates_inverted_high_low():
    snap = make_snapshot(high_24h=50.0, low_24h=200.0)
    result = forecast(snap, rng=random.Random(1))
    assert len(result.points) == 20


@pytest.mark.parametrize("overrides", [
    {"current_price": -5.0},
    {"current_price": 0.0},
    {"current_price": float("nan")},
    {"price_change_percentage_24h": float("inf")},
    {"total_volume": float("nan")},
])
def test_invalid_snapshots_rejected(overrides):
    with pytest.raises(InvalidSnapshotError):
        validate_snapshot(make_snapshot(**overrides))


def test_config_rejects_uneven_horizon():
    with pytest.raises(ValueError):
        ForecastConfig(horizon_minutes=10, step_minutes=3)


def test_signal_voting_uses_supplied_signals(snapshot):
    config = BATCH_CONFIG.model_copy(update={"recommendation_mode": RecommendationMode.SIGNAL_VOTING})
    signals = TechnicalSignals(oversold=True, trend_up=True, below_lower_band=True)

    result = forecast(snapshot, config, rng=random.Random(2), signals=signals)
    assert result.recommendation == Recommendation.STRONG_BUY


def test_signal_voting_without_signals_uses_five_levels(snapshot):
    config = BATCH_CONFIG.model_copy(update={"recommendation_mode": RecommendationMode.SIGNAL_VOTING})
    result = forecast(snapshot, config, rng=random.Random(2))
    assert result.recommendation in FIVE_LEVEL


def test_batch_partial_failure():
    good = make_snapshot(id="btc")
    bad = make_snapshot(id="bad", current_price=-5.0)

    batch = forecast_batch([good, bad])

    assert [r.snapshot.id for r in batch.results] == ["btc"]
    assert len(batch.failures) == 1
    assert batch.failures[0].asset_id == "bad"
    assert "InvalidSnapshotError" in batch.failures[0].error


def test_empty_batch():
    batch = forecast_batch([])
    assert batch.results == []
    assert batch.failures == []


def test_seeded_batch_independent_of_order_and_workers():
    a = make_snapshot(id="a")
    b = make_snapshot(id="b", current_price=2.5)
    config = BATCH_CONFIG.model_copy(update={"seed": 3})
    engine = ForecastEngine(config)

    forward = engine.forecast_batch([a, b])
    backward = engine.forecast_batch([b, a])
    pooled = engine.forecast_batch([a, b], config.model_copy(update={"max_workers": 4}))

    assert forward.results[0] == backward.results[1]
    assert forward.results[1] == backward.results[0]
    assert forward.results == pooled.results


def test_batch_signals_are_matched_by_asset_id():
    a = make_snapshot(id="a")
    b = make_snapshot(id="b")
    config = BATCH_CONFIG.model_copy(update={"recommendation_mode": RecommendationMode.SIGNAL_VOTING, "seed": 1})
    bearish = TechnicalSignals(overbought=True, trend_down=True, above_upper_band=True)

    batch = forecast_batch([a, b], config, signals={"b": bearish})

    assert batch.results[1].recommendation == Recommendation.STRONG_SELL
    assert batch.results[0].recommendation in FIVE_LEVEL


def test_overflowing_return_fails_the_asset():
    snap = make_snapshot(current_price=1e-300, price_change_percentage_1h=1e20)
    with pytest.raises(SimulationError):
        forecast(snap, rng=random.Random(1))


def test_batch_reports_overflowing_path_next_to_good_asset():
    good = make_snapshot(id="btc")
    big = make_snapshot(id="big", current_price=1e308, price_change_percentage_1h=1e4)

    batch = forecast_batch([good, big], SINGLE_ASSET_CONFIG)

    assert [r.snapshot.id for r in batch.results] == ["btc"]
    assert [f.asset_id for f in batch.failures] == ["big"]
    assert "SimulationError" in batch.failures[0].error


def test_result_points_cannot_be_mutated(snapshot, rng):
    result = forecast(snapshot, rng=rng)

    assert isinstance(result.points, tuple)
    with pytest.raises(ValidationError):
        result.points[0].predicted = -1.0
