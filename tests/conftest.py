"""Pytest configuration and fixtures."""
import random

import pytest

from cryptodash.data.models import AssetSnapshot


class ScriptedRandom:
    """Random source returning a fixed sequence of draws, cycling when exhausted."""

    def __init__(self, draws):
        self.draws = list(draws)
        self.index = 0

    def random(self) -> float:
        value = self.draws[self.index % len(self.draws)]
        self.index += 1
        return value


def make_snapshot(**overrides) -> AssetSnapshot:
    data = {
        "id": "btc",
        "symbol": "BTC",
        "name": "Bitcoin",
        "current_price": 100.0,
        "high_24h": 105.0,
        "low_24h": 95.0,
        "price_change_percentage_24h": 4.0,
        "price_change_percentage_1h": 0.5,
        "total_volume": 1_000_000.0,
        "market_cap": 10_000_000.0,
    }
    data.update(overrides)
    return AssetSnapshot(**data)


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def rng():
    return random.Random(42)
