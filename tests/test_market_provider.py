import random

import pytest
import requests

from cryptodash.data.market_provider import CoinGeckoProvider, MockMarketProvider, get_provider


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, payload=None, error=None):
        self.headers = {}
        self.payload = payload
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        if self.error:
            raise self.error
        return FakeResponse(self.payload)


MARKETS_ROW = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "current_price": 43000.0,
    "high_24h": 44000.0,
    "low_24h": 42000.0,
    "price_change_percentage_24h": -1.2,
    "price_change_percentage_1h_in_currency": 0.3,
    "total_volume": 25e9,
    "market_cap": 8.4e11,
}


def test_mock_top_by_volume():
    provider = MockMarketProvider(random.Random(1))
    snapshots = provider.top_by_volume(20)

    assert len(snapshots) == 20
    assert snapshots[0].symbol == "BTC"
    for s in snapshots:
        assert s.low_24h <= s.current_price <= s.high_24h
        assert -10 <= s.price_change_percentage_24h <= 10
        assert -2 <= s.price_change_percentage_1h <= 2


def test_mock_is_reproducible_with_seed():
    a = MockMarketProvider(random.Random(9)).top_by_volume(5)
    b = MockMarketProvider(random.Random(9)).top_by_volume(5)
    assert a == b


def test_mock_lookup():
    provider = MockMarketProvider(random.Random(1))
    assert provider.get("ETH").name == "Ethereum"
    assert provider.get("nope") is None


def test_mock_history_ends_at_current_price():
    provider = MockMarketProvider(random.Random(4))
    snapshot = provider.get("sol")
    bars = provider.price_history(snapshot, 50)

    assert len(bars) == 50
    assert bars[-1].close == pytest.approx(snapshot.current_price)
    assert all(b1.timestamp < b2.timestamp for b1, b2 in zip(bars, bars[1:]))
    assert all(b.low <= min(b.open, b.close) and b.high >= max(b.open, b.close) for b in bars)


def test_coingecko_maps_markets_rows():
    session = FakeSession(payload=[MARKETS_ROW])
    provider = CoinGeckoProvider(base_url="https://example.test/api", session=session)

    [snapshot] = provider.top_by_volume(1)

    assert snapshot.id == "bitcoin"
    assert snapshot.symbol == "BTC"
    assert snapshot.price_change_percentage_1h == 0.3
    url, params = session.calls[0]
    assert url == "https://example.test/api/coins/markets"
    assert params["order"] == "volume_desc"
    assert params["per_page"] == 1


def test_coingecko_missing_range_uses_price():
    row = dict(MARKETS_ROW, high_24h=None, low_24h=None)
    provider = CoinGeckoProvider(session=FakeSession(payload=[row]))
    [snapshot] = provider.top_by_volume(1)
    assert snapshot.high_24h == snapshot.low_24h == 43000.0


def test_coingecko_falls_back_to_mock_on_error():
    session = FakeSession(error=requests.ConnectionError("offline"))
    provider = CoinGeckoProvider(session=session, fallback=MockMarketProvider(random.Random(2)))

    snapshots = provider.top_by_volume(5)
    assert [s.id for s in snapshots] == ["btc", "eth", "usdt", "bnb", "sol"]

    history = provider.price_history(snapshots[0], 10)
    assert len(history) == 10


def test_coingecko_history():
    payload = {"prices": [[1700000000000 + i * 300000, 100.0 + i] for i in range(5)]}
    provider = CoinGeckoProvider(session=FakeSession(payload=payload))
    snapshot = MockMarketProvider(random.Random(1)).get("btc")

    bars = provider.price_history(snapshot, 3)
    assert [b.close for b in bars] == [102.0, 103.0, 104.0]


def test_get_provider_by_source():
    assert isinstance(get_provider("mock", seed=1), MockMarketProvider)
    assert isinstance(get_provider("coingecko", seed=1), CoinGeckoProvider)
