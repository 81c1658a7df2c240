"""
Market data providers - produce AssetSnapshot records for the forecast engine.

MockMarketProvider generates a plausible top-by-volume table from fixed base
prices; CoinGeckoProvider reads the public markets endpoint and falls back to
the mock table when the request fails.
"""
import logging
import math
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Protocol

import requests

from cryptodash import config
from cryptodash.data.models import AssetSnapshot, Bar

logger = logging.getLogger(__name__)

BAR_MINUTES = 15

# (symbol, name, base price USD), ordered by typical 24h volume
MOCK_COINS = [
    ("btc", "Bitcoin", 43000.0),
    ("eth", "Ethereum", 2250.0),
    ("usdt", "Tether", 1.00),
    ("bnb", "BNB", 310.0),
    ("sol", "Solana", 98.0),
    ("xrp", "XRP", 0.62),
    ("usdc", "USD Coin", 1.00),
    ("ada", "Cardano", 0.58),
    ("avax", "Avalanche", 37.0),
    ("doge", "Dogecoin", 0.09),
    ("dot", "Polkadot", 7.2),
    ("matic", "Polygon", 0.89),
    ("link", "Chainlink", 14.5),
    ("trx", "TRON", 0.10),
    ("dai", "Dai", 1.00),
    ("ltc", "Litecoin", 72.0),
    ("uni", "Uniswap", 6.8),
    ("atom", "Cosmos", 10.2),
    ("etc", "Ethereum Classic", 20.5),
    ("xlm", "Stellar", 0.13),
]


class MarketProvider(Protocol):
    def top_by_volume(self, limit: int = 20) -> List[AssetSnapshot]:
        ...

    def get(self, symbol: str) -> Optional[AssetSnapshot]:
        ...

    def price_history(self, snapshot: AssetSnapshot, bars: int = 100) -> List[Bar]:
        ...


class MockMarketProvider:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _make_snapshot(self, rank: int, symbol: str, name: str, base_price: float) -> AssetSnapshot:
        price = base_price * (1 + self.rng.uniform(-0.05, 0.05))
        return AssetSnapshot(
            id=symbol,
            symbol=symbol.upper(),
            name=name,
            current_price=price,
            high_24h=price * 1.05,
            low_24h=price * 0.95,
            price_change_percentage_24h=self.rng.uniform(-10, 10),
            price_change_percentage_1h=self.rng.uniform(-2, 2),
            total_volume=price * (100000 - rank * 1000),
            market_cap=price * (1000000 - rank * 10000),
        )

    def top_by_volume(self, limit: int = 20) -> List[AssetSnapshot]:
        return [
            self._make_snapshot(rank, symbol, name, base)
            for rank, (symbol, name, base) in enumerate(MOCK_COINS[:limit])
        ]

    def get(self, symbol: str) -> Optional[AssetSnapshot]:
        symbol = symbol.lower()
        for rank, (sym, name, base) in enumerate(MOCK_COINS):
            if sym == symbol:
                return self._make_snapshot(rank, sym, name, base)
        return None

    def price_history(self, snapshot: AssetSnapshot, bars: int = 100) -> List[Bar]:
        """Synthetic 15-minute bars walking backwards from the current price."""
        daily_vol = abs(snapshot.price_change_percentage_24h or 2.0) / 100
        bar_vol = daily_vol / math.sqrt(24 * 60 / BAR_MINUTES)

        closes = [snapshot.current_price]
        for _ in range(bars - 1):
            closes.append(closes[-1] / (1 + self.rng.gauss(0.0, bar_vol)))
        closes.reverse()

        end = datetime.now(timezone.utc).replace(second=0, microsecond=0)
        history = []
        prev_close = closes[0]
        for i, close in enumerate(closes):
            wick = abs(self.rng.gauss(0.0, bar_vol)) * close
            history.append(
                Bar(
                    timestamp=end - timedelta(minutes=BAR_MINUTES * (bars - 1 - i)),
                    open=prev_close,
                    high=max(prev_close, close) + wick,
                    low=max(0.0, min(prev_close, close) - wick),
                    close=close,
                    volume=snapshot.total_volume / (24 * 60 / BAR_MINUTES),
                )
            )
            prev_close = close
        return history


class CoinGeckoProvider:
    def __init__(
        self,
        base_url: str = config.COINGECKO_API_URL,
        api_key: str = config.COINGECKO_API_KEY,
        timeout: float = config.COINGECKO_TIMEOUT,
        session: Optional[requests.Session] = None,
        fallback: Optional[MockMarketProvider] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["x-cg-pro-api-key"] = api_key
        self.fallback = fallback or MockMarketProvider()

    def _get(self, path: str, params: dict):
        response = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _to_snapshot(row: dict) -> AssetSnapshot:
        price = float(row.get("current_price") or 0.0)
        return AssetSnapshot(
            id=row["id"],
            symbol=str(row.get("symbol", "")).upper(),
            name=row.get("name", row["id"]),
            current_price=price,
            high_24h=float(row.get("high_24h") or price),
            low_24h=float(row.get("low_24h") or price),
            price_change_percentage_24h=row.get("price_change_percentage_24h"),
            price_change_percentage_1h=row.get("price_change_percentage_1h_in_currency"),
            total_volume=float(row.get("total_volume") or 0.0),
            market_cap=float(row.get("market_cap") or 0.0),
        )

    def top_by_volume(self, limit: int = 20) -> List[AssetSnapshot]:
        params = {
            "vs_currency": "usd",
            "order": "volume_desc",
            "per_page": limit,
            "page": 1,
            "sparkline": "false",
            "price_change_percentage": "1h",
        }
        try:
            rows = self._get("/coins/markets", params)
        except (requests.RequestException, ValueError) as e:
            logger.warning("CoinGecko markets request failed (%s), using mock data", e)
            return self.fallback.top_by_volume(limit)
        return [self._to_snapshot(row) for row in rows]

    def get(self, symbol: str) -> Optional[AssetSnapshot]:
        symbol = symbol.lower()
        for snapshot in self.top_by_volume(100):
            if symbol in (snapshot.id.lower(), snapshot.symbol.lower()):
                return snapshot
        return None

    def price_history(self, snapshot: AssetSnapshot, bars: int = 100) -> List[Bar]:
        params = {"vs_currency": "usd", "days": 1}
        try:
            data = self._get(f"/coins/{snapshot.id}/market_chart", params)
        except (requests.RequestException, ValueError) as e:
            logger.warning("CoinGecko history for %s failed (%s), using mock data", snapshot.id, e)
            return self.fallback.price_history(snapshot, bars)

        history = []
        for ts_ms, price in data.get("prices", [])[-bars:]:
            history.append(
                Bar(
                    timestamp=datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc),
                    open=price,
                    high=price,
                    low=price,
                    close=price,
                    volume=0.0,
                )
            )
        return history


def get_provider(source: str = config.MARKET_DATA_SOURCE, seed: Optional[int] = config.FORECAST_SEED) -> MarketProvider:
    rng = random.Random(seed) if seed is not None else None
    if source == "coingecko":
        return CoinGeckoProvider(fallback=MockMarketProvider(rng))
    return MockMarketProvider(rng)
