from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class AssetSnapshot(BaseModel):
    """Current market data for one asset, as served by a market provider.

    Values are not range-checked here: the forecast engine validates them so a
    batch can carry a bad snapshot without failing at construction time.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    name: str
    current_price: float
    high_24h: float
    low_24h: float
    price_change_percentage_24h: Optional[float] = None
    price_change_percentage_1h: Optional[float] = None
    total_volume: float = 0.0
    market_cap: float = 0.0


class Bar(BaseModel):
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float
