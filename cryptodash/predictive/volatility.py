import logging
import math

from cryptodash.data.models import AssetSnapshot

logger = logging.getLogger(__name__)

DEFAULT_DAILY_VOLATILITY = 0.02
HOURS_PER_DAY = 24


def _finite_positive(value) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def estimate_volatility(
    snapshot: AssetSnapshot,
    default: float = DEFAULT_DAILY_VOLATILITY,
    use_range: bool = False,
) -> float:
    """
    Hourly volatility from the snapshot's 24h move.

    The 24h % change is taken as a daily volatility and scaled down by
    sqrt(24) (diffusion: variance grows linearly with time). Without a usable
    24h change the 24h high/low range is tried when ``use_range`` is set,
    then ``default``. The result is always strictly positive.
    """
    change = snapshot.price_change_percentage_24h
    daily = abs(change) / 100 if change is not None else 0.0

    if not _finite_positive(daily) and use_range and snapshot.current_price > 0:
        daily = (snapshot.high_24h - snapshot.low_24h) / snapshot.current_price

    if not _finite_positive(daily):
        logger.debug("No usable volatility for %s, using default %.4f", snapshot.id, default)
        daily = default

    return daily / math.sqrt(HOURS_PER_DAY)
