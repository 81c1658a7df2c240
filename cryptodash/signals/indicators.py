"""Technical indicators feeding the signal-voting recommendation."""
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from cryptodash.data.models import Bar
from cryptodash.signals.models import TechnicalSignals

RSI_PERIOD = 14
RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
BB_PERIOD = 20
BB_STD = 2.0


@dataclass
class Indicators:
    last_close: Optional[float]
    rsi_14: Optional[float]  # [0,100]
    macd: Optional[float]
    macd_signal: Optional[float]
    macd_histogram: Optional[float]
    bb_middle: Optional[float]
    bb_upper: Optional[float]
    bb_lower: Optional[float]


def _ema(series: pd.Series, span: int) -> pd.Series:
    return series.ewm(span=span, adjust=False).mean()


def _rsi(series: pd.Series, period: int = RSI_PERIOD) -> pd.Series:
    delta = series.diff()
    gain = delta.clip(lower=0)
    loss = -delta.clip(upper=0)
    avg_gain = gain.rolling(window=period).mean()
    avg_loss = loss.rolling(window=period).mean()
    rs = avg_gain / avg_loss.replace(0, np.nan)
    rsi = 100 - (100 / (1 + rs))
    # No losses in the window means maximal strength
    return rsi.where(avg_loss != 0, 100.0)


def _macd(series: pd.Series, fast: int = 12, slow: int = 26, signal: int = 9):
    macd = _ema(series, fast) - _ema(series, slow)
    macd_signal = _ema(macd, signal)
    return macd, macd_signal, macd - macd_signal


def _bollinger(series: pd.Series, period: int = BB_PERIOD, std_dev: float = BB_STD):
    middle = series.rolling(window=period).mean()
    std = series.rolling(window=period).std(ddof=0)
    return middle + std_dev * std, middle, middle - std_dev * std


def _last(series: pd.Series) -> Optional[float]:
    value = series.iloc[-1] if len(series) else np.nan
    return None if pd.isna(value) else float(value)


def calculate_indicators(closes: Sequence[float]) -> Indicators:
    """
    Latest RSI, MACD and Bollinger values for a close series.

    Fields are None when the series is too short for that indicator.
    """
    series = pd.Series(list(closes), dtype=float)
    if series.empty:
        return Indicators(*([None] * 8))

    macd, macd_signal, macd_hist = _macd(series)
    bb_upper, bb_middle, bb_lower = _bollinger(series)
    has_macd = len(series) >= 26

    return Indicators(
        last_close=_last(series),
        rsi_14=_last(_rsi(series)),
        macd=_last(macd) if has_macd else None,
        macd_signal=_last(macd_signal) if has_macd else None,
        macd_histogram=_last(macd_hist) if has_macd else None,
        bb_middle=_last(bb_middle),
        bb_upper=_last(bb_upper),
        bb_lower=_last(bb_lower),
    )


def signals_from_indicators(ind: Indicators, price: Optional[float] = None) -> TechnicalSignals:
    price = ind.last_close if price is None else price
    rsi = ind.rsi_14
    hist = ind.macd_histogram

    return TechnicalSignals(
        oversold=rsi is not None and rsi < RSI_OVERSOLD,
        overbought=rsi is not None and rsi > RSI_OVERBOUGHT,
        trend_up=hist is not None and hist > 0,
        trend_down=hist is not None and hist < 0,
        below_lower_band=price is not None and ind.bb_lower is not None and price < ind.bb_lower,
        above_upper_band=price is not None and ind.bb_upper is not None and price > ind.bb_upper,
    )


def signals_from_bars(bars: List[Bar], price: Optional[float] = None) -> TechnicalSignals:
    """Technical signals for the latest bar (or an explicit current price)."""
    return signals_from_indicators(calculate_indicators([b.close for b in bars]), price)
