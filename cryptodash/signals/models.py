from enum import Enum
from pydantic import BaseModel


class Recommendation(str, Enum):
    LONG = "LONG"
    NEUTRAL = "NEUTRAL"
    SHORT = "SHORT"
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"


class RecommendationMode(str, Enum):
    SIMPLE3 = "simple3"
    SIMPLE5 = "simple5"
    SIGNAL_VOTING = "signal_voting"


class RecommendationThresholds(BaseModel):
    neutral_band: float = 0.5  # |return| above this leaves NEUTRAL/HOLD (%)
    strong: float = 2.0        # STRONG_* level and the return vote (%)


class TechnicalSignals(BaseModel):
    """Boolean indicator predicates used by signal voting."""
    oversold: bool = False
    overbought: bool = False
    trend_up: bool = False
    trend_down: bool = False
    below_lower_band: bool = False
    above_upper_band: bool = False
