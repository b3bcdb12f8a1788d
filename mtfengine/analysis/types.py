from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple

Trend = Literal["UPTREND", "DOWNTREND", "FLAT"]
StochCondition = Literal["OVERBOUGHT", "OVERSOLD", "BULLISH", "BEARISH", "NEUTRAL"]
PullbackState = Literal["ENTRY_ZONE", "OVEREXTENDED", "RETRACING", "UNKNOWN"]
Direction = Literal["long", "short"]

TRENDS = ("UPTREND", "DOWNTREND", "FLAT")
STOCH_CONDITIONS = ("OVERBOUGHT", "OVERSOLD", "BULLISH", "BEARISH", "NEUTRAL")
PULLBACK_STATES = ("ENTRY_ZONE", "OVEREXTENDED", "RETRACING", "UNKNOWN")

# longest -> shortest
TIMEFRAMES = ("1M", "1w", "3d", "1d", "4h", "1h", "15m", "5m", "3m", "1m")

# display labels; minutes stay lower-case so 1m and 1M never collide
TF_LABELS = {
    "1M": "1Mo", "1w": "1W", "3d": "3D", "1d": "1D", "4h": "4H", "1h": "1H",
    "15m": "15m", "5m": "5m", "3m": "3m", "1m": "1m",
}


def tf_label(tf: str) -> str:
    return TF_LABELS.get(tf, tf)


# [ANCHOR:TIMEFRAME_SNAPSHOT_DTO]
@dataclass(frozen=True)
class TimeframeSnapshot:
    timeframe: str
    trend: Trend
    ema21: float
    stoch_k: float
    stoch_d: float
    stoch_condition: StochCondition
    pullback_state: PullbackState
    price: float
    ema200: Optional[float] = None
    ema21_distance_pct: Optional[float] = None   # signed, (price-ema21)/ema21*100
    swing_high: Optional[float] = None
    swing_low: Optional[float] = None
    stoch_history: Tuple[float, ...] = ()         # recent %K, oldest first

    @property
    def distance_pct(self) -> float:
        """Signed EMA21 distance; derived from price when the feed left it out."""
        if self.ema21_distance_pct is not None:
            return float(self.ema21_distance_pct)
        if not self.ema21:
            return 0.0
        return (self.price - self.ema21) / self.ema21 * 100.0

    @property
    def abs_distance_pct(self) -> float:
        return abs(self.distance_pct)

    def swing_level(self, direction: Direction) -> Optional[float]:
        """Protective swing level: swing low for longs, swing high for shorts."""
        return self.swing_low if direction == "long" else self.swing_high


def trend_direction(trend: str) -> Optional[Direction]:
    if trend == "UPTREND":
        return "long"
    if trend == "DOWNTREND":
        return "short"
    return None


def opposite(direction: Direction) -> Direction:
    return "short" if direction == "long" else "long"


@dataclass(frozen=True)
class AuxSignals:
    """Market-quality hints; they modify confidence only."""
    orderbook_imbalance: Optional[float] = None   # % in [-100, 100], positive = bid heavy
    trade_flow: Optional[str] = None               # BUY | SELL | NEUTRAL
