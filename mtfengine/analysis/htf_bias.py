from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Mapping, Tuple

from mtfengine.analysis.types import TimeframeSnapshot

log = logging.getLogger(__name__)

HTF_LADDER = ("1M", "1w", "3d", "1d", "4h", "1h")
STOCH_NUDGE = 0.25   # share of a frame's weight carried by its stochastic condition

_LONG_STOCH = ("BULLISH", "OVERSOLD")
_SHORT_STOCH = ("BEARISH", "OVERBOUGHT")


@dataclass(frozen=True)
class HTFBias:
    direction: Literal["long", "short", "neutral"] = "neutral"
    confidence: int = 0
    source: str = "none"
    timeframes: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"direction": self.direction, "confidence": self.confidence, "source": self.source}


# [ANCHOR:HTF_CONSENSUS]
def compute_htf_bias(snapshots: Mapping[str, TimeframeSnapshot], max_timeframes: int = 4) -> HTFBias:
    """
    Weighted vote over the longest available higher timeframes (2..max_timeframes).
    With n frames the longest weighs n, the next n-1, down to 1.
    """
    tfs = [tf for tf in HTF_LADDER if tf in snapshots][: max(2, max_timeframes)]
    if len(tfs) < 2:
        log.debug(f"[HTF] not enough higher timeframes: {tfs}")
        return HTFBias(timeframes=tuple(tfs))

    n = len(tfs)
    weights = {tf: float(n - i) for i, tf in enumerate(tfs)}
    total = sum(weights.values()) * (1.0 + STOCH_NUDGE)

    trend_net = 0.0
    long_score = short_score = 0.0
    for tf in tfs:
        s, w = snapshots[tf], weights[tf]
        if s.trend == "UPTREND":
            trend_net += w
            long_score += w
        elif s.trend == "DOWNTREND":
            trend_net -= w
            short_score += w
        if s.stoch_condition in _LONG_STOCH:
            long_score += w * STOCH_NUDGE
        elif s.stoch_condition in _SHORT_STOCH:
            short_score += w * STOCH_NUDGE

    if trend_net == 0:
        any_trend = any(snapshots[tf].trend != "FLAT" for tf in tfs)
        return HTFBias("neutral", 0, "mixed" if any_trend else "flat", tuple(tfs))

    direction = "long" if trend_net > 0 else "short"
    want = "UPTREND" if direction == "long" else "DOWNTREND"
    agree, oppose = (long_score, short_score) if direction == "long" else (short_score, long_score)
    confidence = int(round(100.0 * (agree - oppose) / total))
    confidence = max(0, min(100, confidence))
    source = next(tf for tf in tfs if snapshots[tf].trend == want)

    bias = HTFBias(direction, confidence, source, tuple(tfs))
    log.debug(f"[HTF] {direction} conf={confidence} src={source} tfs={tfs}")
    return bias
