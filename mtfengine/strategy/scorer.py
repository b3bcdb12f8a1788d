# [ANCHOR:SCORER]
from __future__ import annotations

from mtfengine.analysis.types import AuxSignals, TimeframeSnapshot


def _clamp01(x): return max(0.0, min(1.0, x))
def _scale01(x, lo, hi):
    if hi == lo: return 0.0
    return _clamp01((x - lo) / (hi - lo))


def clamp_confidence(x, ceiling: int = 100) -> int:
    return int(max(0, min(ceiling, 100, round(x))))


def stoch_curl(s: TimeframeSnapshot) -> str:
    """
    'up' | 'down' | 'flat'. Uses the last three %K values when present,
    otherwise %K against %D.
    """
    h = s.stoch_history[-3:]
    if len(h) == 3:
        if h[0] < h[1] < h[2]: return "up"
        if h[0] > h[1] > h[2]: return "down"
        return "flat"
    if s.stoch_k > s.stoch_d: return "up"
    if s.stoch_k < s.stoch_d: return "down"
    return "flat"


def curls_with(s: TimeframeSnapshot, direction: str) -> bool:
    return stoch_curl(s) == ("up" if direction == "long" else "down")


def curls_against(s: TimeframeSnapshot, direction: str) -> bool:
    return stoch_curl(s) == ("down" if direction == "long" else "up")


def stoch_aligned(s: TimeframeSnapshot, direction: str) -> bool:
    if direction == "long":
        return s.stoch_condition in ("OVERSOLD", "BULLISH")
    return s.stoch_condition in ("OVERBOUGHT", "BEARISH")


def stoch_extreme(s: TimeframeSnapshot, direction: str, level: float = 25.0) -> bool:
    """Oversold for longs / overbought for shorts, by condition or raw %K."""
    if direction == "long":
        return s.stoch_condition == "OVERSOLD" or s.stoch_k < level
    return s.stoch_condition == "OVERBOUGHT" or s.stoch_k > 100.0 - level


def range_position(s: TimeframeSnapshot) -> float | None:
    """Price position inside the swing range, 0 = swing low, 1 = swing high."""
    if s.swing_low is None or s.swing_high is None or s.swing_high <= s.swing_low:
        return None
    return _scale01(s.price, s.swing_low, s.swing_high)


# [ANCHOR:AUX_MODIFIERS]
def aux_adjustment(aux: AuxSignals | None, direction: str, cfg) -> tuple[int, list[str]]:
    """Order-book imbalance ±3, trade flow ±2, total capped at ±AUX_MAX_ADJUST."""
    if aux is None:
        return 0, []
    delta, notes = 0, []
    imb = aux.orderbook_imbalance
    if imb is not None and abs(imb) >= cfg.AUX_IMBALANCE_MIN_PCT:
        agrees = (imb > 0) == (direction == "long")
        d = 3 if agrees else -3
        delta += d
        notes.append(f"order book imbalance {imb:+.1f}% {'supports' if agrees else 'opposes'} {direction} ({d:+d})")
    flow = (aux.trade_flow or "").upper()
    if flow in ("BUY", "SELL"):
        agrees = (flow == "BUY") == (direction == "long")
        d = 2 if agrees else -2
        delta += d
        notes.append(f"trade flow {flow} {'supports' if agrees else 'opposes'} {direction} ({d:+d})")
    cap = int(cfg.AUX_MAX_ADJUST)
    return max(-cap, min(cap, delta)), notes
