from __future__ import annotations

"""Builds TimeframeSnapshots from indicator payloads (JSON) or indicator DataFrames."""

import logging
from typing import Any, Mapping

import pandas as pd

from mtfengine.analysis.types import (
    PULLBACK_STATES, STOCH_CONDITIONS, TIMEFRAMES, TRENDS, TimeframeSnapshot,
)

log = logging.getLogger(__name__)

_TREND_ALIASES = {"UP": "UPTREND", "BULLISH": "UPTREND", "DOWN": "DOWNTREND", "BEARISH": "DOWNTREND",
                  "NEUTRAL": "FLAT", "SIDEWAYS": "FLAT"}


def _num(v) -> float | None:
    if v is None:
        return None
    try:
        if pd.isna(v):
            return None
    except (TypeError, ValueError):
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _clamp_pct(v: float | None) -> float:
    return max(0.0, min(100.0, v if v is not None else 50.0))


def normalize_trend(raw, tf: str = "") -> str:
    t = str(raw or "").strip().upper()
    t = _TREND_ALIASES.get(t, t)
    if t not in TRENDS:
        log.warning(f"[ADAPTER] {tf} unknown trend {raw!r}; treating as FLAT")
        return "FLAT"
    return t


def derive_stoch_condition(k: float, d: float) -> str:
    if k > 80 and d > 80:
        return "OVERBOUGHT"
    if k < 20 and d < 20:
        return "OVERSOLD"
    if k > d:
        return "BULLISH"
    if k < d:
        return "BEARISH"
    return "NEUTRAL"


def normalize_stoch_condition(raw, k: float, d: float, tf: str = "") -> str:
    if raw is None or (isinstance(raw, float) and pd.isna(raw)):
        return derive_stoch_condition(k, d)
    c = str(raw).strip().upper()
    if c not in STOCH_CONDITIONS:
        log.warning(f"[ADAPTER] {tf} unknown stoch condition {raw!r}; deriving from %K/%D")
        return derive_stoch_condition(k, d)
    return c


def normalize_pullback(raw, tf: str = "") -> str:
    p = str(raw or "UNKNOWN").strip().upper()
    if p not in PULLBACK_STATES:
        log.warning(f"[ADAPTER] {tf} unknown pullback state {raw!r}; treating as UNKNOWN")
        return "UNKNOWN"
    return p


def _dig(d: Mapping, *path, default=None):
    cur: Any = d
    for key in path:
        if not isinstance(cur, Mapping) or key not in cur:
            return default
        cur = cur[key]
    return cur


def _swing(data: Mapping, ind: Mapping, flat: str, camel: str):
    return _first(data.get(flat), data.get(camel), ind.get(camel),
                  _dig(data, "structure", camel), _dig(ind, "structure", camel))


def _history_k(point) -> float | None:
    if isinstance(point, Mapping):
        return _num(point.get("k"))
    return _num(point)

def _first(*vals):
    for v in vals:
        if v is not None:
            return v
    return None


def snapshot_from_mapping(tf: str, data: Mapping) -> TimeframeSnapshot:
    """
    Accepts the flat form ({"trend", "ema21", "stoch_k", ...}) as well as the
    nested indicator form ({"indicators": {"ema": {...}, "stochRSI": {...},
    "analysis": {...}, "swingHigh", "swingLow"}, "structure": {...}, "currentPrice", ...}).
    Swing levels are looked up top-level, then under indicators, then under structure.
    Stoch history may be plain %K values or {"k", "d"} points.
    """
    ind = data.get("indicators") or {}
    stoch = _first(ind.get("stochRSI"), ind.get("stoch"), data.get("stoch")) or {}
    analysis = ind.get("analysis") or data.get("analysis") or {}
    pullback = _first(analysis.get("pullbackState"), data.get("pullback"))

    k = _clamp_pct(_num(_first(data.get("stoch_k"), stoch.get("k"))))
    dd = _clamp_pct(_num(_first(data.get("stoch_d"), stoch.get("d"))))
    ema21 = _num(_first(data.get("ema21"), _dig(ind, "ema", "ema21")))
    price = _num(_first(data.get("price"), data.get("currentPrice"), data.get("close")))
    if ema21 is None:
        raise ValueError(f"{tf}: ema21 is required")
    if price is None:
        price = ema21
        log.warning(f"[ADAPTER] {tf} price missing; using EMA21")

    if isinstance(pullback, Mapping):
        state = pullback.get("state")
        dist = _first(pullback.get("distanceFrom21EMA"), data.get("ema21_distance_pct"))
    else:
        state = _first(data.get("pullback_state"), pullback)
        dist = _first(data.get("ema21_distance_pct"), data.get("distanceFrom21EMA"),
                      analysis.get("distanceFrom21EMA"))

    history = data.get("stoch_history") or stoch.get("history") or ()
    return TimeframeSnapshot(
        timeframe=tf,
        trend=normalize_trend(_first(data.get("trend"), analysis.get("trend")), tf),
        ema21=ema21,
        ema200=_num(_first(data.get("ema200"), _dig(ind, "ema", "ema200"))),
        stoch_k=k,
        stoch_d=dd,
        stoch_condition=normalize_stoch_condition(
            _first(data.get("stoch_condition"), stoch.get("condition")), k, dd, tf),
        pullback_state=normalize_pullback(state, tf),
        ema21_distance_pct=_num(dist),
        swing_high=_num(_swing(data, ind, "swing_high", "swingHigh")),
        swing_low=_num(_swing(data, ind, "swing_low", "swingLow")),
        price=price,
        stoch_history=tuple(v for v in (_history_k(x) for x in history) if v is not None),
    )


def snapshots_from_payload(payload: Mapping) -> dict[str, TimeframeSnapshot]:
    """{"4h": {...}, "1h": {...}} -> snapshots. A top-level "timeframes" key is unwrapped."""
    frames = payload.get("timeframes", payload)
    out = {}
    for tf, data in frames.items():
        if tf not in TIMEFRAMES:
            log.debug(f"[ADAPTER] skipping non-timeframe key {tf!r}")
            continue
        if not isinstance(data, Mapping):
            log.warning(f"[ADAPTER] {tf} entry is not an object; skipped")
            continue
        out[tf] = snapshot_from_mapping(tf, data)
    return out


# [ANCHOR:FRAME_ADAPTER]
def snapshot_from_frame(tf: str, df: pd.DataFrame, history: int = 3) -> TimeframeSnapshot:
    """Last row of an indicator frame; the last `history` stoch_k values feed the curl check."""
    if df is None or df.empty:
        raise ValueError(f"{tf}: empty frame")
    row = df.iloc[-1].to_dict()
    if "stoch_k" in df.columns:
        row["stoch_history"] = df["stoch_k"].tail(history).tolist()
    return snapshot_from_mapping(tf, row)


def snapshots_from_frames(frames: Mapping[str, pd.DataFrame]) -> dict[str, TimeframeSnapshot]:
    out = {}
    for tf, df in frames.items():
        if df is None or df.empty:
            log.warning(f"[ADAPTER] {tf} frame empty; skipped")
            continue
        out[tf] = snapshot_from_frame(tf, df)
    return out
