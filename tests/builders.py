from __future__ import annotations

from mtfengine.analysis.types import TimeframeSnapshot

_AUTO = object()


def snap(tf: str, trend: str = "UPTREND", *, price: float = 100.0, dist: float = 0.1, k: float = 50.0,
         d: float = 50.0, cond: str = "NEUTRAL", pullback: str = "ENTRY_ZONE", swing_low=_AUTO,
         swing_high=_AUTO, history=(), ema200=None) -> TimeframeSnapshot:
    """Snapshot whose EMA21 sits `dist` percent below price; swing levels default to EMA21 ∓3%."""
    ema21 = price / (1.0 + dist / 100.0)
    return TimeframeSnapshot(
        timeframe=tf,
        trend=trend,
        ema21=ema21,
        ema200=ema200,
        stoch_k=k,
        stoch_d=d,
        stoch_condition=cond,
        pullback_state=pullback,
        ema21_distance_pct=dist,
        swing_high=ema21 * 1.03 if swing_high is _AUTO else swing_high,
        swing_low=ema21 * 0.97 if swing_low is _AUTO else swing_low,
        price=price,
        stoch_history=tuple(history),
    )


def book(*snaps: TimeframeSnapshot) -> dict[str, TimeframeSnapshot]:
    return {s.timeframe: s for s in snaps}


def micro_book(**ltf) -> dict[str, TimeframeSnapshot]:
    """4H FLAT, 1H up and in the entry zone, 15m/5m oversold right on EMA21."""
    kw = dict(dist=0.1, k=18, d=20, cond="OVERSOLD")
    kw.update(ltf)
    return book(
        snap("4h", "FLAT", dist=0.3),
        snap("1h", "UPTREND", dist=0.4),
        snap("15m", "UPTREND", **kw),
        snap("5m", "UPTREND", **kw),
    )


def short_scalp_book() -> dict[str, TimeframeSnapshot]:
    """4H/1H down, 15m/5m in the entry zone with stoch curling down."""
    return book(
        snap("4h", "DOWNTREND", dist=-0.3, pullback="RETRACING", cond="BEARISH"),
        snap("1h", "DOWNTREND", dist=-0.4),
        snap("15m", "DOWNTREND", dist=0.2, k=50, d=55, cond="BEARISH", history=(62, 56, 50)),
        snap("5m", "DOWNTREND", dist=0.15, k=48, d=54, cond="BEARISH", history=(60, 55, 48)),
    )


def swing_long_book(**over) -> dict[str, TimeframeSnapshot]:
    """3D up and stretched, 1D pulling back, 4H/1H up; SWING and TREND_4H both qualify."""
    frames = {
        "3d": snap("3d", "UPTREND", dist=12.0, pullback="OVEREXTENDED", swing_low=80.0),
        "1d": snap("1d", "DOWNTREND", dist=-1.5, pullback="RETRACING", cond="BULLISH", swing_low=95.0),
        "4h": snap("4h", "UPTREND", dist=0.3),
        "1h": snap("1h", "UPTREND", dist=0.4),
        "15m": snap("15m", "UPTREND", dist=0.2, k=30, d=25, cond="BULLISH"),
        "5m": snap("5m", "UPTREND", dist=0.2, k=30, d=25, cond="BULLISH"),
    }
    frames.update(over)
    return frames


def dead_book() -> dict[str, TimeframeSnapshot]:
    """Nothing qualifies under either profile."""
    return book(
        snap("4h", "FLAT", dist=3.0, pullback="OVEREXTENDED"),
        snap("1h", "FLAT", dist=2.5, pullback="OVEREXTENDED"),
        snap("15m", "FLAT", dist=2.0, pullback="OVEREXTENDED"),
        snap("5m", "FLAT", dist=2.0, pullback="OVEREXTENDED"),
    )


def aggro_scalp_book() -> dict[str, TimeframeSnapshot]:
    """Only AGGRO_SCALP_1H qualifies, and only under AGGRESSIVE."""
    return book(
        snap("4h", "FLAT", dist=1.0, pullback="OVEREXTENDED"),
        snap("1h", "UPTREND", dist=2.0, pullback="OVEREXTENDED"),
        snap("15m", "UPTREND", dist=1.5, pullback="RETRACING", k=60, d=55, cond="BULLISH"),
        snap("5m", "UPTREND", dist=1.2, pullback="OVEREXTENDED"),
    )


def aggro_micro_book() -> dict[str, TimeframeSnapshot]:
    """Only AGGRO_MICRO_SCALP qualifies, and only under AGGRESSIVE."""
    return book(
        snap("4h", "FLAT", dist=1.0, pullback="OVEREXTENDED"),
        snap("1h", "UPTREND", dist=3.0, pullback="OVEREXTENDED"),
        snap("15m", "UPTREND", dist=0.6, pullback="OVEREXTENDED", k=20, d=24, cond="OVERSOLD"),
        snap("5m", "UPTREND", dist=0.5, pullback="ENTRY_ZONE", k=45, d=40, cond="BULLISH"),
    )
