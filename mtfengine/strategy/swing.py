from __future__ import annotations

from mtfengine.analysis.types import trend_direction
from mtfengine.strategy import reasons
from mtfengine.strategy.base import Setup, Strategy
from mtfengine.strategy.scorer import stoch_aligned

BASE = 70
STOCH_BONUS = 10
TIGHT_4H_BONUS = 5
STRETCH_3D_BONUS = 5
TIGHT_4H_PCT = 0.5
STRETCH_3D_PCT = 10.0
RECLAIM_FALLBACK_PCT = 5.0   # 1d EMA21 offset when the 1d swing level is missing

PULLBACK_3D = ("OVEREXTENDED", "RETRACING")
PULLBACK_1D = ("RETRACING", "ENTRY_ZONE")


class Swing3D1D4H(Strategy):
    """
    Multi-day swing: 3D carries the direction, 1D pulls back, 4H confirms.
    Entry sits at the reclaim level, halfway between the 1D swing level and
    the 1D EMA21.
    """
    name = "SWING_3D_1D_4H"
    required = ("3d", "1d", "4h")
    stop_timeframes = ("3d", "1d")
    multiples = (3.0, 4.0, 5.0)
    band_setting = "SWING_ENTRY_BAND_PCT"
    invalidation_tf = "1d"
    max_confidence = 90

    def gatekeeper(self, snaps, profile, bias):
        s3, s1, s4 = snaps["3d"], snaps["1d"], snaps["4h"]
        if s4.trend == "FLAT":
            return reasons.trend_flat("4h", "swing trades require clear 4H direction")
        if s3.trend == "FLAT":
            return reasons.trend_flat("3d", "swing trades require a 3D trend")
        if s1.trend == "FLAT":
            return reasons.trend_flat("1d", "swing trades require a 1D trend")
        if s3.pullback_state not in PULLBACK_3D:
            return reasons.pullback_not_in("3d", s3.pullback_state, PULLBACK_3D)
        if s1.pullback_state not in PULLBACK_1D:
            return reasons.pullback_not_in("1d", s1.pullback_state, PULLBACK_1D)

        direction = trend_direction(s3.trend)
        if trend_direction(s4.trend) != direction:
            return f"4H trend {s4.trend} does not confirm 3D {s3.trend}"
        if s1.abs_distance_pct > profile.max_swing_ema_dist_1d:
            return reasons.band_exceeded([s1], profile.max_swing_ema_dist_1d)

        notes = []
        level = s1.swing_level(direction)
        if level is None or level <= 0:
            off = RECLAIM_FALLBACK_PCT / 100.0
            level = s1.ema21 * (1.0 - off if direction == "long" else 1.0 + off)
            notes.append(f"1D swing level missing; reclaim uses 1D EMA21 ∓{RECLAIM_FALLBACK_PCT:g}%")
        reclaim = (level + s1.ema21) / 2.0
        return Setup(direction, reclaim, notes)

    def score(self, setup, snaps, profile, bias):
        s3, s1, s4 = snaps["3d"], snaps["1d"], snaps["4h"]
        d = setup.direction
        total = BASE
        notes = []

        extreme = "OVERSOLD" if d == "long" else "OVERBOUGHT"
        hits = (s3.stoch_condition == extreme) + stoch_aligned(s1, d)
        if hits == 2:
            total += STOCH_BONUS
            notes.append(f"3D stoch {extreme} with 1D {s1.stoch_condition}")
        elif hits == 1:
            total += STOCH_BONUS / 2

        if s4.price > 0 and abs(s4.price - s4.ema21) / s4.price * 100.0 <= TIGHT_4H_PCT:
            total += TIGHT_4H_BONUS
        if s3.abs_distance_pct >= STRETCH_3D_PCT:
            total += STRETCH_3D_BONUS
            notes.append(f"3D stretched {s3.distance_pct:+.1f}% from EMA21")
        return total, notes
