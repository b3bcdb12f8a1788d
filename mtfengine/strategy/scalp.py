from __future__ import annotations

from mtfengine.analysis.types import trend_direction
from mtfengine.strategy import reasons
from mtfengine.strategy.base import Setup, Strategy
from mtfengine.strategy.scorer import curls_with, stoch_aligned

PULLBACK_OK = ("ENTRY_ZONE", "RETRACING")


class Scalp15M5M(Strategy):
    """Intraday scalp in the 4H/1H direction, timed on the 15m/5m EMA21 pullback."""
    name = "SCALP_15M_5M"
    required = ("4h", "1h", "15m", "5m")
    stop_timeframes = ("15m", "5m")
    multiples = (1.5, 3.0)
    band_setting = "SCALP_ENTRY_BAND_PCT"
    invalidation_tf = "15m"
    max_confidence = 85

    def gatekeeper(self, snaps, profile, bias):
        s4, s1, s15, s5 = snaps["4h"], snaps["1h"], snaps["15m"], snaps["5m"]
        notes = []
        if s4.trend == "FLAT":
            if not profile.allow_flat_4h_for_scalp:
                return reasons.trend_flat("4h", "scalps trade with the 4H direction")
            if s1.trend == "FLAT":
                return "4H and 1H trends are both FLAT"
            direction = trend_direction(s1.trend)
            notes.append(f"4H FLAT admitted by {profile.name}; direction from 1H {s1.trend}")
        else:
            direction = trend_direction(s4.trend)
            if s1.trend == "FLAT":
                if not profile.allow_flat_1h_for_scalp:
                    return reasons.trend_disagrees("1h", s1.trend, "4h", s4.trend)
                notes.append(f"1H FLAT admitted by {profile.name}")
            elif trend_direction(s1.trend) != direction:
                return reasons.trend_disagrees("1h", s1.trend, "4h", s4.trend)

        for s in (s15, s5):
            if s.pullback_state not in PULLBACK_OK:
                return reasons.pullback_not_in(s.timeframe, s.pullback_state, PULLBACK_OK)
        if s15.abs_distance_pct > profile.ema_pullback_max:
            return reasons.band_exceeded([s15], profile.ema_pullback_max)
        if profile.strict_15m_stoch_align and not stoch_aligned(s15, direction):
            return f"15m stoch {s15.stoch_condition} {s15.stoch_k:.0f} not aligned with {direction}"

        return Setup(direction, (s15.ema21 + s5.ema21) / 2.0, notes)

    def score(self, setup, snaps, profile, bias):
        s4, s1, s15, s5 = snaps["4h"], snaps["1h"], snaps["15m"], snaps["5m"]
        d = setup.direction
        notes = []

        both = trend_direction(s4.trend) == d and trend_direction(s1.trend) == d
        total = 40 if both else 20

        curled = curls_with(s15, d) + curls_with(s5, d)
        total += {2: 30, 1: 15}.get(curled, 0)

        avg = (s15.abs_distance_pct + s5.abs_distance_pct) / 2.0
        if avg <= 0.25:
            total += 15
        elif avg <= 0.5:
            total += 10
        elif avg <= 1.0:
            total += 5

        if bias.direction == d:
            total += 0.15 * bias.confidence
            notes.append(f"HTF bias agrees ({bias.confidence}%)")
        elif bias.direction != "neutral":
            notes.append(f"HTF bias {bias.direction} ({bias.confidence}%) leans against")
        return total, notes
