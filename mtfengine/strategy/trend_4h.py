from __future__ import annotations

from mtfengine.analysis.types import opposite, tf_label, trend_direction
from mtfengine.strategy import reasons
from mtfengine.strategy.base import Setup, Strategy
from mtfengine.strategy.scorer import curls_against, curls_with, range_position

# weights sum to 100
W_TREND = 40
W_CONFIRM = 20
W_STOCH = 20
W_STRUCTURE = 10
W_PULLBACK = 10


class Trend4H(Strategy):
    """4h trend continuation, entered on a pullback to the 4h EMA21."""
    name = "TREND_4H"
    required = ("4h", "1h")
    stop_timeframes = ("4h", "1h")
    multiples = (1.5, 2.5)
    band_setting = "TREND_ENTRY_BAND_PCT"
    invalidation_tf = "4h"

    def gatekeeper(self, snaps, profile, bias):
        s4, s1 = snaps["4h"], snaps["1h"]
        notes = []
        if s4.trend == "FLAT":
            if not profile.allow_flat_4h_for_trend:
                return reasons.trend_flat("4h", "trend trades require a clear 4H direction")
            if s1.trend == "FLAT":
                return "4H and 1H trends are both FLAT"
            direction = trend_direction(s1.trend)
            notes.append(f"4H FLAT admitted by {profile.name}; direction from 1H {s1.trend}")
        else:
            direction = trend_direction(s4.trend)
            if trend_direction(s1.trend) == opposite(direction):
                verb = "breaking down" if direction == "long" else "breaking up"
                return f"1H {verb} ({s1.trend}) against 4H {s4.trend}"

        if s4.pullback_state == "OVEREXTENDED":
            return f"4H pullback OVEREXTENDED ({s4.distance_pct:+.2f}%) - price too far from EMA21"

        ltf = [snaps[tf] for tf in ("15m", "5m") if tf in snaps]
        if len(ltf) == 2 and all(curls_against(s, direction) for s in ltf):
            side = "down" if direction == "long" else "up"
            return f"15m/5m stoch both curling {side} ({reasons.stoch_state(ltf)}) against {direction}"
        if len(ltf) < 2:
            notes.append("15m/5m stoch unavailable; curl check skipped")
        return Setup(direction, s4.ema21, notes)

    def score(self, setup, snaps, profile, bias):
        s4, s1 = snaps["4h"], snaps["1h"]
        d = setup.direction
        notes = []
        total = W_TREND if trend_direction(s4.trend) == d else W_TREND / 4
        total += W_CONFIRM if trend_direction(s1.trend) == d else W_CONFIRM / 2

        ltf = [snaps[tf] for tf in ("15m", "5m") if tf in snaps]
        curled = sum(1 for s in ltf if curls_with(s, d))
        total += W_STOCH if curled == 2 else (W_STOCH / 2 if curled == 1 else 0)

        pos = range_position(s4)
        if pos is None:
            notes.append("4H swing range unavailable; structure unscored")
        elif (d == "long" and pos <= 0.5) or (d == "short" and pos >= 0.5):
            total += W_STRUCTURE
        else:
            total += W_STRUCTURE / 2

        if s4.pullback_state == "ENTRY_ZONE":
            total += W_PULLBACK
        elif s4.pullback_state == "RETRACING":
            total += W_PULLBACK / 2

        if bias.direction != "neutral":
            notes.append(f"HTF bias {bias.direction} {bias.confidence}% ({tf_label(bias.source)})")
        return total, notes
