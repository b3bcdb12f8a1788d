from __future__ import annotations

"""AGGRESSIVE-profile fallbacks: wider bands, smaller size, capped confidence."""

from mtfengine.analysis.types import opposite, trend_direction
from mtfengine.strategy import reasons
from mtfengine.strategy.base import Setup, Strategy
from mtfengine.strategy.scorer import _clamp01, stoch_aligned, stoch_extreme

PULLBACK_OK = ("ENTRY_ZONE", "RETRACING")
K_LONG_MAX = 75.0
K_SHORT_MIN = 25.0
COUNTER_TREND_PENALTY = 10


def counter_trend_block(direction: str, bias, profile) -> str | None:
    """Fading the HTF bias is allowed only while its confidence is below the profile minimum."""
    if bias.direction == opposite(direction) and bias.confidence >= profile.min_htf_bias_confidence:
        return (f"counter-trend {direction} against {bias.direction} HTF bias at {bias.confidence}% "
                f"(fade allowed below {profile.min_htf_bias_confidence}%)")
    return None


class AggroScalp1H(Strategy):
    name = "AGGRO_SCALP_1H"
    required = ("1h", "15m")
    stop_timeframes = ("15m", "1h")
    multiples = (1.5, 3.0)
    band_setting = "AGGRO_ENTRY_BAND_PCT"
    invalidation_tf = "15m"
    max_confidence = 50
    override = True
    aggressive = True

    def risk_fraction(self) -> float:
        return self.cfg.AGGRO_SCALP_RISK_FRACTION

    def gatekeeper(self, snaps, profile, bias):
        s1, s15 = snaps["1h"], snaps["15m"]
        notes = []
        direction = trend_direction(s1.trend)
        if direction is None:
            if bias.direction != "neutral":
                direction = bias.direction
                notes.append(f"1H FLAT; direction from HTF bias {bias.direction}")
            else:
                direction = "long" if s15.stoch_k < 50 else "short"
                notes.append(f"1H FLAT and HTF neutral; direction from 15m %K {s15.stoch_k:.0f}")

        if s1.abs_distance_pct > profile.ema_pullback_max_1h:
            return reasons.band_exceeded([s1], profile.ema_pullback_max_1h)
        if s15.abs_distance_pct > profile.ema_pullback_max:
            return reasons.band_exceeded([s15], profile.ema_pullback_max)
        if s15.pullback_state not in PULLBACK_OK:
            return reasons.pullback_not_in("15m", s15.pullback_state, PULLBACK_OK)
        if direction == "long" and s15.stoch_k >= K_LONG_MAX:
            return f"15m %K {s15.stoch_k:.0f} not below {K_LONG_MAX:.0f} for long"
        if direction == "short" and s15.stoch_k <= K_SHORT_MIN:
            return f"15m %K {s15.stoch_k:.0f} not above {K_SHORT_MIN:.0f} for short"
        blocked = counter_trend_block(direction, bias, profile)
        if blocked:
            return blocked

        return Setup(direction, (s1.ema21 + s15.ema21) / 2.0, notes)

    def score(self, setup, snaps, profile, bias):
        s1, s15 = snaps["1h"], snaps["15m"]
        d = setup.direction
        notes = ["aggressive 1H scalp: half risk"]
        total = 30
        if trend_direction(s1.trend) == d:
            total += 10
        if stoch_aligned(s15, d):
            total += 5
        if bias.direction == d:
            total += 5
        elif bias.direction == opposite(d):
            total -= COUNTER_TREND_PENALTY
            notes.append(f"counter-trend against weak HTF bias ({bias.confidence}%)")
        return total, notes


class AggroMicroScalp(Strategy):
    name = "AGGRO_MICRO_SCALP"
    required = ("15m", "5m")
    stop_timeframes = ("15m", "5m")
    multiples = (1.0, 1.5)
    band_setting = "MICRO_ENTRY_BAND_PCT"
    invalidation_tf = "5m"
    max_confidence = 40
    override = True
    aggressive = True

    def risk_fraction(self) -> float:
        return self.cfg.AGGRO_MICRO_RISK_FRACTION

    def gatekeeper(self, snaps, profile, bias):
        s15, s5 = snaps["15m"], snaps["5m"]
        s1 = snaps.get("1h")
        notes = []
        direction = trend_direction(s1.trend) if s1 is not None else None
        if direction is None:
            if bias.direction == "neutral":
                return "no directional lean: 1H FLAT or missing and HTF bias neutral"
            direction = bias.direction
            notes.append(f"direction from HTF bias {bias.direction}")

        band = profile.micro_scalp_ema_band
        if s15.abs_distance_pct > band or s5.abs_distance_pct > band:
            return reasons.band_exceeded([s15, s5], band)
        if not (stoch_extreme(s15, direction) or stoch_extreme(s5, direction)):
            need = "oversold" if direction == "long" else "overbought"
            return f"15m/5m stoch {reasons.stoch_state([s15, s5])}: neither {need} for {direction}"
        blocked = counter_trend_block(direction, bias, profile)
        if blocked:
            return blocked

        return Setup(direction, (s15.ema21 + s5.ema21) / 2.0, notes)

    def score(self, setup, snaps, profile, bias):
        s15, s5 = snaps["15m"], snaps["5m"]
        d = setup.direction
        band = profile.micro_scalp_ema_band
        avg = (s15.abs_distance_pct + s5.abs_distance_pct) / 2.0
        total = 25 + 10 * _clamp01(1.0 - avg / band)
        if stoch_extreme(s15, d) and stoch_extreme(s5, d):
            total += 5
        return total, ["aggressive micro scalp: one-third risk"]
