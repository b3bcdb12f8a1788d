from __future__ import annotations

from mtfengine.analysis.types import trend_direction
from mtfengine.strategy import reasons
from mtfengine.strategy.base import Setup, Strategy
from mtfengine.strategy.scorer import _clamp01, stoch_extreme

PULLBACK_OK = ("ENTRY_ZONE", "RETRACING")
BULL_K_MAX = 40.0     # BULLISH counts for longs only below this %K
BEAR_K_MIN = 60.0


def micro_momentum(s, direction: str) -> bool:
    if direction == "long":
        return s.stoch_condition == "BULLISH" and s.stoch_k < BULL_K_MAX
    return s.stoch_condition == "BEARISH" and s.stoch_k > BEAR_K_MIN


class MicroScalpOverride(Strategy):
    """
    Lower-timeframe fallback when the 4H is not tradeable: 1H direction with a
    tight 15m/5m EMA21 confluence. Always flagged as an override, at reduced size.
    """
    name = "MICRO_SCALP_OVERRIDE"
    required = ("1h", "15m", "5m")
    stop_timeframes = ("15m", "5m")
    multiples = (1.0, 1.5)
    band_setting = "MICRO_ENTRY_BAND_PCT"
    invalidation_tf = "5m"
    max_confidence = 75
    override = True

    def risk_fraction(self) -> float:
        return self.cfg.MICRO_RISK_FRACTION

    def gatekeeper(self, snaps, profile, bias):
        s1, s15, s5 = snaps["1h"], snaps["15m"], snaps["5m"]
        if s1.trend == "FLAT":
            return reasons.trend_flat("1h", "micro scalp follows the 1H direction")
        for s in (s1, s15, s5):
            if s.pullback_state not in PULLBACK_OK:
                return reasons.pullback_not_in(s.timeframe, s.pullback_state, PULLBACK_OK)

        band = profile.micro_scalp_ema_band
        if s15.abs_distance_pct > band or s5.abs_distance_pct > band:
            return reasons.band_exceeded([s15, s5], band)

        direction = trend_direction(s1.trend)
        # both frames must pass on the same rule
        extreme = stoch_extreme(s15, direction) and stoch_extreme(s5, direction)
        momentum = micro_momentum(s15, direction) and micro_momentum(s5, direction)
        if not (extreme or momentum):
            need = ("both oversold, or both bullish with %K<40" if direction == "long"
                    else "both overbought, or both bearish with %K>60")
            return f"15m/5m stoch {reasons.stoch_state([s15, s5])} not aligned for {direction} (needs {need})"

        notes = ["reduced-size lower-timeframe fallback: 4H structure not confirmed"]
        return Setup(direction, (s15.ema21 + s5.ema21) / 2.0, notes)

    def score(self, setup, snaps, profile, bias):
        s15, s5 = snaps["15m"], snaps["5m"]
        d = setup.direction
        band = profile.micro_scalp_ema_band
        avg = (s15.abs_distance_pct + s5.abs_distance_pct) / 2.0
        total = 60 + 10 * _clamp01(1.0 - avg / band)
        extreme = stoch_extreme(s15, d) + stoch_extreme(s5, d)
        total += {2: 5, 1: 2.5}.get(extreme, 0)
        return total, [f"15m/5m EMA21 confluence {avg:.2f}% within ±{band:.2f}%"]
