from __future__ import annotations

"""Named threshold bundles (STANDARD / AGGRESSIVE) and their resolver."""

import json
import logging
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

log = logging.getLogger(__name__)


class ThresholdProfile(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    ema_pullback_max: float = Field(gt=0)           # % band around 15m EMA21
    ema_pullback_max_1h: float = Field(gt=0)        # % band around 1h EMA21
    micro_scalp_ema_band: float = Field(gt=0)       # % band for the 15m/5m confluence
    allow_flat_4h_for_trend: bool
    allow_flat_4h_for_scalp: bool
    allow_flat_1h_for_scalp: bool
    strict_15m_stoch_align: bool
    min_htf_bias_confidence: int = Field(ge=0, le=100)  # 0..100
    max_swing_ema_dist_1d: float = Field(gt=0)      # % band around 1d EMA21
    aggressive: bool = False


STANDARD = ThresholdProfile(
    name="STANDARD",
    ema_pullback_max=1.0,
    ema_pullback_max_1h=1.5,
    micro_scalp_ema_band=0.25,
    allow_flat_4h_for_trend=False,
    allow_flat_4h_for_scalp=False,
    allow_flat_1h_for_scalp=False,
    strict_15m_stoch_align=True,
    min_htf_bias_confidence=60,
    max_swing_ema_dist_1d=3.0,
)

AGGRESSIVE = ThresholdProfile(
    name="AGGRESSIVE",
    ema_pullback_max=1.75,
    ema_pullback_max_1h=2.5,
    micro_scalp_ema_band=0.75,
    allow_flat_4h_for_trend=True,
    allow_flat_4h_for_scalp=True,
    allow_flat_1h_for_scalp=True,
    strict_15m_stoch_align=False,
    min_htf_bias_confidence=40,
    max_swing_ema_dist_1d=5.0,
    aggressive=True,
)

PROFILES: Mapping[str, ThresholdProfile] = MappingProxyType({
    STANDARD.name: STANDARD,
    AGGRESSIVE.name: AGGRESSIVE,
})

_BANDS = ("ema_pullback_max", "ema_pullback_max_1h", "micro_scalp_ema_band", "max_swing_ema_dist_1d")
_FLAGS = ("allow_flat_4h_for_trend", "allow_flat_4h_for_scalp", "allow_flat_1h_for_scalp")


def widens(wide: ThresholdProfile, narrow: ThresholdProfile) -> bool:
    """True when every qualifying band of `wide` contains the matching band of `narrow`."""
    if any(getattr(wide, k) < getattr(narrow, k) for k in _BANDS):
        return False
    if any(getattr(narrow, k) and not getattr(wide, k) for k in _FLAGS):
        return False
    if wide.strict_15m_stoch_align and not narrow.strict_15m_stoch_align:
        return False
    return True


def _parse_overrides(raw) -> dict:
    if not raw:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        data = json.loads(raw)
    except ValueError as e:
        log.warning(f"[PROFILE] PROFILE_OVERRIDES is not valid JSON ({e}); ignoring")
        return {}
    if not isinstance(data, dict):
        log.warning("[PROFILE] PROFILE_OVERRIDES must be an object keyed by profile name; ignoring")
        return {}
    return data


def resolve_profile(mode: str | None, overrides=None) -> ThresholdProfile:
    """
    Return the named profile. Unknown names fall back to STANDARD.
    `overrides` is a mapping or JSON string {"AGGRESSIVE": {field: value}}; a
    malformed override is dropped and the built-in profile is used.
    """
    key = (mode or "").strip().upper()
    base = PROFILES.get(key)
    if base is None:
        log.warning(f"[PROFILE] unknown mode {mode!r}; falling back to STANDARD")
        base = STANDARD

    patch = _parse_overrides(overrides).get(base.name)
    if not patch:
        return base
    if not isinstance(patch, Mapping):
        log.warning(f"[PROFILE] override for {base.name} is not an object; using built-in")
        return base
    try:
        merged = ThresholdProfile(**{**base.model_dump(), **dict(patch), "name": base.name, "aggressive": base.aggressive})
    except ValidationError as e:
        log.warning(f"[PROFILE] invalid override for {base.name}: {e.error_count()} error(s); using built-in")
        return base

    if merged.aggressive and not widens(merged, STANDARD):
        log.warning(f"[PROFILE] override narrows {base.name} below STANDARD; using built-in")
        return base
    if not merged.aggressive and not widens(AGGRESSIVE, merged):
        log.warning(f"[PROFILE] override widens {base.name} beyond AGGRESSIVE; using built-in")
        return base
    return merged
