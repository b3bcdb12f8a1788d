from __future__ import annotations

"""Stable wording for gatekeeper failures: gate, measured value, threshold."""

from typing import Iterable

from mtfengine.analysis.types import TimeframeSnapshot, tf_label


def _tfs(tfs: Iterable[str]) -> str:
    return "/".join(tf_label(tf) for tf in tfs)


def missing(tfs: Iterable[str]) -> str:
    return f"{_tfs(tfs)} snapshot missing"


def trend_flat(tf: str, why: str = "") -> str:
    return f"{tf_label(tf)} trend is FLAT" + (f" - {why}" if why else "")


def trend_disagrees(tf: str, trend: str, ref_tf: str, ref_trend: str) -> str:
    return f"{tf_label(tf)} trend {trend} does not agree with {tf_label(ref_tf)} {ref_trend}"


def pullback_not_in(tf: str, state: str, allowed: Iterable[str]) -> str:
    return f"{tf_label(tf)} pullback is {state}; needs {' or '.join(allowed)}"


def band_exceeded(snaps: list[TimeframeSnapshot], band: float) -> str:
    tfs = _tfs(s.timeframe for s in snaps)
    vals = "/".join(f"{s.abs_distance_pct:.2f}%" for s in snaps)
    return f"{tfs} EMA21 distance {vals} exceeds ±{band:.2f}% band"


def stoch_state(snaps: list[TimeframeSnapshot]) -> str:
    return "/".join(f"{s.stoch_condition} {s.stoch_k:.0f}" for s in snaps)


def profile_required(active: str) -> str:
    return f"requires AGGRESSIVE profile (active: {active})"


def not_evaluated(why: str) -> str:
    return f"not evaluated: {why}"
