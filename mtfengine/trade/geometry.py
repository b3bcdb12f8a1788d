from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from mtfengine.analysis.types import Direction, TimeframeSnapshot, tf_label

log = logging.getLogger(__name__)


class GeometryError(ValueError):
    """Entry/stop/target plan cannot be built from the given levels."""


@dataclass(frozen=True)
class EntryZone:
    min: float
    max: float


@dataclass(frozen=True)
class RiskGeometry:
    entry_zone: EntryZone
    entry: float
    stop_loss: float
    invalidation_level: float
    targets: tuple
    risk_reward: tuple
    risk: float
    fallback_stop: bool = False
    notes: tuple = field(default_factory=tuple)


def swing_stop_reference(direction: Direction, snapshots: Mapping[str, TimeframeSnapshot],
                         timeframes: Iterable[str]) -> tuple[Optional[float], list[str]]:
    """
    Protective level across `timeframes`: min swing low for longs, max swing high
    for shorts. Frames without a level are skipped and noted.
    """
    levels, missing = [], []
    for tf in timeframes:
        snap = snapshots.get(tf)
        lvl = snap.swing_level(direction) if snap is not None else None
        if lvl is None or lvl <= 0:
            missing.append(tf)
        else:
            levels.append((tf, float(lvl)))

    kind = "swing low" if direction == "long" else "swing high"
    notes: list[str] = []
    if not levels:
        return None, notes
    if missing:
        used = "/".join(tf_label(tf) for tf, _ in levels)
        notes.append(f"{'/'.join(tf_label(tf) for tf in missing)} {kind} missing; stop uses {used}")
    pick = min if direction == "long" else max
    return pick(lvl for _, lvl in levels), notes


# [ANCHOR:RISK_GEOMETRY]
def build_geometry(direction: Direction, anchor: float, stop_reference: Optional[float],
                   multiples: Sequence[float], band_pct: float, *, stop_buffer_pct: float,
                   fallback_stop_pct: float, allow_fallback: bool = True) -> RiskGeometry:
    if anchor is None or anchor <= 0:
        raise GeometryError(f"entry anchor {anchor!r} is not a positive price")
    if not multiples or any(b <= a for a, b in zip(multiples, multiples[1:])) or multiples[0] <= 0:
        raise GeometryError(f"target multiples {list(multiples)} must be positive and strictly increasing")

    is_long = direction == "long"
    half = anchor * band_pct / 100.0
    zone = EntryZone(min=anchor - half, max=anchor + half)
    notes: list[str] = []

    stop = None
    invalidation = None
    if stop_reference is not None and stop_reference > 0:
        buf = stop_buffer_pct / 100.0
        stop = stop_reference * (1.0 - buf) if is_long else stop_reference * (1.0 + buf)
        invalidation = float(stop_reference)
        if (is_long and stop >= zone.min) or (not is_long and stop <= zone.max):
            notes.append(f"swing stop {stop:.6g} is not beyond the entry zone; "
                         f"using {fallback_stop_pct:g}% fallback stop")
            stop = None
    else:
        notes.append(f"no swing level available; using {fallback_stop_pct:g}% fallback stop")

    fallback = stop is None
    if fallback:
        if not allow_fallback:
            raise GeometryError("no usable swing level for stop placement")
        fb = fallback_stop_pct / 100.0
        stop = zone.min * (1.0 - fb) if is_long else zone.max * (1.0 + fb)
        invalidation = stop
        log.debug(f"[GEOMETRY] {direction} fallback stop={stop:.6g} anchor={anchor:.6g}")

    risk = abs(anchor - stop)
    if is_long:
        targets = tuple(anchor + risk * m for m in multiples)
    else:
        targets = tuple(anchor - risk * m for m in multiples)
        if targets[-1] <= 0:
            raise GeometryError(f"short target {targets[-1]:.6g} at or below zero (risk {risk:.6g})")

    return RiskGeometry(
        entry_zone=zone,
        entry=anchor,
        stop_loss=stop,
        invalidation_level=invalidation,
        targets=targets,
        risk_reward=tuple(float(m) for m in multiples),
        risk=risk,
        fallback_stop=fallback,
        notes=tuple(notes),
    )
