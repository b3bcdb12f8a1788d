from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from mtfengine.analysis.htf_bias import HTFBias
from mtfengine.analysis.types import AuxSignals, TimeframeSnapshot, tf_label
from mtfengine.config.profiles import ThresholdProfile
from mtfengine.strategy import reasons
from mtfengine.strategy.result import Invalidation, StrategyResult
from mtfengine.strategy.scorer import aux_adjustment, clamp_confidence
from mtfengine.trade.geometry import GeometryError, build_geometry, swing_stop_reference

log = logging.getLogger(__name__)


@dataclass
class Setup:
    """Output of a passed gatekeeper: which way, and where to enter."""
    direction: str
    anchor: float
    notes: list = field(default_factory=list)


class Strategy:
    """
    One rule-based strategy. Subclasses supply the gatekeeper, the scoring and
    the geometry inputs; `evaluate` strings them together and never raises on
    well-typed input.
    """
    name: str = ""
    required: tuple = ()            # snapshots that must be present
    stop_timeframes: tuple = ()     # swing levels feeding the stop
    multiples: tuple = ()           # target R multiples, strictly increasing
    band_setting: str = "TREND_ENTRY_BAND_PCT"
    invalidation_tf: str = "4h"
    max_confidence: int = 100
    override: bool = False
    aggressive: bool = False

    def __init__(self, cfg):
        self.cfg = cfg

    # --- hooks ---
    def gatekeeper(self, snaps: Mapping[str, TimeframeSnapshot], profile: ThresholdProfile,
                   bias: HTFBias) -> Union[Setup, str]:
        raise NotImplementedError

    def score(self, setup: Setup, snaps: Mapping[str, TimeframeSnapshot], profile: ThresholdProfile,
              bias: HTFBias) -> tuple[float, list[str]]:
        raise NotImplementedError

    def risk_fraction(self) -> float:
        return 1.0

    def describe_invalidation(self, direction: str, level: float) -> str:
        side = "below" if direction == "long" else "above"
        return f"{tf_label(self.invalidation_tf)} close {side} {level:.6g} invalidates the {self.name} setup"

    # --- contract ---
    def reject(self, detail: str, notes: Optional[list] = None) -> StrategyResult:
        reason = f"{self.name}: {detail}"
        log.debug(f"[GATE] {reason}")
        return StrategyResult.rejected(self.name, reason, notes)

    def evaluate(self, symbol: str, snapshots: Mapping[str, TimeframeSnapshot], profile: ThresholdProfile,
                 htf_bias: HTFBias, aux: Optional[AuxSignals] = None) -> StrategyResult:
        if self.aggressive and not profile.aggressive:
            return self.reject(reasons.profile_required(profile.name))
        absent = [tf for tf in self.required if tf not in snapshots]
        if absent:
            return self.reject(reasons.missing(absent))
        unpriced = [tf for tf in self.required if not snapshots[tf].ema21 or snapshots[tf].ema21 <= 0]
        if unpriced:
            return self.reject(f"{'/'.join(tf_label(tf) for tf in unpriced)} EMA21 is not a positive price")

        gate = self.gatekeeper(snapshots, profile, htf_bias)
        if isinstance(gate, str):
            return self.reject(gate)
        setup = gate
        direction = setup.direction

        raw, score_notes = self.score(setup, snapshots, profile, htf_bias)
        delta, aux_notes = aux_adjustment(aux, direction, self.cfg)
        confidence = clamp_confidence(raw + delta, self.max_confidence)

        ref, stop_notes = swing_stop_reference(direction, snapshots, self.stop_timeframes)
        try:
            geo = build_geometry(
                direction, setup.anchor, ref, self.multiples, getattr(self.cfg, self.band_setting),
                stop_buffer_pct=self.cfg.STOP_BUFFER_PCT,
                fallback_stop_pct=self.cfg.FALLBACK_STOP_PCT,
                allow_fallback=self.cfg.STOP_FALLBACK_ENABLED,
            )
        except GeometryError as e:
            return self.reject(str(e), notes=setup.notes + stop_notes)

        notes = list(setup.notes) + score_notes + aux_notes + stop_notes + list(geo.notes)
        result = StrategyResult(
            strategy=self.name,
            valid=True,
            direction=direction,
            confidence=confidence,
            reason=f"{self.name}: {direction} setup at {confidence}% confidence",
            entry_zone=geo.entry_zone,
            stop_loss=geo.stop_loss,
            targets=geo.targets,
            risk_reward=geo.risk_reward,
            invalidation=Invalidation(geo.invalidation_level,
                                      self.describe_invalidation(direction, geo.invalidation_level)),
            override=self.override,
            aggressive_used=self.aggressive,
            risk_fraction=self.risk_fraction(),
            fallback_stop=geo.fallback_stop,
            notes=tuple(notes),
        )
        log.debug(f"[GATE] {symbol} {self.name} pass {direction} conf={confidence}")
        return result
