from __future__ import annotations

import logging
from typing import Mapping, Optional

from mtfengine.analysis.htf_bias import compute_htf_bias
from mtfengine.analysis.state import CompositeDecision
from mtfengine.analysis.types import AuxSignals, TimeframeSnapshot
from mtfengine.config.profiles import resolve_profile
from mtfengine.config.settings import Settings
from mtfengine.strategy import STRATEGY_ORDER, canonical_name, reasons
from mtfengine.strategy.aggressive import AggroMicroScalp, AggroScalp1H
from mtfengine.strategy.base import Strategy
from mtfengine.strategy.micro_scalp import MicroScalpOverride
from mtfengine.strategy.result import StrategyResult
from mtfengine.strategy.scalp import Scalp15M5M
from mtfengine.strategy.swing import Swing3D1D4H
from mtfengine.strategy.trend_4h import Trend4H

log = logging.getLogger(__name__)

STRATEGY_CLASSES = (Swing3D1D4H, Trend4H, Scalp15M5M, MicroScalpOverride, AggroScalp1H, AggroMicroScalp)


def build_strategies(cfg) -> list[Strategy]:
    """One instance per evaluator, in cascade priority order."""
    classes = sorted(STRATEGY_CLASSES, key=lambda cls: STRATEGY_ORDER.index(cls.name))
    return [cls(cfg) for cls in classes]


class DecisionEngine:
    """Runs the strategy cascade for one symbol and picks at most one signal."""

    def __init__(self, cfg: Settings | None = None):
        self.cfg = cfg or Settings()
        self.strategies = build_strategies(self.cfg)

    def _selectable(self, result: StrategyResult) -> bool:
        if not result.valid:
            return False
        if result.strategy == "SWING_3D_1D_4H":
            return result.confidence >= self.cfg.SWING_MIN_CONFIDENCE
        return True

    # [ANCHOR:DECISION_CASCADE]
    def evaluate(self, symbol: str, snapshots: Mapping[str, TimeframeSnapshot], mode: str | None = None,
                 aux: Optional[AuxSignals] = None, strategy: str | None = None) -> CompositeDecision:
        profile = resolve_profile(mode or self.cfg.ENGINE_MODE, self.cfg.PROFILE_OVERRIDES)
        bias = compute_htf_bias(snapshots, self.cfg.HTF_BIAS_MAX_TFS)
        notes: list[str] = []

        requested = canonical_name(strategy)
        if strategy and requested is None and strategy.strip().upper() != "AUTO":
            log.warning(f"[DECISION] unknown strategy {strategy!r}; running auto cascade")
            notes.append(f"unknown strategy {strategy!r}; auto cascade used")

        results: dict[str, StrategyResult] = {}
        best = None
        for strat in self.strategies:
            if requested and strat.name != requested:
                results[strat.name] = StrategyResult.rejected(
                    strat.name, f"{strat.name}: {reasons.not_evaluated(f'{requested} requested')}")
                continue
            if best and not self.cfg.EVALUATE_ALL:
                results[strat.name] = StrategyResult.rejected(
                    strat.name, f"{strat.name}: {reasons.not_evaluated(f'{best} selected first')}")
                continue
            r = strat.evaluate(symbol, snapshots, profile, bias, aux)
            results[strat.name] = r
            if best is None and self._selectable(r):
                best = strat.name
            elif r.valid and best is None:
                notes.append(f"{strat.name} valid but below {self.cfg.SWING_MIN_CONFIDENCE}% floor")

        if best:
            chosen = results[best]
            reason = chosen.reason
            if chosen.override:
                notes.append(f"{best} selected as override at {chosen.risk_fraction:g}x risk")
        else:
            reason = f"No valid setup ({profile.name}): " + " | ".join(r.reason for r in results.values())

        decision = CompositeDecision(
            symbol=symbol,
            mode=profile.name,
            htf_bias=bias,
            strategies=results,
            best_signal=best,
            reason=reason,
            notes=notes,
        )
        if best:
            log.info(f"[DECISION] {symbol} {profile.name} best={best} {results[best].direction} "
                     f"conf={results[best].confidence}")
        else:
            log.info(f"[DECISION] {symbol} {profile.name} NO_TRADE")
        return decision


def evaluate_decision(symbol: str, snapshots: Mapping[str, TimeframeSnapshot], mode: str = "STANDARD",
                      aux: Optional[AuxSignals] = None, strategy: str | None = None,
                      cfg: Settings | None = None) -> CompositeDecision:
    return DecisionEngine(cfg).evaluate(symbol, snapshots, mode, aux, strategy)
