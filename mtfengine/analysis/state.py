from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from mtfengine.analysis.htf_bias import HTFBias
from mtfengine.strategy.result import StrategyResult


# [ANCHOR:COMPOSITE_DECISION_DTO]
@dataclass
class CompositeDecision:
    symbol: str
    mode: str                              # profile name actually applied
    htf_bias: HTFBias
    strategies: Dict[str, StrategyResult]  # priority order
    best_signal: Optional[str] = None
    reason: str = ""
    notes: List[str] = field(default_factory=list)

    @property
    def best(self) -> Optional[StrategyResult]:
        return self.strategies.get(self.best_signal) if self.best_signal else None

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "mode": self.mode,
            "htfBias": self.htf_bias.to_dict(),
            "bestSignal": self.best_signal,
            "reason": self.reason,
            "notes": list(self.notes),
            "strategies": {name: r.to_dict() for name, r in self.strategies.items()},
        }
