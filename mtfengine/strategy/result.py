from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from mtfengine.trade.geometry import EntryZone

TARGET_SLOTS = 3


@dataclass(frozen=True)
class Invalidation:
    level: Optional[float] = None
    description: str = ""


# [ANCHOR:STRATEGY_RESULT_DTO]
@dataclass(frozen=True)
class StrategyResult:
    strategy: str
    valid: bool
    direction: str                  # long | short | NO_TRADE
    confidence: int                 # 0..100
    reason: str
    entry_zone: Optional[EntryZone] = None
    stop_loss: Optional[float] = None
    targets: tuple = ()             # 2..3 prices
    risk_reward: tuple = ()         # one R multiple per target
    invalidation: Invalidation = field(default_factory=Invalidation)
    override: bool = False
    aggressive_used: bool = False
    risk_fraction: float = 0.0
    fallback_stop: bool = False
    notes: tuple = ()

    @classmethod
    def rejected(cls, strategy: str, reason: str, notes: List[str] | None = None) -> "StrategyResult":
        return cls(strategy=strategy, valid=False, direction="NO_TRADE", confidence=0,
                   reason=reason, notes=tuple(notes or ()))

    def to_dict(self) -> dict:
        targets = list(self.targets) + [None] * (TARGET_SLOTS - len(self.targets))
        rr = list(self.risk_reward) + [None] * (TARGET_SLOTS - len(self.risk_reward))
        zone = self.entry_zone
        return {
            "strategy": self.strategy,
            "valid": self.valid,
            "direction": self.direction,
            "confidence": self.confidence,
            "entryZone": {"min": zone.min if zone else None, "max": zone.max if zone else None},
            "stopLoss": self.stop_loss,
            "targets": targets[:TARGET_SLOTS],
            "riskReward": {"tp1RR": rr[0], "tp2RR": rr[1], "tp3RR": rr[2]},
            "invalidation": {"level": self.invalidation.level, "description": self.invalidation.description},
            "reason": self.reason,
            "override": self.override,
            "aggressiveUsed": self.aggressive_used,
            "riskFraction": self.risk_fraction,
            "fallbackStop": self.fallback_stop,
            "notes": list(self.notes),
        }
