from __future__ import annotations

import json

import pytest

from builders import (
    aggro_micro_book, aggro_scalp_book, dead_book, micro_book, short_scalp_book, snap, swing_long_book,
)
from mtfengine.analysis.engine import STRATEGY_CLASSES, DecisionEngine, build_strategies, evaluate_decision
from mtfengine.analysis.types import AuxSignals
from mtfengine.strategy import STRATEGY_ORDER

BOOKS = {
    "micro": micro_book,
    "short_scalp": short_scalp_book,
    "swing_long": swing_long_book,
    "dead": dead_book,
    "aggro_scalp": aggro_scalp_book,
    "aggro_micro": aggro_micro_book,
}
STANDARD_FOUR = STRATEGY_ORDER[:4]


def decide(cfg, snaps, mode="STANDARD", **kw):
    return DecisionEngine(cfg).evaluate("BTCUSDT", snaps, mode, **kw)


# --- scenarios ---

def test_flat_4h_falls_back_to_micro_scalp(cfg) -> None:
    d = decide(cfg, micro_book())
    assert d.best_signal == "MICRO_SCALP_OVERRIDE"
    best = d.best
    assert best.valid and best.override
    assert best.confidence >= 60
    assert "4H trend is FLAT" in d.strategies["TREND_4H"].reason


def test_short_scalp_scenario(cfg) -> None:
    d = decide(cfg, short_scalp_book())
    scalp = d.strategies["SCALP_15M_5M"]
    assert scalp.valid and scalp.direction == "short"
    assert scalp.risk_reward == (1.5, 3.0)
    mid = (scalp.entry_zone.min + scalp.entry_zone.max) / 2
    risk = scalp.stop_loss - mid
    assert mid - scalp.targets[0] == pytest.approx(1.5 * risk)
    assert mid - scalp.targets[1] == pytest.approx(3.0 * risk)


def test_flat_3d_blocks_swing(cfg) -> None:
    snaps = swing_long_book(**{"3d": snap("3d", "FLAT", pullback="RETRACING")})
    d = decide(cfg, snaps)
    swing = d.strategies["SWING_3D_1D_4H"]
    assert not swing.valid
    assert "3D trend is FLAT" in swing.reason
    assert d.best_signal == "TREND_4H"


def test_nothing_qualifies(cfg) -> None:
    d = decide(cfg, dead_book())
    assert d.best_signal is None and d.best is None
    reasons = [r.reason for r in d.strategies.values()]
    assert len(reasons) == 6
    assert all(reasons)
    assert len(set(reasons)) == 6
    assert d.reason.startswith("No valid setup (STANDARD)")
    for r in reasons:
        assert r in d.reason


# --- laws ---

def test_swing_outranks_trend(cfg) -> None:
    d = decide(cfg, swing_long_book())
    assert d.strategies["SWING_3D_1D_4H"].valid
    assert d.strategies["TREND_4H"].valid
    assert d.best_signal == "SWING_3D_1D_4H"


def test_swing_below_floor_yields_to_trend(cfg) -> None:
    d = decide(cfg, swing_long_book(), aux=AuxSignals(orderbook_imbalance=-30.0, trade_flow="SELL"))
    # 85 - 5 = 80 still clears 70
    assert d.best_signal == "SWING_3D_1D_4H"
    high_floor = cfg.model_copy(update={"SWING_MIN_CONFIDENCE": 86})
    d = decide(high_floor, swing_long_book())
    assert d.strategies["SWING_3D_1D_4H"].valid
    assert d.best_signal == "TREND_4H"


@pytest.mark.parametrize("name", sorted(BOOKS))
def test_aggressive_never_narrower(cfg, name) -> None:
    snaps = BOOKS[name]()
    std = decide(cfg, snaps, "STANDARD")
    agg = decide(cfg, snaps, "AGGRESSIVE")
    for s in STANDARD_FOUR:
        if std.strategies[s].valid:
            assert agg.strategies[s].valid, s


@pytest.mark.parametrize("name", sorted(BOOKS))
@pytest.mark.parametrize("mode", ["STANDARD", "AGGRESSIVE"])
def test_result_invariants(cfg, name, mode) -> None:
    d = decide(cfg, BOOKS[name](), mode)
    assert list(d.strategies) == list(STRATEGY_ORDER)
    for r in d.strategies.values():
        assert 0 <= r.confidence <= 100
        assert (r.direction == "NO_TRADE") == (not r.valid)
        if not r.valid:
            continue
        zone = r.entry_zone
        mid = (zone.min + zone.max) / 2
        if r.direction == "long":
            assert r.stop_loss < zone.min
            assert all(a < b for a, b in zip(r.targets, r.targets[1:]))
        else:
            assert r.stop_loss > zone.max
            assert all(a > b for a, b in zip(r.targets, r.targets[1:]))
        risk = abs(mid - r.stop_loss)
        for t, m in zip(r.targets, r.risk_reward):
            assert abs(t - mid) == pytest.approx(m * risk)
    if d.best_signal:
        assert d.strategies[d.best_signal].valid


@pytest.mark.parametrize("name", sorted(BOOKS))
def test_decision_is_idempotent(cfg, name) -> None:
    snaps = BOOKS[name]()
    aux = AuxSignals(orderbook_imbalance=12.5, trade_flow="BUY")
    a = json.dumps(decide(cfg, snaps, "AGGRESSIVE", aux=aux).to_dict(), sort_keys=True)
    b = json.dumps(evaluate_decision("BTCUSDT", snaps, "AGGRESSIVE", aux, cfg=cfg).to_dict(), sort_keys=True)
    assert a == b


# --- modes ---

def test_aggressive_cascade_reaches_aggro_scalp(cfg) -> None:
    assert decide(cfg, aggro_scalp_book()).best_signal is None
    d = decide(cfg, aggro_scalp_book(), "AGGRESSIVE")
    assert d.mode == "AGGRESSIVE"
    assert d.best_signal == "AGGRO_SCALP_1H"
    assert d.best.aggressive_used and d.best.override
    assert any("0.5x risk" in n for n in d.notes)


def test_aggressive_cascade_reaches_aggro_micro(cfg) -> None:
    d = decide(cfg, aggro_micro_book(), "aggressive")
    assert d.best_signal == "AGGRO_MICRO_SCALP"
    assert d.best.risk_fraction == pytest.approx(0.33)


def test_unknown_mode_runs_standard(cfg) -> None:
    d = decide(cfg, aggro_scalp_book(), "TURBO")
    assert d.mode == "STANDARD"
    assert d.best_signal is None


def test_requested_strategy_only(cfg) -> None:
    d = decide(cfg, swing_long_book(), strategy="scalp")
    assert d.best_signal == "SCALP_15M_5M"
    for name in STRATEGY_ORDER:
        if name != "SCALP_15M_5M":
            assert d.strategies[name].reason == f"{name}: not evaluated: SCALP_15M_5M requested"


def test_requested_strategy_that_fails(cfg) -> None:
    d = decide(cfg, micro_book(), strategy="TREND_4H")
    assert d.best_signal is None
    assert "4H trend is FLAT" in d.reason


def test_unknown_strategy_runs_auto(cfg) -> None:
    d = decide(cfg, swing_long_book(), strategy="MOONSHOT")
    assert d.best_signal == "SWING_3D_1D_4H"
    assert any("MOONSHOT" in n for n in d.notes)


def test_short_circuit_selects_same_signal(cfg) -> None:
    lazy = cfg.model_copy(update={"EVALUATE_ALL": False})
    for name, build in BOOKS.items():
        for mode in ("STANDARD", "AGGRESSIVE"):
            full = decide(cfg, build(), mode)
            short = decide(lazy, build(), mode)
            assert full.best_signal == short.best_signal, (name, mode)
    d = decide(lazy, swing_long_book())
    assert d.strategies["TREND_4H"].reason == "TREND_4H: not evaluated: SWING_3D_1D_4H selected first"


def test_to_dict_shape(cfg) -> None:
    out = decide(cfg, micro_book()).to_dict()
    assert out["bestSignal"] == "MICRO_SCALP_OVERRIDE"
    assert out["htfBias"]["direction"] == "long"
    micro = out["strategies"]["MICRO_SCALP_OVERRIDE"]
    assert len(micro["targets"]) == 3 and micro["targets"][2] is None
    assert micro["riskReward"] == {"tp1RR": 1.0, "tp2RR": 1.5, "tp3RR": None}
    assert set(micro["entryZone"]) == {"min", "max"}
    assert micro["invalidation"]["level"] is not None
    trend = out["strategies"]["TREND_4H"]
    assert trend["entryZone"] == {"min": None, "max": None}
    assert trend["targets"] == [None, None, None]
    assert trend["direction"] == "NO_TRADE"


def test_strategies_built_in_cascade_order(cfg) -> None:
    assert len(STRATEGY_CLASSES) == len(STRATEGY_ORDER)
    assert [s.name for s in build_strategies(cfg)] == list(STRATEGY_ORDER)
    assert [s.name for s in DecisionEngine(cfg).strategies] == list(STRATEGY_ORDER)
