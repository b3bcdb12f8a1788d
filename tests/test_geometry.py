from __future__ import annotations

import pytest

from builders import book, snap
from mtfengine.trade.geometry import GeometryError, build_geometry, swing_stop_reference

KW = dict(stop_buffer_pct=0.3, fallback_stop_pct=3.0)


def test_long_geometry_from_swing_low() -> None:
    g = build_geometry("long", 100.0, 97.0, (1.5, 2.5), 0.4, **KW)
    assert g.entry_zone.min == pytest.approx(99.6)
    assert g.entry_zone.max == pytest.approx(100.4)
    assert g.stop_loss == pytest.approx(97.0 * 0.997)
    assert g.invalidation_level == 97.0
    assert g.risk == pytest.approx(100.0 - 97.0 * 0.997)
    assert g.targets[0] == pytest.approx(100.0 + g.risk * 1.5)
    assert g.targets[1] == pytest.approx(100.0 + g.risk * 2.5)
    assert g.risk_reward == (1.5, 2.5)
    assert not g.fallback_stop


def test_short_geometry_mirrors_long() -> None:
    g = build_geometry("short", 100.0, 103.0, (1.0, 1.5), 0.2, **KW)
    assert g.stop_loss == pytest.approx(103.0 * 1.003)
    assert g.stop_loss > g.entry_zone.max
    assert g.targets[0] > g.targets[1]
    assert g.targets[1] == pytest.approx(100.0 - g.risk * 1.5)


def test_missing_reference_uses_percent_fallback() -> None:
    g = build_geometry("long", 100.0, None, (1.5, 3.0), 0.3, **KW)
    assert g.fallback_stop
    assert g.stop_loss == pytest.approx(99.7 * 0.97)
    assert g.invalidation_level == g.stop_loss
    assert any("fallback" in n for n in g.notes)


def test_stop_inside_zone_falls_back() -> None:
    # buffered swing low still above the zone floor
    g = build_geometry("long", 100.0, 99.9, (1.5, 3.0), 0.5, **KW)
    assert g.fallback_stop
    assert g.stop_loss < g.entry_zone.min


def test_fallback_disabled_fails_closed() -> None:
    with pytest.raises(GeometryError):
        build_geometry("long", 100.0, None, (1.5, 3.0), 0.3, allow_fallback=False, **KW)


@pytest.mark.parametrize("multiples", [(), (2.0, 1.5), (1.0, 1.0), (0.0, 1.0)])
def test_bad_multiples_rejected(multiples) -> None:
    with pytest.raises(GeometryError):
        build_geometry("long", 100.0, 97.0, multiples, 0.3, **KW)


def test_non_positive_anchor_rejected() -> None:
    with pytest.raises(GeometryError):
        build_geometry("short", 0.0, 1.0, (1.0, 1.5), 0.3, **KW)


def test_short_target_below_zero_rejected() -> None:
    with pytest.raises(GeometryError):
        build_geometry("short", 100.0, 150.0, (1.0, 2.0, 3.0), 0.3, **KW)


def test_swing_reference_uses_remaining_timeframe() -> None:
    snaps = book(snap("15m", swing_low=None), snap("5m", swing_low=98.0))
    ref, notes = swing_stop_reference("long", snaps, ("15m", "5m"))
    assert ref == 98.0
    assert notes == ["15m swing low missing; stop uses 5m"]


def test_swing_reference_picks_extreme_level() -> None:
    snaps = book(snap("4h", swing_high=105.0), snap("1h", swing_high=103.0))
    ref, notes = swing_stop_reference("short", snaps, ("4h", "1h"))
    assert ref == 105.0
    assert notes == []


def test_swing_reference_none_when_all_missing() -> None:
    snaps = book(snap("15m", swing_low=None), snap("5m", swing_low=None))
    assert swing_stop_reference("long", snaps, ("15m", "5m")) == (None, [])
