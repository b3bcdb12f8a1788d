from __future__ import annotations

# cascade priority, highest first
STRATEGY_ORDER = (
    "SWING_3D_1D_4H",
    "TREND_4H",
    "SCALP_15M_5M",
    "MICRO_SCALP_OVERRIDE",
    "AGGRO_SCALP_1H",
    "AGGRO_MICRO_SCALP",
)

ALIASES = {
    "SWING": "SWING_3D_1D_4H",
    "TREND": "TREND_4H",
    "4H": "TREND_4H",
    "SCALP": "SCALP_15M_5M",
    "MICRO": "MICRO_SCALP_OVERRIDE",
    "MICRO_SCALP": "MICRO_SCALP_OVERRIDE",
    "AGGRO_SCALP": "AGGRO_SCALP_1H",
    "AGGRO_MICRO": "AGGRO_MICRO_SCALP",
}


def canonical_name(name: str | None) -> str | None:
    """Strategy name for a user-supplied name or alias; None when unknown or auto."""
    if not name:
        return None
    key = name.strip().upper()
    if key in ("AUTO", ""):
        return None
    if key in STRATEGY_ORDER:
        return key
    return ALIASES.get(key)
