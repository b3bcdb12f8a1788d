from pydantic import BaseModel, Field
import logging
import os
from pathlib import Path
from dotenv import load_dotenv

log = logging.getLogger(__name__)


class Settings(BaseModel):
    # [ENGINE_MODE] STANDARD | AGGRESSIVE
    ENGINE_MODE: str = os.getenv("ENGINE_MODE", "STANDARD")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # --- Risk geometry ---
    STOP_BUFFER_PCT: float = Field(default=float(os.getenv("STOP_BUFFER_PCT", "0.3")), ge=0)
    # > 0: the fallback stop sits strictly outside the entry zone
    FALLBACK_STOP_PCT: float = Field(default=float(os.getenv("FALLBACK_STOP_PCT", "3.0")), gt=0)
    # false -> strategies without any swing level reject instead of using FALLBACK_STOP_PCT
    STOP_FALLBACK_ENABLED: bool = os.getenv("STOP_FALLBACK_ENABLED", "true").lower() == "true"
    TREND_ENTRY_BAND_PCT: float = Field(default=float(os.getenv("TREND_ENTRY_BAND_PCT", "0.4")), gt=0)
    SWING_ENTRY_BAND_PCT: float = Field(default=float(os.getenv("SWING_ENTRY_BAND_PCT", "0.5")), gt=0)
    SCALP_ENTRY_BAND_PCT: float = Field(default=float(os.getenv("SCALP_ENTRY_BAND_PCT", "0.3")), gt=0)
    MICRO_ENTRY_BAND_PCT: float = Field(default=float(os.getenv("MICRO_ENTRY_BAND_PCT", "0.2")), gt=0)
    AGGRO_ENTRY_BAND_PCT: float = Field(default=float(os.getenv("AGGRO_ENTRY_BAND_PCT", "0.3")), gt=0)

    # --- Cascade ---
    SWING_MIN_CONFIDENCE: int = int(os.getenv("SWING_MIN_CONFIDENCE", "70"))
    HTF_BIAS_MAX_TFS: int = int(os.getenv("HTF_BIAS_MAX_TFS", "4"))
    EVALUATE_ALL: bool = os.getenv("EVALUATE_ALL", "true").lower() == "true"

    # --- Auxiliary signals (confidence modifiers only) ---
    AUX_IMBALANCE_MIN_PCT: float = float(os.getenv("AUX_IMBALANCE_MIN_PCT", "10"))
    AUX_MAX_ADJUST: int = int(os.getenv("AUX_MAX_ADJUST", "5"))

    # --- Position risk, as a fraction of standard risk ---
    MICRO_RISK_FRACTION: float = float(os.getenv("MICRO_RISK_FRACTION", "0.5"))
    AGGRO_SCALP_RISK_FRACTION: float = float(os.getenv("AGGRO_SCALP_RISK_FRACTION", "0.5"))
    AGGRO_MICRO_RISK_FRACTION: float = float(os.getenv("AGGRO_MICRO_RISK_FRACTION", "0.33"))

    # JSON: {"AGGRESSIVE": {"micro_scalp_ema_band": 1.0}}
    PROFILE_OVERRIDES: str = os.getenv("PROFILE_OVERRIDES", "")


def load_env_chain() -> Settings:
    """
    Load order (later files win; override=True):
    .env -> .env.engine -> .env.local
    """
    ROOT = Path(__file__).resolve().parents[2]

    candidates = [
        ROOT / ".env",
        ROOT / ".env.engine",
        ROOT / ".env.local",
    ]

    loaded, missing = [], []
    for p in candidates:
        if p.exists():
            load_dotenv(dotenv_path=p, override=True)
            loaded.append(str(p))
        else:
            missing.append(str(p))

    log.info(f"[ENV] loaded={len(loaded)} files={loaded}")
    if missing:
        log.debug(f"[ENV][MISS] {missing}")

    field_values = {}
    for k in Settings.model_fields:
        v = os.getenv(k)
        if v is not None:
            field_values[k] = v

    return Settings(**field_values)
