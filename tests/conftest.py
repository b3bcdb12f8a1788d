from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mtfengine.config.settings import Settings  # noqa: E402


@pytest.fixture
def cfg() -> Settings:
    # explicit values so a developer's .env never leaks into the tests
    return Settings(
        ENGINE_MODE="STANDARD",
        STOP_BUFFER_PCT=0.3,
        FALLBACK_STOP_PCT=3.0,
        STOP_FALLBACK_ENABLED=True,
        SWING_MIN_CONFIDENCE=70,
        HTF_BIAS_MAX_TFS=4,
        EVALUATE_ALL=True,
        PROFILE_OVERRIDES="",
    )
