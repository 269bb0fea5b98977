"""Evaluation scenarios exercising provider outages and fallback paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import httpx

from tools.image_provider import (
    MODEL_LOADING,
    RATE_LIMITED,
    FatalProviderError,
    RetryableProviderError,
    ScriptStep,
    mock_image,
)


@dataclass
class EvaluationScenario:
    name: str
    description: str
    preferences: Dict[str, object]
    primary_script: List[ScriptStep]
    backup_script: List[ScriptStep]
    expectations: Dict[str, object]
    force_demo: bool = False
    metadata: Dict[str, object] = field(default_factory=dict)


def _preferences(**overrides: object) -> Dict[str, object]:
    base: Dict[str, object] = {
        "gender": "female",
        "occasion": "party",
        "style": "modern",
        "colors": ["#FF6B6B", "#4ECDC4"],
    }
    base.update(overrides)
    return base


def _cold_start() -> RetryableProviderError:
    return RetryableProviderError("huggingface", "HTTP 503 (model_loading)", http_status=503, reason=MODEL_LOADING)


def _rate_limited() -> RetryableProviderError:
    return RetryableProviderError("huggingface", "HTTP 429 (rate_limited)", http_status=429, reason=RATE_LIMITED)


def _bad_token(provider: str) -> FatalProviderError:
    return FatalProviderError(provider, "HTTP 401 (bad_credentials)", http_status=401, reason="bad_credentials")


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="healthy_primary",
        description="Primary answers on the first call.",
        preferences=_preferences(mood="romantic", season="summer"),
        primary_script=[mock_image(model_id="hf/sdxl")],
        backup_script=[mock_image(model_id="replicate/sdxl")],
        expectations={"provider_used": "primary", "is_placeholder": False, "primary_attempts": 1, "backup_attempts": 0},
    ),
    EvaluationScenario(
        name="cold_start_recovers",
        description="Model loading twice, then the primary delivers.",
        preferences=_preferences(style="vintage", occasion="wedding"),
        primary_script=[_cold_start(), _cold_start(), mock_image(model_id="hf/sdxl")],
        backup_script=[mock_image(model_id="replicate/sdxl")],
        expectations={"provider_used": "primary", "is_placeholder": False, "primary_attempts": 3, "backup_attempts": 0},
    ),
    EvaluationScenario(
        name="rate_limit_exhausts_budget",
        description="Primary stays rate limited; the backup takes over.",
        preferences=_preferences(patterns=["stripes"], materials=["linen"]),
        primary_script=[_rate_limited()],
        backup_script=[mock_image(model_id="replicate/sdxl")],
        expectations={"provider_used": "backup", "is_placeholder": False, "primary_attempts": 3, "backup_attempts": 1},
    ),
    EvaluationScenario(
        name="bad_primary_token",
        description="Auth failure skips retries and goes straight to the backup.",
        preferences=_preferences(gender="male", occasion="business", style="classic"),
        primary_script=[_bad_token("huggingface")],
        backup_script=[mock_image(model_id="replicate/sdxl")],
        expectations={"provider_used": "backup", "is_placeholder": False, "primary_attempts": 1, "backup_attempts": 1},
    ),
    EvaluationScenario(
        name="network_down",
        description="Both providers unreachable; the placeholder is served.",
        preferences=_preferences(colors=["navy", "#FFFFFF"]),
        primary_script=[httpx.ConnectError("connection refused")],
        backup_script=[httpx.ConnectError("connection refused")],
        expectations={"provider_used": "placeholder", "is_placeholder": True, "primary_attempts": 3, "backup_attempts": 1},
    ),
    EvaluationScenario(
        name="forced_demo",
        description="Demo mode never contacts a provider.",
        preferences=_preferences(),
        primary_script=[mock_image()],
        backup_script=[mock_image()],
        force_demo=True,
        expectations={"provider_used": "placeholder", "is_placeholder": True, "primary_attempts": 0, "backup_attempts": 0},
    ),
]


__all__ = ["EvaluationScenario", "SCENARIOS"]
