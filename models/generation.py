"""Result and attempt records produced by a design generation."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple

ProviderTier = Literal["primary", "backup", "placeholder"]
AttemptOutcome = Literal["success", "retryable-failure", "fatal-failure"]

PRIMARY: ProviderTier = "primary"
BACKUP: ProviderTier = "backup"
PLACEHOLDER: ProviderTier = "placeholder"

SUCCESS: AttemptOutcome = "success"
RETRYABLE_FAILURE: AttemptOutcome = "retryable-failure"
FATAL_FAILURE: AttemptOutcome = "fatal-failure"


@dataclass(frozen=True)
class RawImageResponse:
    """Bytes returned by a provider, before any presentation encoding."""

    content: bytes
    content_type: str
    model_id: str


@dataclass(frozen=True)
class ProviderAttempt:
    """One call against one provider tier."""

    provider: ProviderTier
    attempt_number: int
    outcome: AttemptOutcome
    http_status: Optional[int] = None
    detail: Optional[str] = None


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a single design generation request."""

    image_data: bytes
    content_type: str
    prompt: str
    provider_used: ProviderTier
    generation_time_ms: int
    is_placeholder: bool
    model_id: Optional[str] = None
    caption: Optional[str] = None
    attempts: Tuple[ProviderAttempt, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.prompt:
            raise ValueError("GenerationResult requires a non-empty prompt")
        if self.provider_used not in (PRIMARY, BACKUP, PLACEHOLDER):
            raise ValueError(f"Unknown provider attribution '{self.provider_used}'")
        if self.is_placeholder != (self.provider_used == PLACEHOLDER):
            raise ValueError("is_placeholder must match the placeholder attribution")

    def as_data_url(self) -> str:
        """Return the image as a base64 ``data:`` URL for direct display."""

        encoded = base64.b64encode(self.image_data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"

    def summary(self) -> Dict[str, Any]:
        """Loggable view without the image payload."""

        return {
            "provider_used": self.provider_used,
            "is_placeholder": self.is_placeholder,
            "model_id": self.model_id,
            "generation_time_ms": self.generation_time_ms,
            "attempt_count": len(self.attempts),
            "image_bytes": len(self.image_data),
        }


__all__ = [
    "AttemptOutcome",
    "ProviderTier",
    "PRIMARY",
    "BACKUP",
    "PLACEHOLDER",
    "SUCCESS",
    "RETRYABLE_FAILURE",
    "FATAL_FAILURE",
    "RawImageResponse",
    "ProviderAttempt",
    "GenerationResult",
]
