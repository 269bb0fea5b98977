"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.preferences import PreferenceSet, PreferenceValidationError, build_preference_set
from models.generation import GenerationResult, ProviderAttempt, RawImageResponse

__all__ = [
    "GenerationResult",
    "PreferenceSet",
    "PreferenceValidationError",
    "ProviderAttempt",
    "RawImageResponse",
    "build_preference_set",
]
