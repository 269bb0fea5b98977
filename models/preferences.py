"""Validated design preference model and its factory."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.taxonomy import (
    DEFAULT_MOOD,
    DEFAULT_SEASON,
    GENDERS,
    MATERIALS,
    MAX_COLORS,
    MIN_COLORS,
    MOODS,
    OCCASIONS,
    PATTERNS,
    SEASONS,
    STYLES,
    normalise_tags,
    normalize_label,
)


class PreferenceValidationError(ValueError):
    """Raised when a design request does not describe a valid preference set."""

    def __init__(self, message: str, details: List[Dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


def _check_choice(value: Any, allowed: List[str], label: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string")
    key = normalize_label(value)
    if key not in allowed:
        raise ValueError(f"Unsupported {label} '{value}'. Allowed: {allowed}")
    return key


def _check_tag_list(value: Any, label: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{label} must be a list of strings")
    if not all(isinstance(tag, str) for tag in value):
        raise ValueError(f"each entry in {label} must be a string")
    return list(value)


class PreferenceSet(BaseModel):
    """Immutable description of the design a user asked for."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    gender: str
    occasion: str
    style: str
    colors: Tuple[str, ...] = Field(min_length=MIN_COLORS, max_length=MAX_COLORS)
    patterns: Tuple[str, ...] = ()
    materials: Tuple[str, ...] = ()
    mood: str = DEFAULT_MOOD
    season: str = DEFAULT_SEASON

    @field_validator("gender", mode="before")
    @classmethod
    def _validate_gender(cls, value: Any) -> str:
        return _check_choice(value, GENDERS, "gender")

    @field_validator("occasion", mode="before")
    @classmethod
    def _validate_occasion(cls, value: Any) -> str:
        return _check_choice(value, OCCASIONS, "occasion")

    @field_validator("style", mode="before")
    @classmethod
    def _validate_style(cls, value: Any) -> str:
        return _check_choice(value, STYLES, "style")

    @field_validator("mood", mode="before")
    @classmethod
    def _validate_mood(cls, value: Any) -> str:
        if value is None or value == "":
            return DEFAULT_MOOD
        return _check_choice(value, MOODS, "mood")

    @field_validator("season", mode="before")
    @classmethod
    def _validate_season(cls, value: Any) -> str:
        if value is None or value == "":
            return DEFAULT_SEASON
        return _check_choice(value, SEASONS, "season")

    @field_validator("colors", mode="before")
    @classmethod
    def _validate_colors(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            raise ValueError("colors must be a list of color values")
        cleaned = []
        for token in value:
            if not isinstance(token, str) or not token.strip():
                raise ValueError("each color must be a non-empty string")
            cleaned.append(token.strip())
        return tuple(cleaned)

    @field_validator("patterns", mode="before")
    @classmethod
    def _validate_patterns(cls, value: Any) -> Tuple[str, ...]:
        return tuple(normalise_tags(_check_tag_list(value, "patterns"), PATTERNS))

    @field_validator("materials", mode="before")
    @classmethod
    def _validate_materials(cls, value: Any) -> Tuple[str, ...]:
        return tuple(normalise_tags(_check_tag_list(value, "materials"), MATERIALS))


def build_preference_set(raw: Mapping[str, Any]) -> PreferenceSet:
    """Validate loose request data into a :class:`PreferenceSet`.

    This is the only supported way to build preferences from user input.

    Raises:
        PreferenceValidationError: with per-field details when any rule fails.
    """

    if not isinstance(raw, Mapping):
        raise PreferenceValidationError("Preferences must be an object")
    try:
        return PreferenceSet.model_validate(dict(raw))
    except ValidationError as exc:
        details = exc.errors(include_url=False, include_context=False)
        fields = sorted({str(error["loc"][0]) for error in details if error.get("loc")})
        raise PreferenceValidationError(
            f"Invalid design preferences: {', '.join(fields) or 'payload'}", details
        ) from exc


__all__ = ["PreferenceSet", "PreferenceValidationError", "build_preference_set"]
