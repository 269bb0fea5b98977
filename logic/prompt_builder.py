"""Render a :class:`PreferenceSet` into a text-to-image prompt."""

from __future__ import annotations

from typing import List

from models.mood_styles import get_mood_style, get_season_detail
from models.preferences import PreferenceSet
from models.taxonomy import color_name

QUALITY_SUFFIX = (
    "High-quality fashion illustration, clean professional presentation, fashion portfolio style, "
    "detailed clothing design, modern aesthetic, studio lighting, white background, full outfit view, "
    "fashion sketch style, detailed fabric textures, professional fashion photography style"
)


def build_prompt(preferences: PreferenceSet) -> str:
    """Return the prompt for ``preferences``.

    Pure and deterministic: equal preference sets always give equal prompts.
    Unmapped colors, moods and seasons degrade to raw or generic text.
    """

    parts: List[str] = [
        f"A professional fashion design illustration of a {preferences.style} "
        f"{preferences.occasion} outfit for {preferences.gender}, "
    ]

    if preferences.colors:
        names = " and ".join(color_name(token) for token in preferences.colors)
        parts.append(f"featuring {names} colors, ")

    if preferences.patterns:
        parts.append(f"with {' and '.join(preferences.patterns)} patterns, ")

    if preferences.materials:
        parts.append(f"made from {' and '.join(preferences.materials)} materials, ")

    parts.append(f"with a {get_mood_style(preferences.mood).phrase}. ")

    season_detail = get_season_detail(preferences.season)
    if season_detail:
        parts.append(f"{season_detail}. ")

    parts.append(QUALITY_SUFFIX)
    return "".join(parts)


__all__ = ["QUALITY_SUFFIX", "build_prompt"]
