"""Mappings from mood and season labels to descriptive prompt phrases."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from models.taxonomy import DEFAULT_SEASON, normalize_label

logger = logging.getLogger(__name__)

GENERIC_MOOD_PHRASE = "stylish design"


@dataclass(frozen=True)
class MoodStyleProfile:
    """Prompt wording for a given mood."""

    name: str
    phrase: str


_MOOD_STYLES: Dict[str, MoodStyleProfile] = {
    "confident": MoodStyleProfile(name="confident", phrase="bold and empowering design"),
    "romantic": MoodStyleProfile(name="romantic", phrase="soft and feminine aesthetic"),
    "edgy": MoodStyleProfile(name="edgy", phrase="modern and rebellious style"),
    "comfortable": MoodStyleProfile(name="comfortable", phrase="relaxed and casual feel"),
    "professional": MoodStyleProfile(name="professional", phrase="polished and sophisticated look"),
    "playful": MoodStyleProfile(name="playful", phrase="fun and creative design"),
    "sophisticated": MoodStyleProfile(name="sophisticated", phrase="elegant and refined appearance"),
}

_SEASON_DETAILS: Dict[str, str] = {
    "spring": "perfect for mild spring weather with light layers",
    "summer": "ideal for warm weather with breathable fabrics",
    "fall": "suitable for cooler weather with cozy layers",
    "winter": "designed for cold weather with warm materials",
}


def get_mood_style(mood: str | None) -> MoodStyleProfile:
    """Return a :class:`MoodStyleProfile` for the given mood.

    Unknown moods get a generic profile instead of an error.
    """

    normalized = normalize_label(mood or "")
    profile = _MOOD_STYLES.get(normalized)
    if profile is None:
        logger.info("Unknown mood '%s', using generic phrase", mood)
        return MoodStyleProfile(name=normalized or "unknown", phrase=GENERIC_MOOD_PHRASE)
    return profile


def get_season_detail(season: str | None) -> Optional[str]:
    """Return the season clause, or ``None`` for all-season and unknown values."""

    normalized = normalize_label(season or DEFAULT_SEASON)
    if normalized == DEFAULT_SEASON:
        return None
    detail = _SEASON_DETAILS.get(normalized)
    if detail is None:
        logger.info("Unknown season '%s', omitting season clause", season)
    return detail


__all__ = ["GENERIC_MOOD_PHRASE", "MoodStyleProfile", "get_mood_style", "get_season_detail"]
