"""Canonical vocabularies for design preferences.

This module centralises the labels a design request may use. Helper functions
keep normalisation consistent between request validation, prompt rendering and
the placeholder renderer.
"""

from typing import Dict, Iterable, List

GENDERS = ["male", "female", "unisex", "other"]
OCCASIONS = [
    "casual",
    "formal",
    "business",
    "party",
    "wedding",
    "vacation",
    "sports",
    "sport",
    "date",
    "interview",
]
STYLES = ["vintage", "modern", "bohemian", "minimalist", "streetwear", "classic", "trendy", "elegant"]
PATTERNS = ["solid", "stripes", "floral", "geometric", "polka-dots", "animal-print", "abstract", "plaid"]
MATERIALS = [
    "cotton",
    "silk",
    "wool",
    "linen",
    "polyester",
    "denim",
    "leather",
    "chiffon",
    "satin",
    "velvet",
]
MOODS = ["confident", "romantic", "edgy", "comfortable", "professional", "playful", "sophisticated"]
SEASONS = ["spring", "summer", "fall", "winter", "all-season"]

DEFAULT_MOOD = "confident"
DEFAULT_SEASON = "all-season"
MIN_COLORS = 1
MAX_COLORS = 5

# Swatches offered by the design form, keyed by upper-case hex.
COLOR_NAMES: Dict[str, str] = {
    "#FF6B6B": "coral red",
    "#4ECDC4": "turquoise",
    "#45B7D1": "sky blue",
    "#96CEB4": "mint green",
    "#FFEAA7": "golden yellow",
    "#DDA0DD": "lavender",
    "#98D8C8": "seafoam green",
    "#F7DC6F": "pale yellow",
    "#BB8FCE": "light purple",
    "#85C1E9": "powder blue",
    "#F8C471": "peach",
    "#82E0AA": "light green",
    "#F1948A": "salmon pink",
    "#A78BFA": "violet purple",
    "#D7BDE2": "pale lavender",
    "#000000": "black",
    "#FFFFFF": "white",
    "#808080": "gray",
    "#8B4513": "brown",
    "#2F4F4F": "dark gray",
}


def normalize_label(value: str) -> str:
    """Normalise a free-form label into a vocabulary key."""

    return value.strip().lower().replace("_", "-").replace(" ", "-")


def color_name(token: str) -> str:
    """Map a color token to a human color name, or return it unchanged."""

    return COLOR_NAMES.get(token.strip().upper(), token)


def normalise_tags(values: Iterable[str], allowed: List[str]) -> List[str]:
    """Normalise and deduplicate tags, keeping first-seen order.

    Raises a :class:`ValueError` naming the first tag outside ``allowed``.
    """

    normalised = []
    seen = set()
    for value in values:
        key = normalize_label(value)
        if key not in allowed:
            raise ValueError(f"Unsupported value '{value}'. Allowed: {allowed}")
        if key not in seen:
            normalised.append(key)
            seen.add(key)
    return normalised


__all__ = [
    "GENDERS",
    "OCCASIONS",
    "STYLES",
    "PATTERNS",
    "MATERIALS",
    "MOODS",
    "SEASONS",
    "DEFAULT_MOOD",
    "DEFAULT_SEASON",
    "MIN_COLORS",
    "MAX_COLORS",
    "COLOR_NAMES",
    "normalize_label",
    "color_name",
    "normalise_tags",
]
