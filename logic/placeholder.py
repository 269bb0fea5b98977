"""Deterministic SVG placeholder used when no image provider can deliver."""

from __future__ import annotations

import re
from typing import Optional
from xml.sax.saxutils import escape

from models.preferences import PreferenceSet

PLACEHOLDER_CONTENT_TYPE = "image/svg+xml"
DEFAULT_START_COLOR = "#FF6B6B"
DEFAULT_END_COLOR = "#4ECDC4"
DEFAULT_CAPTION = "Demo Mode - Placeholder Design"
CANVAS_SIZE = 1024

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _gradient_stop(colors: tuple, index: int, default: str) -> str:
    if len(colors) > index and _HEX_COLOR.match(colors[index]):
        return colors[index]
    return default


def render_placeholder(preferences: PreferenceSet, caption: Optional[str] = None) -> bytes:
    """Draw a gradient card describing the requested design.

    The gradient runs from the first to the second requested color. Tokens that
    are not hex colors fall back to the default pair so the SVG stays valid.
    """

    start = _gradient_stop(preferences.colors, 0, DEFAULT_START_COLOR)
    end = _gradient_stop(preferences.colors, 1, DEFAULT_END_COLOR)
    title = escape(f"{preferences.style.upper()} {preferences.occasion.upper()}")
    subtitle = escape(f"{preferences.gender} Fashion Design")
    footer = escape(caption or DEFAULT_CAPTION)

    svg = (
        f'<svg width="{CANVAS_SIZE}" height="{CANVAS_SIZE}" xmlns="http://www.w3.org/2000/svg">'
        "<defs>"
        '<linearGradient id="grad1" x1="0%" y1="0%" x2="100%" y2="100%">'
        f'<stop offset="0%" style="stop-color:{start};stop-opacity:1" />'
        f'<stop offset="100%" style="stop-color:{end};stop-opacity:1" />'
        "</linearGradient>"
        "</defs>"
        '<rect width="100%" height="100%" fill="url(#grad1)" />'
        '<text x="50%" y="45%" text-anchor="middle" font-family="Arial, sans-serif" '
        f'font-size="48" fill="white" font-weight="bold">{title}</text>'
        '<text x="50%" y="55%" text-anchor="middle" font-family="Arial, sans-serif" '
        f'font-size="32" fill="white">{subtitle}</text>'
        '<text x="50%" y="65%" text-anchor="middle" font-family="Arial, sans-serif" '
        f'font-size="24" fill="rgba(255,255,255,0.8)">{footer}</text>'
        "</svg>"
    )
    return svg.encode("utf-8")


__all__ = [
    "CANVAS_SIZE",
    "DEFAULT_CAPTION",
    "DEFAULT_END_COLOR",
    "DEFAULT_START_COLOR",
    "PLACEHOLDER_CONTENT_TYPE",
    "render_placeholder",
]
