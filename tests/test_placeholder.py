"""Placeholder SVG rendering."""

from xml.etree import ElementTree

from logic.placeholder import DEFAULT_CAPTION, DEFAULT_END_COLOR, DEFAULT_START_COLOR, render_placeholder
from models.preferences import build_preference_set


def _prefs(colors: list) -> object:
    return build_preference_set({"gender": "female", "occasion": "party", "style": "trendy", "colors": colors})


def test_placeholder_is_byte_identical_across_calls() -> None:
    prefs = _prefs(["#96CEB4", "#DDA0DD"])

    assert render_placeholder(prefs) == render_placeholder(prefs)
    assert render_placeholder(prefs, "API down") == render_placeholder(prefs, "API down")


def test_placeholder_uses_first_two_colors_and_text() -> None:
    svg = render_placeholder(_prefs(["#96CEB4", "#DDA0DD", "#000000"])).decode("utf-8")

    assert "stop-color:#96CEB4" in svg
    assert "stop-color:#DDA0DD" in svg
    assert "#000000" not in svg
    assert "TRENDY PARTY" in svg
    assert "female Fashion Design" in svg
    assert DEFAULT_CAPTION in svg


def test_placeholder_defaults_missing_or_non_hex_colors() -> None:
    single = render_placeholder(_prefs(["#96CEB4"])).decode("utf-8")
    named = render_placeholder(_prefs(["navy", "red"])).decode("utf-8")

    assert f"stop-color:{DEFAULT_END_COLOR}" in single
    assert f"stop-color:{DEFAULT_START_COLOR}" in named
    assert f"stop-color:{DEFAULT_END_COLOR}" in named


def test_placeholder_is_well_formed_with_escaped_caption() -> None:
    svg = render_placeholder(_prefs(["#96CEB4"]), caption="Tokens <missing> & expired")

    root = ElementTree.fromstring(svg)

    texts = [element.text for element in root.iter() if element.tag.endswith("text")]
    assert "Tokens <missing> & expired" in texts
