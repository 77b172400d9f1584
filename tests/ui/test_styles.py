# tests/ui/test_styles.py
"""Tests for attribute blending and style parsing in `sift.ui.Styles`."""

import logging

import pytest

from sift.ui.Styles import (
    ATTR_BOLD,
    ATTR_REVERSE,
    ATTR_UNDERLINE,
    COLOR_BLACK,
    COLOR_BLUE,
    COLOR_CYAN,
    COLOR_DEFAULT,
    COLOR_GREEN,
    COLOR_MAGENTA,
    COLOR_RED,
    Style,
    StyleSet,
    merge_attribute,
    parse_style,
)


class TestMergeAttribute:
    def test_uncoloured_side_is_ored(self) -> None:
        assert merge_attribute(COLOR_DEFAULT, COLOR_CYAN) == COLOR_CYAN
        assert merge_attribute(COLOR_MAGENTA, COLOR_DEFAULT) == COLOR_MAGENTA
        assert merge_attribute(ATTR_BOLD, COLOR_RED) == ATTR_BOLD | COLOR_RED

    def test_two_colours_keep_the_lower(self) -> None:
        assert merge_attribute(COLOR_RED, COLOR_BLUE) == COLOR_RED
        assert merge_attribute(COLOR_BLUE, COLOR_RED) == COLOR_RED

    def test_flags_are_combined(self) -> None:
        merged = merge_attribute(COLOR_BLUE | ATTR_BOLD, COLOR_GREEN | ATTR_UNDERLINE)
        assert merged == COLOR_GREEN | ATTR_BOLD | ATTR_UNDERLINE


class TestParseStyle:
    def test_foreground_flags_and_background(self) -> None:
        assert parse_style(["green", "bold", "on_black"]) == Style(
            COLOR_GREEN | ATTR_BOLD, COLOR_BLACK
        )

    def test_on_bold_and_reverse(self) -> None:
        assert parse_style(["reverse", "on_bold"]) == Style(ATTR_REVERSE, ATTR_BOLD)

    def test_later_colour_wins(self) -> None:
        assert parse_style(["red", "blue"]) == Style(COLOR_BLUE, COLOR_DEFAULT)

    def test_unknown_word(self) -> None:
        with pytest.raises(ValueError):
            parse_style(["sparkly"])


class TestStyleSet:
    def test_defaults(self) -> None:
        styles = StyleSet()
        assert styles.matched == Style(COLOR_CYAN, COLOR_DEFAULT)
        assert styles.selected == Style(ATTR_UNDERLINE, COLOR_MAGENTA)
        assert styles.saved_selection == Style(COLOR_BLACK | ATTR_BOLD, COLOR_CYAN)

    def test_from_config(self) -> None:
        styles = StyleSet.from_config(
            {"styles": {"matched": ["red", "on_default"], "selected": "bold on_blue"}}
        )
        assert styles.matched == Style(COLOR_RED, COLOR_DEFAULT)
        assert styles.selected == Style(ATTR_BOLD, COLOR_BLUE)
        assert styles.basic == Style()

    def test_invalid_entry_keeps_default(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="sift"):
            styles = StyleSet.from_config({"styles": {"query": ["glitter"]}})
        assert styles.query == Style()
        assert "Ignoring style for 'query'" in caplog.text
