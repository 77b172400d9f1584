# sift/ui/Styles.py
"""Styles.py
========================
Cell attributes and the per-role style set used by the layout.

An attribute is a small integer: the low nibble holds a colour number
(0 = terminal default, 1..8 = black..white) and the higher bits hold the
bold, underline and reverse flags. The curses backend translates these into
colour pairs and `curses.A_*` attributes when a cell is written.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

logger = logging.getLogger("sift")

Attribute = int

COLOR_DEFAULT: Attribute = 0x00
COLOR_BLACK: Attribute = 0x01
COLOR_RED: Attribute = 0x02
COLOR_GREEN: Attribute = 0x03
COLOR_YELLOW: Attribute = 0x04
COLOR_BLUE: Attribute = 0x05
COLOR_MAGENTA: Attribute = 0x06
COLOR_CYAN: Attribute = 0x07
COLOR_WHITE: Attribute = 0x08

COLOR_MASK: Attribute = 0x0F

ATTR_BOLD: Attribute = 0x0200
ATTR_UNDERLINE: Attribute = 0x0400
ATTR_REVERSE: Attribute = 0x0800

COLOR_NAMES: dict[str, Attribute] = {
    "default": COLOR_DEFAULT,
    "black": COLOR_BLACK,
    "red": COLOR_RED,
    "green": COLOR_GREEN,
    "yellow": COLOR_YELLOW,
    "blue": COLOR_BLUE,
    "magenta": COLOR_MAGENTA,
    "cyan": COLOR_CYAN,
    "white": COLOR_WHITE,
}

FLAG_NAMES: dict[str, Attribute] = {
    "bold": ATTR_BOLD,
    "underline": ATTR_UNDERLINE,
    "reverse": ATTR_REVERSE,
}


def merge_attribute(a: Attribute, b: Attribute) -> Attribute:
    """Blend two attributes.

    If either side carries no colour, the two are OR-ed together. Otherwise
    the flags are combined and the lower of the two colour numbers is kept,
    so overlapping styles never brighten twice.
    """
    if a & COLOR_MASK == 0 or b & COLOR_MASK == 0:
        return a | b
    color = min(a & COLOR_MASK, b & COLOR_MASK)
    return ((a | b) & ~COLOR_MASK) | color


@dataclass(frozen=True)
class Style:
    fg: Attribute = COLOR_DEFAULT
    bg: Attribute = COLOR_DEFAULT


def parse_style(words: Iterable[str]) -> Style:
    """Build a `Style` from words such as ``["green", "bold", "on_black"]``.

    Colour names set the foreground, ``on_<colour>`` sets the background,
    ``bold``/``underline``/``reverse`` add foreground flags and ``on_bold``
    brightens the background.

    Raises:
        ValueError: for an unknown word.
    """
    fg = COLOR_DEFAULT
    bg = COLOR_DEFAULT
    for word in words:
        name = word.strip().lower()
        if name in COLOR_NAMES:
            fg = (fg & ~COLOR_MASK) | COLOR_NAMES[name]
        elif name in FLAG_NAMES:
            fg |= FLAG_NAMES[name]
        elif name == "on_bold":
            bg |= ATTR_BOLD
        elif name.startswith("on_") and name[3:] in COLOR_NAMES:
            bg = (bg & ~COLOR_MASK) | COLOR_NAMES[name[3:]]
        else:
            raise ValueError(f"unknown style word: {word!r}")
    return Style(fg, bg)


@dataclass(frozen=True)
class StyleSet:
    """Styles for each display role. Read-only to the layout."""

    basic: Style = Style()
    query: Style = Style()
    matched: Style = Style(COLOR_CYAN, COLOR_DEFAULT)
    selected: Style = Style(ATTR_UNDERLINE, COLOR_MAGENTA)
    saved_selection: Style = Style(COLOR_BLACK | ATTR_BOLD, COLOR_CYAN)

    ROLES = ("basic", "query", "matched", "selected", "saved_selection")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "StyleSet":
        """Read the ``[styles]`` section; invalid entries keep their defaults."""
        section = config.get("styles", {})
        values: dict[str, Style] = {}
        for role in cls.ROLES:
            words = section.get(role)
            if words is None:
                continue
            if isinstance(words, str):
                words = words.split()
            try:
                values[role] = parse_style(words)
            except ValueError as e:
                logger.warning("Ignoring style for '%s': %s", role, e)
        return cls(**values)
