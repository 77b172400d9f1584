# sift/utils/utils.py
"""
sift.utils.utils.py
===================

This module provides a collection of core utility functions for sift.

Key functionalities include:
- Robust Configuration Loading: Implements a layered strategy that loads a
  hardcoded, built-in default configuration, then recursively merges it with
  user-defined settings from `~/.config/sift/config.toml`.
- Display Width Helpers: Terminal cell width of characters and strings,
  backed by `wcwidth` so wide (CJK) glyphs occupy two columns.
- Helper Utilities: Includes a function for deep-merging dictionaries.

The application is always runnable, even if the user configuration file is
missing or corrupted, by falling back to the embedded defaults.
"""

import logging
import unicodedata
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from wcwidth import wcswidth, wcwidth

logger = logging.getLogger("sift")


# This dictionary is the built-in configuration.
# It serves as the ultimate fallback, ensuring the application can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "layout": {
        "type": "top-down",
        "prompt": "QUERY>",
        "extra_offset": 0,
    },
    "status": {"clear_delay": 0.5},
    "styles": {
        "basic": ["default", "on_default"],
        "query": ["default", "on_default"],
        "matched": ["cyan", "on_default"],
        "selected": ["underline", "on_magenta"],
        "saved_selection": ["black", "bold", "on_cyan"],
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
}


def user_config_path() -> Path:
    """Location of the user's configuration file."""
    return Path.home() / ".config" / "sift" / "config.toml"


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    config_path = path if path is not None else user_config_path()
    if config_path.is_file():
        try:
            user_config = toml.load(config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def get_char_width(char: str) -> int:
    """Calculates the display width of a character using wcwidth.

    Control and format characters occupy no cell, combining marks have zero
    width, and characters whose width wcwidth cannot determine (-1) count as
    one cell so the cursor still advances.
    """
    if not isinstance(char, str) or len(char) != 1:
        return 1  # Unexpected input, counting width 1

    if unicodedata.category(char) in ("Cc", "Cf"):
        return 0
    if unicodedata.combining(char):
        return 0

    width = wcwidth(char)
    return width if width >= 0 else 1


def get_string_width(text: str) -> int:
    """Calculates the display width of a string using wcswidth.
    Falls back to summing individual character widths when wcswidth
    reports non-printable content.
    """
    if not isinstance(text, str):
        logger.warning(f"get_string_width received non-string input: {type(text)}")
        return 0

    width = wcswidth(text)
    if width != -1:
        return width
    return sum(get_char_width(ch) for ch in text)
