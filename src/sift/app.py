# sift/app.py
"""Startup helpers that wire config, logging and the layout together.

The order matters: configuration is loaded first, logging is set up from it
before curses takes over the terminal, and only then is the screen opened
and the layout built from the same config.

    >>> from sift import app
    >>> config = app.start()
    >>> with app.open_selector(["alpha", "beta"], config) as (state, layout):
    ...     layout.draw_screen(state)
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from sift.core import LineBuffer, MemoryBuffer, SelectorState
from sift.ui.Layout import BasicLayout, LayoutConfig, new_layout
from sift.ui.Screen import CursesBackend, Screen, ScreenBackend
from sift.ui.Styles import StyleSet
from sift.utils.logging_config import setup_logging
from sift.utils.utils import load_config


logger = logging.getLogger("sift")


def start(config_path: Optional[Path] = None, log_filename: str = "sift.log") -> dict[str, Any]:
    """Load the configuration and set up logging from it.

    Returns:
        The merged configuration dictionary.
    """
    config = load_config(config_path)
    setup_logging(config, log_filename)
    logger.info("sift configuration loaded.")
    return config


def build_selector(
    screen: Screen,
    config: dict[str, Any],
    buffer: Optional[LineBuffer] = None,
    filter_name: str = "IgnoreCase",
) -> tuple[SelectorState, BasicLayout]:
    """Create the selector state and the layout described by *config*.

    Raises:
        LayoutContractError: The ``[layout]`` section is invalid.
    """
    layout_config = LayoutConfig.from_config(config)
    styles = StyleSet.from_config(config)
    state = SelectorState(
        screen, styles, prompt=layout_config.prompt, buffer=buffer, filter_name=filter_name
    )
    layout = new_layout(state, layout_config)
    logger.debug("Built %s layout.", layout_config.layout_type.value)
    return state, layout


@contextmanager
def open_selector(
    lines: Sequence[str],
    config: Optional[dict[str, Any]] = None,
    backend: Optional[ScreenBackend] = None,
) -> Iterator[tuple[SelectorState, BasicLayout]]:
    """Open the terminal and yield a state and layout over *lines*.

    The screen is closed again when the block exits, also on error. Without
    a *backend* the real curses terminal is used.
    """
    if config is None:
        config = load_config()
    with Screen(backend or CursesBackend()) as screen:
        state, layout = build_selector(screen, config, MemoryBuffer.from_strings(lines))
        try:
            yield state, layout
        finally:
            layout.status_bar.cancel()
