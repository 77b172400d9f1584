# sift/core/State.py
"""State.py
========================
The application state the layout engine reads while drawing.

`SelectorState` is a plain holder: the surrounding application owns it,
mutates the query, swaps the current buffer when a filter produces new
results, and hands it to `BasicLayout` once per frame. The layout only reads
it, except for the `Location` and `Selection` objects whose fields it updates
in place.
"""

from typing import TYPE_CHECKING, Optional, Sequence

from sift.core.LineBuffer import LineBuffer, MemoryBuffer
from sift.core.Location import Location
from sift.core.Selection import Selection

if TYPE_CHECKING:
    from sift.ui.Screen import Screen
    from sift.ui.Styles import StyleSet


class Query:
    """The text typed at the prompt, held as a list of characters."""

    def __init__(self, text: str = "") -> None:
        self._runes: list[str] = list(text)

    def __str__(self) -> str:
        return "".join(self._runes)

    def __len__(self) -> int:
        return len(self._runes)

    def runes(self) -> list[str]:
        return list(self._runes)

    def set(self, text: str) -> None:
        self._runes = list(text)

    def insert_at(self, ch: str, pos: int) -> None:
        self._runes.insert(pos, ch)

    def delete_range(self, start: int, end: int) -> None:
        del self._runes[start:end]


class Caret:
    """Position of the text cursor inside the query, in characters."""

    def __init__(self, pos: int = 0) -> None:
        self._pos = pos

    def pos(self) -> int:
        return self._pos

    def set_pos(self, pos: int) -> None:
        self._pos = pos

    def move(self, delta: int) -> None:
        self._pos += delta


class SelectorState:
    """Everything the layout needs to render one frame.

    Attributes:
        screen (Screen): The terminal the layout draws on.
        styles (StyleSet): Attributes for each display role.
        prompt (str): Prompt label drawn before the query.
        query (Query): Current query text.
        caret (Caret): Caret position inside the query.
        location (Location): Pagination and cursor state.
        filter_name (str): Display name of the active filter.
        selection (Selection): Lines marked by the user.
        single_key_jump_mode (bool): Rows show their jump prefix and accept it.
        single_key_jump_show_prefix (bool): Rows show their jump prefix only.
        single_key_jump_prefixes (Sequence[str]): Prefix for each visible row.
        selection_range_start (Optional[int]): Line where a range selection
            began; ``None`` while no range selection is in progress.
    """

    def __init__(
        self,
        screen: "Screen",
        styles: "StyleSet",
        prompt: str = "",
        buffer: Optional[LineBuffer] = None,
        filter_name: str = "IgnoreCase",
    ) -> None:
        self.screen = screen
        self.styles = styles
        self.prompt = prompt
        self.query = Query()
        self.caret = Caret()
        self.location = Location()
        self.filter_name = filter_name
        self.selection = Selection()
        self._buffer: LineBuffer = buffer if buffer is not None else MemoryBuffer()
        self.single_key_jump_mode = False
        self.single_key_jump_show_prefix = False
        self.single_key_jump_prefixes: Sequence[str] = ()
        self.selection_range_start: Optional[int] = None

    def current_line_buffer(self) -> LineBuffer:
        return self._buffer

    def set_current_line_buffer(self, buffer: LineBuffer) -> None:
        self._buffer = buffer

    def start_range_selection(self) -> None:
        """Anchor a range selection at the line under the cursor."""
        self.selection_range_start = self.location.line_number

    def reset_range_selection(self) -> None:
        self.selection_range_start = None
