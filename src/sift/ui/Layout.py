# sift/ui/Layout.py
"""Layout.py
========================
Layout components of the sift selector screen and the `BasicLayout` that
composes them.

It is responsible for:
- positioning each component from a vertical anchor (top or bottom edge plus
  a fixed offset),
- drawing the query prompt with its caret and the page summary,
- drawing transient status messages that clear themselves after a delay,
- drawing the paginated result list, skipping rows whose content has not
  changed since the previous frame,
- computing the current page and moving the cursor (with wrap-around and
  range selection) in response to paging requests.

The list can read top-down (prompt on the first row, list below it) or
bottom-up (list grows upwards from just above the prompt); the direction is
fixed when the layout is built.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from sift.core.LineBuffer import Line, LineBuffer, LineIndexError
from sift.core.Paging import JumpToLineRequest, PagingRequest, PagingType
from sift.ui.Screen import PrintArgs, Screen, ScreenError
from sift.ui.Styles import ATTR_BOLD, ATTR_REVERSE, Style, StyleSet, merge_attribute
from sift.utils.logging_config import TRACE_LOGGER
from sift.utils.utils import get_char_width, get_string_width

if TYPE_CHECKING:
    from sift.core.State import SelectorState


DEFAULT_PROMPT = "QUERY>"
# One row for the prompt, one for the status bar.
RESERVED_LINES = 2


class LayoutContractError(Exception):
    """A layout precondition was violated by the caller or the environment."""


class TerminalTooSmallError(LayoutContractError):
    """The terminal has no room left for the result list."""


class NothingToDraw(Exception):
    """There is nothing to render yet; skip this frame and retry later."""


class LayoutType(str, Enum):
    TOP_DOWN = "top-down"
    BOTTOM_UP = "bottom-up"


DEFAULT_LAYOUT_TYPE = LayoutType.TOP_DOWN


def is_valid_layout_type(value: Any) -> bool:
    try:
        LayoutType(value)
    except ValueError:
        return False
    return True


class VerticalAnchor(Enum):
    TOP = 1
    BOTTOM = 2


def is_valid_vertical_anchor(anchor: Any) -> bool:
    return isinstance(anchor, VerticalAnchor)


@dataclass(frozen=True)
class LayoutConfig:
    """Layout settings read from the ``[layout]`` and ``[status]`` sections.

    Attributes:
        layout_type (LayoutType): Reading direction of the list.
        prompt (str): Prompt label used when the state carries none.
        extra_offset (int): Additional rows kept free below the status bar.
        status_clear_delay (float): Seconds before a status message clears
            itself; 0 keeps it until replaced.
    """

    layout_type: LayoutType = DEFAULT_LAYOUT_TYPE
    prompt: str = DEFAULT_PROMPT
    extra_offset: int = 0
    status_clear_delay: float = 0.5

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "LayoutConfig":
        section = config.get("layout", {})
        raw_type = section.get("type", DEFAULT_LAYOUT_TYPE.value)
        if not is_valid_layout_type(raw_type):
            raise LayoutContractError(f"unknown layout type: {raw_type!r}")
        extra_offset = int(section.get("extra_offset", 0))
        if extra_offset < 0:
            raise LayoutContractError(f"extra_offset must be >= 0 (was {extra_offset})")
        clear_delay = float(config.get("status", {}).get("clear_delay", 0.5))
        prompt = str(section.get("prompt", DEFAULT_PROMPT))
        return cls(LayoutType(raw_type), prompt, extra_offset, clear_delay)


## ================= AnchorSettings ==============================
class AnchorSettings:
    """Vertical placement of a one-row (or row-anchored) component."""

    def __init__(self, screen: Screen, anchor: VerticalAnchor, offset: int) -> None:
        if not is_valid_vertical_anchor(anchor):
            raise LayoutContractError(f"invalid vertical anchor: {anchor!r}")
        if offset < 0:
            raise LayoutContractError(f"anchor offset must be >= 0 (was {offset})")
        self.screen = screen
        self.anchor = anchor
        self.anchor_offset = offset

    def anchor_position(self) -> int:
        """Return the screen row this component starts at."""
        if self.anchor is VerticalAnchor.TOP:
            return self.anchor_offset
        _, height = self.screen.size()
        # height counts rows from 1, rows are addressed from 0
        return height - self.anchor_offset - 1


## ================= UserPrompt ==============================
class UserPrompt(AnchorSettings):
    """The query line: prompt label, query text with caret, page summary."""

    def __init__(
        self,
        screen: Screen,
        anchor: VerticalAnchor,
        offset: int,
        prompt: str,
        styles: StyleSet,
    ) -> None:
        super().__init__(screen, anchor, offset)
        self.prompt = prompt or DEFAULT_PROMPT
        self.prompt_len = get_string_width(self.prompt)
        self.styles = styles

    def draw(self, state: "SelectorState", flush: bool = True) -> None:
        TRACE_LOGGER.debug("UserPrompt.draw: START")
        location = self.anchor_position()
        basic = self.styles.basic

        self.screen.print(PrintArgs(y=location, fg=basic.fg, bg=basic.bg, text=self.prompt))

        caret = state.caret
        query = state.query
        query_len = len(query)
        if caret.pos() < 0:
            caret.set_pos(0)
        if caret.pos() > query_len:
            caret.set_pos(query_len)

        fg, bg = self.styles.query.fg, self.styles.query.bg
        query_x = self.prompt_len + 1

        if query_len == 0:
            self.screen.print(PrintArgs(x=self.prompt_len, y=location, fg=fg, bg=bg, fill=True))
            self.screen.print(
                PrintArgs(
                    x=query_x, y=location, fg=fg | ATTR_REVERSE, bg=bg | ATTR_REVERSE, text=" "
                )
            )
        elif caret.pos() == query_len:
            # the entire string + the caret after the string
            text = str(query)
            self.screen.print(PrintArgs(x=self.prompt_len, y=location, fg=fg, bg=bg, fill=True))
            self.screen.print(PrintArgs(x=query_x, y=location, fg=fg, bg=bg, text=text))
            self.screen.print(
                PrintArgs(
                    x=query_x + get_string_width(text),
                    y=location,
                    fg=fg | ATTR_REVERSE,
                    bg=bg | ATTR_REVERSE,
                    text=" ",
                )
            )
        else:
            # the caret is in the middle of the string
            prev = 0
            for i, ch in enumerate(query.runes()):
                cell_fg, cell_bg = fg, bg
                if i == caret.pos():
                    cell_fg |= ATTR_REVERSE
                    cell_bg |= ATTR_REVERSE
                self.screen.set_cell(query_x + prev, location, ch, cell_fg, cell_bg)
                prev += get_char_width(ch)
            self.screen.print(PrintArgs(x=query_x + prev, y=location, fg=fg, bg=bg, fill=True))

        width, _ = self.screen.size()
        loc = state.location
        summary = f"{state.filter_name} [{loc.total} ({loc.page}/{loc.max_page})]"
        self.screen.print(
            PrintArgs(
                x=width - get_string_width(summary),
                y=location,
                fg=basic.fg,
                bg=basic.bg,
                text=summary,
            )
        )

        if flush:
            self.screen.flush()
        TRACE_LOGGER.debug("UserPrompt.draw: END")


## ================= StatusBar ==============================
class StatusBar(AnchorSettings):
    """One-line status message, optionally cleared after a delay.

    The pending clear is an owned `threading.Timer`. Re-arming it is a single
    step under `_timer_lock`: any previous timer is cancelled before the new
    one is installed, so at most one clear fires per message. The timer lock
    is never held while drawing.

    Drawing happens under `_draw_lock`. A fired timer checks its generation
    and clears the row inside that same lock, so a newer message drawn in
    the meantime is never wiped. Lock order is `_draw_lock`, then
    `_timer_lock` (briefly) or the screen lock, never both of the latter.
    """

    def __init__(
        self, screen: Screen, anchor: VerticalAnchor, offset: int, styles: StyleSet
    ) -> None:
        super().__init__(screen, anchor, offset)
        self.styles = styles
        self._clear_timer: Optional[threading.Timer] = None
        self._timer_generation = 0
        self._timer_lock = threading.Lock()
        self._draw_lock = threading.Lock()

    def _rearm(self, delay: float) -> None:
        with self._timer_lock:
            if self._clear_timer is not None:
                self._clear_timer.cancel()
                self._clear_timer = None
            self._timer_generation += 1
            if delay > 0:
                timer = threading.Timer(delay, self._expire, args=(self._timer_generation,))
                timer.daemon = True
                self._clear_timer = timer
                timer.start()

    def _expire(self, generation: int) -> None:
        with self._draw_lock:
            with self._timer_lock:
                if generation != self._timer_generation:
                    return
                self._clear_timer = None
            try:
                self._draw_status("", 0)
            except ScreenError as e:
                logging.error("Could not clear the status bar: %s", e)

    def has_pending_clear(self) -> bool:
        with self._timer_lock:
            return self._clear_timer is not None

    def print_status(self, message: str, clear_delay: float = 0) -> None:
        """Show *message* right-aligned on the status row.

        Args:
            message: Text to display; an empty string clears the row.
            clear_delay: Seconds after which the row is cleared again.
                0 leaves the message in place.
        """
        with self._draw_lock:
            self._draw_status(message, clear_delay)

    def _draw_status(self, message: str, clear_delay: float) -> None:
        self._rearm(0)

        location = self.anchor_position()
        w, _ = self.screen.size()
        width = get_string_width(message)
        while width > w and message:
            width -= get_char_width(message[0])
            message = message[1:]

        fg, bg = self.styles.basic.fg, self.styles.basic.bg
        if w > width:
            self.screen.print(PrintArgs(y=location, fg=fg, bg=bg, text=" " * (w - width)))
        if width > 0:
            self.screen.print(
                PrintArgs(
                    x=w - width,
                    y=location,
                    fg=fg | ATTR_REVERSE | ATTR_BOLD,
                    bg=bg | ATTR_REVERSE,
                    text=message,
                )
            )
        self.screen.flush()

        if clear_delay > 0:
            self._rearm(clear_delay)

    def cancel(self) -> None:
        """Drop any pending clear without drawing."""
        self._rearm(0)


## ================= ListArea ==============================
class ListArea(AnchorSettings):
    """The paginated result list.

    Attributes:
        display_cache (list[Optional[Line]]): Line last drawn in each row slot.
        sort_top_down (bool): Row 0 is the top row when True, the bottom row
            otherwise.
        styles (StyleSet): Display styles.
    """

    def __init__(
        self,
        screen: Screen,
        anchor: VerticalAnchor,
        offset: int,
        sort_top_down: bool,
        styles: StyleSet,
    ) -> None:
        super().__init__(screen, anchor, offset)
        self.display_cache: list[Optional[Line]] = []
        self._dirty = False
        self.sort_top_down = sort_top_down
        self.styles = styles

    def purge_display_cache(self) -> None:
        self.display_cache = []

    def is_dirty(self) -> bool:
        return self._dirty

    def set_dirty(self, dirty: bool) -> None:
        self._dirty = dirty

    def _row_y(self, n: int, start: int) -> int:
        return n + start if self.sort_top_down else start - n

    def draw(
        self,
        state: "SelectorState",
        parent: "BasicLayout",
        per_page: int,
        running_query: bool,
    ) -> None:
        TRACE_LOGGER.debug(
            "START ListArea.draw per_page = %d, running_query = %s", per_page, running_query
        )
        if per_page < 1:
            raise LayoutContractError(f"per_page < 1 (was {per_page})")

        loc = state.location
        linebuf = state.current_line_buffer()

        # While a query is still producing results, never sit on a page the
        # buffer has not reached: step back to the page holding the last line.
        if running_query:
            bufsiz = linebuf.size()
            page = loc.page
            while page > 1:
                if loc.per_page * (page - 1) < bufsiz <= loc.per_page * page:
                    break
                page -= 1
            if loc.page != page:
                loc.page = page
                parent.draw_prompt(state, flush=False)

        buf = loc.page_crop().crop(linebuf)
        bufsiz = buf.size()

        lbufsiz = linebuf.size()
        if lbufsiz > 0 and loc.line_number >= lbufsiz:
            loc.line_number = lbufsiz - 1

        if len(self.display_cache) != per_page:
            self.display_cache = (self.display_cache + [None] * per_page)[:per_page]

        start = self.anchor_position()
        basic = self.styles.basic

        TRACE_LOGGER.debug(
            "ListArea.draw: buffer size is %d, our view area is %d", bufsiz, per_page
        )
        for n in range(bufsiz, per_page):
            self.display_cache[n] = None
            y = self._row_y(n, start)
            TRACE_LOGGER.debug("ListArea.draw: clearing row %d", y)
            self.screen.print(PrintArgs(y=y, fg=basic.fg, bg=basic.bg, fill=True))

        cached = written = 0
        for n in range(min(bufsiz, per_page)):
            try:
                target = buf.line_at(n)
            except LineIndexError:
                break

            if n + loc.offset == loc.line_number:
                style = self.styles.selected
            elif state.selection.has(target):
                style = self.styles.saved_selection
            else:
                style = basic

            if self._dirty or target.is_dirty():
                target.set_dirty(False)
            elif self.display_cache[n] is target:
                cached += 1
                continue

            written += 1
            self.display_cache[n] = target
            self._draw_row(state, target, n, self._row_y(n, start), style)

        self._dirty = False
        TRACE_LOGGER.debug(
            "ListArea.draw: Written total of %d lines (%d cached)", written + cached, cached
        )

    def _draw_row(
        self, state: "SelectorState", target: Line, n: int, y: int, style: Style
    ) -> None:
        loc = state.location
        fg, bg = style.fg, style.bg
        # Characters scrolled past the left edge land on negative columns and
        # are dropped by the backend; x_offset keeps tab stops aligned.
        x = -loc.column
        x_offset = loc.column
        line = target.display_string()

        if state.single_key_jump_mode or state.single_key_jump_show_prefix:
            prefixes = state.single_key_jump_prefixes
            if n < len(prefixes):
                self.screen.print(
                    PrintArgs(
                        x=x,
                        y=y,
                        x_offset=x_offset,
                        fg=fg | ATTR_BOLD | ATTR_REVERSE,
                        bg=bg,
                        text=prefixes[n],
                    )
                )
                self.screen.print(
                    PrintArgs(x=x + 1, y=y, x_offset=x_offset, fg=fg, bg=bg, text=" ")
                )
            else:
                self.screen.print(
                    PrintArgs(x=x, y=y, x_offset=x_offset, fg=fg, bg=bg, text="  ")
                )
            x += 2

        matches = target.indices()
        if not matches:
            self.screen.print(
                PrintArgs(x=x, y=y, x_offset=x_offset, fg=fg, bg=bg, text=line, fill=True)
            )
            return

        matched = self.styles.matched
        prev = x
        index = 0
        for match_start, match_end in matches:
            match_start = max(match_start, index)
            if match_start > index:
                prev += self.screen.print(
                    PrintArgs(
                        x=prev, y=y, x_offset=x_offset, fg=fg, bg=bg, text=line[index:match_start]
                    )
                )
            if match_end > match_start:
                prev += self.screen.print(
                    PrintArgs(
                        x=prev,
                        y=y,
                        x_offset=x_offset,
                        fg=matched.fg,
                        bg=merge_attribute(bg, matched.bg),
                        text=line[match_start:match_end],
                    )
                )
            index = max(index, match_end)

        # The rest of the row; a row that echoes the query back is shown in
        # the query style.
        query_text = str(state.query)
        if query_text and line == query_text:
            tail_fg = self.styles.query.fg
            tail_bg = merge_attribute(bg, self.styles.query.bg)
        else:
            tail_fg, tail_bg = fg, bg
        self.screen.print(
            PrintArgs(
                x=prev, y=y, x_offset=x_offset, fg=tail_fg, bg=tail_bg, text=line[index:], fill=True
            )
        )


## ================= BasicLayout ==============================
class BasicLayout:
    """Prompt, status bar and result list arranged for one reading direction.

    This is the single entry point the application uses per frame:
    `draw_screen` renders everything and flushes once; `move_page` updates
    the cursor and selection before the next frame.

    Attributes:
        screen (Screen): Terminal being drawn on.
        status_bar (StatusBar): Transient messages.
        prompt (UserPrompt): Query line.
        list (ListArea): Result list.
        config (LayoutConfig): Layout settings.
    """

    def __init__(
        self,
        screen: Screen,
        status_bar: StatusBar,
        prompt: UserPrompt,
        list_area: ListArea,
        config: LayoutConfig,
    ) -> None:
        self.screen = screen
        self.status_bar = status_bar
        self.prompt = prompt
        self.list = list_area
        self.config = config

    @property
    def sort_top_down(self) -> bool:
        return self.list.sort_top_down

    def print_status(self, message: str, clear_delay: Optional[float] = None) -> None:
        if clear_delay is None:
            clear_delay = self.config.status_clear_delay
        self.status_bar.print_status(message, clear_delay)

    def purge_display_cache(self) -> None:
        self.list.purge_display_cache()

    def draw_prompt(self, state: "SelectorState", flush: bool = True) -> None:
        self.prompt.draw(state, flush=flush)

    def lines_per_page(self) -> int:
        _, height = self.screen.size()
        reserved = RESERVED_LINES + self.config.extra_offset
        per_page = height - reserved
        if per_page < 1:
            raise TerminalTooSmallError(
                f"lines per page is < 1 (height = {height}, reserved lines = {reserved})"
            )
        return per_page

    def calculate_page(self, state: "SelectorState", per_page: int) -> None:
        """Recompute the page, page count and totals from the cursor position.

        Raises:
            LayoutContractError: if *per_page* < 1.
            NothingToDraw: if the buffer is empty and the cursor points past
                the only page.
        """
        if per_page < 1:
            raise LayoutContractError(f"per_page < 1 (was {per_page})")

        buf = state.current_line_buffer()
        loc = state.location
        loc.page = loc.line_number // per_page + 1
        loc.per_page = per_page
        loc.total = buf.size()
        loc.max_page = 1 if loc.total == 0 else (loc.total + per_page - 1) // per_page

        if loc.max_page < loc.page:
            if loc.total == 0:
                # wait for targets
                raise NothingToDraw("no targets or query. nothing to do")
            # the page moved out from under the cursor
            loc.page = loc.max_page
            loc.line_number = loc.offset
        TRACE_LOGGER.debug("BasicLayout.calculate_page: %r", loc)

    def draw_screen(self, state: "SelectorState", running_query: bool = False) -> bool:
        """Draw the prompt and the list, then flush once.

        Returns:
            bool: True when a frame was flushed, False when it was skipped.
        """
        TRACE_LOGGER.debug("draw_screen: START")
        per_page = self.lines_per_page()

        try:
            self.calculate_page(state, per_page)
        except NothingToDraw as e:
            TRACE_LOGGER.debug("draw_screen: skipped (%s)", e)
            return False

        try:
            self.draw_prompt(state, flush=False)
            self.list.draw(state, self, per_page, running_query)
            self.screen.flush()
        except ScreenError as e:
            logging.error("Frame aborted, terminal write failed: %s", e)
            return False

        TRACE_LOGGER.debug("draw_screen: END")
        return True

    def move_page(self, state: "SelectorState", request: PagingRequest) -> bool:
        """Apply a scroll or jump request. Returns True if anything moved."""
        if request.is_horizontal():
            return self._horizontal_scroll(state, request)
        return self._vertical_scroll(state, request)

    def _vertical_scroll(self, state: "SelectorState", request: PagingRequest) -> bool:
        loc = state.location
        line_before = loc.line_number
        lineno = line_before

        buf = state.current_line_buffer()
        lcur = buf.size()
        lpp = self.lines_per_page()
        top_down = self.list.sort_top_down
        # bottom-up lists read the other way, so every delta flips
        step = 1 if top_down else -1

        kind = request.type
        if kind is PagingType.LINE_ABOVE:
            lineno -= step
        elif kind is PagingType.LINE_BELOW:
            lineno += step
        elif kind is PagingType.SCROLL_PAGE_DOWN:
            lineno += step * lpp
            if (
                top_down
                and loc.page == loc.max_page - 1
                and lcur < lineno
                and (lcur - line_before) < lpp
            ):
                lineno = lcur - 1
        elif kind is PagingType.SCROLL_PAGE_UP:
            lineno -= step * lpp
        elif kind is PagingType.LINE_IN_PAGE:
            row = request.line if isinstance(request, JumpToLineRequest) else 0
            lineno = loc.per_page * (loc.page - 1) + step * row
        else:
            raise LayoutContractError(f"not a vertical paging request: {request!r}")

        if lineno < 0:
            lineno = lcur - 1 if lcur > 0 else 0
        elif lineno >= lcur:
            lineno = 0

        # The new line number must be committed before the range selection
        # below is evaluated.
        loc.line_number = lineno
        TRACE_LOGGER.debug("current line changed from %d -> %d", line_before, lineno)
        _mark_dirty(buf, (line_before, lineno))

        anchor = state.selection_range_start
        if anchor is None or not top_down:
            return True

        self._update_range_selection(state, buf, anchor, line_before, lineno)
        return True

    def _update_range_selection(
        self,
        state: "SelectorState",
        buf: LineBuffer,
        anchor: int,
        line_before: int,
        line_now: int,
    ) -> None:
        """Keep the selection equal to the span between *anchor* and the cursor.

        The anchor stays fixed; lines that entered the span are added and
        lines that left it are removed.
        """
        size = buf.size()
        old_span = _closed_span(anchor, line_before, size)
        new_span = _closed_span(anchor, line_now, size)
        sel = state.selection

        for lineno in new_span:
            try:
                line = buf.line_at(lineno)
            except LineIndexError:
                break
            if not sel.has(line):
                sel.add(line)
                line.set_dirty(True)

        for lineno in sorted(set(old_span) - set(new_span)):
            try:
                line = buf.line_at(lineno)
            except LineIndexError:
                break
            sel.remove(line)
            line.set_dirty(True)

    def _horizontal_scroll(self, state: "SelectorState", request: PagingRequest) -> bool:
        width, _ = self.screen.size()
        loc = state.location
        if request.type is PagingType.SCROLL_RIGHT:
            loc.column += width // 2
        elif loc.column > 0:
            loc.column = max(0, loc.column - width // 2)
        else:
            return False

        self.list.set_dirty(True)
        return True


def _closed_span(a: int, b: int, size: int) -> range:
    low, high = min(a, b), max(a, b)
    return range(max(0, low), min(size - 1, high) + 1)


def _mark_dirty(buf: LineBuffer, line_numbers: tuple[int, ...]) -> None:
    for lineno in line_numbers:
        try:
            buf.line_at(lineno).set_dirty(True)
        except LineIndexError:
            continue
        TRACE_LOGGER.debug("Setting line %d dirty", lineno)


## ================= Layout factories ==============================
def new_default_layout(
    state: "SelectorState", config: Optional[LayoutConfig] = None
) -> BasicLayout:
    """Top-down layout: prompt on the first row, list below, status at the bottom."""
    config = config or LayoutConfig()
    screen, styles = state.screen, state.styles
    return BasicLayout(
        screen,
        StatusBar(screen, VerticalAnchor.BOTTOM, config.extra_offset, styles),
        UserPrompt(screen, VerticalAnchor.TOP, 0, state.prompt or config.prompt, styles),
        ListArea(screen, VerticalAnchor.TOP, 1, True, styles),
        config,
    )


def new_bottom_up_layout(
    state: "SelectorState", config: Optional[LayoutConfig] = None
) -> BasicLayout:
    """Bottom-up layout: status at the bottom, prompt above it, list growing upwards."""
    config = config or LayoutConfig(layout_type=LayoutType.BOTTOM_UP)
    screen, styles = state.screen, state.styles
    extra = config.extra_offset
    prompt = state.prompt or config.prompt
    return BasicLayout(
        screen,
        StatusBar(screen, VerticalAnchor.BOTTOM, extra, styles),
        UserPrompt(screen, VerticalAnchor.BOTTOM, 1 + extra, prompt, styles),
        ListArea(screen, VerticalAnchor.BOTTOM, 2 + extra, False, styles),
        config,
    )


def new_layout(state: "SelectorState", config: LayoutConfig) -> BasicLayout:
    if config.layout_type is LayoutType.BOTTOM_UP:
        return new_bottom_up_layout(state, config)
    return new_default_layout(state, config)
