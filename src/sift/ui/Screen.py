# sift/ui/Screen.py
"""Screen.py
========================
The terminal I/O boundary of sift.

`Screen` is the cell-level writer every layout component draws through. It
wraps a `ScreenBackend` (the real terminal, or a fake in tests) and is
responsible for:

- serialising every direct access to the terminal (`size`, `set_cell`,
  `flush`) behind one lock, held only for the duration of a single call,
- printing strings cell by cell with wide-glyph aware advance, tab expansion
  and optional fill to the right edge,
- running the backend's blocking input read in a background thread and
  republishing what it returns on an `EventStream`, so the application's
  main loop can wait with a timeout instead of blocking inside curses.

`CursesBackend` is the production backend built on the standard `curses`
module. Input is read from a dedicated 1x1 window so that a blocking read
never triggers an implicit refresh of the drawing window mid-frame.
"""

import curses
import logging
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Union

from sift.ui.Styles import (
    ATTR_BOLD,
    ATTR_REVERSE,
    ATTR_UNDERLINE,
    COLOR_MASK,
    Attribute,
)
from sift.utils.logging_config import TRACE_LOGGER
from sift.utils.utils import get_char_width

TAB_WIDTH = 4
PLACEHOLDER = "?"


class ScreenError(Exception):
    """The terminal backend failed to perform an operation."""


class ScreenClosedError(ScreenError):
    """The terminal backend has been closed."""


class EventStreamClosed(Exception):
    """No more events will be delivered on this stream."""


class EventType(Enum):
    KEY = "key"
    RESIZE = "resize"
    INTERRUPT = "interrupt"


@dataclass(frozen=True)
class Event:
    """An input event.

    For `KEY` events `key` holds what curses returned: a one-character string
    for text input or an int key code for function keys. `RESIZE` events
    carry the new terminal dimensions.
    """

    type: EventType
    key: Union[str, int, None] = None
    width: int = 0
    height: int = 0


@dataclass
class PrintArgs:
    x: int = 0
    y: int = 0
    x_offset: int = 0
    fg: Attribute = 0
    bg: Attribute = 0
    text: Union[str, bytes] = ""
    fill: bool = False


# ==================== Backends ====================
class ScreenBackend(ABC):
    """The raw terminal operations `Screen` is built on.

    Implementations need not be thread-safe: `Screen` serialises `size`,
    `set_cell` and `flush`. `poll_event` is called from the background
    polling thread only and must raise `ScreenClosedError` once the backend
    has been closed.
    """

    @abstractmethod
    def init(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def size(self) -> tuple[int, int]:
        """Return ``(width, height)``."""

    @abstractmethod
    def set_cell(self, x: int, y: int, ch: str, fg: Attribute, bg: Attribute) -> None: ...

    @abstractmethod
    def flush(self) -> None: ...

    @abstractmethod
    def poll_event(self) -> Event: ...


class CursesBackend(ScreenBackend):
    """`ScreenBackend` over the standard `curses` library.

    Attributes are converted lazily: each distinct (foreground, background)
    colour combination gets its own colour pair the first time it is drawn.
    """

    POLL_TIMEOUT_MS = 100

    def __init__(self, stdscr: Optional["curses.window"] = None) -> None:
        self._stdscr = stdscr
        self._owns_terminal = stdscr is None
        self._input_win: Optional["curses.window"] = None
        self._pairs: dict[tuple[int, int], int] = {}
        self._next_pair = 1
        self._colors_enabled = False
        self._closed = threading.Event()

    def init(self) -> None:
        if self._stdscr is None:
            self._stdscr = curses.initscr()
        curses.noecho()
        curses.cbreak()
        try:
            curses.start_color()
            curses.use_default_colors()
            self._colors_enabled = curses.has_colors()
        except curses.error as e:
            logging.warning("Terminal colours unavailable (%s); drawing monochrome.", e)
            self._colors_enabled = False
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        self._stdscr.keypad(True)
        self._stdscr.leaveok(True)

        self._input_win = curses.newwin(1, 1, 0, 0)
        self._input_win.keypad(True)
        self._input_win.timeout(self.POLL_TIMEOUT_MS)
        self._input_win.noutrefresh()
        self._closed.clear()
        logging.debug("CursesBackend initialised (colours=%s).", self._colors_enabled)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        if not self._owns_terminal or self._stdscr is None:
            return
        try:
            self._stdscr.keypad(False)
            curses.nocbreak()
            curses.echo()
            curses.endwin()
        except curses.error as e:
            logging.warning("Error while restoring the terminal: %s", e)
        logging.debug("CursesBackend closed.")

    def size(self) -> tuple[int, int]:
        assert self._stdscr is not None
        height, width = self._stdscr.getmaxyx()
        return width, height

    def set_cell(self, x: int, y: int, ch: str, fg: Attribute, bg: Attribute) -> None:
        assert self._stdscr is not None
        height, width = self._stdscr.getmaxyx()
        if x < 0 or y < 0 or x >= width or y >= height:
            return
        try:
            self._stdscr.addstr(y, x, ch, self._to_curses_attr(fg, bg))
        except curses.error:
            # The bottom-right cell cannot be written without scrolling.
            logging.debug("addstr failed at (%d,%d)", x, y)

    def flush(self) -> None:
        assert self._stdscr is not None
        try:
            self._stdscr.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            raise ScreenError(f"flush failed: {e}") from e

    def poll_event(self) -> Event:
        # Runs on the polling thread without the Screen lock. The separate
        # 1x1 input window is the only isolation from drawing on stdscr.
        while not self._closed.is_set():
            assert self._input_win is not None
            try:
                key = self._input_win.get_wch()
            except curses.error:
                continue  # timeout, check for close and wait again
            except KeyboardInterrupt:
                return Event(EventType.INTERRUPT)
            if key == curses.KEY_RESIZE:
                curses.update_lines_cols()
                return Event(EventType.RESIZE, width=curses.COLS, height=curses.LINES)
            return Event(EventType.KEY, key=key)
        raise ScreenClosedError("curses backend closed")

    # ── helpers ───────────────────────────────────────────────────────────────

    def _curses_color(self, color: int) -> int:
        if color == 0:
            return -1
        palette = (
            curses.COLOR_BLACK,
            curses.COLOR_RED,
            curses.COLOR_GREEN,
            curses.COLOR_YELLOW,
            curses.COLOR_BLUE,
            curses.COLOR_MAGENTA,
            curses.COLOR_CYAN,
            curses.COLOR_WHITE,
        )
        return palette[(color - 1) % len(palette)]

    def _pair_for(self, fg: int, bg: int) -> int:
        if not self._colors_enabled or (fg, bg) == (-1, -1):
            return 0
        key = (fg, bg)
        pair = self._pairs.get(key)
        if pair is not None:
            return pair
        if self._next_pair >= curses.COLOR_PAIRS:
            return 0
        try:
            curses.init_pair(self._next_pair, fg, bg)
        except curses.error as exc:
            logging.warning("init_pair failed (%s) – falling back to default colours", exc)
            return 0
        pair = self._pairs[key] = self._next_pair
        self._next_pair += 1
        return pair

    def _to_curses_attr(self, fg: Attribute, bg: Attribute) -> int:
        pair = self._pair_for(
            self._curses_color(fg & COLOR_MASK), self._curses_color(bg & COLOR_MASK)
        )
        attr = curses.color_pair(pair)
        if fg & ATTR_BOLD:
            attr |= curses.A_BOLD
        if fg & ATTR_UNDERLINE:
            attr |= curses.A_UNDERLINE
        if (fg | bg) & ATTR_REVERSE:
            attr |= curses.A_REVERSE
        return attr


# ==================== Event stream ====================
class EventStream:
    """Queue of input events with an explicit end-of-stream.

    `get` waits with an optional timeout and returns ``None`` when it expires;
    once the stream has been closed and drained it raises `EventStreamClosed`
    for every consumer.
    """

    _END = object()

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue[Any] = queue.Queue(maxsize)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def put(self, event: Event) -> bool:
        """Publish an event. Returns False if the stream is already closed."""
        if self._closed.is_set():
            return False
        self._queue.put(event)
        return True

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._queue.put(self._END)

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is self._END:
            # Leave the marker in place so other consumers see it too.
            self._queue.put(self._END)
            raise EventStreamClosed()
        return item

    def __iter__(self) -> Iterator[Event]:
        while True:
            try:
                event = self.get()
            except EventStreamClosed:
                return
            if event is not None:
                yield event


# ==================== Screen ====================
class Screen:
    """Thread-safe cell writer over a `ScreenBackend`.

    Attributes:
        backend (ScreenBackend): The terminal implementation.
    """

    POLLER_JOIN_TIMEOUT = 1.0

    def __init__(self, backend: ScreenBackend) -> None:
        self.backend = backend
        self._lock = threading.Lock()
        self._stream_lock = threading.Lock()
        self._stream: Optional[EventStream] = None
        self._poller: Optional[threading.Thread] = None

    def init(self) -> None:
        TRACE_LOGGER.debug("initializing screen backend")
        self.backend.init()

    def close(self) -> None:
        """Close the backend and end the event stream.

        The stream is closed here even while the polling thread is alive, so
        consumers see end-of-stream when the backend's blocking read never
        returns.
        """
        self.backend.close()
        with self._stream_lock:
            if self._stream is not None:
                self._stream.close()
        if self._poller is not None and self._poller is not threading.current_thread():
            self._poller.join(timeout=self.POLLER_JOIN_TIMEOUT)
            if self._poller.is_alive():
                logging.warning("Event polling thread did not stop within the timeout.")

    def __enter__(self) -> "Screen":
        self.init()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- guarded primitives --------------------------------------------------

    def size(self) -> tuple[int, int]:
        """Return ``(width, height)`` of the terminal."""
        with self._lock:
            return self.backend.size()

    def set_cell(self, x: int, y: int, ch: str, fg: Attribute, bg: Attribute) -> None:
        with self._lock:
            self.backend.set_cell(x, y, ch, fg, bg)

    def flush(self) -> None:
        """Commit the frame. Backend failures propagate as `ScreenError`."""
        with self._lock:
            self.backend.flush()

    # -- text ------------------------------------------------------------------

    def print(self, args: PrintArgs) -> int:
        """Write `args.text` starting at column `args.x` of row `args.y`.

        Returns the number of display columns covered, including the padding
        written when `args.fill` is set.
        """
        fg, bg, y = args.fg, args.bg, args.y
        x = args.x
        written = 0

        text = args.text
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")

        for ch in text:
            if _is_undecodable(ch):
                ch = PLACEHOLDER
            if ch == "\t":
                n = TAB_WIDTH - (x + args.x_offset) % TAB_WIDTH
                for i in range(n + 1):
                    self.set_cell(x + i, y, " ", fg, bg)
                written += n
                x += n
            else:
                self.set_cell(x, y, ch, fg, bg)
                n = get_char_width(ch)
                x += n
                written += n

        if not args.fill:
            return written

        width, _ = self.size()
        if x < width:
            written += width - x
            for col in range(x, width):
                self.set_cell(col, y, " ", fg, bg)
        return written

    # -- events ----------------------------------------------------------------

    def poll_event(self) -> EventStream:
        """Return the event stream, starting the polling thread on first use."""
        with self._stream_lock:
            stream = self._ensure_stream()
            if self._poller is None:
                self._poller = threading.Thread(
                    target=self._poll_loop,
                    args=(stream,),
                    daemon=True,
                    name="ScreenEventPoller",
                )
                self._poller.start()
            return stream

    def send_event(self, event: Event) -> bool:
        """Inject a synthetic event into the stream consumers read from."""
        with self._stream_lock:
            stream = self._ensure_stream()
        return stream.put(event)

    def _ensure_stream(self) -> EventStream:
        if self._stream is None:
            self._stream = EventStream()
        return self._stream

    def _poll_loop(self, stream: EventStream) -> None:
        logging.info("Event polling thread started.")
        try:
            while True:
                event = self.backend.poll_event()
                TRACE_LOGGER.debug("polled event %r", event)
                if not stream.put(event):
                    break
        except ScreenClosedError:
            logging.debug("Screen backend closed; ending event stream.")
        except Exception:
            logging.exception("Event polling stopped unexpectedly")
        finally:
            stream.close()
            logging.info("Event polling thread has shut down.")


def _is_undecodable(ch: str) -> bool:
    code = ord(ch)
    return 0xD800 <= code <= 0xDFFF or ch == "\ufffd"
