# tests/conftest.py
"""Pytest configuration with shared fixtures for the sift layout tests.

The layout engine only talks to the terminal through `Screen`, so most tests
run against `FakeBackend`: an in-memory `ScreenBackend` that records every
cell write, counts flushes and serves queued input events.
"""

from __future__ import annotations

import queue
from typing import Callable, Optional, Sequence

import pytest

from sift.core.LineBuffer import MemoryBuffer
from sift.core.State import SelectorState
from sift.ui.Screen import Event, Screen, ScreenBackend, ScreenClosedError, ScreenError
from sift.ui.Styles import StyleSet

Cell = tuple[str, int, int]


class FakeBackend(ScreenBackend):
    """In-memory terminal.

    Attributes:
        cells: Last (char, fg, bg) written to each (x, y).
        log: Every in-bounds write in order, as (x, y, char).
        flushes: Number of successful flushes.
        fail_flush: When True, `flush` raises `ScreenError`.
    """

    def __init__(self, width: int = 40, height: int = 12) -> None:
        self.width = width
        self.height = height
        self.cells: dict[tuple[int, int], Cell] = {}
        self.log: list[tuple[int, int, str]] = []
        self.flushes = 0
        self.fail_flush = False
        self.initialised = False
        self.closed = False
        self.events: queue.Queue[Optional[Event]] = queue.Queue()

    def init(self) -> None:
        self.initialised = True

    def close(self) -> None:
        self.closed = True
        self.events.put(None)

    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def set_cell(self, x: int, y: int, ch: str, fg: int, bg: int) -> None:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return
        self.cells[(x, y)] = (ch, fg, bg)
        self.log.append((x, y, ch))

    def flush(self) -> None:
        if self.fail_flush:
            raise ScreenError("flush failed")
        self.flushes += 1

    def poll_event(self) -> Event:
        item = self.events.get()
        if item is None:
            self.events.put(None)
            raise ScreenClosedError("fake backend closed")
        return item

    # -- inspection helpers ----------------------------------------------------

    def cell(self, x: int, y: int) -> Cell:
        return self.cells.get((x, y), (" ", 0, 0))

    def row_text(self, y: int) -> str:
        return "".join(self.cell(x, y)[0] for x in range(self.width))

    def writes_in_row(self, y: int) -> int:
        return sum(1 for _, row, _ in self.log if row == y)

    def clear_log(self) -> None:
        self.log.clear()


@pytest.fixture
def fake_backend() -> FakeBackend:
    """A 40x12 in-memory terminal."""
    return FakeBackend()


@pytest.fixture
def screen(fake_backend: FakeBackend) -> Screen:
    return Screen(fake_backend)


@pytest.fixture
def styles() -> StyleSet:
    return StyleSet()


@pytest.fixture
def make_state(screen: Screen, styles: StyleSet) -> Callable[..., SelectorState]:
    """Factory building a `SelectorState` over a list of plain strings.

    Line ids equal their index in the buffer, which keeps selection
    assertions readable.
    """

    def _make(lines: Sequence[str] = (), prompt: str = "") -> SelectorState:
        return SelectorState(screen, styles, prompt=prompt, buffer=MemoryBuffer.from_strings(lines))

    return _make


@pytest.fixture
def numbered_lines() -> list[str]:
    """25 distinct lines: 'line 00' .. 'line 24'."""
    return [f"line {i:02d}" for i in range(25)]
