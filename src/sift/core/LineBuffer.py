# sift/core/LineBuffer.py
"""LineBuffer.py
========================
Line and line-buffer types consumed by the layout engine.

A buffer exposes `size()` and `line_at(index)`; `line_at` raises
`LineIndexError` past the end, which callers treat as "no more data" rather
than as a failure. Lines are compared by identity in the display cache and
keyed by `id` in the selection set.
"""

import threading
from typing import Optional, Protocol, Sequence, runtime_checkable

MatchSpan = tuple[int, int]


class LineIndexError(IndexError):
    """Raised by `line_at` for an index outside the buffer."""


@runtime_checkable
class Line(Protocol):
    """A displayable line of the result list."""

    @property
    def id(self) -> int: ...

    def display_string(self) -> str: ...

    def indices(self) -> Optional[Sequence[MatchSpan]]: ...

    def is_dirty(self) -> bool: ...

    def set_dirty(self, dirty: bool) -> None: ...


class RawLine:
    """A line as read from the input, without match information."""

    __slots__ = ("_id", "_text", "_dirty")

    def __init__(self, line_id: int, text: str) -> None:
        self._id = line_id
        self._text = text
        self._dirty = False

    @property
    def id(self) -> int:
        return self._id

    def display_string(self) -> str:
        return self._text

    def indices(self) -> Optional[Sequence[MatchSpan]]:
        return None

    def is_dirty(self) -> bool:
        return self._dirty

    def set_dirty(self, dirty: bool) -> None:
        self._dirty = dirty

    def __repr__(self) -> str:
        return f"RawLine({self._id}, {self._text!r})"


class MatchedLine:
    """A line together with the spans a filter matched in its display string.

    The id is shared with the wrapped line so selection membership survives
    re-filtering.
    """

    __slots__ = ("_line", "_indices", "_dirty")

    def __init__(self, line: Line, indices: Sequence[MatchSpan]) -> None:
        self._line = line
        self._indices = list(indices)
        self._dirty = False

    @property
    def id(self) -> int:
        return self._line.id

    def display_string(self) -> str:
        return self._line.display_string()

    def indices(self) -> Optional[Sequence[MatchSpan]]:
        return self._indices

    def is_dirty(self) -> bool:
        return self._dirty

    def set_dirty(self, dirty: bool) -> None:
        self._dirty = dirty

    def __repr__(self) -> str:
        return f"MatchedLine({self.id}, {self.display_string()!r}, {self._indices!r})"


class LineBuffer(Protocol):
    def size(self) -> int: ...

    def line_at(self, index: int) -> Line: ...


class MemoryBuffer:
    """Append-only in-memory buffer.

    A filter running in the background may keep appending while the render
    path reads, so access goes through a lock.
    """

    def __init__(self, lines: Optional[Sequence[Line]] = None) -> None:
        self._lines: list[Line] = list(lines or [])
        self._lock = threading.Lock()

    @classmethod
    def from_strings(cls, texts: Sequence[str]) -> "MemoryBuffer":
        return cls([RawLine(i, text) for i, text in enumerate(texts)])

    def append(self, line: Line) -> None:
        with self._lock:
            self._lines.append(line)

    def size(self) -> int:
        with self._lock:
            return len(self._lines)

    def line_at(self, index: int) -> Line:
        with self._lock:
            if index < 0 or index >= len(self._lines):
                raise LineIndexError(f"index out of range: {index}")
            return self._lines[index]


class CroppedBuffer:
    """A window of at most `length` lines of another buffer, starting at `start`."""

    def __init__(self, source: LineBuffer, start: int, length: int) -> None:
        self._source = source
        self._start = start
        self._length = length

    def size(self) -> int:
        remaining = self._source.size() - self._start
        return max(0, min(self._length, remaining))

    def line_at(self, index: int) -> Line:
        if index < 0 or index >= self._length:
            raise LineIndexError(f"index out of range: {index}")
        return self._source.line_at(self._start + index)
