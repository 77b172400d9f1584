# sift/core/Selection.py
"""Selection.py
========================
The set of lines the user has marked. Membership is keyed by line id.
"""

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sift.core.LineBuffer import Line


class Selection:
    """Thread-safe set of selected lines keyed by `Line.id`."""

    def __init__(self) -> None:
        self._lines: dict[int, "Line"] = {}
        self._lock = threading.Lock()

    def has(self, line: "Line") -> bool:
        with self._lock:
            return line.id in self._lines

    def add(self, line: "Line") -> None:
        with self._lock:
            self._lines[line.id] = line

    def remove(self, line: "Line") -> None:
        with self._lock:
            self._lines.pop(line.id, None)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def ids(self) -> set[int]:
        with self._lock:
            return set(self._lines)

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)
