# sift/core/Location.py
"""Location.py
========================
Mutable pagination and cursor state shared between the application and the
layout engine.

The layout never replaces a `Location`; it only updates its fields in place
(`BasicLayout.calculate_page`, the scroll handlers and `ListArea.draw`).
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sift.core.LineBuffer import LineBuffer


class Location:
    """Current page, page size, result count and cursor position.

    Attributes:
        page (int): 1-based page number being displayed.
        per_page (int): Number of list rows on one page.
        total (int): Number of lines in the current buffer.
        max_page (int): Last valid page for `total` and `per_page`.
        line_number (int): 0-based index of the line under the cursor.
        column (int): Horizontal scroll offset, in cells.
    """

    def __init__(self) -> None:
        self.page: int = 1
        self.per_page: int = 1
        self.total: int = 0
        self.max_page: int = 1
        self.line_number: int = 0
        self.column: int = 0

    @property
    def offset(self) -> int:
        """Index of the first line of the current page."""
        return (self.page - 1) * self.per_page

    def page_crop(self) -> "PageCrop":
        return PageCrop(self.per_page, self.page)

    def __repr__(self) -> str:
        return (
            f"Location(page={self.page}, per_page={self.per_page}, offset={self.offset}, "
            f"total={self.total}, max_page={self.max_page}, "
            f"line_number={self.line_number}, column={self.column})"
        )


class PageCrop:
    """Describes the window of lines that make up one page."""

    def __init__(self, per_page: int, current_page: int) -> None:
        self.per_page = per_page
        self.current_page = current_page

    def crop(self, buffer: "LineBuffer") -> "LineBuffer":
        """Return a view of *buffer* restricted to this page."""
        from sift.core.LineBuffer import CroppedBuffer

        start = (self.current_page - 1) * self.per_page
        return CroppedBuffer(buffer, start, self.per_page)
