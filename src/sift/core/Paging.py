# sift/core/Paging.py
"""Paging.py
========================
Scroll and jump requests handed to `BasicLayout.move_page`.

Requests are immutable values built by the input-dispatch layer; the layout
only inspects their type and, for `LINE_IN_PAGE`, the target row.
"""

from dataclasses import dataclass
from enum import Enum


class PagingType(Enum):
    LINE_ABOVE = "line_above"
    LINE_BELOW = "line_below"
    SCROLL_PAGE_UP = "scroll_page_up"
    SCROLL_PAGE_DOWN = "scroll_page_down"
    SCROLL_LEFT = "scroll_left"
    SCROLL_RIGHT = "scroll_right"
    LINE_IN_PAGE = "line_in_page"


HORIZONTAL_TYPES = frozenset({PagingType.SCROLL_LEFT, PagingType.SCROLL_RIGHT})


@dataclass(frozen=True)
class PagingRequest:
    type: PagingType

    def is_horizontal(self) -> bool:
        return self.type in HORIZONTAL_TYPES


@dataclass(frozen=True)
class JumpToLineRequest(PagingRequest):
    """Jump to row `line` of the current page."""

    type: PagingType = PagingType.LINE_IN_PAGE
    line: int = 0


LINE_ABOVE = PagingRequest(PagingType.LINE_ABOVE)
LINE_BELOW = PagingRequest(PagingType.LINE_BELOW)
SCROLL_PAGE_UP = PagingRequest(PagingType.SCROLL_PAGE_UP)
SCROLL_PAGE_DOWN = PagingRequest(PagingType.SCROLL_PAGE_DOWN)
SCROLL_LEFT = PagingRequest(PagingType.SCROLL_LEFT)
SCROLL_RIGHT = PagingRequest(PagingType.SCROLL_RIGHT)


def jump_to_line(line: int) -> JumpToLineRequest:
    return JumpToLineRequest(line=line)
