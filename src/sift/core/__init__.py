"""Public facade for sift.core: re-export the state types from CamelCase modules.

Keeps one file per concept (Location.py, LineBuffer.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .LineBuffer import (  # noqa: F401
    CroppedBuffer,
    Line,
    LineBuffer,
    LineIndexError,
    MatchedLine,
    MemoryBuffer,
    RawLine,
)
from .Location import Location, PageCrop  # noqa: F401
from .Paging import JumpToLineRequest, PagingRequest, PagingType, jump_to_line  # noqa: F401
from .Selection import Selection  # noqa: F401
from .State import Caret, Query, SelectorState  # noqa: F401


__all__ = [
    "Caret",
    "CroppedBuffer",
    "JumpToLineRequest",
    "Line",
    "LineBuffer",
    "LineIndexError",
    "Location",
    "MatchedLine",
    "MemoryBuffer",
    "PageCrop",
    "PagingRequest",
    "PagingType",
    "Query",
    "RawLine",
    "Selection",
    "SelectorState",
    "jump_to_line",
]
