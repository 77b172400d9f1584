"""sift: the screen layout engine of an incremental-search terminal selector."""

__version__ = "0.1.0"
