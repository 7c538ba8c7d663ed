"""Consumer-facing helpers."""

from .format import format_timestamp
from .scroll import InfiniteScrollTrigger

__all__ = ["InfiniteScrollTrigger", "format_timestamp"]
