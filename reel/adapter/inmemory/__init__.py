"""In-memory adapters."""

from .comment import InMemoryCommentRepository

__all__ = ["InMemoryCommentRepository"]
