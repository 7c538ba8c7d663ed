"""Repository interfaces for reel.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the adapter layer.
"""

from reel.domain.repository.comment import CommentRepository

__all__ = [
    "CommentRepository",
]
