"""Domain models."""

from reel.domain.model.comment import (
    Author,
    Comment,
    CommentPage,
    Pagination,
    Reaction,
)
from reel.domain.model.common import DomainModel
from reel.domain.model.event import ReactionUpdate, TypingEvent

__all__ = [
    "Author",
    "Comment",
    "CommentPage",
    "DomainModel",
    "Pagination",
    "Reaction",
    "ReactionUpdate",
    "TypingEvent",
]
