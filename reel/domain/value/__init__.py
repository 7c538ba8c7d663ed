"""Domain value objects for reel."""

from reel.domain.value.identifiers import CommentId, UserId, VideoId
from reel.domain.value.types import ChannelEvent, ConnectionState, ReactionType

__all__ = [
    # Identifiers
    "CommentId",
    "UserId",
    "VideoId",
    # Types
    "ChannelEvent",
    "ConnectionState",
    "ReactionType",
]
