"""Enumerated value types."""

from enum import Enum


class ReactionType(str, Enum):
    """Closed set of reactions an author can leave on a comment."""

    LIKE = "like"
    DISLIKE = "dislike"
    HEART = "heart"
    LAUGH = "laugh"


class ConnectionState(str, Enum):
    """Lifecycle of the push channel.

    disconnected -> connecting -> connected, a drop returns to disconnected
    and the channel retries on its own. FAILED is terminal until the consumer
    calls connect() again.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class ChannelEvent(str, Enum):
    """Event names on the push channel."""

    # Received
    COMMENT_ADDED = "comment-added"
    COMMENT_UPDATED = "comment-updated"
    COMMENT_DELETED = "comment-deleted"
    REACTION_UPDATED = "reaction-updated"
    USER_TYPING = "user-typing"

    # Sent
    JOIN_VIDEO_ROOM = "join-video-room"
    LEAVE_VIDEO_ROOM = "leave-video-room"
    TYPING = "typing"
