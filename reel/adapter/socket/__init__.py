"""Socket.IO push channel."""

from .channel import (
    CommentChannel,
    MockCommentChannel,
    SocketIOCommentChannel,
)

__all__ = [
    "CommentChannel",
    "MockCommentChannel",
    "SocketIOCommentChannel",
]
