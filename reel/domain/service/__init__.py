"""Domain services."""

from .base import Service
from .comment_cache import CommentCache
from .comment_service import CommentService
from .live_sync import LiveCommentSync
from .push_channel import PushChannel, Unregister
from .request_scheduler import RequestKey, RequestScheduler

__all__ = [
    "CommentCache",
    "CommentService",
    "LiveCommentSync",
    "PushChannel",
    "RequestKey",
    "RequestScheduler",
    "Service",
    "Unregister",
]
