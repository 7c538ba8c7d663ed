"""Strongly typed identifiers for reel entities.

The backend assigns opaque string ids (Mongo ObjectIds), so every identifier
wraps ``str``. NewType keeps comment, video and user ids from being mixed up.
"""

from typing import NewType

CommentId = NewType("CommentId", str)
VideoId = NewType("VideoId", str)
UserId = NewType("UserId", str)
