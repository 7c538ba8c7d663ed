"""REST API adapter."""

from .client import ApiClient
from .comment import HttpCommentRepository

__all__ = ["ApiClient", "HttpCommentRepository"]
