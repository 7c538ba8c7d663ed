"""Test configuration and fixtures."""

from datetime import datetime
from typing import Any, Optional

from reel.domain.model.comment import Author, Comment, CommentPage, Pagination

ALICE = Author(_id="u-alice", name="Alice", email="alice@example.com")
BOB = Author(_id="u-bob", name="Bob", email="bob@example.com")


def make_comment(
    comment_id: str,
    video_id: Optional[str] = "v1",
    content: str = "Nice cut",
    author: Author = ALICE,
    parent_id: Optional[str] = None,
    **fields: Any,
) -> Comment:
    """Build a comment the way the server would serve it."""
    return Comment(
        _id=comment_id,
        video_id=video_id,
        userId=author,
        content=content,
        parent_id=parent_id,
        created_at=datetime(2024, 1, 1, 12, 0),
        updated_at=datetime(2024, 1, 1, 12, 0),
        **fields,
    )


def comment_payload(
    comment_id: str,
    video_id: str = "v1",
    content: str = "Nice cut",
    parent_id: Optional[str] = None,
    **fields: Any,
) -> dict[str, Any]:
    """Build a raw wire payload (``_id``, populated ``userId``, camelCase)."""
    payload: dict[str, Any] = {
        "_id": comment_id,
        "videoId": video_id,
        "userId": {"_id": "u-alice", "name": "Alice", "email": "alice@example.com"},
        "content": content,
        "reactions": [],
        "isEdited": False,
        "createdAt": "2024-01-01T12:00:00Z",
        "updatedAt": "2024-01-01T12:00:00Z",
    }
    if parent_id is not None:
        payload["parentId"] = parent_id
    payload.update(fields)
    return payload


def make_page(
    comments: list[Comment], page: int = 1, limit: int = 50, total: Optional[int] = None
) -> CommentPage:
    """Build a page; ``pages`` is derived from total and limit like the server does."""
    total = len(comments) if total is None else total
    pages = -(-total // limit)
    return CommentPage(
        comments=comments,
        pagination=Pagination(page=page, limit=limit, total=total, pages=pages),
    )
