"""In-memory comment repository for testing."""

import math
from datetime import datetime
from itertools import count
from typing import Optional

from reel.adapter.error import ApiError
from reel.domain.error import MalformedResponseError
from reel.domain.model.comment import Author, Comment, CommentPage, Pagination, Reaction
from reel.domain.repository.comment import CommentRepository
from reel.domain.value import CommentId, ReactionType, UserId, VideoId


class InMemoryCommentRepository(CommentRepository):
    """In-memory implementation of CommentRepository for testing.

    Behaves like the backend: top-level comments are paged in creation order
    with their replies attached, only the author may edit or delete, deleting
    a top-level comment deletes its replies, and a reaction toggle replaces
    the caller's previous reaction.
    """

    def __init__(self, current_user: Optional[Author] = None) -> None:
        self.current_user = current_user or Author(
            _id=UserId("user-1"), name="Test User", email="test@example.com"
        )
        self._comments: dict[CommentId, Comment] = {}
        self._ids = count(1)

        # Next write returns an entity without required fields when set
        self.malformed_next = False
        # Calls made, for assertions
        self.calls: list[str] = []

    def seed(
        self,
        video_id: VideoId,
        content: str,
        author: Optional[Author] = None,
        parent_id: Optional[CommentId] = None,
        timestamp: Optional[float] = None,
    ) -> Comment:
        """Store a comment directly, bypassing authorization."""
        comment = Comment(
            _id=CommentId(f"c{next(self._ids)}"),
            video_id=video_id,
            userId=author or self.current_user,
            content=content,
            timestamp=timestamp,
            parent_id=parent_id,
        )
        self._comments[comment.id] = comment
        return comment

    def get(self, comment_id: CommentId) -> Optional[Comment]:
        return self._comments.get(comment_id)

    async def find_page(self, video_id: VideoId, page: int, limit: int) -> CommentPage:
        self.calls.append("find_page")
        top_level = [
            c
            for c in self._comments.values()
            if c.video_id == video_id and c.parent_id is None
        ]
        total = len(top_level)
        window = top_level[(page - 1) * limit : page * limit]
        return CommentPage(
            comments=[self._with_replies(c) for c in window],
            pagination=Pagination(
                page=page, limit=limit, total=total, pages=math.ceil(total / limit)
            ),
        )

    async def create(
        self,
        video_id: VideoId,
        content: str,
        timestamp: Optional[float] = None,
        parent_id: Optional[CommentId] = None,
    ) -> Comment:
        self.calls.append("create")
        if not content.strip():
            raise ApiError("Comment content is required", 400)
        if parent_id is not None:
            parent = self._comments.get(parent_id)
            if parent is None:
                raise ApiError("Parent comment not found", 404)
            if parent.parent_id is not None:
                raise ApiError("Cannot reply to a reply", 400)
        self._check_malformed()
        return self.seed(video_id, content, parent_id=parent_id, timestamp=timestamp)

    async def update(self, comment_id: CommentId, content: str) -> Comment:
        self.calls.append("update")
        comment = self._owned(comment_id)
        self._check_malformed()
        now = datetime.now()
        updated = comment.model_copy(
            update={
                "content": content,
                "is_edited": True,
                "edited_at": now,
                "updated_at": now,
            }
        )
        self._comments[comment_id] = updated
        return self._with_replies(updated)

    async def delete(self, comment_id: CommentId) -> None:
        self.calls.append("delete")
        self._owned(comment_id)
        del self._comments[comment_id]
        for reply_id in [
            c.id for c in self._comments.values() if c.parent_id == comment_id
        ]:
            del self._comments[reply_id]

    async def toggle_reaction(
        self, comment_id: CommentId, reaction_type: ReactionType
    ) -> Comment:
        self.calls.append("toggle_reaction")
        comment = self._comments.get(comment_id)
        if comment is None:
            raise ApiError("Comment not found", 404)
        self._check_malformed()

        user_id = self.current_user.id
        previous = comment.reaction_of(user_id)
        reactions = [r for r in comment.reactions if r.user_id != user_id]
        if previous != reaction_type:
            reactions.append(Reaction(user_id=user_id, type=reaction_type))

        updated = comment.with_reactions(reactions)
        self._comments[comment_id] = updated
        return self._with_replies(updated)

    def _owned(self, comment_id: CommentId) -> Comment:
        comment = self._comments.get(comment_id)
        if comment is None:
            raise ApiError("Comment not found", 404)
        if comment.author.id != self.current_user.id:
            raise ApiError("Not authorized", 403)
        return comment

    def _with_replies(self, comment: Comment) -> Comment:
        if comment.parent_id is not None:
            return comment
        replies = [c for c in self._comments.values() if c.parent_id == comment.id]
        return comment.with_replies(replies)

    def _check_malformed(self) -> None:
        if self.malformed_next:
            self.malformed_next = False
            raise MalformedResponseError()
