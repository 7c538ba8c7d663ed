"""Comment repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from reel.domain.model.comment import Comment, CommentPage
from reel.domain.value import CommentId, ReactionType, VideoId


class CommentRepository(ABC):
    """Remote store of comments.

    Defines the contract the comment service relies on. The production
    implementation talks to the REST backend; the in-memory one backs tests.
    Every write returns the server's representation of the affected comment.
    """

    @abstractmethod
    async def find_page(self, video_id: VideoId, page: int, limit: int) -> CommentPage:
        """Fetch one page of top-level comments with their replies attached.

        Args:
            video_id: The video the comments belong to
            page: 1-based page number
            limit: Page size

        Returns:
            The page and the pagination cursor describing it
        """
        pass

    @abstractmethod
    async def create(
        self,
        video_id: VideoId,
        content: str,
        timestamp: Optional[float] = None,
        parent_id: Optional[CommentId] = None,
    ) -> Comment:
        """Create a comment or a reply.

        Args:
            video_id: The video to comment on
            content: Comment text
            timestamp: Playback position in seconds to anchor the comment to
            parent_id: Top-level comment being replied to

        Returns:
            The created comment

        Raises:
            MalformedResponseError: If the server's entity lacks required fields
        """
        pass

    @abstractmethod
    async def update(self, comment_id: CommentId, content: str) -> Comment:
        """Edit a comment's text and return the updated comment."""
        pass

    @abstractmethod
    async def delete(self, comment_id: CommentId) -> None:
        """Delete a comment."""
        pass

    @abstractmethod
    async def toggle_reaction(
        self, comment_id: CommentId, reaction_type: ReactionType
    ) -> Comment:
        """Toggle the caller's reaction and return the comment's resulting state."""
        pass
