"""REST implementation of the comment repository."""

from typing import Any, Optional

import logfire
from pydantic import ValidationError as PydanticValidationError

from reel.adapter.api.client import ApiClient
from reel.domain.error import MalformedResponseError
from reel.domain.model.comment import Comment, CommentPage
from reel.domain.repository.comment import CommentRepository
from reel.domain.value import CommentId, ReactionType, VideoId


class HttpCommentRepository(CommentRepository):
    """Comment repository backed by the ``/comments`` REST endpoints."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def find_page(self, video_id: VideoId, page: int, limit: int) -> CommentPage:
        body = await self.client.get(
            f"/comments/{video_id}", params={"page": page, "limit": limit}
        )
        try:
            return CommentPage.model_validate(body)
        except PydanticValidationError as e:
            logfire.error(
                "Invalid comment page received from server",
                video_id=video_id,
                page=page,
                error=str(e),
            )
            raise MalformedResponseError("Invalid comment page received from server") from e

    async def create(
        self,
        video_id: VideoId,
        content: str,
        timestamp: Optional[float] = None,
        parent_id: Optional[CommentId] = None,
    ) -> Comment:
        data: dict[str, Any] = {"content": content}
        if timestamp is not None:
            data["timestamp"] = timestamp
        if parent_id is not None:
            data["parentId"] = parent_id
        body = await self.client.post(f"/comments/{video_id}", data)
        return self._comment_from(body)

    async def update(self, comment_id: CommentId, content: str) -> Comment:
        body = await self.client.put(f"/comments/{comment_id}", {"content": content})
        return self._comment_from(body)

    async def delete(self, comment_id: CommentId) -> None:
        await self.client.delete(f"/comments/{comment_id}")

    async def toggle_reaction(
        self, comment_id: CommentId, reaction_type: ReactionType
    ) -> Comment:
        body = await self.client.post(
            f"/comments/{comment_id}/reaction", {"type": reaction_type.value}
        )
        return self._comment_from(body)

    @staticmethod
    def _comment_from(body: Any) -> Comment:
        """Validate a ``{comment: ...}`` envelope.

        Raises:
            MalformedResponseError: If the envelope or the comment is invalid
        """
        raw = body.get("comment") if isinstance(body, dict) else None
        if not isinstance(raw, dict):
            logfire.error("Response carries no comment", body_type=type(body).__name__)
            raise MalformedResponseError()
        try:
            return Comment.model_validate(raw)
        except PydanticValidationError as e:
            logfire.error(
                "Invalid comment structure received from server",
                comment_id=raw.get("_id"),
                error=str(e),
            )
            raise MalformedResponseError() from e
