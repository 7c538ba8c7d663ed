"""Close video comments use case."""

import logfire
from pydantic import BaseModel

from reel.application.usecase.base import BaseUseCase
from reel.domain.service import CommentCache, LiveCommentSync


class CloseVideoCommentsRequest(BaseModel):
    """Close video comments request."""

    video_id: str


class CloseVideoCommentsResponse(BaseModel):
    """Close video comments response."""

    video_id: str
    left_room: bool


class CloseVideoCommentsUseCase(BaseUseCase):
    """Use case for leaving a video: stop live updates and drop its comments."""

    def __init__(self, live_sync: LiveCommentSync, cache: CommentCache) -> None:
        self.live_sync = live_sync
        self.cache = cache

    async def execute(
        self, request: CloseVideoCommentsRequest
    ) -> CloseVideoCommentsResponse:
        left_room = self.live_sync.video_id == request.video_id
        if left_room:
            await self.live_sync.unwatch()
        if self.cache.video_id == request.video_id:
            self.cache.reset()
        logfire.info(
            "Video comments closed", video_id=request.video_id, left_room=left_room
        )
        return CloseVideoCommentsResponse(video_id=request.video_id, left_room=left_room)
