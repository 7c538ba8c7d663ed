"""Open video comments use case."""

from typing import Optional

import logfire
from pydantic import BaseModel

from reel.application.usecase.base import BaseUseCase
from reel.domain.model.comment import Comment, Pagination
from reel.domain.service import CommentService, LiveCommentSync, PushChannel
from reel.domain.value import ConnectionState, VideoId


class OpenVideoCommentsRequest(BaseModel):
    """Open video comments request."""

    video_id: str
    wait_for_channel: bool = False
    wait_timeout: Optional[float] = None  # Seconds, channel default when unset


class OpenVideoCommentsResponse(BaseModel):
    """Open video comments response."""

    video_id: str
    comments: list[Comment]
    pagination: Optional[Pagination]
    connection_state: ConnectionState
    live: bool


class OpenVideoCommentsUseCase(BaseUseCase):
    """Use case for switching the viewer to a video's comments."""

    def __init__(
        self,
        comment_service: CommentService,
        live_sync: LiveCommentSync,
        channel: PushChannel,
    ) -> None:
        """Initialize open video comments use case.

        Args:
            comment_service: Comment domain service
            live_sync: Push event reconciliation for the same cache
            channel: Push channel
        """
        self.comment_service = comment_service
        self.live_sync = live_sync
        self.channel = channel

    async def execute(
        self, request: OpenVideoCommentsRequest
    ) -> OpenVideoCommentsResponse:
        """Execute open video comments flow.

        Steps:
        1. Leave the previously watched video's room
        2. Fetch the first page of comments
        3. Join the video's room (queued until the channel is connected)
        4. Optionally wait for the channel

        Args:
            request: Open video comments request

        Returns:
            Loaded comments and the channel's connection status

        Raises:
            RemoteError: If the first page could not be fetched
            RequestTimeoutError: If the first page fetch timed out
        """
        video_id = VideoId(request.video_id)
        with logfire.span("open_video_comments", video_id=video_id):
            self.live_sync.attach()
            if self.live_sync.video_id not in (None, video_id):
                await self.live_sync.unwatch()

            await self.comment_service.fetch_comments(video_id)
            await self.live_sync.watch(video_id)

            live = self.channel.is_connected
            if request.wait_for_channel and not live:
                live = await self.channel.wait_for_connection(request.wait_timeout)

            return OpenVideoCommentsResponse(
                video_id=video_id,
                comments=self.comment_service.comments,
                pagination=self.comment_service.pagination,
                connection_state=self.channel.state,
                live=live,
            )
