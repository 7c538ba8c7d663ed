"""Application layer DI providers."""

from dishka import Scope, provide

from reel.adapter.socket import CommentChannel
from reel.application.usecase.video import (
    CloseVideoCommentsUseCase,
    OpenVideoCommentsUseCase,
)
from reel.domain.service import CommentCache, CommentService, LiveCommentSync
from reel.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_open_video_comments_use_case(
        self,
        comment_service: CommentService,
        live_sync: LiveCommentSync,
        channel: CommentChannel,
    ) -> OpenVideoCommentsUseCase:
        """Provide open video comments use case."""
        return OpenVideoCommentsUseCase(
            comment_service=comment_service,
            live_sync=live_sync,
            channel=channel,
        )

    @provide(scope=Scope.REQUEST)
    def get_close_video_comments_use_case(
        self, live_sync: LiveCommentSync, cache: CommentCache
    ) -> CloseVideoCommentsUseCase:
        """Provide close video comments use case."""
        return CloseVideoCommentsUseCase(live_sync=live_sync, cache=cache)
