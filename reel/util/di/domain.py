"""Domain layer DI providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide

from reel.adapter.socket import CommentChannel
from reel.config import ApiSettings, Settings
from reel.domain.repository import CommentRepository
from reel.domain.service import (
    CommentCache,
    CommentService,
    LiveCommentSync,
    RequestScheduler,
)
from reel.domain.value import UserId
from reel.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped: each video context gets its own cache,
    scheduler and service, all sharing the APP-scoped channel.
    """

    scope = Scope.REQUEST

    @provide
    def get_comment_cache(self) -> CommentCache:
        return CommentCache()

    @provide
    def get_request_scheduler(self, api_settings: ApiSettings) -> RequestScheduler:
        return RequestScheduler(timeout=api_settings.request_timeout)

    @provide
    def get_comment_service(
        self,
        comment_repository: CommentRepository,
        cache: CommentCache,
        scheduler: RequestScheduler,
        api_settings: ApiSettings,
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(
            comment_repository=comment_repository,
            cache=cache,
            scheduler=scheduler,
            page_size=api_settings.page_size,
        )

    @provide
    async def get_live_comment_sync(
        self, cache: CommentCache, channel: CommentChannel, settings: Settings
    ) -> AsyncIterator[LiveCommentSync]:
        """Provide push event reconciliation bound to the request's cache.

        The channel outlives the request, so on exit the sync leaves its room
        and removes its handlers from the channel.
        """
        current_user_id = settings.session.current_user_id
        sync = LiveCommentSync(
            cache=cache,
            channel=channel,
            current_user_id=UserId(current_user_id) if current_user_id else None,
        )
        try:
            yield sync
        finally:
            sync.detach()
            await sync.unwatch()
