"""Comment domain service."""

import sys
from typing import Awaitable, Callable, Optional, TypeVar

import logfire

from reel.domain.error import (
    DomainError,
    RemoteError,
    RequestCancelledError,
)
from reel.domain.model.comment import Comment, CommentPage, Pagination
from reel.domain.repository import CommentRepository
from reel.domain.value import CommentId, ReactionType, VideoId

from .base import Service
from .comment_cache import CommentCache
from .request_scheduler import RequestKey, RequestScheduler

T = TypeVar("T")

FETCH_FAILED = "Failed to fetch comments"
LOAD_MORE_FAILED = "Failed to load more comments"
ADD_FAILED = "Failed to add comment"
UPDATE_FAILED = "Failed to update comment"
DELETE_FAILED = "Failed to delete comment"
REACTION_FAILED = "Failed to toggle reaction"

# All page fetches share one key: a newer fetch always supersedes an older
# one because they write to the same cache.
FETCH_KEY = RequestKey("fetch")


class CommentService(Service):
    """Domain service holding one video's comments in sync with the server.

    Every write defers to the server's returned representation; nothing is
    guessed client-side. Failures are recorded in ``error`` (latest message)
    and ``errors`` (per operation key), then re-raised so the caller decides
    whether to show additional feedback.
    """

    def __init__(
        self,
        comment_repository: CommentRepository,
        cache: CommentCache,
        scheduler: RequestScheduler,
        page_size: int = 50,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_repository: Remote comment store
            cache: Cache of the current video's comments
            scheduler: Request scheduler (cancellation, timeout, per-comment ordering)
            page_size: Number of top-level comments per page
        """
        self.comment_repository = comment_repository
        self.cache = cache
        self.scheduler = scheduler
        self.page_size = page_size

        self.is_loading = False
        self.is_loading_more = False
        self.error: Optional[str] = None
        self.errors: dict[str, str] = {}
        self._listeners: list[Callable[[], None]] = []

        self.cache.subscribe(self._notify)

    @property
    def comments(self) -> list[Comment]:
        return self.cache.comments

    @property
    def pagination(self) -> Optional[Pagination]:
        return self.cache.pagination

    @property
    def video_id(self) -> Optional[VideoId]:
        return self.cache.video_id

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a listener for any state change (comments, flags, errors)."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def fetch_comments(self, video_id: VideoId, page: int = 1) -> None:
        """Fetch a page of top-level comments.

        Page 1 replaces the cache (switching video or hard refresh); later
        pages are appended. A newer fetch supersedes one still in flight.

        Args:
            video_id: Video ID
            page: 1-based page number

        Raises:
            RequestCancelledError: If a newer fetch superseded this one
            RemoteError: If the request failed
            RequestTimeoutError: If the request timed out
        """
        first_page = page == 1
        with logfire.span(
            "comment_service.fetch_comments", video_id=video_id, page=page
        ):
            if first_page:
                self._set_flags(is_loading=True, is_loading_more=False)
                self._forget_error(str(FETCH_KEY))

            try:
                result: CommentPage = await self.scheduler.run(
                    FETCH_KEY,
                    lambda: self.comment_repository.find_page(
                        video_id, page, self.page_size
                    ),
                )
            except RequestCancelledError:
                # The superseding fetch owns the flags and the cache now
                raise
            except Exception as e:
                # The fetch that completes owns both flags
                self._set_flags(is_loading=False, is_loading_more=False)
                if first_page:
                    self.cache.reset(video_id)
                    self._record_error(str(FETCH_KEY), e, FETCH_FAILED)
                else:
                    self._record_error(str(FETCH_KEY), e, LOAD_MORE_FAILED)
                raise

            self._set_flags(is_loading=False, is_loading_more=False)
            if first_page:
                self.cache.replace_page(video_id, result)
            else:
                appended = self.cache.append_page(result)
                logfire.info(
                    "Loaded more comments",
                    video_id=video_id,
                    page=page,
                    appended=appended,
                    total_loaded=len(self.cache.comments),
                )

            logfire.info(
                "Comments fetched",
                video_id=video_id,
                page=page,
                count=len(result.comments),
                has_more=result.pagination.has_more,
            )

    async def load_more_comments(self, video_id: VideoId) -> None:
        """Fetch the next page if there is one and no fetch is running."""
        if video_id != self.cache.video_id:
            logfire.debug(
                "Load more for a video not in view, skipping",
                video_id=video_id,
                current_video_id=self.cache.video_id,
            )
            return
        pagination = self.cache.pagination
        if pagination is None or not pagination.has_more:
            logfire.debug("No more comments to load", video_id=video_id)
            return
        if self.is_loading or self.is_loading_more:
            logfire.debug("Fetch already running, skipping load more", video_id=video_id)
            return

        self._set_flags(is_loading_more=True)
        await self.fetch_comments(video_id, pagination.page + 1)

    async def refresh_comments(self, video_id: VideoId) -> None:
        """Reload from page 1."""
        await self.fetch_comments(video_id, 1)

    async def add_comment(
        self,
        video_id: VideoId,
        content: str,
        timestamp: Optional[float] = None,
        parent_id: Optional[CommentId] = None,
    ) -> Comment:
        """Post a comment or reply and insert the server's copy.

        The comment is inserted only after the server confirms it. A reply
        whose parent is not loaded is not shown until the next refresh.

        Args:
            video_id: Video ID
            content: Comment text
            timestamp: Playback position in seconds
            parent_id: Top-level comment being replied to

        Returns:
            The created comment

        Raises:
            MalformedResponseError: If the server's comment lacks id, content or author
        """
        key = RequestKey("add", video_id)
        with logfire.span(
            "comment_service.add_comment",
            video_id=video_id,
            parent_id=parent_id,
            has_timestamp=timestamp is not None,
        ):
            comment = await self._mutate(
                key,
                lambda: self.comment_repository.create(
                    video_id, content, timestamp, parent_id
                ),
                ADD_FAILED,
                supersede=False,
            )
            inserted = self.cache.insert(comment)
            logfire.info(
                "Comment added",
                comment_id=comment.id,
                video_id=video_id,
                parent_id=parent_id,
                inserted=inserted,
            )
            return comment

    async def update_comment(self, comment_id: CommentId, content: str) -> Comment:
        """Edit a comment and replace it in place with the server's copy."""
        with logfire.span(
            "comment_service.update_comment",
            comment_id=comment_id,
            text_length=len(content),
        ):
            comment = await self._mutate(
                RequestKey("update", comment_id),
                lambda: self.comment_repository.update(comment_id, content),
                UPDATE_FAILED,
                entity_id=comment_id,
            )
            replaced = self.cache.replace(comment)
            logfire.info("Comment updated", comment_id=comment_id, replaced=replaced)
            return comment

    async def delete_comment(self, comment_id: CommentId) -> None:
        """Delete a comment and remove it from wherever it is cached."""
        with logfire.span("comment_service.delete_comment", comment_id=comment_id):
            await self._mutate(
                RequestKey("delete", comment_id),
                lambda: self.comment_repository.delete(comment_id),
                DELETE_FAILED,
                entity_id=comment_id,
            )
            removed = self.cache.remove(comment_id)
            logfire.info("Comment deleted", comment_id=comment_id, removed=removed)

    async def toggle_reaction(
        self, comment_id: CommentId, reaction_type: ReactionType
    ) -> Comment:
        """Toggle a reaction and adopt the server's resulting reaction set."""
        with logfire.span(
            "comment_service.toggle_reaction",
            comment_id=comment_id,
            reaction_type=reaction_type.value,
        ):
            comment = await self._mutate(
                RequestKey("reaction", comment_id),
                lambda: self.comment_repository.toggle_reaction(
                    comment_id, reaction_type
                ),
                REACTION_FAILED,
                entity_id=comment_id,
            )
            self.cache.replace(comment)
            logfire.info(
                "Reaction toggled",
                comment_id=comment_id,
                reaction_type=reaction_type.value,
                reactions=len(comment.reactions),
            )
            return comment

    def clear_error(self, key: Optional[str] = None) -> None:
        """Clear one operation's error, or all errors when ``key`` is None."""
        if key is None:
            self.errors.clear()
            self.error = None
        else:
            self._forget_error(key)
        self._notify()

    async def _mutate(
        self,
        key: RequestKey,
        call: Callable[[], Awaitable[T]],
        fallback: str,
        entity_id: Optional[str] = None,
        supersede: bool = True,
    ) -> T:
        self._forget_error(str(key))
        try:
            return await self.scheduler.run(
                key, call, entity_id=entity_id, supersede=supersede
            )
        except RequestCancelledError:
            raise
        except Exception as e:
            self._record_error(str(key), e, fallback)
            raise

    def _record_error(self, key: str, error: Exception, fallback: str) -> None:
        message = self._message_for(error, fallback)
        self.errors[key] = message
        self.error = message
        logfire.error(
            "Comment operation failed",
            key=key,
            error=message,
            error_type=type(error).__name__,
            _exc_info=sys.exc_info(),
        )
        self._notify()

    def _forget_error(self, key: str) -> None:
        message = self.errors.pop(key, None)
        if message is not None and self.error == message:
            self.error = next(reversed(self.errors.values()), None)

    @staticmethod
    def _message_for(error: Exception, fallback: str) -> str:
        """Server message verbatim when present, otherwise the operation's fallback."""
        if isinstance(error, RemoteError):
            return error.server_message or fallback
        if isinstance(error, DomainError):
            return str(error)
        return fallback

    def _set_flags(
        self,
        is_loading: Optional[bool] = None,
        is_loading_more: Optional[bool] = None,
    ) -> None:
        if is_loading is not None:
            self.is_loading = is_loading
        if is_loading_more is not None:
            self.is_loading_more = is_loading_more
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logfire.error(
                    "Comment service listener failed",
                    error=str(e),
                    _exc_info=sys.exc_info(),
                )
