"""Reconciliation of push events into the comment cache."""

from typing import Callable, Optional

import logfire

from reel.domain.model.comment import Comment
from reel.domain.model.event import ReactionUpdate, TypingEvent
from reel.domain.value import CommentId, UserId, VideoId

from .base import Service
from .comment_cache import CommentCache
from .push_channel import PushChannel


class LiveCommentSync(Service):
    """Applies push events from one channel to one comment cache.

    Push events and REST responses describe the same server state, so every
    handler is idempotent: a comment the REST echo already inserted is not
    inserted twice, a delete of an absent comment is a no-op.
    """

    def __init__(
        self,
        cache: CommentCache,
        channel: PushChannel,
        current_user_id: Optional[UserId] = None,
    ) -> None:
        """Initialize live comment sync.

        Args:
            cache: Cache the events are applied to
            channel: Push channel delivering the events
            current_user_id: Signed-in user, whose own typing events are ignored
        """
        self.cache = cache
        self.channel = channel
        self.current_user_id = current_user_id

        self.video_id: Optional[VideoId] = None
        self.typing_users: dict[UserId, str] = {}
        self._unregisters: list[Callable[[], None]] = []

    @property
    def attached(self) -> bool:
        return bool(self._unregisters)

    def attach(self) -> None:
        """Register the event handlers on the channel. Runs once until detached."""
        if self._unregisters:
            return
        self._unregisters = [
            self.channel.on_comment_added(self._on_comment_added),
            self.channel.on_comment_updated(self._on_comment_updated),
            self.channel.on_comment_deleted(self._on_comment_deleted),
            self.channel.on_reaction_updated(self._on_reaction_updated),
            self.channel.on_user_typing(self._on_user_typing),
        ]
        logfire.debug("Live comment sync attached")

    def detach(self) -> None:
        """Remove the event handlers from the channel."""
        unregisters, self._unregisters = self._unregisters, []
        for unregister in unregisters:
            unregister()
        if unregisters:
            logfire.debug("Live comment sync detached")

    async def watch(self, video_id: VideoId) -> None:
        """Follow a video's room, leaving the previously watched one."""
        self.attach()
        if self.video_id == video_id:
            return
        if self.video_id is not None:
            await self.channel.leave_video_room(self.video_id)
        self.video_id = video_id
        self.typing_users.clear()
        await self.channel.join_video_room(video_id)

    async def unwatch(self) -> None:
        if self.video_id is None:
            return
        video_id = self.video_id
        self.video_id = None
        self.typing_users.clear()
        await self.channel.leave_video_room(video_id)

    async def set_typing(self, is_typing: bool) -> None:
        """Tell the watched room whether the current user is typing."""
        if self.video_id is None:
            return
        await self.channel.emit_typing(self.video_id, is_typing)

    def _on_comment_added(self, comment: Comment) -> None:
        inserted = self.cache.insert(comment)
        logfire.debug("Push comment added", comment_id=comment.id, inserted=inserted)

    def _on_comment_updated(self, comment: Comment) -> None:
        if not self.cache.belongs(comment):
            return
        replaced = self.cache.replace(comment)
        logfire.debug("Push comment updated", comment_id=comment.id, replaced=replaced)

    def _on_comment_deleted(self, comment_id: CommentId) -> None:
        removed = self.cache.remove(comment_id)
        logfire.debug("Push comment deleted", comment_id=comment_id, removed=removed)

    def _on_reaction_updated(self, update: ReactionUpdate) -> None:
        applied = self.cache.apply_reactions(update.comment_id, update.reactions)
        logfire.debug(
            "Push reactions updated", comment_id=update.comment_id, applied=applied
        )

    def _on_user_typing(self, event: TypingEvent) -> None:
        if self.current_user_id is not None and event.user_id == self.current_user_id:
            return
        if event.is_typing:
            self.typing_users[event.user_id] = event.user_name
        else:
            self.typing_users.pop(event.user_id, None)
