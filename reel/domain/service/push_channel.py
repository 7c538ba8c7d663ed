"""Push channel interface required by the domain."""

from typing import Any, Callable, Optional

from reel.domain.model.comment import Comment
from reel.domain.model.event import ReactionUpdate, TypingEvent
from reel.domain.value import CommentId, ConnectionState, VideoId

Unregister = Callable[[], None]


class PushChannel:
    """Live event channel interface for all transports.

    Every ``on_*`` registration returns a function that removes the callback
    again, so short-lived consumers can detach from a long-lived channel.
    """

    @property
    def state(self) -> ConnectionState:
        raise NotImplementedError

    @property
    def is_connected(self) -> bool:
        raise NotImplementedError

    async def join_video_room(self, video_id: VideoId) -> None:
        raise NotImplementedError

    async def leave_video_room(self, video_id: VideoId) -> None:
        raise NotImplementedError

    async def emit_typing(self, video_id: VideoId, is_typing: bool) -> None:
        raise NotImplementedError

    async def wait_for_connection(self, timeout: Optional[float] = None) -> bool:
        """Wait until connected.

        Args:
            timeout: Seconds to wait, transport default when None

        Returns:
            True if connected within the timeout
        """
        raise NotImplementedError

    def on_comment_added(self, callback: Callable[[Comment], Any]) -> Unregister:
        raise NotImplementedError

    def on_comment_updated(self, callback: Callable[[Comment], Any]) -> Unregister:
        raise NotImplementedError

    def on_comment_deleted(self, callback: Callable[[CommentId], Any]) -> Unregister:
        raise NotImplementedError

    def on_reaction_updated(
        self, callback: Callable[[ReactionUpdate], Any]
    ) -> Unregister:
        raise NotImplementedError

    def on_user_typing(self, callback: Callable[[TypingEvent], Any]) -> Unregister:
        raise NotImplementedError
