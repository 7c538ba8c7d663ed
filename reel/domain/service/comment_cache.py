"""In-memory view of one video's comments."""

import sys
from typing import Callable, Optional

import logfire

from reel.domain.model.comment import Comment, CommentPage, Pagination, Reaction
from reel.domain.value import CommentId, VideoId

Listener = Callable[[], None]


class CommentCache:
    """Ordered top-level comments of the current video and their replies.

    Invariants:
    - top-level comments keep the order pages were loaded in; new comments are
      appended, never re-sorted
    - a comment id appears at most once (top level or inside one reply list)
    - replies live only inside their parent's ``replies``

    Every mutation is keyed by comment id, so applying the same change twice
    (REST echo plus push delivery) converges to the same state.
    """

    def __init__(self) -> None:
        self._video_id: Optional[VideoId] = None
        self._comments: list[Comment] = []
        self._pagination: Optional[Pagination] = None
        self._listeners: list[Listener] = []

    @property
    def video_id(self) -> Optional[VideoId]:
        return self._video_id

    @property
    def comments(self) -> list[Comment]:
        return list(self._comments)

    @property
    def pagination(self) -> Optional[Pagination]:
        return self._pagination

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every effective mutation.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self, video_id: Optional[VideoId] = None) -> None:
        """Drop everything and start an empty view for ``video_id``."""
        self._video_id = video_id
        self._comments = []
        self._pagination = None
        self._notify()

    def replace_page(self, video_id: VideoId, page: CommentPage) -> None:
        """Replace the whole view with the first page of a video."""
        self._video_id = video_id
        self._comments = list(page.comments)
        self._pagination = page.pagination
        self._notify()

    def append_page(self, page: CommentPage) -> int:
        """Append a subsequent page, skipping comments already present.

        A comment can already be present when it arrived by push (or was
        added locally) before the page containing it was fetched.

        Returns:
            Number of comments appended
        """
        appended = 0
        for comment in page.comments:
            if self.contains(comment.id):
                continue
            self._comments.append(comment)
            appended += 1
        self._pagination = page.pagination
        self._notify()
        return appended

    def find(self, comment_id: CommentId) -> Optional[Comment]:
        location = self._locate(comment_id)
        if location is None:
            return None
        index, reply_index = location
        if reply_index is None:
            return self._comments[index]
        return self._comments[index].replies[reply_index]

    def contains(self, comment_id: CommentId) -> bool:
        return self._locate(comment_id) is not None

    def belongs(self, comment: Comment) -> bool:
        """Whether a comment is part of the video this cache is showing."""
        if self._video_id is None:
            return False
        return comment.video_id is None or comment.video_id == self._video_id

    def insert(self, comment: Comment) -> bool:
        """Insert a comment if absent.

        Replies are appended to their parent's replies; top-level comments
        are appended to the end of the list.

        Returns:
            True if the cache changed
        """
        if not self.belongs(comment):
            logfire.debug(
                "Ignoring comment for another video",
                comment_id=comment.id,
                comment_video_id=comment.video_id,
                cache_video_id=self._video_id,
            )
            return False

        if self.contains(comment.id):
            return False

        if comment.parent_id is not None:
            parent_index = self._top_level_index(comment.parent_id)
            if parent_index is None:
                # Parent is outside the loaded window; shown after a refresh
                logfire.warn(
                    "Reply parent not loaded",
                    comment_id=comment.id,
                    parent_id=comment.parent_id,
                )
                return False
            parent = self._comments[parent_index]
            self._comments[parent_index] = parent.with_replies(
                [*parent.replies, comment]
            )
        else:
            self._comments.append(comment)
            self._adjust_total(1)

        self._notify()
        return True

    def replace(self, comment: Comment) -> bool:
        """Replace a cached comment in place with a newer representation.

        A replacement built from a payload without ``replies`` keeps the
        replies already cached.

        Returns:
            True if the comment was found
        """
        location = self._locate(comment.id)
        if location is None:
            return False

        index, reply_index = location
        if reply_index is None:
            existing = self._comments[index]
            if not comment.carries_replies and existing.replies:
                comment = comment.with_replies(existing.replies)
            self._comments[index] = comment
        else:
            parent = self._comments[index]
            replies = list(parent.replies)
            replies[reply_index] = comment
            self._comments[index] = parent.with_replies(replies)

        self._notify()
        return True

    def remove(self, comment_id: CommentId) -> bool:
        """Remove a top-level comment (with its replies) or a nested reply.

        Returns:
            True if something was removed
        """
        location = self._locate(comment_id)
        if location is None:
            return False

        index, reply_index = location
        if reply_index is None:
            del self._comments[index]
            self._adjust_total(-1)
        else:
            parent = self._comments[index]
            self._comments[index] = parent.with_replies(
                [reply for reply in parent.replies if reply.id != comment_id]
            )

        self._notify()
        return True

    def apply_reactions(self, comment_id: CommentId, reactions: list[Reaction]) -> bool:
        """Overwrite a comment's reaction set with the server's."""
        comment = self.find(comment_id)
        if comment is None:
            return False
        return self.replace(comment.with_reactions(reactions))

    def _locate(self, comment_id: CommentId) -> Optional[tuple[int, Optional[int]]]:
        for index, comment in enumerate(self._comments):
            if comment.id == comment_id:
                return index, None
            for reply_index, reply in enumerate(comment.replies):
                if reply.id == comment_id:
                    return index, reply_index
        return None

    def _top_level_index(self, comment_id: CommentId) -> Optional[int]:
        for index, comment in enumerate(self._comments):
            if comment.id == comment_id:
                return index
        return None

    def _adjust_total(self, delta: int) -> None:
        if self._pagination is not None:
            self._pagination = self._pagination.with_total(
                self._pagination.total + delta
            )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logfire.error(
                    "Comment cache listener failed",
                    error=str(e),
                    _exc_info=sys.exc_info(),
                )
