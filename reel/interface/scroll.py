"""Infinite scroll trigger for the comment list."""

import sys

import logfire

from reel.domain.error import RequestCancelledError
from reel.domain.service import CommentService
from reel.domain.value import VideoId


class InfiniteScrollTrigger:
    """Loads the next page when the end-of-list sentinel becomes visible.

    Wire ``on_visibility_change`` to whatever reports how much of the
    sentinel is on screen (an intersection observer, a terminal pager).
    """

    def __init__(
        self, service: CommentService, video_id: VideoId, threshold: float = 0.1
    ) -> None:
        """Initialize scroll trigger.

        Args:
            service: Comment service owning the list
            video_id: Video whose comments are listed
            threshold: Visible fraction of the sentinel that triggers a load
        """
        self.service = service
        self.video_id = video_id
        self.threshold = threshold

    def should_load(self, intersection_ratio: float) -> bool:
        pagination = self.service.pagination
        return (
            intersection_ratio >= self.threshold
            and not self.service.is_loading
            and not self.service.is_loading_more
            and pagination is not None
            and pagination.has_more
        )

    async def on_visibility_change(self, intersection_ratio: float) -> bool:
        """Load more comments if the sentinel is visible enough.

        Failures are already recorded on the service for display, so they are
        logged here and not raised.

        Returns:
            True if a page was requested
        """
        if not self.should_load(intersection_ratio):
            return False
        try:
            await self.service.load_more_comments(self.video_id)
        except RequestCancelledError:
            logfire.debug("Load more superseded", video_id=self.video_id)
        except Exception as e:
            logfire.error(
                "Failed to load more comments",
                video_id=self.video_id,
                error=str(e),
                _exc_info=sys.exc_info(),
            )
        return True
