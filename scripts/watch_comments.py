#!/usr/bin/env python3
"""Follow a video's comments and log live changes until interrupted.

Usage:
    API__AUTH_TOKEN=... python scripts/watch_comments.py <video_id>
"""

import asyncio
import sys

import logfire

from reel.application.usecase.video import (
    CloseVideoCommentsRequest,
    CloseVideoCommentsUseCase,
    OpenVideoCommentsRequest,
    OpenVideoCommentsUseCase,
)
from reel.config import Settings
from reel.domain.service import CommentService
from reel.interface.format import format_timestamp
from reel.util.di.container import create_container
from reel.util.logging import setup_logging
from reel.util.observability import configure_logfire


async def watch(video_id: str) -> None:
    container = create_container()
    try:
        async with container() as request_container:
            open_video = await request_container.get(OpenVideoCommentsUseCase)
            close_video = await request_container.get(CloseVideoCommentsUseCase)
            service = await request_container.get(CommentService)

            response = await open_video.execute(
                OpenVideoCommentsRequest(video_id=video_id, wait_for_channel=True)
            )
            for comment in response.comments:
                at = (
                    format_timestamp(comment.timestamp)
                    if comment.timestamp is not None
                    else "-"
                )
                logfire.info(
                    "Comment",
                    at=at,
                    author=comment.author.name,
                    content=comment.content,
                    replies=len(comment.replies),
                )

            service.subscribe(
                lambda: logfire.info(
                    "Comments changed",
                    count=len(service.comments),
                    total=service.pagination.total if service.pagination else None,
                )
            )
            logfire.info("Watching comments", video_id=video_id, live=response.live)

            try:
                await asyncio.Event().wait()
            finally:
                await close_video.execute(CloseVideoCommentsRequest(video_id=video_id))
    finally:
        await container.close()


def main() -> int:
    if len(sys.argv) != 2:
        print(__doc__)
        return 2

    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)

    try:
        asyncio.run(watch(sys.argv[1]))
    except KeyboardInterrupt:
        logfire.info("Stopped watching")
    except Exception as e:
        logfire.error(
            "Watching comments failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
