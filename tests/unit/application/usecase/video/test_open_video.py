"""Unit tests for OpenVideoCommentsUseCase."""

import pytest

from reel.adapter.error import ApiError
from reel.adapter.socket import CommentChannel
from reel.application.usecase.video import (
    OpenVideoCommentsRequest,
    OpenVideoCommentsUseCase,
)
from reel.domain.repository import CommentRepository
from reel.domain.service import LiveCommentSync
from reel.domain.value import ChannelEvent, ConnectionState
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestOpenVideoComments:
    """Tests for switching the viewer to a video."""

    @pytest.mark.asyncio
    async def test_loads_comments_and_joins_room(self, unit_env):
        # Arrange
        use_case = await unit_env.get(OpenVideoCommentsUseCase)
        repo = await unit_env.get(CommentRepository)
        channel = await unit_env.get(CommentChannel)
        repo.seed("v1", "first")
        repo.seed("v1", "second")

        # Act
        response = await use_case.execute(
            OpenVideoCommentsRequest(video_id="v1", wait_for_channel=True)
        )

        # Assert
        assert [c.content for c in response.comments] == ["first", "second"]
        assert response.pagination.total == 2
        assert response.live is True
        assert response.connection_state == ConnectionState.CONNECTED
        assert channel.rooms == ["v1"]

    @pytest.mark.asyncio
    async def test_switching_videos_leaves_previous_room(self, unit_env):
        use_case = await unit_env.get(OpenVideoCommentsUseCase)
        repo = await unit_env.get(CommentRepository)
        channel = await unit_env.get(CommentChannel)
        repo.seed("v2", "other video")

        await use_case.execute(OpenVideoCommentsRequest(video_id="v1"))
        response = await use_case.execute(OpenVideoCommentsRequest(video_id="v2"))

        assert [c.content for c in response.comments] == ["other video"]
        assert channel.emitted_payloads(ChannelEvent.LEAVE_VIDEO_ROOM) == [
            {"videoId": "v1"}
        ]
        assert channel.rooms == ["v2"]

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates_without_joining(self, unit_env):
        use_case = await unit_env.get(OpenVideoCommentsUseCase)
        repo = await unit_env.get(CommentRepository)
        sync = await unit_env.get(LiveCommentSync)

        async def fail(*args):
            raise ApiError("Video not found", 404)

        repo.find_page = fail

        with pytest.raises(ApiError):
            await use_case.execute(OpenVideoCommentsRequest(video_id="v1"))

        assert sync.video_id is None
