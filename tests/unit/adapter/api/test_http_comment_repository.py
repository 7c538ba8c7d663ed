"""Unit tests for HttpCommentRepository."""

from unittest.mock import AsyncMock

import pytest

from reel.adapter.api import ApiClient, HttpCommentRepository
from reel.domain.error import MalformedResponseError
from reel.domain.value import ReactionType
from tests.conftest import comment_payload


@pytest.fixture
def api_client() -> AsyncMock:
    return AsyncMock(spec=ApiClient)


class TestFindPage:
    @pytest.mark.asyncio
    async def test_requests_page_and_parses(self, api_client):
        # Arrange
        api_client.get.return_value = {
            "comments": [
                comment_payload("c1", replies=[comment_payload("r1", parent_id="c1")]),
                comment_payload("c2"),
            ],
            "pagination": {"page": 1, "limit": 50, "total": 2, "pages": 1, "hasMore": False},
        }
        repository = HttpCommentRepository(api_client)

        # Act
        page = await repository.find_page("v1", 1, 50)

        # Assert
        api_client.get.assert_awaited_once_with(
            "/comments/v1", params={"page": 1, "limit": 50}
        )
        assert [c.id for c in page.comments] == ["c1", "c2"]
        assert page.comments[0].replies[0].id == "r1"
        assert page.pagination.has_more is False

    @pytest.mark.asyncio
    async def test_malformed_page(self, api_client):
        api_client.get.return_value = {"comments": "nope"}
        repository = HttpCommentRepository(api_client)

        with pytest.raises(MalformedResponseError):
            await repository.find_page("v1", 1, 50)


class TestWrites:
    """Tests for create / update / delete / reaction endpoints."""

    @pytest.mark.asyncio
    async def test_create_reply_with_timestamp(self, api_client):
        api_client.post.return_value = {
            "comment": comment_payload("r1", parent_id="c1", timestamp=12.0)
        }
        repository = HttpCommentRepository(api_client)

        comment = await repository.create("v1", "agreed", timestamp=12.0, parent_id="c1")

        api_client.post.assert_awaited_once_with(
            "/comments/v1", {"content": "agreed", "timestamp": 12.0, "parentId": "c1"}
        )
        assert comment.parent_id == "c1"

    @pytest.mark.asyncio
    async def test_create_omits_optional_fields(self, api_client):
        api_client.post.return_value = {"comment": comment_payload("c9")}
        repository = HttpCommentRepository(api_client)

        await repository.create("v1", "hello")

        api_client.post.assert_awaited_once_with("/comments/v1", {"content": "hello"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["_id", "content", "userId"])
    async def test_create_rejects_incomplete_comment(self, api_client, missing):
        payload = comment_payload("c9")
        del payload[missing]
        api_client.post.return_value = {"comment": payload}
        repository = HttpCommentRepository(api_client)

        with pytest.raises(MalformedResponseError) as exc_info:
            await repository.create("v1", "hello")

        assert str(exc_info.value) == "Invalid comment structure received from server"

    @pytest.mark.asyncio
    async def test_response_without_comment_envelope(self, api_client):
        api_client.put.return_value = {"message": "ok"}
        repository = HttpCommentRepository(api_client)

        with pytest.raises(MalformedResponseError):
            await repository.update("c1", "x")

    @pytest.mark.asyncio
    async def test_update(self, api_client):
        api_client.put.return_value = {
            "comment": comment_payload("c1", content="new text", isEdited=True)
        }
        repository = HttpCommentRepository(api_client)

        comment = await repository.update("c1", "new text")

        api_client.put.assert_awaited_once_with("/comments/c1", {"content": "new text"})
        assert comment.is_edited is True

    @pytest.mark.asyncio
    async def test_delete(self, api_client):
        api_client.delete.return_value = {"message": "Comment deleted"}
        repository = HttpCommentRepository(api_client)

        await repository.delete("c1")

        api_client.delete.assert_awaited_once_with("/comments/c1")

    @pytest.mark.asyncio
    async def test_toggle_reaction(self, api_client):
        api_client.post.return_value = {
            "comment": comment_payload(
                "c1", reactions=[{"userId": "u-alice", "type": "heart"}]
            )
        }
        repository = HttpCommentRepository(api_client)

        comment = await repository.toggle_reaction("c1", ReactionType.HEART)

        api_client.post.assert_awaited_once_with(
            "/comments/c1/reaction", {"type": "heart"}
        )
        assert comment.reaction_of("u-alice") == ReactionType.HEART
