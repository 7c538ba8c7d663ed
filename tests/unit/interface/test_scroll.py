"""Unit tests for InfiniteScrollTrigger."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from reel.adapter.error import ApiError
from reel.domain.model.comment import Pagination
from reel.domain.service import CommentService
from reel.interface.scroll import InfiniteScrollTrigger


def service_state(has_more=True, is_loading=False, is_loading_more=False) -> MagicMock:
    service = MagicMock(spec=CommentService)
    service.is_loading = is_loading
    service.is_loading_more = is_loading_more
    service.pagination = Pagination(
        page=1, limit=50, total=120 if has_more else 10, pages=3 if has_more else 1
    )
    service.load_more_comments = AsyncMock()
    return service


class TestInfiniteScrollTrigger:
    """Tests for the visibility gate in front of load_more_comments."""

    @pytest.mark.asyncio
    async def test_visible_sentinel_loads_more(self):
        service = service_state()
        trigger = InfiniteScrollTrigger(service, "v1")

        assert await trigger.on_visibility_change(0.5) is True

        service.load_more_comments.assert_awaited_once_with("v1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("ratio", "state"),
        [
            (0.05, {}),
            (1.0, {"has_more": False}),
            (1.0, {"is_loading": True}),
            (1.0, {"is_loading_more": True}),
        ],
    )
    async def test_gated(self, ratio, state):
        service = service_state(**state)
        trigger = InfiniteScrollTrigger(service, "v1")

        assert await trigger.on_visibility_change(ratio) is False

        service.load_more_comments.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_threshold_is_inclusive(self):
        service = service_state()
        trigger = InfiniteScrollTrigger(service, "v1", threshold=0.1)

        assert await trigger.on_visibility_change(0.1) is True

    @pytest.mark.asyncio
    async def test_nothing_loaded_yet(self):
        service = service_state()
        service.pagination = None
        trigger = InfiniteScrollTrigger(service, "v1")

        assert await trigger.on_visibility_change(1.0) is False

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self):
        service = service_state()
        service.load_more_comments.side_effect = ApiError(status_code=500)
        trigger = InfiniteScrollTrigger(service, "v1")

        assert await trigger.on_visibility_change(1.0) is True
