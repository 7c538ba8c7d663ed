"""Unit tests for RequestScheduler."""

import asyncio

import pytest

from reel.domain.error import RequestCancelledError, RequestTimeoutError
from reel.domain.service import RequestKey, RequestScheduler


class TestRequestKey:
    def test_str(self):
        assert str(RequestKey("fetch")) == "fetch"
        assert str(RequestKey("update", "c1")) == "update:c1"


class TestSupersession:
    """Tests for cancelling in-flight requests with the same key."""

    @pytest.mark.asyncio
    async def test_newer_request_cancels_older(self):
        # Arrange
        scheduler = RequestScheduler(timeout=5)
        key = RequestKey("fetch")
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "old"

        async def fast():
            return "new"

        # Act
        older = asyncio.ensure_future(scheduler.run(key, slow))
        await asyncio.sleep(0)
        newer = await scheduler.run(key, fast)

        # Assert
        assert newer == "new"
        with pytest.raises(RequestCancelledError):
            await older
        assert not scheduler.in_flight(key)

    @pytest.mark.asyncio
    async def test_without_supersede_both_complete(self):
        scheduler = RequestScheduler(timeout=5)
        key = RequestKey("add", "v1")

        async def call(value):
            await asyncio.sleep(0.01)
            return value

        results = await asyncio.gather(
            scheduler.run(key, lambda: call(1), supersede=False),
            scheduler.run(key, lambda: call(2), supersede=False),
        )

        assert results == [1, 2]

    @pytest.mark.asyncio
    async def test_different_keys_do_not_interfere(self):
        scheduler = RequestScheduler(timeout=5)

        async def call(value):
            await asyncio.sleep(0.01)
            return value

        results = await asyncio.gather(
            scheduler.run(RequestKey("update", "c1"), lambda: call("a")),
            scheduler.run(RequestKey("update", "c2"), lambda: call("b")),
        )

        assert results == ["a", "b"]

    @pytest.mark.asyncio
    async def test_cancelling_caller_cancels_request(self):
        scheduler = RequestScheduler(timeout=5)
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def call():
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        caller = asyncio.ensure_future(scheduler.run(RequestKey("fetch"), call))
        await started.wait()
        caller.cancel()

        with pytest.raises(asyncio.CancelledError):
            await caller
        await asyncio.wait_for(cancelled.wait(), timeout=1)


class TestTimeout:
    @pytest.mark.asyncio
    async def test_slow_request_times_out(self):
        scheduler = RequestScheduler(timeout=0.01)

        async def hang():
            await asyncio.sleep(10)

        with pytest.raises(RequestTimeoutError) as exc_info:
            await scheduler.run(RequestKey("fetch"), hang)

        assert str(exc_info.value) == "Request timed out"
        assert exc_info.value.operation == "fetch"

    @pytest.mark.asyncio
    async def test_errors_propagate_unchanged(self):
        scheduler = RequestScheduler(timeout=5)

        async def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            await scheduler.run(RequestKey("fetch"), fail)


class TestEntityOrdering:
    """Tests for one-at-a-time execution per entity."""

    @pytest.mark.asyncio
    async def test_requests_on_same_entity_run_in_issue_order(self):
        # Arrange
        scheduler = RequestScheduler(timeout=5)
        log = []

        async def op(name, delay):
            log.append(f"start {name}")
            await asyncio.sleep(delay)
            log.append(f"end {name}")
            return name

        # Act
        results = await asyncio.gather(
            scheduler.run(RequestKey("update", "c1"), lambda: op("update", 0.02), entity_id="c1"),
            scheduler.run(RequestKey("reaction", "c1"), lambda: op("reaction", 0), entity_id="c1"),
            scheduler.run(RequestKey("delete", "c1"), lambda: op("delete", 0), entity_id="c1"),
        )

        # Assert
        assert results == ["update", "reaction", "delete"]
        assert log == [
            "start update",
            "end update",
            "start reaction",
            "end reaction",
            "start delete",
            "end delete",
        ]

    @pytest.mark.asyncio
    async def test_entity_lock_released_after_failure(self):
        scheduler = RequestScheduler(timeout=5)

        async def fail():
            raise ValueError("boom")

        async def ok():
            return "ok"

        with pytest.raises(ValueError):
            await scheduler.run(RequestKey("update", "c1"), fail, entity_id="c1")
        result = await scheduler.run(RequestKey("delete", "c1"), ok, entity_id="c1")

        assert result == "ok"
        assert scheduler._entity_locks == {}
