"""Cancellation, timeouts and per-entity ordering for outbound requests."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import logfire

from reel.domain.error import RequestCancelledError, RequestTimeoutError

T = TypeVar("T")


@dataclass(frozen=True)
class RequestKey:
    """Identity of a request: the operation and the entity it targets."""

    operation: str
    entity_id: Optional[str] = None

    def __str__(self) -> str:
        if self.entity_id is None:
            return self.operation
        return f"{self.operation}:{self.entity_id}"


class _EntityLock:
    """FIFO lock shared by every request touching one entity."""

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class RequestScheduler:
    """Runs requests with three guarantees.

    - A new request for a key that is still in flight cancels the older one;
      the older caller gets RequestCancelledError.
    - Requests that name an entity run one at a time per entity, in the
      order they were issued.
    - Each request is bounded by a timeout and raises RequestTimeoutError
      instead of hanging.
    """

    def __init__(self, timeout: float) -> None:
        """Initialize request scheduler.

        Args:
            timeout: Seconds a single request may take, excluding time spent
                waiting for an earlier request on the same entity
        """
        self.timeout = timeout
        self._in_flight: dict[RequestKey, asyncio.Task] = {}
        self._entity_locks: dict[str, _EntityLock] = {}

    def in_flight(self, key: RequestKey) -> bool:
        task = self._in_flight.get(key)
        return task is not None and not task.done()

    async def run(
        self,
        key: RequestKey,
        call: Callable[[], Awaitable[T]],
        entity_id: Optional[str] = None,
        supersede: bool = True,
    ) -> T:
        """Run ``call`` under ``key``.

        Args:
            key: Request identity used for supersession
            call: Factory producing the request coroutine
            entity_id: Entity to serialize on, if any
            supersede: Cancel an in-flight request with the same key

        Returns:
            Result of the call

        Raises:
            RequestCancelledError: If a newer request for the same key superseded this one
            RequestTimeoutError: If the call exceeded the timeout
        """
        previous = self._in_flight.get(key)
        if supersede and previous is not None and not previous.done():
            logfire.debug("Superseding in-flight request", key=str(key))
            previous.cancel()

        task = asyncio.ensure_future(self._execute(key, call, entity_id))
        self._in_flight[key] = task

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # Our own caller was cancelled; take the request down with it
            task.cancel()
            raise
        finally:
            if self._in_flight.get(key) is task and task.done():
                del self._in_flight[key]

        if task.cancelled():
            raise RequestCancelledError(str(key))
        return task.result()

    async def _execute(
        self,
        key: RequestKey,
        call: Callable[[], Awaitable[T]],
        entity_id: Optional[str],
    ) -> T:
        if entity_id is None:
            return await self._with_timeout(key, call)

        entry = self._entity_locks.setdefault(entity_id, _EntityLock())
        entry.users += 1
        try:
            async with entry.lock:
                return await self._with_timeout(key, call)
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._entity_locks.pop(entity_id, None)

    async def _with_timeout(self, key: RequestKey, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(call(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logfire.warn("Request timed out", key=str(key), timeout=self.timeout)
            raise RequestTimeoutError(str(key), self.timeout)
