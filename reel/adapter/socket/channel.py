"""Push channel for live comment events.

One channel per application session. The channel owns its connection state
machine (including bounded reconnection), buffers room joins issued before
the connection is ready, and dispatches typed events to registered callbacks.
"""

import asyncio
import contextlib
import inspect
import sys
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Optional

import logfire
import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from reel.adapter.error import ChannelError
from reel.domain.model.comment import Comment
from reel.domain.model.event import ReactionUpdate, TypingEvent
from reel.domain.service.push_channel import PushChannel, Unregister
from reel.domain.value import ChannelEvent, CommentId, ConnectionState, VideoId

EventHandler = Callable[[Any], Any]
StateListener = Callable[[ConnectionState], None]

RECEIVED_EVENTS = (
    ChannelEvent.COMMENT_ADDED,
    ChannelEvent.COMMENT_UPDATED,
    ChannelEvent.COMMENT_DELETED,
    ChannelEvent.REACTION_UPDATED,
    ChannelEvent.USER_TYPING,
)


def parse_deleted_comment_id(raw: Any) -> CommentId:
    """Extract the comment id from a comment-deleted payload.

    The backend sends the bare id; object payloads are accepted as well.
    """
    if isinstance(raw, str) and raw:
        return CommentId(raw)
    if isinstance(raw, dict):
        value = raw.get("commentId") or raw.get("_id")
        if isinstance(value, str) and value:
            return CommentId(value)
    raise ValueError(f"comment-deleted payload carries no comment id: {raw!r}")


def parse_event(event: ChannelEvent, raw: Any) -> Any:
    """Turn a raw event payload into its typed model.

    Raises:
        ValueError: If the payload does not match the event's contract
    """
    if event in (ChannelEvent.COMMENT_ADDED, ChannelEvent.COMMENT_UPDATED):
        return Comment.model_validate(raw)
    if event == ChannelEvent.COMMENT_DELETED:
        return parse_deleted_comment_id(raw)
    if event == ChannelEvent.REACTION_UPDATED:
        return ReactionUpdate.model_validate(raw)
    if event == ChannelEvent.USER_TYPING:
        return TypingEvent.model_validate(raw)
    raise ValueError(f"Not a received event: {event.value}")


class CommentChannel(PushChannel, ABC):
    """Base class for push channels.

    Holds the connection state machine; subclasses only provide the
    transport (open, close, emit) and call ``_handle_connect``,
    ``_handle_disconnect`` and ``_dispatch`` when the transport reports
    those happenings.
    """

    def __init__(
        self,
        reconnection_attempts: int = 5,
        reconnection_delay: float = 1.0,
        wait_timeout: float = 5.0,
    ) -> None:
        """Initialize channel.

        Args:
            reconnection_attempts: Retries after a failed connect or a drop
                before entering the FAILED state
            reconnection_delay: Fixed delay between retries, in seconds
            wait_timeout: Default budget for wait_for_connection, in seconds
        """
        self.reconnection_attempts = reconnection_attempts
        self.reconnection_delay = reconnection_delay
        self.wait_timeout = wait_timeout

        # Failed attempts since the last successful connect (diagnostics)
        self.reconnect_attempts = 0

        self._state = ConnectionState.DISCONNECTED
        self._connected = asyncio.Event()
        self._pending_rooms: list[VideoId] = []
        self._rooms: list[VideoId] = []
        self._handlers: dict[ChannelEvent, list[EventHandler]] = defaultdict(list)
        self._state_listeners: list[StateListener] = []
        self._reconnect_task: Optional[asyncio.Task] = None
        self._closing = False

    @abstractmethod
    async def _open(self) -> None:
        """Open the transport connection.

        Raises:
            ChannelError: If the connection could not be established
        """
        pass

    @abstractmethod
    async def _close(self) -> None:
        """Close the transport connection."""
        pass

    @abstractmethod
    async def _emit(self, event: ChannelEvent, payload: dict[str, Any]) -> None:
        """Send an event on the open connection."""
        pass

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def pending_rooms(self) -> list[VideoId]:
        return list(self._pending_rooms)

    @property
    def rooms(self) -> list[VideoId]:
        return list(self._rooms)

    async def connect(self) -> None:
        """Connect unless connected or already trying to."""
        if self._state in (ConnectionState.CONNECTED, ConnectionState.CONNECTING):
            logfire.debug("Push channel already connected or connecting", state=self._state.value)
            return
        if self._reconnecting():
            logfire.debug("Push channel reconnection in progress")
            return

        self.reconnect_attempts = 0
        if not await self._attempt():
            self._start_reconnecting()

    async def disconnect(self) -> None:
        """Tear down the connection. Safe to call when already disconnected."""
        self._closing = True
        try:
            task = self._reconnect_task
            self._reconnect_task = None
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            if self._state != ConnectionState.DISCONNECTED:
                await self._close()
        finally:
            self._closing = False
        self._rooms = []
        self._set_state(ConnectionState.DISCONNECTED)
        logfire.info("Push channel disconnected")

    async def join_video_room(self, video_id: VideoId) -> None:
        """Subscribe to a video's room, queueing the join while offline."""
        if self.is_connected:
            if video_id not in self._rooms:
                self._rooms.append(video_id)
            logfire.info("Joining video room", video_id=video_id)
            await self._emit(ChannelEvent.JOIN_VIDEO_ROOM, {"videoId": video_id})
            return

        logfire.info("Push channel not connected, queuing room join", video_id=video_id)
        if video_id not in self._pending_rooms:
            self._pending_rooms.append(video_id)
        if not self._attempt_in_flight():
            await self.connect()

    async def leave_video_room(self, video_id: VideoId) -> None:
        """Unsubscribe from a video's room.

        Emits only when connected; offline, the room is just forgotten so it
        is not joined on the next connect.
        """
        if video_id in self._rooms:
            self._rooms.remove(video_id)
        if video_id in self._pending_rooms:
            self._pending_rooms.remove(video_id)
        if self.is_connected:
            logfire.info("Leaving video room", video_id=video_id)
            await self._emit(ChannelEvent.LEAVE_VIDEO_ROOM, {"videoId": video_id})

    async def emit_typing(self, video_id: VideoId, is_typing: bool) -> None:
        """Best-effort typing indicator; dropped when not connected."""
        if not self.is_connected:
            logfire.debug("Dropping typing indicator while offline", video_id=video_id)
            return
        await self._emit(
            ChannelEvent.TYPING, {"videoId": video_id, "isTyping": is_typing}
        )

    async def wait_for_connection(self, timeout: Optional[float] = None) -> bool:
        """Wait until connected.

        Args:
            timeout: Seconds to wait, defaults to the channel's wait_timeout

        Returns:
            True if connected within the timeout, False otherwise
        """
        if self.is_connected:
            return True
        budget = self.wait_timeout if timeout is None else timeout
        try:
            await asyncio.wait_for(self._connected.wait(), timeout=budget)
        except asyncio.TimeoutError:
            logfire.error("Push channel connection timeout", timeout=budget)
            return False
        return True

    def on_comment_added(self, callback: Callable[[Comment], Any]) -> Unregister:
        return self._register(ChannelEvent.COMMENT_ADDED, callback)

    def on_comment_updated(self, callback: Callable[[Comment], Any]) -> Unregister:
        return self._register(ChannelEvent.COMMENT_UPDATED, callback)

    def on_comment_deleted(self, callback: Callable[[CommentId], Any]) -> Unregister:
        return self._register(ChannelEvent.COMMENT_DELETED, callback)

    def on_reaction_updated(
        self, callback: Callable[[ReactionUpdate], Any]
    ) -> Unregister:
        return self._register(ChannelEvent.REACTION_UPDATED, callback)

    def on_user_typing(self, callback: Callable[[TypingEvent], Any]) -> Unregister:
        return self._register(ChannelEvent.USER_TYPING, callback)

    def handler_count(self, event: ChannelEvent) -> int:
        return len(self._handlers[event])

    def on_state_change(self, listener: StateListener) -> None:
        """Register a listener for connection state transitions, FAILED included."""
        self._state_listeners.append(listener)

    def _register(self, event: ChannelEvent, callback: EventHandler) -> Unregister:
        self._handlers[event].append(callback)

        def unregister() -> None:
            if callback in self._handlers[event]:
                self._handlers[event].remove(callback)

        return unregister

    async def _attempt(self) -> bool:
        self._set_state(ConnectionState.CONNECTING)
        try:
            await self._open()
        except ChannelError as e:
            self.reconnect_attempts += 1
            logfire.error(
                "Push channel connection error",
                error=str(e),
                attempts=self.reconnect_attempts,
            )
            self._set_state(ConnectionState.DISCONNECTED)
            return False
        await self._handle_connect()
        return True

    async def _handle_connect(self) -> None:
        """Mark connected and (re)join every queued or previously joined room."""
        if self._state == ConnectionState.CONNECTED:
            return
        self.reconnect_attempts = 0
        self._set_state(ConnectionState.CONNECTED)
        logfire.info("Push channel connected")

        rooms = list(dict.fromkeys([*self._rooms, *self._pending_rooms]))
        self._pending_rooms = []
        self._rooms = rooms
        for video_id in rooms:
            logfire.info("Joining pending room", video_id=video_id)
            await self._emit(ChannelEvent.JOIN_VIDEO_ROOM, {"videoId": video_id})

    async def _handle_disconnect(self, reason: Optional[str] = None) -> None:
        """Transport reported a drop; reconnect unless we closed it ourselves."""
        if self._closing or self._state != ConnectionState.CONNECTED:
            return
        logfire.warn("Push channel disconnected", reason=reason)
        self._set_state(ConnectionState.DISCONNECTED)
        self.reconnect_attempts = 0
        self._start_reconnecting()

    async def _dispatch(self, event: ChannelEvent, raw: Any) -> None:
        """Parse a received payload and hand it to every registered callback."""
        try:
            payload = parse_event(event, raw)
        except ValueError as e:
            logfire.warn("Dropping malformed push event", event=event.value, error=str(e))
            return

        logfire.debug("Received push event", event=event.value)
        for handler in list(self._handlers[event]):
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logfire.error(
                    "Push event handler failed",
                    event=event.value,
                    error=str(e),
                    _exc_info=sys.exc_info(),
                )

    def _reconnecting(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    def _attempt_in_flight(self) -> bool:
        return self._state == ConnectionState.CONNECTING or self._reconnecting()

    def _start_reconnecting(self) -> None:
        if self._reconnecting():
            return
        self._reconnect_task = asyncio.ensure_future(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        for attempt in range(1, self.reconnection_attempts + 1):
            await asyncio.sleep(self.reconnection_delay)
            logfire.info("Push channel reconnecting", attempt=attempt)
            if await self._attempt():
                logfire.info("Push channel reconnected", attempt=attempt)
                return

        logfire.error(
            "Push channel reconnection failed",
            attempts=self.reconnect_attempts,
        )
        self._set_state(ConnectionState.FAILED)

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        previous = self._state
        self._state = state
        if state == ConnectionState.CONNECTED:
            self._connected.set()
        else:
            self._connected.clear()
        logfire.debug(
            "Push channel state changed", previous=previous.value, state=state.value
        )
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception as e:
                logfire.error(
                    "Push channel state listener failed",
                    error=str(e),
                    _exc_info=sys.exc_info(),
                )


class SocketIOCommentChannel(CommentChannel):
    """Push channel over Socket.IO.

    The library's own reconnection is disabled; retries are driven by the
    base class so that exhaustion surfaces as ConnectionState.FAILED.
    """

    def __init__(
        self,
        url: str,
        socketio_path: str = "socket.io",
        transports: Optional[list[str]] = None,
        headers: Optional[dict[str, str]] = None,
        connect_timeout: float = 20.0,
        client: Optional[socketio.AsyncClient] = None,
        **kwargs: Any,
    ) -> None:
        """Initialize Socket.IO channel.

        Args:
            url: Server URL
            socketio_path: Socket.IO endpoint path
            transports: Transports in preference order
            headers: Extra handshake headers (credentials cookie)
            connect_timeout: Seconds to wait for a connection attempt
            client: Socket.IO client to use (built when omitted)
            **kwargs: Reconnection settings passed to CommentChannel
        """
        super().__init__(**kwargs)
        self.url = url
        self.socketio_path = socketio_path
        self.transports = transports or ["websocket", "polling"]
        self.headers = headers or {}
        self.connect_timeout = connect_timeout
        self.client = client or socketio.AsyncClient(
            reconnection=False, logger=False, engineio_logger=False
        )

        self.client.on("connect", self._on_connect)
        self.client.on("disconnect", self._on_disconnect)
        self.client.on("connect_error", self._on_connect_error)
        for event in RECEIVED_EVENTS:
            self.client.on(event.value, self._dispatcher(event))

    def _dispatcher(self, event: ChannelEvent) -> Callable[..., Any]:
        async def handler(data: Any = None) -> None:
            await self._dispatch(event, data)

        return handler

    async def _open(self) -> None:
        logfire.info("Connecting push channel", url=self.url, transports=self.transports)
        try:
            await self.client.connect(
                self.url,
                headers=self.headers,
                transports=self.transports,
                socketio_path=self.socketio_path,
                wait_timeout=self.connect_timeout,
            )
        except SocketIOConnectionError as e:
            raise ChannelError(f"Socket.IO connection failed: {e}") from e

    async def _close(self) -> None:
        await self.client.disconnect()

    async def _emit(self, event: ChannelEvent, payload: dict[str, Any]) -> None:
        await self.client.emit(event.value, payload)

    async def _on_connect(self) -> None:
        logfire.info("Socket connected", sid=self.client.sid)
        await self._handle_connect()

    async def _on_disconnect(self, reason: Any = None) -> None:
        await self._handle_disconnect(str(reason) if reason is not None else None)

    async def _on_connect_error(self, data: Any = None) -> None:
        logfire.error("Socket connection error", data=data)


class MockCommentChannel(CommentChannel):
    """In-process channel for tests.

    Records emitted events, lets tests deliver server events, and can be made
    to refuse a number of connection attempts or drop an open connection.
    """

    def __init__(self, refuse_connects: int = 0, **kwargs: Any) -> None:
        kwargs.setdefault("reconnection_delay", 0.0)
        super().__init__(**kwargs)
        self.refuse_connects = refuse_connects
        self.open_calls = 0
        self.emitted: list[tuple[ChannelEvent, dict[str, Any]]] = []

    async def _open(self) -> None:
        self.open_calls += 1
        if self.refuse_connects > 0:
            self.refuse_connects -= 1
            raise ChannelError("Mock connection refused")

    async def _close(self) -> None:
        pass

    async def _emit(self, event: ChannelEvent, payload: dict[str, Any]) -> None:
        self.emitted.append((event, payload))

    def emitted_payloads(self, event: ChannelEvent) -> list[dict[str, Any]]:
        return [payload for emitted, payload in self.emitted if emitted == event]

    async def deliver(self, event: ChannelEvent, raw: Any) -> None:
        """Simulate the server sending ``event`` with ``raw`` payload."""
        await self._dispatch(event, raw)

    async def drop(self, reason: str = "transport close") -> None:
        """Simulate the server side closing the connection."""
        await self._handle_disconnect(reason)
