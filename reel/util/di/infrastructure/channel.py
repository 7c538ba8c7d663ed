"""Push channel infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide

from reel.adapter.socket import CommentChannel, SocketIOCommentChannel
from reel.config import ApiSettings, ChannelSettings
from reel.util.di.base import ProviderBase


class ChannelProvider(ProviderBase):
    """Push channel component base."""

    __mock_component__ = "channel"


class ProdChannelProvider(ChannelProvider):
    """Production push channel provider using Socket.IO."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_channel(
        self, channel_settings: ChannelSettings, api_settings: ApiSettings
    ) -> AsyncIterator[CommentChannel]:
        """Provide the application-wide push channel.

        The handshake carries the same session cookie as REST calls. The
        channel is disconnected when the container closes.
        """
        headers = {}
        if api_settings.auth_token:
            headers["Cookie"] = f"{api_settings.auth_cookie_name}={api_settings.auth_token}"

        channel = SocketIOCommentChannel(
            url=channel_settings.url,
            socketio_path=channel_settings.socketio_path,
            transports=list(channel_settings.transports),
            headers=headers,
            connect_timeout=channel_settings.connect_timeout,
            reconnection_attempts=channel_settings.reconnection_attempts,
            reconnection_delay=channel_settings.reconnection_delay,
            wait_timeout=channel_settings.wait_timeout,
        )
        try:
            yield channel
        finally:
            await channel.disconnect()
