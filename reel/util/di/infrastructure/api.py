"""REST API infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import httpx
import logfire

from reel.adapter.api import ApiClient, HttpCommentRepository
from reel.config import ApiSettings
from reel.domain.repository import CommentRepository
from reel.util.di.base import ProviderBase
from reel.util.error import ConfigurationError
from reel.util.observability import instrument_httpx


class ApiProvider(ProviderBase):
    """REST API component base."""

    __mock_component__ = "api"


class ProdApiProvider(ApiProvider):
    """Production REST API provider."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_api_client(self, api_settings: ApiSettings) -> AsyncIterator[ApiClient]:
        """Provide the shared API client, closed with the container.

        Raises:
            ConfigurationError: If the base URL is not an absolute http(s) URL
        """
        url = httpx.URL(api_settings.base_url)
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(
                f"API base URL must be an absolute http(s) URL: {api_settings.base_url}"
            )

        instrument_httpx()
        client = ApiClient(
            base_url=api_settings.base_url,
            auth_token=api_settings.auth_token,
            auth_cookie_name=api_settings.auth_cookie_name,
            connect_timeout=api_settings.connect_timeout,
        )
        try:
            yield client
        finally:
            await client.aclose()
            logfire.info("API client closed")

    @provide(scope=Scope.REQUEST)
    def get_comment_repository(self, client: ApiClient) -> CommentRepository:
        """Provide Comment repository."""
        return HttpCommentRepository(client)
