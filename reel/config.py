"""Application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseModel):
    """REST API configuration."""

    # Base URL for every REST call (comments live under /comments)
    base_url: str = "http://localhost:5000/api"

    # Fixed page size for top-level comment pages
    page_size: int = Field(default=50, ge=1)

    # Upper bound for a single request, enforced by the request scheduler
    request_timeout: float = Field(default=15.0, gt=0)

    # TCP connect timeout handed to httpx
    connect_timeout: float = Field(default=10.0, gt=0)

    # Cookie-based credentials (the backend reads the session from this cookie)
    auth_cookie_name: str = "token"
    auth_token: str | None = None


class ChannelSettings(BaseModel):
    """Push channel (Socket.IO) configuration."""

    url: str = "http://localhost:5000"
    socketio_path: str = "socket.io"
    transports: list[Literal["websocket", "polling"]] = ["websocket", "polling"]

    # Reconnection policy: bounded attempts with a fixed delay
    reconnection_attempts: int = Field(default=5, ge=0)
    reconnection_delay: float = Field(default=1.0, ge=0)

    # Connection-level timeout for a single connection attempt
    connect_timeout: float = Field(default=20.0, gt=0)

    # Default budget for wait_for_connection()
    wait_timeout: float = Field(default=5.0, ge=0)


class SessionSettings(BaseModel):
    """Identity of the signed-in user, used to filter own typing events."""

    current_user_id: str | None = None


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # If None, will auto-determine: sends if token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Client settings.

    Set environment variables to override, nested values use ``__``:

        API__BASE_URL=https://review.example.com/api
        API__AUTH_TOKEN=...
        CHANNEL__URL=https://review.example.com
        CHANNEL__RECONNECTION_ATTEMPTS=10
        SESSION__CURRENT_USER_ID=64f0...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows API__BASE_URL syntax
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    api: ApiSettings = ApiSettings()
    channel: ChannelSettings = ChannelSettings()
    session: SessionSettings = SessionSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
