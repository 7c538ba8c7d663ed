"""Infrastructure layer errors."""

from reel.domain.error import RemoteError


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class ProviderError(AdapterError):
    """External provider error."""

    pass


class ApiError(ProviderError, RemoteError):
    """REST call failed (transport error or non-2xx status).

    ``server_message`` holds the backend's ``message`` field verbatim when the
    error body carried one.
    """

    def __init__(
        self,
        server_message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.server_message = server_message
        self.status_code = status_code
        if server_message:
            detail = server_message
        elif status_code is not None:
            detail = f"HTTP error! status: {status_code}"
        else:
            detail = "Network error"
        super().__init__(detail)


class ChannelError(ProviderError):
    """Push channel could not be opened."""

    pass
