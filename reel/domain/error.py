"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class MalformedResponseError(ValidationError):
    """Raised when the server returns an entity missing required fields."""

    def __init__(self, message: str = "Invalid comment structure received from server"):
        super().__init__(message)


class RequestTimeoutError(DomainError):
    """Raised when a request does not complete within its time budget."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__("Request timed out")


class RequestCancelledError(DomainError):
    """Raised to the caller of a request superseded by a newer one for the same key."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Request superseded: {operation}")


class RemoteError(DomainError):
    """Raised when the backend rejects or fails a request.

    ``server_message`` is the backend's own explanation, when it sent one.
    """

    server_message: str | None = None
