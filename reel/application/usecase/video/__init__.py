"""Video comments use cases."""

from .close_video import (
    CloseVideoCommentsRequest,
    CloseVideoCommentsResponse,
    CloseVideoCommentsUseCase,
)
from .open_video import (
    OpenVideoCommentsRequest,
    OpenVideoCommentsResponse,
    OpenVideoCommentsUseCase,
)

__all__ = [
    "CloseVideoCommentsRequest",
    "CloseVideoCommentsResponse",
    "CloseVideoCommentsUseCase",
    "OpenVideoCommentsRequest",
    "OpenVideoCommentsResponse",
    "OpenVideoCommentsUseCase",
]
