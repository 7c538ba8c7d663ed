"""Mock providers for testing."""

from .api import MockApiProvider
from .channel import MockChannelProvider
from .container import build_test_container

__all__ = [
    "MockApiProvider",
    "MockChannelProvider",
    "build_test_container",
]
