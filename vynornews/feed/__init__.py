"""Feed fetching and merging."""

from .base import ContentProvider
from .engine import FeedEngine, FetchToken
from .provider import LiteLLMFeedProvider
from .simulated import SimulatedFeedProvider

__all__ = [
    "ContentProvider",
    "FeedEngine",
    "FetchToken",
    "LiteLLMFeedProvider",
    "SimulatedFeedProvider",
]
