"""Content provider contract consumed by the feed engine."""

from typing import Protocol, Sequence

from ..news.models import NewsItem


class ContentProvider(Protocol):
    """
    Source of feed pages.

    Implementations return up to one page of items for the given interests,
    starting at ``offset`` items into the feed. They may raise; the engine
    treats any failure as an empty page.
    """

    async def fetch_feed_page(self, interests: Sequence[str], offset: int) -> Sequence[NewsItem]:
        ...
