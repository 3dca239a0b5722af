"""Paginated, de-duplicated news feed.

The engine owns the in-memory feed sequence. Pages come from a
ContentProvider using the current feed length as the offset cursor and are
merged append-only: ids already in the feed are dropped, the rest keep the
order the provider returned them in.

Only one fetch is live at a time. A call made while another is pending is
dropped, not queued. Every fetch carries a FetchToken; if the feed is reset
(logout, new onboarding) or the interests change before the fetch resolves,
its result is discarded instead of being merged into the new state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from pydantic import ValidationError

from ..news.models import NewsItem, NewsImpact
from .base import ContentProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchToken:
    """Identifies the feed state a fetch was issued for."""

    generation: int
    interests: tuple[str, ...]
    offset: int


def coerce_batch(raw: Any) -> list[NewsItem]:
    """
    Turn a provider result into a list of valid items.

    Non-sequence results become an empty batch. Entries that are neither
    NewsItem instances nor dicts that validate as one are skipped.
    """
    if not isinstance(raw, (list, tuple)):
        if raw is not None:
            logger.warning("[FEED] Provider returned %s, expected a list", type(raw).__name__)
        return []

    batch: list[NewsItem] = []
    for entry in raw:
        if isinstance(entry, NewsItem):
            batch.append(entry)
            continue
        if not isinstance(entry, dict):
            logger.warning("[FEED] Skipping non-object feed entry: %r", entry)
            continue
        try:
            batch.append(NewsItem.model_validate(entry))
        except ValidationError as e:
            logger.warning("[FEED] Skipping malformed item %r: %d error(s)", entry.get("id"), e.error_count())
    return batch


def merge_unique(existing: Sequence[NewsItem], batch: Sequence[NewsItem]) -> list[NewsItem]:
    """Append the items of batch whose id is not already present, in order."""
    seen = {item.id for item in existing}
    merged = list(existing)
    for item in batch:
        if item.id in seen:
            continue
        seen.add(item.id)
        merged.append(item)
    return merged


class FeedEngine:
    """
    Fetches and merges pages of news items.

    The engine does not know about sessions directly; the application hands
    it two callables so the login gate and interest tagging follow whatever
    the session store currently reports.
    """

    def __init__(
        self,
        provider: ContentProvider,
        is_logged_in: Optional[Callable[[], bool]] = None,
        current_interests: Optional[Callable[[], Sequence[str]]] = None,
    ):
        """
        Initialize feed engine.

        Args:
            provider: Source of feed pages
            is_logged_in: Login gate for load_more (default: always open)
            current_interests: Interests the feed is currently for. Results
                fetched for a different interest set are discarded. When
                omitted, only resets invalidate a fetch.
        """
        self.provider = provider
        self._is_logged_in = is_logged_in or (lambda: True)
        self._current_interests = current_interests
        self._items: list[NewsItem] = []
        self.is_loading = False
        self.is_loading_more = False
        self.generation = 0

    @property
    def items(self) -> tuple[NewsItem, ...]:
        return tuple(self._items)

    @property
    def busy(self) -> bool:
        """True while any fetch is in flight."""
        return self.is_loading or self.is_loading_more

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> Optional[NewsItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def alerts(self) -> list[NewsItem]:
        """Items with high or critical impact, in feed order."""
        return [item for item in self._items if item.impact.is_alert]

    def critical_count(self) -> int:
        return sum(1 for item in self._items if item.impact == NewsImpact.CRITICAL)

    async def load_initial(self, interests: Sequence[str]) -> bool:
        """
        Fetch the first page and replace the whole feed with it.

        Args:
            interests: Interest tags to query

        Returns:
            True if a result was applied, False if the call was dropped or
            its result was stale
        """
        if self.busy:
            logger.debug("[FEED] load_initial dropped, fetch already in flight")
            return False

        token = self._issue(interests, offset=0)
        self.is_loading = True
        try:
            batch = await self._fetch(token)
        finally:
            # A stale fetch must not clear the flag of the fetch that replaced it
            if token.generation == self.generation:
                self.is_loading = False

        if token.generation != self.generation:
            logger.info("[FEED] Discarding stale initial page (generation %d)", token.generation)
            return False
        if not self._interests_match(token):
            logger.info("[FEED] Discarding initial page fetched for %s", list(token.interests))
            return False

        self._items = merge_unique([], batch)
        logger.info("[FEED] Loaded %d items for %s", len(self._items), ", ".join(token.interests))
        return True

    async def load_more(self, interests: Sequence[str]) -> bool:
        """
        Fetch the next page and append its unseen items.

        No-op while another fetch is in flight or when the session is not
        logged in.

        Args:
            interests: Interest tags to query

        Returns:
            True if a result was merged
        """
        if self.busy or not self._is_logged_in():
            logger.debug("[FEED] load_more dropped (busy=%s)", self.busy)
            return False

        token = self._issue(interests, offset=len(self._items))
        self.is_loading_more = True
        try:
            batch = await self._fetch(token)
        finally:
            if token.generation == self.generation:
                self.is_loading_more = False

        if token.generation != self.generation:
            logger.info("[FEED] Discarding stale page at offset %d", token.offset)
            return False
        if not self._interests_match(token):
            logger.info("[FEED] Discarding page fetched for %s", list(token.interests))
            return False

        before = len(self._items)
        self._items = merge_unique(self._items, batch)
        logger.info(
            "[FEED] Merged page at offset %d: %d new, %d duplicate",
            token.offset,
            len(self._items) - before,
            len(batch) - (len(self._items) - before),
        )
        return True

    def reset(self) -> None:
        """Empty the feed and invalidate any fetch still in flight."""
        self.generation += 1
        self._items = []
        self.is_loading = False
        self.is_loading_more = False

    def _issue(self, interests: Sequence[str], offset: int) -> FetchToken:
        return FetchToken(generation=self.generation, interests=tuple(interests), offset=offset)

    def _interests_match(self, token: FetchToken) -> bool:
        if self._current_interests is None:
            return True
        return tuple(self._current_interests()) == token.interests

    async def _fetch(self, token: FetchToken) -> list[NewsItem]:
        try:
            raw = await self.provider.fetch_feed_page(list(token.interests), token.offset)
        except Exception as e:
            # Provider failures degrade to an empty page
            logger.warning("[FEED] Provider failed at offset %d: %s", token.offset, e)
            return []
        return coerce_batch(raw)
