"""Bookmarked items, persisted independently of the feed."""

import logging

from ..news.models import NewsItem
from ..storage.adapter import PersistenceAdapter, Slot

logger = logging.getLogger(__name__)


class SavedItemsStore:
    """
    Ordered collection of saved items keyed by id.

    Holds its own copies of the items (flagged ``is_saved``), so refreshing
    the feed never drops a bookmark. Every mutation rewrites the whole slot.
    """

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter
        self._items: list[NewsItem] = []

    @property
    def items(self) -> tuple[NewsItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def hydrate(self) -> None:
        """Load the saved collection from storage (empty when absent)."""
        self._items = list(self.adapter.load(Slot.SAVED_ITEMS) or [])
        logger.info("[SAVED] Hydrated %d saved items", len(self._items))

    def is_saved(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self._items)

    def ids(self) -> list[str]:
        return [item.id for item in self._items]

    def toggle(self, item: NewsItem) -> bool:
        """
        Save the item, or unsave it if its id is already present.

        Args:
            item: Feed item to toggle

        Returns:
            True if the item is saved after the call
        """
        if self.is_saved(item.id):
            self._items = [saved for saved in self._items if saved.id != item.id]
            saved_now = False
        else:
            self._items.append(item.model_copy(update={"is_saved": True}))
            saved_now = True

        self.adapter.save(Slot.SAVED_ITEMS, self._items)
        return saved_now

    def reset(self) -> None:
        """Drop the in-memory collection. Storage is cleared by the caller."""
        self._items = []
