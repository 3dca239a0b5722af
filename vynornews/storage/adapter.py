"""Typed persistence over the two storage slots.

Each slot pairs a storage key with a codec. Reads fail soft: anything that
does not decode into the slot's type is reported as absent, so callers only
ever deal with "a valid value" or "first launch".
"""

import logging
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from ..news.models import NewsItem, UserProfile
from .backends import KeyValueBackend, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CodecError(ValueError):
    """Stored text is not a well-formed value for its slot."""


class SlotCodec(Generic[T]):
    """Encode/decode pair for one slot's value type."""

    def __init__(self, type_: Any):
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def encode(self, value: T) -> str:
        return self._adapter.dump_json(value, by_alias=True, exclude_none=True).decode("utf-8")

    def decode(self, text: str) -> T:
        try:
            return self._adapter.validate_json(text)
        except ValidationError as e:
            raise CodecError(f"{e.error_count()} schema error(s): {e.errors()[0]['msg']}") from e


class Slot(str, Enum):
    """Named storage slots. Values are the storage keys."""

    SESSION = "vynornews_user_session"
    SAVED_ITEMS = "vynornews_saved_items"


_CODECS: dict[Slot, SlotCodec] = {
    Slot.SESSION: SlotCodec(UserProfile),
    Slot.SAVED_ITEMS: SlotCodec(list[NewsItem]),
}


class PersistenceAdapter:
    """
    Reads and writes slot values through a key-value backend.

    - load() never raises: corrupt or mismatched payloads come back as None.
    - save() never raises: write failures are logged and dropped, and the
      caller's in-memory state stays authoritative.
    """

    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    def load(self, slot: Slot) -> Optional[Any]:
        """Read and decode a slot. Returns None when absent or malformed."""
        try:
            text = self.backend.get(slot.value)
        except (StorageError, OSError, UnicodeDecodeError) as e:
            logger.warning("[STORAGE] Could not read %s: %s", slot.value, e)
            return None

        if text is None:
            return None

        try:
            return _CODECS[slot].decode(text)
        except CodecError as e:
            logger.warning("[STORAGE] Discarding malformed %s payload: %s", slot.value, e)
            return None

    def save(self, slot: Slot, value: Any) -> None:
        """Encode and write a slot's full value. Failures are swallowed."""
        text = _CODECS[slot].encode(value)
        try:
            self.backend.set(slot.value, text)
        except (StorageError, OSError) as e:
            logger.warning("[STORAGE] Write to %s dropped: %s", slot.value, e)

    def clear(self, slot: Slot) -> None:
        """Remove a slot's stored value."""
        try:
            self.backend.remove(slot.value)
        except (StorageError, OSError) as e:
            logger.warning("[STORAGE] Could not clear %s: %s", slot.value, e)

    def clear_all(self) -> None:
        """Remove every slot."""
        for slot in Slot:
            self.clear(slot)
