"""Durable storage for the session and saved-items slots."""

from .adapter import CodecError, PersistenceAdapter, Slot, SlotCodec
from .backends import FileBackend, KeyValueBackend, MemoryBackend, StorageError, StorageQuotaExceeded

__all__ = [
    "CodecError",
    "PersistenceAdapter",
    "Slot",
    "SlotCodec",
    "FileBackend",
    "KeyValueBackend",
    "MemoryBackend",
    "StorageError",
    "StorageQuotaExceeded",
]
