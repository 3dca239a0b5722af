"""Key-value storage backends.

The client only needs get/set/remove with last-write-wins semantics, the
same capability a browser's local storage offers.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A write could not be completed (storage disabled, I/O failure...)."""


class StorageQuotaExceeded(StorageError):
    """A write would exceed the backend's quota."""


class KeyValueBackend(ABC):
    """Durable string storage addressed by key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text, or None when the key is missing."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Missing keys are ignored."""


class MemoryBackend(KeyValueBackend):
    """
    Process-local storage.

    Used by tests and by sessions that should not outlive the process.
    A quota and a disabled flag reproduce the write failures a real
    browser storage can raise.
    """

    def __init__(self, quota_bytes: Optional[int] = None, disabled: bool = False):
        self.data: dict[str, str] = {}
        self.quota_bytes = quota_bytes
        self.disabled = disabled

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.disabled:
            raise StorageError("storage is disabled")
        if self.quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self.data.items() if k != key)
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaExceeded(f"quota of {self.quota_bytes} bytes exceeded writing {key!r}")
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileBackend(KeyValueBackend):
    """Stores each key as one UTF-8 file inside a directory."""

    def __init__(self, directory: Path):
        """
        Initialize file backend.

        Args:
            directory: Directory holding the key files (created on first write)
        """
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write to a sibling temp file first so readers never see a half-written value
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self._path(key))
        except OSError:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        logger.debug("[STORAGE] Removed %s", key)
