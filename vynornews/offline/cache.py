"""Offline asset cache.

Serves the app shell when the network is unavailable. Cached responses are
returned immediately while a background request refreshes them; uncached
paths go to the network; when both miss, the cached root document is served.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import httpx

from ..config.settings import settings

logger = logging.getLogger(__name__)

ROOT_PATH = "/"


@dataclass(frozen=True)
class CachedResponse:
    """A stored copy of a successful response."""

    path: str
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_response(cls, path: str, response: httpx.Response) -> "CachedResponse":
        return cls(
            path=path,
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
        )


class AssetCache:
    """
    Named cache of app-shell assets.

    Use as an async context manager, or call ``aclose()`` when done, to
    release the HTTP client.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        bootstrap: Optional[Sequence[str]] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize asset cache.

        Args:
            name: Cache name (default: settings.cache_name)
            bootstrap: Paths fetched by install() (default: settings.bootstrap_assets)
            base_url: Origin the paths are relative to (default: settings.asset_base_url)
            client: HTTP client to use; one is created when omitted
        """
        self.name = name or settings.cache_name
        self.bootstrap = list(bootstrap if bootstrap is not None else settings.bootstrap_assets)
        self.client = client or httpx.AsyncClient(
            base_url=base_url or settings.asset_base_url, follow_redirects=True, timeout=10.0
        )
        self._entries: dict[str, CachedResponse] = {}
        self._updates: set[asyncio.Task] = set()

    async def __aenter__(self) -> "AssetCache":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def match(self, path: str) -> Optional[CachedResponse]:
        return self._entries.get(path)

    def put(self, path: str, response: httpx.Response) -> CachedResponse:
        entry = CachedResponse.from_response(path, response)
        self._entries[path] = entry
        return entry

    async def install(self) -> None:
        """
        Fetch and store every bootstrap asset.

        All-or-nothing: if any asset fails, nothing is stored.

        Raises:
            httpx.HTTPError: If an asset cannot be fetched
        """
        tasks = [asyncio.create_task(self._get(path)) for path in self.bootstrap]
        try:
            responses = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        for path, response in zip(self.bootstrap, responses):
            self.put(path, response)
        logger.info("[CACHE] Installed %d assets into %s", len(responses), self.name)

    async def fetch(self, path: str) -> Optional[CachedResponse]:
        """
        Serve a path, cache first.

        Returns:
            The cached or freshly fetched response, the cached root document
            when both miss, or None when even that is unavailable
        """
        cached = self.match(path)
        if cached is not None:
            task = asyncio.create_task(self._update(path))
            self._updates.add(task)
            task.add_done_callback(self._updates.discard)
            return cached

        try:
            response = await self._get(path)
        except httpx.HTTPError as e:
            logger.info("[CACHE] Network miss for %s (%s), serving root", path, e)
            return self.match(ROOT_PATH)
        return self.put(path, response)

    async def drain(self) -> None:
        """Wait for background refreshes started by fetch()."""
        if self._updates:
            await asyncio.gather(*list(self._updates))

    async def aclose(self) -> None:
        await self.drain()
        await self.client.aclose()

    async def _update(self, path: str) -> None:
        try:
            response = await self._get(path)
        except httpx.HTTPError as e:
            logger.debug("[CACHE] Background refresh of %s failed: %s", path, e)
            return
        self.put(path, response)

    async def _get(self, path: str) -> httpx.Response:
        response = await self.client.get(path)
        response.raise_for_status()
        return response
