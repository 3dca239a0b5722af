"""Tests for feed pagination, de-duplication and fetch serialization."""
from __future__ import annotations

import asyncio
import unittest

from vynornews.feed.engine import FeedEngine, coerce_batch, merge_unique
from vynornews.news.models import NewsItem


def _item(item_id: str, impact: str = "medium") -> NewsItem:
    return NewsItem(
        id=item_id, title=f"Title {item_id}", summary="Summary", impact=impact,
        category="AI", timestamp="1 hour ago", published_at="2026-10-19T08:00:00+00:00",
    )


def _page(*ids: str) -> list[NewsItem]:
    return [_item(i) for i in ids]


class PagedProvider:
    """Returns queued pages in order and records every call."""

    def __init__(self, *pages) -> None:
        self.pages = list(pages)
        self.calls: list[tuple[list[str], int]] = []

    async def fetch_feed_page(self, interests, offset):
        self.calls.append((list(interests), offset))
        page = self.pages.pop(0) if self.pages else []
        if isinstance(page, Exception):
            raise page
        return page


class GatedProvider:
    """Blocks every fetch until release is set."""

    def __init__(self, page) -> None:
        self.page = page
        self.calls = 0
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def fetch_feed_page(self, interests, offset):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return self.page


def _ids(engine: FeedEngine) -> list[str]:
    return [item.id for item in engine.items]


class MergeTests(unittest.TestCase):
    def test_merge_drops_existing_and_repeated_ids(self) -> None:
        merged = merge_unique(_page("a", "b"), _page("b", "c", "c", "d"))
        self.assertEqual([i.id for i in merged], ["a", "b", "c", "d"])

    def test_coerce_batch_skips_invalid_entries(self) -> None:
        raw = [
            _item("ok"),
            {"id": "dict-ok", "title": "T", "summary": "S", "impact": "high", "category": "AI",
             "timestamp": "now", "publishedAt": "2026-10-19T08:00:00Z"},
            {"id": "bad", "title": "T", "summary": "S", "impact": "urgent", "category": "AI",
             "timestamp": "now", "publishedAt": "2026-10-19T08:00:00Z"},
            "not an item",
        ]
        with self.assertLogs("vynornews.feed.engine", level="WARNING"):
            batch = coerce_batch(raw)
        self.assertEqual([i.id for i in batch], ["ok", "dict-ok"])

    def test_coerce_batch_non_sequence_is_empty(self) -> None:
        with self.assertLogs("vynornews.feed.engine", level="WARNING"):
            self.assertEqual(coerce_batch({"items": []}), [])
        self.assertEqual(coerce_batch(None), [])


class FeedEngineTests(unittest.IsolatedAsyncioTestCase):
    async def test_scenario_overlapping_second_page(self) -> None:
        provider = PagedProvider(_page("n-0", "n-1", "n-2", "n-3", "n-4"), _page("n-3", "n-5", "n-6"))
        engine = FeedEngine(provider)

        self.assertTrue(await engine.load_initial(["AI", "Finance"]))
        self.assertTrue(await engine.load_more(["AI", "Finance"]))

        self.assertEqual(_ids(engine), ["n-0", "n-1", "n-2", "n-3", "n-4", "n-5", "n-6"])
        self.assertEqual(provider.calls, [(["AI", "Finance"], 0), (["AI", "Finance"], 5)])

    async def test_sequential_pages_keep_first_seen_order(self) -> None:
        provider = PagedProvider(_page("a", "b"), _page("c", "a"), _page("b", "d", "c"))
        engine = FeedEngine(provider)
        await engine.load_initial(["AI"])
        await engine.load_more(["AI"])
        await engine.load_more(["AI"])
        self.assertEqual(_ids(engine), ["a", "b", "c", "d"])
        self.assertEqual([offset for _, offset in provider.calls], [0, 2, 3])

    async def test_load_initial_replaces_feed(self) -> None:
        provider = PagedProvider(_page("a", "b"), _page("c"), _page("x", "y"))
        engine = FeedEngine(provider)
        await engine.load_initial(["AI"])
        await engine.load_more(["AI"])
        await engine.load_initial(["AI"])
        self.assertEqual(_ids(engine), ["x", "y"])

    async def test_initial_page_is_deduplicated(self) -> None:
        engine = FeedEngine(PagedProvider(_page("a", "a", "b")))
        await engine.load_initial(["AI"])
        self.assertEqual(_ids(engine), ["a", "b"])

    async def test_load_more_requires_login(self) -> None:
        provider = PagedProvider(_page("a"))
        engine = FeedEngine(provider, is_logged_in=lambda: False)
        self.assertFalse(await engine.load_more(["AI"]))
        self.assertEqual(provider.calls, [])
        self.assertFalse(engine.is_loading_more)

    async def test_concurrent_load_more_makes_one_call(self) -> None:
        provider = GatedProvider(_page("a", "b"))
        engine = FeedEngine(provider)

        first = asyncio.create_task(engine.load_more(["AI"]))
        await provider.started.wait()
        self.assertTrue(engine.is_loading_more)
        second = await engine.load_more(["AI"])
        provider.release.set()

        self.assertTrue(await first)
        self.assertFalse(second)
        self.assertEqual(provider.calls, 1)
        self.assertEqual(_ids(engine), ["a", "b"])
        self.assertFalse(engine.is_loading_more)

    async def test_load_initial_blocks_load_more(self) -> None:
        provider = GatedProvider(_page("a"))
        engine = FeedEngine(provider)

        initial = asyncio.create_task(engine.load_initial(["AI"]))
        await provider.started.wait()
        self.assertTrue(engine.is_loading)
        self.assertFalse(await engine.load_more(["AI"]))
        self.assertFalse(await engine.load_initial(["AI"]))
        provider.release.set()
        await initial

        self.assertEqual(provider.calls, 1)
        self.assertFalse(engine.busy)

    async def test_failed_initial_load_yields_empty_feed(self) -> None:
        provider = PagedProvider(_page("a"), RuntimeError("quota"))
        engine = FeedEngine(provider)
        await engine.load_initial(["AI"])
        with self.assertLogs("vynornews.feed.engine", level="WARNING"):
            await engine.load_initial(["AI"])
        self.assertEqual(_ids(engine), [])
        self.assertFalse(engine.is_loading)

    async def test_failed_load_more_leaves_feed_unchanged(self) -> None:
        provider = PagedProvider(_page("a", "b"), ConnectionError("offline"))
        engine = FeedEngine(provider)
        await engine.load_initial(["AI"])
        with self.assertLogs("vynornews.feed.engine", level="WARNING"):
            await engine.load_more(["AI"])
        self.assertEqual(_ids(engine), ["a", "b"])
        self.assertFalse(engine.is_loading_more)

    async def test_reset_discards_in_flight_result(self) -> None:
        provider = GatedProvider(_page("stale"))
        engine = FeedEngine(provider)

        task = asyncio.create_task(engine.load_initial(["AI"]))
        await provider.started.wait()
        engine.reset()
        provider.release.set()

        self.assertFalse(await task)
        self.assertEqual(_ids(engine), [])
        self.assertFalse(engine.busy)

    async def test_fetch_after_reset_is_not_blocked_by_stale_one(self) -> None:
        stale = GatedProvider(_page("stale"))
        engine = FeedEngine(stale)
        task = asyncio.create_task(engine.load_initial(["AI"]))
        await stale.started.wait()
        engine.reset()

        engine.provider = PagedProvider(_page("fresh"))
        self.assertTrue(await engine.load_initial(["AI"]))
        stale.release.set()
        await task
        self.assertEqual(_ids(engine), ["fresh"])

    async def test_result_for_old_interests_is_discarded(self) -> None:
        interests = ["AI"]
        provider = GatedProvider(_page("c"))
        engine = FeedEngine(PagedProvider(_page("a", "b")), current_interests=lambda: interests)
        await engine.load_initial(["AI"])

        engine.provider = provider
        task = asyncio.create_task(engine.load_more(["AI"]))
        await provider.started.wait()
        interests = ["Energy"]
        provider.release.set()

        self.assertFalse(await task)
        self.assertEqual(_ids(engine), ["a", "b"])
        self.assertFalse(engine.is_loading_more)

    async def test_cancelled_initial_load_releases_guard(self) -> None:
        engine = FeedEngine(GatedProvider(_page("never")))
        with self.assertRaises(asyncio.TimeoutError):
            await asyncio.wait_for(engine.load_initial(["AI"]), 0.05)
        self.assertFalse(engine.busy)

        engine.provider = PagedProvider(_page("a", "b"))
        self.assertTrue(await engine.load_initial(["AI"]))
        self.assertEqual(_ids(engine), ["a", "b"])

    async def test_cancelled_load_more_releases_guard(self) -> None:
        engine = FeedEngine(PagedProvider(_page("a")))
        await engine.load_initial(["AI"])

        gated = GatedProvider(_page("never"))
        engine.provider = gated
        task = asyncio.create_task(engine.load_more(["AI"]))
        await gated.started.wait()
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertFalse(engine.is_loading_more)

        engine.provider = PagedProvider(_page("b"))
        self.assertTrue(await engine.load_more(["AI"]))
        self.assertEqual(_ids(engine), ["a", "b"])

    async def test_cancelled_stale_fetch_keeps_newer_flag(self) -> None:
        stale = GatedProvider(_page("stale"))
        engine = FeedEngine(stale)
        old = asyncio.create_task(engine.load_initial(["AI"]))
        await stale.started.wait()
        engine.reset()

        fresh = GatedProvider(_page("fresh"))
        engine.provider = fresh
        new = asyncio.create_task(engine.load_initial(["AI"]))
        await fresh.started.wait()
        old.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await old
        self.assertTrue(engine.is_loading)

        fresh.release.set()
        self.assertTrue(await new)
        self.assertEqual(_ids(engine), ["fresh"])

    async def test_alert_queries(self) -> None:
        page = [_item("a", "low"), _item("b", "critical"), _item("c", "high"), _item("d", "critical")]
        engine = FeedEngine(PagedProvider(page))
        await engine.load_initial(["AI"])
        self.assertEqual([i.id for i in engine.alerts()], ["b", "c", "d"])
        self.assertEqual(engine.critical_count(), 2)
        self.assertEqual(engine.get("c").impact.value, "high")
        self.assertIsNone(engine.get("zzz"))


if __name__ == "__main__":
    unittest.main()
