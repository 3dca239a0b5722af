"""Deterministic offline feed provider.

Used when no model credentials are configured. Items are synthetic and
labelled as such.
"""

import asyncio
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Sequence

from ..news.models import NewsImpact, NewsItem
from .provider import image_url_for

_IMPACTS = [NewsImpact.LOW, NewsImpact.MEDIUM, NewsImpact.HIGH, NewsImpact.CRITICAL]


class SimulatedFeedProvider:
    def __init__(self, page_size: int = 5, delay: float = 0.0) -> None:
        self.page_size = page_size
        self.delay = delay

    async def fetch_feed_page(self, interests: Sequence[str], offset: int = 0) -> list[NewsItem]:
        if self.delay:
            await asyncio.sleep(self.delay)
        topics = list(interests) or ["Business"]
        now = datetime.now(timezone.utc)
        items = []
        for index in range(self.page_size):
            position = offset + index
            topic = topics[position % len(topics)]
            digest = hashlib.sha256(f"{topic}:{position}".encode("utf-8")).hexdigest()
            hours = position + 1
            items.append(
                NewsItem(
                    id=f"n-{position}",
                    title=f"[Simulated] {topic} briefing #{position + 1}",
                    summary=f"Simulated placeholder for {topic}. Configure a model API key for real coverage.",
                    impact=_IMPACTS[int(digest[:8], 16) % len(_IMPACTS)],
                    category=topic,
                    timestamp=f"{hours} hour{'s' if hours > 1 else ''} ago",
                    published_at=(now - timedelta(hours=hours)).isoformat(timespec="seconds"),
                    image_url=image_url_for(offset, index),
                )
            )
        return items
