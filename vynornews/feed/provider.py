"""LiteLLM-backed feed provider.

Asks a generative model for a page of recent business news on the user's
interests and turns its JSON answer into NewsItem values. Any failure yields
an empty page; the feed engine never sees an exception from here.
"""

import json
import logging
import re
import time
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from ..config.settings import settings
from ..news.models import NewsItem
from ..utils.llm_client import get_completion_async

logger = logging.getLogger(__name__)

IMAGE_URL_TEMPLATE = "https://images.unsplash.com/photo-{photo_id}?q=80&w=800&auto=format&fit=crop"
_IMAGE_BASE_ID = 1550000000000


def extract_json(text: str) -> Optional[Any]:
    """
    Parse JSON out of a model response.

    Handles:
    - Pure JSON response
    - JSON wrapped in markdown code blocks
    - A JSON array embedded in text

    Returns:
        Parsed JSON, or None if parsing fails
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    json_patterns = [
        r"```json\s*([\s\S]*?)\s*```",
        r"```\s*([\s\S]*?)\s*```",
        r"\[[\s\S]*\]",
    ]

    for pattern in json_patterns:
        match = re.search(pattern, text)
        if match:
            try:
                return json.loads(match.group(1) if "```" in pattern else match.group(0))
            except (json.JSONDecodeError, IndexError):
                continue

    return None


def image_url_for(offset: int, index: int) -> str:
    """Stable illustrative image for the index-th item of the page at offset."""
    return IMAGE_URL_TEMPLATE.format(photo_id=_IMAGE_BASE_ID + offset * 10 + index)


class LiteLLMFeedProvider:
    """
    Generates feed pages with a LiteLLM model.

    Implements the ContentProvider contract.
    """

    def __init__(
        self,
        model_id: Optional[str] = None,
        page_size: Optional[int] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
    ):
        """
        Initialize feed provider.

        Args:
            model_id: LiteLLM model identifier (default: settings.feed_model)
            page_size: Items requested per page (default: settings.page_size)
            max_tokens: Response token cap (default: settings.feed_max_tokens)
            temperature: Sampling temperature (default: settings.feed_temperature)
            api_key: Provider key (default: settings.google_api_key)
        """
        self.model_id = model_id or settings.feed_model
        self.page_size = page_size or settings.page_size
        self.max_tokens = max_tokens or settings.feed_max_tokens
        self.temperature = settings.feed_temperature if temperature is None else temperature
        self.api_key = api_key or settings.google_api_key or None

    def build_prompt(self, interests: Sequence[str], offset: int) -> str:
        """Build the generation prompt for one page."""
        skip = ""
        if offset:
            skip = f"\nThese are items {offset + 1} to {offset + self.page_size} of the feed; do not repeat earlier stories."
        return f"""Generate {self.page_size} REAL business news stories from the last 48 hours about: {", ".join(interests)}.{skip}

Respond ONLY with a JSON array (no markdown, no explanation). Each element:
{{
    "id": "unique stable identifier",
    "title": "headline",
    "summary": "two-sentence summary",
    "content": "full analysis, 2-4 paragraphs",
    "impact": "low | medium | high | critical",
    "category": "one of the interests above",
    "timestamp": "relative label, e.g. 2 hours ago",
    "publishedAt": "ISO-8601 instant",
    "sources": [{{"title": "publisher", "uri": "https://..."}}]
}}

The "impact" field MUST be exactly one of: low, medium, high, critical.
"""

    async def fetch_feed_page(self, interests: Sequence[str], offset: int = 0) -> list[NewsItem]:
        """
        Generate one page of feed items.

        Args:
            interests: Interest tags to cover
            offset: Number of items already in the feed

        Returns:
            Valid items of the page; empty on any failure
        """
        logger.info("[PROVIDER] Requesting %d items at offset %d from %s", self.page_size, offset, self.model_id)

        try:
            text = await get_completion_async(
                model=self.model_id,
                messages=[{"role": "user", "content": self.build_prompt(interests, offset)}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                api_key=self.api_key,
            )
        except Exception as e:
            logger.warning("[PROVIDER] Generation failed: %s", e)
            return []

        return self.parse_page(text, offset)

    def parse_page(self, text: str, offset: int) -> list[NewsItem]:
        """
        Convert a model response into NewsItem values.

        Missing ids are filled with ``n-<epoch ms>-<index>`` and every item
        gets an image URL. Entries that fail validation (unknown impact,
        missing fields) are skipped.
        """
        data = extract_json(text)
        # json_object mode sometimes wraps the array: {"news": [...]}
        if isinstance(data, dict):
            data = next((v for v in data.values() if isinstance(v, list)), None)
        if not isinstance(data, list):
            logger.warning("[PROVIDER] Response was not a JSON array (%d chars)", len(text))
            return []

        stamp = int(time.time() * 1000)
        items = []
        for index, raw in enumerate(data):
            if not isinstance(raw, dict):
                continue
            raw = {**raw, "imageUrl": image_url_for(offset, index)}
            if not raw.get("id"):
                raw["id"] = f"n-{stamp}-{index}"
            try:
                items.append(NewsItem.model_validate(raw))
            except ValidationError as e:
                logger.warning("[PROVIDER] Skipping item %d: %s", index, e.errors()[0]["msg"])

        logger.info("[PROVIDER] Parsed %d/%d items", len(items), len(data))
        return items
