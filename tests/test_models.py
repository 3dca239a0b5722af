from __future__ import annotations

import json
import unittest

from pydantic import ValidationError

from vynornews.news.formatting import format_published
from vynornews.news.models import NewsImpact, NewsItem, NewsSource, UserPreferences, UserProfile


def _item(item_id: str = "n-0", impact: str = "medium", **overrides) -> NewsItem:
    data = dict(
        id=item_id, title=f"Title {item_id}", summary="Summary", impact=impact,
        category="AI", timestamp="1 hour ago", published_at="2026-10-19T08:00:00+00:00",
    )
    data.update(overrides)
    return NewsItem(**data)


class NewsImpactTests(unittest.TestCase):
    def test_rank_is_ordinal(self) -> None:
        ranks = [impact.rank for impact in (NewsImpact.LOW, NewsImpact.MEDIUM, NewsImpact.HIGH, NewsImpact.CRITICAL)]
        self.assertEqual(ranks, sorted(ranks))
        self.assertEqual(len(set(ranks)), 4)

    def test_only_high_and_critical_are_alerts(self) -> None:
        self.assertFalse(NewsImpact.LOW.is_alert)
        self.assertFalse(NewsImpact.MEDIUM.is_alert)
        self.assertTrue(NewsImpact.HIGH.is_alert)
        self.assertTrue(NewsImpact.CRITICAL.is_alert)


class NewsItemTests(unittest.TestCase):
    def test_serializes_with_camel_case_and_omits_none(self) -> None:
        item = _item(image_url="https://img.example/1.jpg")
        data = json.loads(item.model_dump_json(by_alias=True, exclude_none=True))
        self.assertEqual(data["publishedAt"], "2026-10-19T08:00:00+00:00")
        self.assertEqual(data["imageUrl"], "https://img.example/1.jpg")
        self.assertNotIn("content", data)
        self.assertNotIn("isSaved", data)

    def test_accepts_camel_case_payload(self) -> None:
        item = NewsItem.model_validate({
            "id": "x", "title": "T", "summary": "S", "impact": "critical", "category": "Finance",
            "timestamp": "now", "publishedAt": "2026-10-19T08:00:00Z",
            "sources": [{"title": "Reuters", "uri": "https://reuters.com/a"}],
        })
        self.assertEqual(item.impact, NewsImpact.CRITICAL)
        self.assertEqual(item.sources, (NewsSource(title="Reuters", uri="https://reuters.com/a"),))

    def test_rejects_unknown_impact(self) -> None:
        with self.assertRaises(ValidationError):
            _item(impact="severe")

    def test_items_are_immutable(self) -> None:
        item = _item()
        with self.assertRaises(ValidationError):
            item.title = "changed"

    def test_copy_does_not_touch_original(self) -> None:
        item = _item()
        saved = item.model_copy(update={"is_saved": True})
        self.assertTrue(saved.is_saved)
        self.assertIsNone(item.is_saved)


class UserProfileTests(unittest.TestCase):
    def test_empty_profile_is_logged_out(self) -> None:
        profile = UserProfile.empty()
        self.assertFalse(profile.is_logged_in)
        self.assertEqual(profile.preferences.interests, [])
        self.assertEqual(profile.preferences.alert_level, "medium")

    def test_alert_level_is_restricted(self) -> None:
        with self.assertRaises(ValidationError):
            UserPreferences(alert_level="extreme")

    def test_requires_identity_fields(self) -> None:
        with self.assertRaises(ValidationError):
            UserProfile.model_validate({"foo": 1})


class FormattingTests(unittest.TestCase):
    def test_formats_iso_instant(self) -> None:
        self.assertEqual(format_published("2026-10-19T08:05:00Z"), "19/10/2026 08:05")

    def test_returns_unparseable_text_unchanged(self) -> None:
        self.assertEqual(format_published("yesterday"), "yesterday")
