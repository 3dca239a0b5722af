"""Data models for the user session and feed items.

Serialized field names are camelCase (``isLoggedIn``, ``publishedAt``...) so
payloads written by earlier clients decode unchanged.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

AlertLevel = Literal["low", "medium", "high"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NewsImpact(str, Enum):
    """Ordinal impact of a news item: low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _IMPACT_ORDER.index(self)

    @property
    def is_alert(self) -> bool:
        """Whether items of this impact surface in the alerts view."""
        return self.rank >= NewsImpact.HIGH.rank


_IMPACT_ORDER = [NewsImpact.LOW, NewsImpact.MEDIUM, NewsImpact.HIGH, NewsImpact.CRITICAL]


class NewsSource(_CamelModel):
    """Attribution link for a generated summary."""

    model_config = ConfigDict(frozen=True)

    title: str
    uri: str


class NewsItem(_CamelModel):
    """One feed entry. Immutable once fetched."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str
    summary: str
    content: Optional[str] = None
    impact: NewsImpact
    category: str
    timestamp: str  # friendly label like "2 hours ago"
    published_at: str  # ISO-8601
    image_url: Optional[str] = None
    sources: Optional[tuple[NewsSource, ...]] = None
    is_saved: Optional[bool] = None


class UserPreferences(_CamelModel):
    """What the user wants to see."""

    interests: list[str] = []
    alert_level: AlertLevel = "medium"
    company_types: list[str] = []


class UserProfile(_CamelModel):
    """Identity, login flag and preferences of the local user."""

    name: str
    email: str
    role: Optional[str] = ""
    company: Optional[str] = ""
    avatar: Optional[str] = None
    is_logged_in: bool
    preferences: UserPreferences

    @classmethod
    def empty(cls) -> "UserProfile":
        """The logged-out profile used at first launch and after logout."""
        return cls(name="", email="", role="", company="", is_logged_in=False, preferences=UserPreferences())
