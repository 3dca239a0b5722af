"""Onboarding options loaded from YAML configuration."""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml

from ..config.settings import settings
from ..news.models import UserPreferences

logger = logging.getLogger(__name__)


@dataclass
class OnboardingCatalog:
    """Choices offered when the user sets up preferences."""

    interests: list[str]
    company_types: list[str] = field(default_factory=list)
    alert_levels: list[str] = field(default_factory=lambda: ["low", "medium", "high"])
    defaults: UserPreferences = field(default_factory=UserPreferences)

    def default_preferences(self) -> UserPreferences:
        return self.defaults.model_copy(deep=True)


def load_catalog(path: Optional[Path] = None) -> OnboardingCatalog:
    """
    Load onboarding options from YAML.

    Args:
        path: Path to onboarding.yaml (default: settings.onboarding_file)

    Returns:
        OnboardingCatalog with the configured choices and defaults
    """
    path = path or settings.onboarding_file
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)["onboarding"]

    defaults = raw.get("defaults", {})
    catalog = OnboardingCatalog(
        interests=raw["interests"],
        company_types=raw.get("company_types", []),
        alert_levels=raw.get("alert_levels", ["low", "medium", "high"]),
        defaults=UserPreferences(
            interests=defaults.get("interests", []),
            alert_level=defaults.get("alert_level", "medium"),
            company_types=defaults.get("company_types", []),
        ),
    )
    logger.debug("[ONBOARDING] Loaded %d interest options from %s", len(catalog.interests), path.name)
    return catalog


@lru_cache(maxsize=1)
def default_catalog() -> OnboardingCatalog:
    """Catalog shipped with the package, loaded once."""
    return load_catalog()
