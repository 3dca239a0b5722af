"""Session store: the local user's profile and its lifecycle.

The profile is the single source of truth for whether the user is logged in
and which interests drive the feed. Every mutation is written through to the
session slot while the user is logged in. An unfinished sign-up (after the
credentials step, before onboarding) is kept in memory only.
"""

import logging
from typing import Any, Optional, Sequence

from ..app.views import View
from ..feed.engine import FeedEngine
from ..news.models import UserPreferences, UserProfile
from ..saved.store import SavedItemsStore
from ..storage.adapter import PersistenceAdapter, Slot
from .onboarding import default_catalog

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("name", "email", "role", "company", "avatar")


class SessionStore:
    """
    Owns the UserProfile from hydration to logout.

    Holds references to the feed engine and saved-items store because
    onboarding and logout reset them.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        feed: FeedEngine,
        saved: SavedItemsStore,
        default_interests: Optional[Sequence[str]] = None,
    ):
        """
        Initialize session store.

        Args:
            adapter: Persistence for the session slot
            feed: Feed engine reset by onboarding and logout
            saved: Saved-items store hydrated at startup and reset by logout
            default_interests: Interests used when onboarding submits none
                (default: the onboarding catalog's defaults)
        """
        self.adapter = adapter
        self.feed = feed
        self.saved = saved
        if default_interests is None:
            default_interests = default_catalog().defaults.interests
        self.default_interests = list(default_interests)
        self._profile = UserProfile.empty()

    @property
    def profile(self) -> UserProfile:
        return self._profile

    @property
    def is_logged_in(self) -> bool:
        return self._profile.is_logged_in

    @property
    def interests(self) -> list[str]:
        return list(self._profile.preferences.interests)

    def hydrate(self) -> View:
        """
        Restore the persisted session and saved items.

        Returns:
            View.HOME for a restored logged-in session, else View.AUTH
        """
        loaded = self.adapter.load(Slot.SESSION)
        self._profile = loaded if loaded is not None else UserProfile.empty()
        self.saved.hydrate()

        logger.info("[SESSION] Hydrated (logged_in=%s)", self._profile.is_logged_in)
        return View.HOME if self._profile.is_logged_in else View.AUTH

    def complete_authentication(
        self,
        name: str,
        email: str,
        role: Optional[str] = None,
        company: Optional[str] = None,
    ) -> UserProfile:
        """Record identity from the credentials step. Does not log in."""
        self._profile = self._profile.model_copy(
            update={"name": name, "email": email, "role": role or "", "company": company or ""}
        )
        self._persist()
        return self._profile

    def complete_onboarding(self, preferences: UserPreferences) -> UserProfile:
        """
        Log the user in with their chosen preferences.

        This is the only path that sets is_logged_in. Empty interests are
        replaced by the default set. The feed is reset since it was built
        for different preferences.
        """
        if not preferences.interests:
            preferences = preferences.model_copy(update={"interests": list(self.default_interests)})

        self._profile = self._profile.model_copy(update={"is_logged_in": True, "preferences": preferences})
        self.feed.reset()
        self._persist()
        logger.info("[SESSION] Onboarding complete: %s", ", ".join(preferences.interests))
        return self._profile

    def update_preferences(self, **partial: Any) -> UserPreferences:
        """
        Merge fields into the current preferences.

        Does not reset the feed.

        Raises:
            ValueError: If a key is not a preference field
            pydantic.ValidationError: If a merged value is invalid
        """
        names = {name: name for name in UserPreferences.model_fields}
        names.update({info.alias: name for name, info in UserPreferences.model_fields.items() if info.alias})
        unknown = set(partial) - set(names)
        if unknown:
            raise ValueError(f"Unknown preference fields: {', '.join(sorted(unknown))}")

        updates = {names[key]: value for key, value in partial.items()}
        merged = {**self._profile.preferences.model_dump(), **updates}
        preferences = UserPreferences.model_validate(merged)
        self._profile = self._profile.model_copy(update={"preferences": preferences})
        self._persist()
        return preferences

    def update_profile(self, **fields: Any) -> UserProfile:
        """Edit identity fields (name, email, role, company, avatar)."""
        unknown = set(fields) - set(_PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        self._profile = UserProfile.model_validate({**self._profile.model_dump(), **fields})
        self._persist()
        return self._profile

    def logout(self) -> None:
        """Wipe persisted state and reset profile, feed and saved items."""
        self.adapter.clear_all()
        self._profile = UserProfile.empty()
        self.feed.reset()
        self.saved.reset()
        logger.info("[SESSION] Logged out")

    def _persist(self) -> None:
        if self._profile.is_logged_in:
            self.adapter.save(Slot.SESSION, self._profile)

