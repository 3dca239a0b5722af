"""Application controller.

Builds the stores once, wires them together and exposes the user actions.
Rendering is a function of ``screen()``; nothing here draws anything.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..feed.base import ContentProvider
from ..feed.engine import FeedEngine
from ..news.models import NewsItem, UserPreferences, UserProfile
from ..saved.store import SavedItemsStore
from ..session.store import SessionStore
from ..session.validation import check_credentials
from ..storage.adapter import PersistenceAdapter
from ..storage.backends import KeyValueBackend
from .views import AuthMode, View, ViewStateMachine

logger = logging.getLogger(__name__)

ItemRef = Union[NewsItem, str]


@dataclass
class ScreenState:
    """Everything a view needs to render, as one snapshot."""

    view: View
    auth_mode: AuthMode
    profile: UserProfile
    items: list[NewsItem] = field(default_factory=list)
    is_loading: bool = False
    is_loading_more: bool = False
    saved_ids: list[str] = field(default_factory=list)
    saved_count: int = 0
    selected: Optional[NewsItem] = None
    selected_is_saved: bool = False
    alert_badge: int = 0
    chrome_visible: bool = False
    nav_visible: bool = False


class VynorApp:
    """
    The client core: session, feed, saved items and current view.

    Construct once per process and call ``start()`` before anything else.
    """

    def __init__(
        self,
        provider: ContentProvider,
        backend: KeyValueBackend,
        default_interests: Optional[list[str]] = None,
    ):
        """
        Initialize the application.

        Args:
            provider: Source of feed pages
            backend: Durable key-value storage
            default_interests: Interests used when onboarding submits none
        """
        self.adapter = PersistenceAdapter(backend)
        self.saved = SavedItemsStore(self.adapter)
        self.feed = FeedEngine(
            provider,
            is_logged_in=lambda: self.session.is_logged_in,
            current_interests=lambda: self.session.interests,
        )
        self.session = SessionStore(self.adapter, self.feed, self.saved, default_interests)
        self.views = ViewStateMachine(lambda: self.session.is_logged_in)
        self._feed_activated = False

    # --- Lifecycle ---

    async def start(self) -> View:
        """Hydrate persisted state, pick the initial view, activate the feed."""
        view = self.views.start(self.session.hydrate())
        await self._activate_feed()
        return view

    async def _activate_feed(self) -> bool:
        """
        Run the first feed load of a login session.

        Fires once per login session, when the user is logged in with
        interests and the feed is empty.
        """
        if self._feed_activated or not self.session.is_logged_in:
            return False
        if not self.session.interests or len(self.feed):
            return False

        self._feed_activated = True
        logger.info("[APP] Activating feed")
        return await self.feed.load_initial(self.session.interests)

    # --- Auth & onboarding ---

    def set_auth_mode(self, mode: AuthMode) -> None:
        self.views.set_auth_mode(mode)

    def authenticate(
        self,
        email: str,
        password: str,
        confirm_password: Optional[str] = None,
        role: Optional[str] = None,
        company: Optional[str] = None,
    ) -> UserProfile:
        """
        Validate credentials and move on to onboarding.

        Identity is not verified; the display name is the e-mail's local part.

        Raises:
            CredentialsError: If a field fails validation
        """
        check_credentials(email, password, confirm_password, signup=self.views.auth_mode == AuthMode.SIGNUP)
        self.views.authentication_completed()
        return self.session.complete_authentication(email.split("@")[0], email, role=role, company=company)

    async def complete_onboarding(self, preferences: UserPreferences) -> UserProfile:
        """Log in with the chosen preferences and load the first page."""
        self.views.preferences_submitted()
        profile = self.session.complete_onboarding(preferences)
        self._feed_activated = False
        await self._activate_feed()
        return profile

    def logout(self) -> None:
        self.session.logout()
        self._feed_activated = False
        self.views.logout()

    # --- Feed ---

    async def refresh(self) -> bool:
        """Reload the first page, replacing the feed."""
        if not self.session.is_logged_in:
            return False
        return await self.feed.load_initial(self.session.interests)

    async def load_more(self) -> bool:
        return await self.feed.load_more(self.session.interests)

    def toggle_save(self, ref: ItemRef) -> bool:
        """Save or unsave an item. Returns True if it is saved afterwards."""
        return self.saved.toggle(self._resolve(ref))

    def update_preferences(self, **partial: Any) -> UserPreferences:
        return self.session.update_preferences(**partial)

    def update_profile(self, **fields: Any) -> UserProfile:
        return self.session.update_profile(**fields)

    # --- Navigation ---

    def select(self, ref: ItemRef) -> View:
        return self.views.select_item(self._resolve(ref))

    def back(self) -> View:
        return self.views.back()

    def navigate(self, tab: View) -> View:
        return self.views.navigate(tab)

    def open_editor(self) -> View:
        return self.views.open_editor()

    def _resolve(self, ref: ItemRef) -> NewsItem:
        if isinstance(ref, NewsItem):
            return ref
        item = self.feed.get(ref)
        if item is None:
            item = next((saved for saved in self.saved.items if saved.id == ref), None)
        if item is None:
            raise KeyError(ref)
        return item

    # --- Rendering ---

    def screen(self) -> ScreenState:
        """Snapshot of what the current view shows."""
        view = self.views.current
        if view == View.HOME:
            items = list(self.feed.items)
        elif view == View.ALERTS:
            items = self.feed.alerts()
        else:
            items = []

        selected = self.views.selected if view == View.DETAIL else None
        return ScreenState(
            view=view,
            auth_mode=self.views.auth_mode,
            profile=self.session.profile,
            items=items,
            is_loading=self.feed.is_loading,
            is_loading_more=self.feed.is_loading_more,
            saved_ids=self.saved.ids(),
            saved_count=len(self.saved),
            selected=selected,
            selected_is_saved=selected is not None and self.saved.is_saved(selected.id),
            alert_badge=self.feed.critical_count(),
            chrome_visible=self.views.chrome_visible,
            nav_visible=self.views.chrome_visible and self.session.is_logged_in,
        )
