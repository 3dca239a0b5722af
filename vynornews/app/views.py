"""View state machine.

Transitions:
    auth        --authentication_completed--> onboarding
    onboarding  --preferences_submitted-----> home
    home|alerts|profile|image-editor --navigate--> home|alerts|profile
    home|alerts --select_item--> detail --back--> home
    home|alerts|profile --open_editor--> image-editor --back--> previous view
    any         --logout--> auth (login mode)

There is no history stack: detail always goes back to home, and the
editor remembers a single previous view.
"""

from enum import Enum
from typing import Callable, Optional

from ..news.models import NewsItem


class View(str, Enum):
    AUTH = "auth"
    ONBOARDING = "onboarding"
    HOME = "home"
    ALERTS = "alerts"
    DETAIL = "detail"
    PROFILE = "profile"
    IMAGE_EDITOR = "image-editor"


class AuthMode(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"


TAB_VIEWS = frozenset({View.HOME, View.ALERTS, View.PROFILE})
SELECTABLE_FROM = frozenset({View.HOME, View.ALERTS})
# Views without the header and tab bar
_BARE_VIEWS = frozenset({View.AUTH, View.ONBOARDING, View.DETAIL})


class InvalidTransitionError(ValueError):
    """The requested transition is not allowed from the current view."""

    def __init__(self, action: str, current: View):
        super().__init__(f"Cannot {action} from view {current.value!r}")
        self.action = action
        self.current = current


class ViewStateMachine:
    """Current view plus the little state that travels with it."""

    def __init__(self, is_logged_in: Callable[[], bool]):
        self._is_logged_in = is_logged_in
        self.current = View.AUTH
        self.auth_mode = AuthMode.LOGIN
        self.selected: Optional[NewsItem] = None
        self._editor_return: Optional[View] = None

    @property
    def chrome_visible(self) -> bool:
        """Whether the header and tab bar are shown."""
        return self.current not in _BARE_VIEWS

    def start(self, initial: View) -> View:
        if initial not in (View.AUTH, View.HOME):
            raise ValueError(f"Initial view must be auth or home, not {initial.value!r}")
        if initial == View.HOME and not self._is_logged_in():
            initial = View.AUTH
        self.current = initial
        self.auth_mode = AuthMode.LOGIN
        return self.current

    def set_auth_mode(self, mode: AuthMode) -> None:
        self._require({View.AUTH}, "switch auth mode")
        self.auth_mode = mode

    def authentication_completed(self) -> View:
        self._require({View.AUTH}, "complete authentication")
        return self._go(View.ONBOARDING)

    def preferences_submitted(self) -> View:
        self._require({View.ONBOARDING}, "submit preferences")
        return self._go(View.HOME)

    def navigate(self, tab: View) -> View:
        if tab not in TAB_VIEWS:
            raise ValueError(f"{tab.value!r} is not a tab")
        self._require(TAB_VIEWS | {View.IMAGE_EDITOR}, f"navigate to {tab.value}")
        self._require_login(f"navigate to {tab.value}")
        self._editor_return = None
        return self._go(tab)

    def select_item(self, item: NewsItem) -> View:
        self._require(SELECTABLE_FROM, "select an item")
        self.selected = item
        return self._go(View.DETAIL)

    def open_editor(self) -> View:
        self._require(TAB_VIEWS, "open the image editor")
        self._require_login("open the image editor")
        self._editor_return = self.current
        return self._go(View.IMAGE_EDITOR)

    def back(self) -> View:
        if self.current == View.DETAIL:
            self.selected = None
            return self._go(View.HOME)
        if self.current == View.IMAGE_EDITOR:
            previous = self._editor_return or View.HOME
            self._editor_return = None
            return self._go(previous)
        raise InvalidTransitionError("go back", self.current)

    def logout(self) -> View:
        self.selected = None
        self._editor_return = None
        self.auth_mode = AuthMode.LOGIN
        return self._go(View.AUTH)

    def _require(self, allowed: set[View] | frozenset[View], action: str) -> None:
        if self.current not in allowed:
            raise InvalidTransitionError(action, self.current)

    def _require_login(self, action: str) -> None:
        if not self._is_logged_in():
            raise InvalidTransitionError(action, self.current)

    def _go(self, view: View) -> View:
        self.current = view
        return view
