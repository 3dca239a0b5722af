#!/usr/bin/env python3
"""
VynorNews terminal client.

Runs the client core in an interactive shell. Session and saved items
persist between runs in the storage directory.

Usage:
    python -m vynornews.main                 # Gemini-backed feed
    python -m vynornews.main --offline       # Simulated feed, no API key needed
    python -m vynornews.main --storage-dir /tmp/vynor
"""

import argparse
import asyncio
import logging
import shlex
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from .app.controller import ScreenState, VynorApp
from .app.views import AuthMode, InvalidTransitionError, View
from .config.settings import settings
from .feed.base import ContentProvider
from .feed.provider import LiteLLMFeedProvider
from .feed.simulated import SimulatedFeedProvider
from .news.formatting import format_published
from .news.models import NewsItem, UserPreferences
from .offline.cache import AssetCache
from .session.onboarding import default_catalog
from .session.validation import CredentialsError
from .storage.backends import FileBackend

logger = logging.getLogger(__name__)

HELP = """Commands:
  login EMAIL PASSWORD              sign in
  signup EMAIL PASSWORD CONFIRM     create an account
  mode login|signup                 switch the auth form
  onboard [INTEREST ...]            finish onboarding (defaults if none given)
  feed | alerts | profile           switch tab
  more                              load the next page
  refresh                           reload the first page
  open N                            open item N of the current list
  back                              leave detail or the image editor
  save [N]                          toggle save on item N, or the open item
  saved                             list saved items
  prefs KEY VALUE...                update interests, alert_level or company_types
  editor                            open the image editor
  asset PATH                        serve PATH through the offline cache
  logout                            sign out and clear local data
  help | quit"""


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="VynorNews terminal client")

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use the simulated feed provider (no API key needed)",
    )

    parser.add_argument(
        "--storage-dir",
        type=Path,
        default=settings.storage_dir,
        help=f"Directory for session data (default: {settings.storage_dir})",
    )

    parser.add_argument(
        "--model",
        default=settings.feed_model,
        help=f"LiteLLM model for feed generation (default: {settings.feed_model})",
    )

    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )

    parser.add_argument(
        "--asset-url",
        default=None,
        help="Origin to install the offline asset cache from",
    )

    return parser.parse_args(argv)


def render(state: ScreenState) -> str:
    """Render a screen snapshot as text."""
    lines: list[str] = []
    if state.chrome_visible:
        badge = f" [{state.alert_badge} critical]" if state.alert_badge else ""
        lines.append(f"== VynorNews :: {state.view.value}{badge} ==")

    if state.view == View.AUTH:
        lines.append(f"Sign {'in' if state.auth_mode == AuthMode.LOGIN else 'up'} ({state.auth_mode.value} mode)")
    elif state.view == View.ONBOARDING:
        catalog = default_catalog()
        lines.append(f"Welcome, {state.profile.name}. Pick your interests:")
        lines.append("  " + ", ".join(catalog.interests))
    elif state.view in (View.HOME, View.ALERTS):
        if state.is_loading:
            lines.append("Loading...")
        elif not state.items:
            lines.append("No news yet. Try 'refresh'.")
        for i, item in enumerate(state.items, 1):
            mark = "*" if item.id in state.saved_ids else " "
            lines.append(f"{i:>3}.{mark} [{item.impact.value.upper()}] {item.title} ({item.category}, {item.timestamp})")
        if state.is_loading_more:
            lines.append("Loading more...")
    elif state.view == View.DETAIL and state.selected is not None:
        item = state.selected
        lines.append(item.title)
        lines.append(f"{item.category} | {item.impact.value} | {format_published(item.published_at)}")
        lines.append("")
        lines.append(item.content or item.summary)
        for source in item.sources or ():
            lines.append(f"  - {source.title}: {source.uri}")
        lines.append("[saved]" if state.selected_is_saved else "[not saved]")
    elif state.view == View.PROFILE:
        prefs = state.profile.preferences
        lines.append(f"{state.profile.name} <{state.profile.email}>")
        lines.append(f"Interests: {', '.join(prefs.interests)}")
        lines.append(f"Alert level: {prefs.alert_level}")
        lines.append(f"Saved items: {state.saved_count}")
    elif state.view == View.IMAGE_EDITOR:
        lines.append("Image editor. Type 'back' to return.")

    if state.nav_visible:
        lines.append("-- feed | alerts | profile --")
    return "\n".join(lines)


class Shell:
    """Maps text commands onto VynorApp actions."""

    def __init__(self, app: VynorApp, cache: Optional[AssetCache] = None):
        self.app = app
        self.cache = cache
        self.commands: dict[str, Callable[[list[str]], Awaitable[Optional[str]]]] = {
            "login": self._login,
            "signup": self._signup,
            "mode": self._mode,
            "onboard": self._onboard,
            "feed": self._tab(View.HOME),
            "alerts": self._tab(View.ALERTS),
            "profile": self._tab(View.PROFILE),
            "more": self._more,
            "refresh": self._refresh,
            "open": self._open,
            "back": self._back,
            "save": self._save,
            "saved": self._saved,
            "prefs": self._prefs,
            "editor": self._editor,
            "asset": self._asset,
            "logout": self._logout,
            "help": self._help,
        }

    async def handle(self, line: str) -> str:
        """Run one command line and return the text to show."""
        try:
            parts = shlex.split(line)
        except ValueError as e:
            return f"Error: {e}"
        if not parts:
            return render(self.app.screen())

        name, args = parts[0].lower(), parts[1:]
        command = self.commands.get(name)
        if command is None:
            return f"Unknown command {name!r}. Type 'help'."

        try:
            message = await command(args)
        except CredentialsError as e:
            return f"{e.field}: {e.message}"
        except (InvalidTransitionError, KeyError, IndexError, ValueError) as e:
            return f"Error: {e}"
        screen = render(self.app.screen())
        return f"{message}\n{screen}" if message else screen

    async def _login(self, args: list[str]) -> None:
        email, password = args[0], args[1]
        self.app.set_auth_mode(AuthMode.LOGIN)
        self.app.authenticate(email, password)

    async def _signup(self, args: list[str]) -> None:
        email, password, confirm = args[0], args[1], args[2]
        self.app.set_auth_mode(AuthMode.SIGNUP)
        self.app.authenticate(email, password, confirm)

    async def _mode(self, args: list[str]) -> None:
        self.app.set_auth_mode(AuthMode(args[0]))

    async def _onboard(self, args: list[str]) -> None:
        await self.app.complete_onboarding(UserPreferences(interests=args))

    def _tab(self, view: View) -> Callable[[list[str]], Awaitable[None]]:
        async def go(args: list[str]) -> None:
            self.app.navigate(view)

        return go

    async def _more(self, args: list[str]) -> Optional[str]:
        before = len(self.app.feed)
        await self.app.load_more()
        return f"{len(self.app.feed) - before} new item(s)"

    async def _refresh(self, args: list[str]) -> None:
        await self.app.refresh()

    def _item_at(self, position: str) -> NewsItem:
        """Item at a 1-based position of the current list."""
        index = int(position)
        items = self.app.screen().items
        if not 1 <= index <= len(items):
            raise ValueError(f"no item {index} on this screen")
        return items[index - 1]

    async def _open(self, args: list[str]) -> None:
        self.app.select(self._item_at(args[0]))

    async def _back(self, args: list[str]) -> None:
        self.app.back()

    async def _save(self, args: list[str]) -> str:
        if args:
            item = self._item_at(args[0])
        else:
            item = self.app.views.selected
            if item is None:
                raise ValueError("no item open; use 'save N'")
        saved = self.app.toggle_save(item)
        return f"{'Saved' if saved else 'Removed'}: {item.title}"

    async def _saved(self, args: list[str]) -> str:
        items = self.app.saved.items
        if not items:
            return "No saved items."
        return "\n".join(f"  - {item.title} ({item.category})" for item in items)

    async def _prefs(self, args: list[str]) -> str:
        key, values = args[0], args[1:]
        value = values[0] if key == "alert_level" else values
        try:
            self.app.update_preferences(**{key: value})
        except ValidationError as e:
            raise ValueError(e.errors()[0]["msg"]) from e
        return "Preferences updated."

    async def _editor(self, args: list[str]) -> None:
        self.app.open_editor()

    async def _asset(self, args: list[str]) -> str:
        if self.cache is None:
            raise ValueError("no asset cache; start with --asset-url")
        response = await self.cache.fetch(args[0])
        if response is None:
            return f"{args[0]}: unavailable offline"
        return f"{response.path}: {response.status_code}, {len(response.content)} bytes"

    async def _logout(self, args: list[str]) -> str:
        self.app.logout()
        return "Logged out."

    async def _help(self, args: list[str]) -> str:
        return HELP


def build_provider(args: argparse.Namespace) -> ContentProvider:
    if args.offline or not settings.google_api_key:
        if not args.offline:
            logger.warning("No GEMINI_API_KEY set, using the simulated feed")
        return SimulatedFeedProvider(page_size=settings.page_size)
    return LiteLLMFeedProvider(model_id=args.model)


async def open_asset_cache(base_url: str) -> AssetCache:
    """Create the asset cache and install the bootstrap set, best effort."""
    cache = AssetCache(base_url=base_url)
    try:
        await cache.install()
    except httpx.HTTPError as e:
        logger.warning("[CACHE] Install from %s failed: %s", base_url, e)
    return cache


async def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    app = VynorApp(build_provider(args), FileBackend(args.storage_dir))
    await app.start()
    cache = await open_asset_cache(args.asset_url) if args.asset_url else None
    shell = Shell(app, cache)

    print("=" * 60)
    print("VynorNews")
    print("=" * 60)
    print(render(app.screen()))

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        if line.strip().lower() in ("quit", "exit"):
            break
        print(await shell.handle(line))

    if cache is not None:
        await cache.aclose()
    return 0


def cli() -> None:
    """CLI entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
