"""Yatijapp Textual TUI application.

The app owns the screen stack.  Pages never push each other; they post
navigation messages which bubble up here and are turned into pushes and
pops.  Each pushed page keeps a reference to the page below it so that
going back returns to exactly that instance.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from textual.app import App
from textual.binding import Binding
from textual.screen import Screen

from yatijapp_tui.constants import APP_NAME, APP_VERSION
from yatijapp_tui.errors import InternalError
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import (
    ApiSuccess,
    SwitchToCreate,
    SwitchToEdit,
    SwitchToFilter,
    SwitchToList,
    SwitchToMenu,
    SwitchToPrevious,
    SwitchToResetPassword,
    SwitchToSearchList,
    SwitchToSignin,
    SwitchToSignup,
    SwitchToView,
)
from yatijapp_tui.tui.screens.auth import ResetPasswordScreen, SigninScreen, SignupScreen
from yatijapp_tui.tui.screens.filter import FilterScreen
from yatijapp_tui.tui.screens.menu import MenuScreen
from yatijapp_tui.tui.screens.record_config import RecordConfigScreen
from yatijapp_tui.tui.screens.records import RecordListScreen, SearchListScreen
from yatijapp_tui.tui.screens.view import RecordViewScreen

logger = logging.getLogger(__name__)

# Display mode → Textual theme.  "auto" keeps Textual's default.
_THEMES = {
    "light": "textual-light",
    "dark": "textual-dark",
}

ScreenFactory = Callable[[Optional[Screen]], Screen]


class YatijappApp(App):
    """Textual TUI for the yatijapp service."""

    TITLE = f"{APP_NAME} v{APP_VERSION}"

    DEFAULT_CSS = """
    Screen {
        layout: vertical;
    }
    #page-body {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, ctx: AppContext) -> None:
        super().__init__()
        self.ctx = ctx

    # ── Lifecycle ───────────────────────────────────────────────

    def on_mount(self) -> None:
        theme = _THEMES.get(self.ctx.display_mode)
        if theme is not None and theme in self.available_themes:
            self.theme = theme
        logger.info("TUI started against %s", self.ctx.api_endpoint)
        self.push_screen(MenuScreen(self.ctx))

    async def on_unmount(self) -> None:
        """Clean up on app exit."""
        await self.ctx.auth.close()

    # ── Routing helpers ─────────────────────────────────────────

    async def _open(self, factory: ScreenFactory) -> None:
        """Push the page built by *factory*, handing it the current page."""
        current: Optional[Screen] = self.screen if len(self.screen_stack) > 1 else None
        try:
            screen = factory(current)
        except InternalError as exc:
            logger.critical("Cannot open page: %s", exc, extra={"occurrence": "router"})
            self.exit(return_code=1, message=f"Internal error: {exc}")
            return
        if current is not None:
            current.stale = True  # type: ignore[attr-defined]
        await self.push_screen(screen)

    async def _back_to(self, target: Optional[Screen], msg: str = "") -> None:
        """Pop pages until *target* is on top, then show *msg* on it."""
        if target is None or target not in self.screen_stack:
            await self.on_switch_to_menu(SwitchToMenu(msg))
            return
        while self.screen is not target:
            await self.pop_screen()
        if msg:
            target.show_message(msg)  # type: ignore[attr-defined]

    # ── Navigation messages ─────────────────────────────────────

    async def on_switch_to_menu(self, message: SwitchToMenu) -> None:
        while len(self.screen_stack) > 2:
            await self.pop_screen()
        menu = MenuScreen(self.ctx, message.msg)
        if len(self.screen_stack) > 1:
            await self.switch_screen(menu)
        else:
            await self.push_screen(menu)

    async def on_switch_to_signin(self, message: SwitchToSignin) -> None:
        await self._open(lambda prev: SigninScreen(self.ctx, prev))

    async def on_switch_to_signup(self, message: SwitchToSignup) -> None:
        await self._open(lambda prev: SignupScreen(self.ctx, prev))

    async def on_switch_to_reset_password(self, message: SwitchToResetPassword) -> None:
        await self._open(lambda prev: ResetPasswordScreen(self.ctx, prev))

    async def on_switch_to_list(self, message: SwitchToList) -> None:
        await self._open(lambda prev: RecordListScreen(self.ctx, prev, message.record_type, message.src))

    async def on_switch_to_view(self, message: SwitchToView) -> None:
        await self._open(lambda prev: RecordViewScreen(self.ctx, prev, message.record_type, message.uuid))

    async def on_switch_to_create(self, message: SwitchToCreate) -> None:
        await self._open(lambda prev: RecordConfigScreen(self.ctx, prev, message.record_type, src=message.src))

    async def on_switch_to_edit(self, message: SwitchToEdit) -> None:
        await self._open(lambda prev: RecordConfigScreen(self.ctx, prev, message.record_type, record=message.record))

    async def on_switch_to_filter(self, message: SwitchToFilter) -> None:
        await self._open(lambda prev: FilterScreen(self.ctx, prev, message.record_type))

    async def on_switch_to_search_list(self, message: SwitchToSearchList) -> None:
        await self._open(lambda prev: SearchListScreen(self.ctx, prev, message.query))

    async def on_switch_to_previous(self, message: SwitchToPrevious) -> None:
        await self._back_to(message.target, message.msg)

    async def on_api_success(self, message: ApiSuccess) -> None:
        if message.redirect is None:
            return
        message.redirect.stale = True  # type: ignore[attr-defined]
        await self._back_to(message.redirect, message.msg)
