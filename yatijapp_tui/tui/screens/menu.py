"""Main menu page."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.message import Message
from textual.widgets import Static

from yatijapp_tui.api import ApiError, NotFoundError, Preferences, UnauthorizedError, default_preferences
from yatijapp_tui.api.models import RecordType
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import ApiSuccess, PreferencesLoaded, SwitchToSearchList, UserLoaded, is_stale
from yatijapp_tui.tui.pages.menu import SEARCH, SIGN_OUT, MenuState
from yatijapp_tui.tui.screens.base import YatijappScreen
from yatijapp_tui.tui.screens.search import SearchScreen
from yatijapp_tui.tui.style import CHOICE, MSG, NORMAL, NORMAL_DIM, HelperItem, menu_title

logger = logging.getLogger(__name__)


class MenuScreen(YatijappScreen):
    """Loads the current user on mount and shows the matching items.

    An unauthorised answer switches to the anonymous items (sign in,
    sign up, password reset).  Signed in, the user's stored list
    preferences are loaded into the context.
    """

    DEFAULT_CSS = """
    MenuScreen #page-body {
        align: center middle;
    }
    #menu-title, #menu-greeting, #menu-items, #menu-pages {
        width: 30;
        height: auto;
        margin-bottom: 1;
    }
    """

    def __init__(self, ctx: AppContext, msg: str = "", **kwargs: Any) -> None:
        super().__init__(ctx, prev=None, **kwargs)
        self.state = MenuState()
        self.msg = msg

    def compose_content(self) -> ComposeResult:
        yield Static(menu_title(), id="menu-title")
        yield Static("", id="menu-greeting")
        yield Static("", id="menu-items")
        yield Static("", id="menu-pages")

    # ── Loading ─────────────────────────────────────────────────

    def load(self) -> None:
        self.set_loading(True)
        self.spawn(self._load_user(), name="menu-user")

    async def _load_user(self) -> None:
        api = self.ctx.api
        try:
            user = await api.current_user()
        except UnauthorizedError as exc:
            logger.info("Not signed in: %s", exc, extra={"action": "GET User", "status": exc.status})
            self.post_message(UserLoaded(self.source_tag, None))
            return
        except ApiError as exc:
            self.report_failure(exc, "GET User")
            return

        preferences: Optional[Preferences] = None
        try:
            preferences = await api.get_preferences()
        except NotFoundError:
            logger.info("No stored preferences, using defaults", extra={"action": "GET Preferences"})
            preferences = default_preferences()
        except UnauthorizedError as exc:
            logger.info("Not signed in: %s", exc, extra={"action": "GET Preferences", "status": exc.status})
            self.post_message(UserLoaded(self.source_tag, None))
            return
        except ApiError as exc:
            self.report_failure(exc, "GET Preferences")
        if preferences is not None:
            self.post_message(PreferencesLoaded(self.source_tag, preferences))
        self.post_message(UserLoaded(self.source_tag, user))

    def on_user_loaded(self, message: UserLoaded) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.set_loading(False)
        if message.user is None:
            self.state.sign_out()
        else:
            self.state.set_user(message.user.name)
        self.render_page()

    def on_preferences_loaded(self, message: PreferencesLoaded) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.ctx.preferences = message.preferences

    async def _sign_out(self) -> None:
        try:
            await self.ctx.api.signout()
        except ApiError as exc:
            self.report_failure(exc, "DELETE Authentication token")
            return
        self.post_message(ApiSuccess(self.source_tag, "Signed out successfully"))

    def on_api_success(self, message: ApiSuccess) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.ctx.preferences = default_preferences()
        self.state.sign_out()
        self.show_message(message.msg)
        self.render_page()

    def handle_failure(self, error: Exception, action: str = "") -> None:
        if action == "DELETE Authentication token":
            # The local token is gone either way.
            self.state.sign_out()
            self.render_page()
        if isinstance(error, UnauthorizedError):
            logger.info("Session ended by server: %s", error, extra={"action": action})
            self.state.sign_out()
            self.render_page()
            return
        super().handle_failure(error, action)

    # ── Rendering ───────────────────────────────────────────────

    def title_contents(self) -> Sequence[str]:
        return ["Menu"]

    def helper_items(self) -> Sequence[HelperItem]:
        items = [("↑/↓", "select"), ("enter", "confirm")]
        if self.state.submenu:
            items.append(("esc", "back"))
        elif len(self.state.pages) > 1:
            items.append(("</>", "page"))
        items.append(("q", "quit"))
        return items

    def render_page(self) -> None:
        if not self.is_mounted:
            return
        self.query_one("#menu-greeting", Static).update(Text(self.state.greeting, style=MSG))
        rows = Text()
        for i, item in enumerate(self.state.items):
            if i:
                rows.append("\n")
            if i == self.state.selected:
                rows.append(f" {item} ".ljust(28), style=CHOICE)
            else:
                rows.append(f" {item}", style=NORMAL)
        self.query_one("#menu-items", Static).update(rows)

        pages = Text()
        if not self.state.submenu and len(self.state.pages) > 1:
            for page in range(len(self.state.pages)):
                pages.append("● " if page == self.state.page else "○ ", style=NORMAL if page == self.state.page else NORMAL_DIM)
        elif self.state.submenu:
            pages.append(self.state.submenu, style=NORMAL_DIM)
        self.query_one("#menu-pages", Static).update(pages)
        self.render_chrome()

    # ── Keys ────────────────────────────────────────────────────

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        state = self.state
        if key == "q":
            self.app.exit()
        elif key in ("up", "k"):
            state.up()
        elif key in ("down", "j"):
            state.down()
        elif key == ">":
            state.next_page()
        elif key == "<":
            if not self.clear_error():
                state.prev_page()
        elif key == "esc":
            state.leave_submenu()
        elif key == "enter":
            self._select()
        else:
            return False
        self.render_page()
        return True

    def _select(self) -> None:
        choice = self.state.select()
        if choice is None:
            return
        if isinstance(choice, Message):
            self.post_message(choice)
        elif choice == SEARCH:
            self.app.push_screen(SearchScreen(RecordType.ALL), self._searched)
        elif choice == SIGN_OUT:
            self.spawn(self._sign_out(), name="menu-signout")

    def _searched(self, result: Optional[SwitchToSearchList]) -> None:
        if result is not None:
            self.post_message(result)
