"""Main menu state: signed-in and anonymous item pages plus sub-menus."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple, Union

from textual.message import Message

from yatijapp_tui.api.models import RecordType
from yatijapp_tui.tui.events import (
    SwitchToFilter,
    SwitchToList,
    SwitchToResetPassword,
    SwitchToSignin,
    SwitchToSignup,
)

SEARCH = "search"
SIGN_OUT = "sign out"

AUTH_PAGES: List[List[str]] = [
    ["Targets", "Actions", "Sessions", "Search", "Sign out"],
    ["Preferences"],
]
UNAUTH_PAGES: List[List[str]] = [["Sign in", "Sign up", "Forget password"]]
SUBMENUS: Dict[str, List[str]] = {
    "Preferences": ["Filter"],
    "Filter": ["Targets", "Actions", "Sessions"],
}

_KINDS = {
    "Targets": RecordType.TARGET,
    "Actions": RecordType.ACTION,
    "Sessions": RecordType.SESSION,
}

MenuChoice = Union[Message, str, None]


class MenuState:
    """Cursor over the menu items.

    :meth:`select` either descends into a sub-menu (returning ``None``),
    returns a navigation message, or returns :data:`SEARCH` /
    :data:`SIGN_OUT` for the screen to handle itself.
    """

    def __init__(self) -> None:
        self.signed_in = False
        self.user_name = ""
        self.page = 0
        self.selected = 0
        self._path: List[Tuple[str, int, int]] = []

    # ── Session ─────────────────────────────────────────────────

    def set_user(self, name: str) -> None:
        self.signed_in = True
        self.user_name = name
        self._reset()

    def sign_out(self) -> None:
        self.signed_in = False
        self.user_name = ""
        self._reset()

    def _reset(self) -> None:
        self.page = 0
        self.selected = 0
        self._path = []

    @property
    def greeting(self) -> str:
        return f"Welcome, {self.user_name}" if self.signed_in else ""

    # ── Items ───────────────────────────────────────────────────

    @property
    def pages(self) -> List[List[str]]:
        return AUTH_PAGES if self.signed_in else UNAUTH_PAGES

    @property
    def submenu(self) -> str:
        return self._path[-1][0] if self._path else ""

    @property
    def items(self) -> List[str]:
        if self._path:
            return SUBMENUS[self.submenu]
        return self.pages[self.page]

    def choice(self) -> str:
        return self.items[self.selected]

    def up(self) -> None:
        self.selected = (self.selected - 1) % len(self.items)

    def down(self) -> None:
        self.selected = (self.selected + 1) % len(self.items)

    def next_page(self) -> None:
        if not self._path and self.page < len(self.pages) - 1:
            self.page += 1
            self.selected = 0

    def prev_page(self) -> None:
        if not self._path and self.page > 0:
            self.page -= 1
            self.selected = 0

    def leave_submenu(self) -> bool:
        if not self._path:
            return False
        _, self.page, self.selected = self._path.pop()
        return True

    def select(self) -> MenuChoice:
        item = self.choice()
        if item in SUBMENUS:
            self._path.append((item, self.page, self.selected))
            self.selected = 0
            return None
        if self.submenu == "Filter":
            return SwitchToFilter(_KINDS[item])
        if item in _KINDS:
            return SwitchToList(_KINDS[item])
        if item == "Search":
            return SEARCH
        if item == "Sign out":
            return SIGN_OUT
        if item == "Sign in":
            return SwitchToSignin()
        if item == "Sign up":
            return SwitchToSignup()
        if item == "Forget password":
            return SwitchToResetPassword()
        return None
