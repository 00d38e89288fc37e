"""Tests for the main menu state."""

from __future__ import annotations

from yatijapp_tui.api import RecordType
from yatijapp_tui.tui.events import SwitchToFilter, SwitchToList, SwitchToResetPassword, SwitchToSignin
from yatijapp_tui.tui.pages.menu import SEARCH, SIGN_OUT, MenuState


def _signed_in() -> MenuState:
    menu = MenuState()
    menu.set_user("ann")
    return menu


class TestAnonymousMenu:
    def test_items(self) -> None:
        menu = MenuState()
        assert menu.items == ["Sign in", "Sign up", "Forget password"]
        assert menu.greeting == ""
        assert isinstance(menu.select(), SwitchToSignin)

    def test_cursor_wraps(self) -> None:
        menu = MenuState()
        menu.up()
        assert menu.choice() == "Forget password"
        assert isinstance(menu.select(), SwitchToResetPassword)
        menu.down()
        assert menu.choice() == "Sign in"

    def test_single_page(self) -> None:
        menu = MenuState()
        menu.next_page()
        assert menu.page == 0


class TestSignedInMenu:
    def test_greeting_and_lists(self) -> None:
        menu = _signed_in()
        assert menu.greeting == "Welcome, ann"
        menu.down()
        choice = menu.select()
        assert isinstance(choice, SwitchToList)
        assert choice.record_type is RecordType.ACTION
        assert choice.src.is_empty()

    def test_search_and_sign_out_are_local(self) -> None:
        menu = _signed_in()
        menu.selected = 3
        assert menu.select() == SEARCH
        menu.down()
        assert menu.select() == SIGN_OUT

    def test_pages(self) -> None:
        menu = _signed_in()
        menu.selected = 2
        menu.next_page()
        assert (menu.page, menu.selected) == (1, 0)
        assert menu.items == ["Preferences"]
        menu.next_page()
        assert menu.page == 1
        menu.prev_page()
        assert menu.page == 0

    def test_filter_submenu(self) -> None:
        menu = _signed_in()
        menu.next_page()
        assert menu.select() is None
        assert menu.submenu == "Preferences"
        assert menu.select() is None
        assert menu.items == ["Targets", "Actions", "Sessions"]
        menu.up()
        choice = menu.select()
        assert isinstance(choice, SwitchToFilter)
        assert choice.record_type is RecordType.SESSION

    def test_leave_submenu_restores_cursor(self) -> None:
        menu = _signed_in()
        menu.next_page()
        menu.select()
        menu.select()
        # Paging is disabled inside a sub-menu.
        menu.prev_page()
        assert menu.submenu == "Filter"
        assert menu.leave_submenu()
        assert menu.submenu == "Preferences"
        assert menu.leave_submenu()
        assert (menu.page, menu.selected) == (1, 0)
        assert menu.items == ["Preferences"]
        assert not menu.leave_submenu()

    def test_sign_out_resets(self) -> None:
        menu = _signed_in()
        menu.next_page()
        menu.select()
        menu.sign_out()
        assert not menu.signed_in
        assert (menu.page, menu.selected, menu.submenu) == (0, 0, "")
        assert menu.items[0] == "Sign in"
