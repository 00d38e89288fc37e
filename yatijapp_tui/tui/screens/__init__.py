"""TUI pages and overlays."""

from yatijapp_tui.tui.screens.auth import ResetPasswordScreen, SigninScreen, SignupScreen
from yatijapp_tui.tui.screens.base import YatijappModal, YatijappScreen
from yatijapp_tui.tui.screens.confirm import ConfirmScreen, HelpScreen
from yatijapp_tui.tui.screens.filter import FilterScreen
from yatijapp_tui.tui.screens.menu import MenuScreen
from yatijapp_tui.tui.screens.record_config import RecordConfigScreen
from yatijapp_tui.tui.screens.records import RecordListScreen, SearchListScreen
from yatijapp_tui.tui.screens.search import SearchScreen
from yatijapp_tui.tui.screens.selector import SelectorScreen
from yatijapp_tui.tui.screens.view import RecordViewScreen

__all__ = [
    "ConfirmScreen",
    "FilterScreen",
    "HelpScreen",
    "MenuScreen",
    "RecordConfigScreen",
    "RecordListScreen",
    "RecordViewScreen",
    "ResetPasswordScreen",
    "SearchListScreen",
    "SearchScreen",
    "SelectorScreen",
    "SigninScreen",
    "SignupScreen",
    "YatijappModal",
    "YatijappScreen",
]
