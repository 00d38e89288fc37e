"""Title bar, error line and helper bar shared by every page."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from textual.widgets import Static

from yatijapp_tui.tui.style import HelperItem, error_line, helper_bar, title_bar


class TitleBar(Static):
    DEFAULT_CSS = """
    TitleBar {
        dock: top;
        height: 1;
        padding: 0 1;
        margin-bottom: 1;
    }
    """

    def set_title(self, contents: Sequence[str], msg: bool = False) -> None:
        self.update(title_bar(contents, msg))


class ErrorLine(Static):
    DEFAULT_CSS = """
    ErrorLine {
        height: auto;
        margin-top: 1;
    }
    """

    def show_error(self, error: Optional[BaseException]) -> None:
        self.display = error is not None
        self.update(error_line(error))


class HelperBar(Static):
    DEFAULT_CSS = """
    HelperBar {
        dock: bottom;
        height: 1;
        width: 100%;
    }
    """

    def set_items(self, items: Iterable[HelperItem], highlight: bool = False) -> None:
        self.update(helper_bar(items, highlight))
