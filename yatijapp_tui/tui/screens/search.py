"""Search popup."""

from __future__ import annotations

from typing import Any, Optional

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Label

from yatijapp_tui.api.models import RecordType
from yatijapp_tui.errors import ValidationError
from yatijapp_tui.tui.keys import is_fn_key
from yatijapp_tui.tui.pages.records import RecordsSelection
from yatijapp_tui.tui.pages.search import SearchForm
from yatijapp_tui.tui.screens.base import YatijappModal, column_rules
from yatijapp_tui.tui.widgets.chrome import ErrorLine, HelperBar
from yatijapp_tui.tui.widgets.form_view import FormView


class SearchScreen(YatijappModal):
    """Query box over the current page.

    Searching everything dismisses with a
    :class:`~yatijapp_tui.tui.events.SwitchToSearchList`; a search
    scoped to one kind rewrites *selection* and dismisses with ``None``,
    as does ``esc``.  Callers check ``selection.changed``.
    """

    DEFAULT_CSS = f"""
    SearchScreen {{
        align: center middle;
    }}
    #search-dialog {{
        {column_rules(74)}
        height: auto;
        border: heavy $primary;
        background: $surface;
        padding: 1 1;
    }}
    #search-title {{
        text-style: bold;
        margin-bottom: 1;
        padding: 0 2;
    }}
    """

    def __init__(self, scope: RecordType, selection: Optional[RecordsSelection] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.form = SearchForm(scope, selection)

    def compose(self) -> ComposeResult:
        with Vertical(id="search-dialog"):
            yield Label(self.form.title, id="search-title")
            yield FormView(self.form, numbered=False, id="search-form")
            yield ErrorLine(id="search-error")
            yield HelperBar(id="search-helper")

    def on_mount(self) -> None:
        self.query_one("#search-form", FormView).refresh_form()
        self.query_one("#search-error", ErrorLine).show_error(None)
        self.query_one("#search-helper", HelperBar).set_items([("esc", "back"), ("enter", "search")])

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        if key == "esc":
            self.dismiss(None)
            return True
        if key == "enter":
            try:
                result = self.form.submit()
            except ValidationError as exc:
                self.query_one("#search-error", ErrorLine).show_error(exc)
                self.query_one("#search-form", FormView).refresh_form()
                return True
            self.dismiss(result)
            return True
        if key in ("tab", "shift+tab") or is_fn_key(key):
            return True
        self.form.handle_key(key, character)
        self.query_one("#search-form", FormView).refresh_form()
        return True
