"""Sort/status filter page."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from textual.app import ComposeResult
from textual.screen import Screen

from yatijapp_tui.api import ApiError, RecordType, UnauthorizedError, UnexpectedApiError
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import ApiSuccess, is_stale
from yatijapp_tui.tui.keys import is_fn_key
from yatijapp_tui.tui.pages.filter_form import FilterForm
from yatijapp_tui.tui.pages.records import RecordsSelection
from yatijapp_tui.tui.screens.base import YatijappScreen, column_rules
from yatijapp_tui.tui.style import HelperItem
from yatijapp_tui.tui.widgets.form_view import FormView

logger = logging.getLogger(__name__)

PREFERENCES_UPDATED_MSG = "Preferences updated"
FILTER_WIDTH = 76


class FilterScreen(YatijappScreen):
    """Chooses how a list is sorted and which statuses it shows.

    Opened from a list, the list's in-memory filter is replaced.  Opened
    from the menu, the user's stored preferences are updated through
    the API.

    Raises :class:`~yatijapp_tui.errors.InternalError` at construction
    when the current filter does not fit the form.
    """

    DEFAULT_CSS = f"""
    FilterScreen #page-body {{
        align: center top;
    }}
    #filter-form {{
        {column_rules(FILTER_WIDTH)}
    }}
    """

    def __init__(self, ctx: AppContext, prev: Optional[Screen], record_type: RecordType, **kwargs: Any) -> None:
        super().__init__(ctx, prev, **kwargs)
        self.record_type = record_type
        current = ctx.preferences.get_filter(record_type)
        if self.selection is not None and self.selection.filter is not None:
            current = self.selection.filter
        self.form = FilterForm(record_type, current)

    @property
    def selection(self) -> Optional[RecordsSelection]:
        selection = getattr(self.prev, "selection", None)
        return selection if isinstance(selection, RecordsSelection) else None

    def compose_content(self) -> ComposeResult:
        yield FormView(self.form, id="filter-form")

    def title_contents(self) -> Sequence[str]:
        return [f"{self.record_type.value}s Filter"]

    def helper_items(self) -> Sequence[HelperItem]:
        return [("tab/shift+tab", "navigate"), ("F1-F3", "jump"), ("<C-s>", "apply"), ("esc", "back")]

    def render_page(self) -> None:
        if not self.is_mounted:
            return
        self.query_one("#filter-form", FormView).refresh_form()
        self.render_chrome()

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        form = self.form
        if key == "esc":
            self.go_back()
            return True
        if key == "ctrl+s":
            self.submit()
        elif key in ("tab", "enter"):
            form.next()
        elif key == "shift+tab":
            form.prev()
        elif is_fn_key(key):
            form.jump(key)
        else:
            form.handle_key(key, character)
        self.render_page()
        return True

    def submit(self) -> None:
        selection = self.selection
        self.form.apply(selection, self.ctx.preferences)
        if selection is not None:
            selection.reset_cursor()
            self.prev.stale = True  # type: ignore[union-attr]
            self.go_back()
            return
        self.set_loading(True)
        self.spawn(self._persist(), name="filter-save")

    async def _persist(self) -> None:
        try:
            await self.ctx.api.update_preferences(self.ctx.preferences)
        except ApiError as exc:
            self.report_failure(exc, "PUT Preferences")
            return
        self.post_message(ApiSuccess(self.source_tag, PREFERENCES_UPDATED_MSG, redirect=self.prev))

    def on_api_success(self, message: ApiSuccess) -> None:
        if is_stale(message, self.source_tag):
            return
        # Bubbles on to the app, which shows the redirect.
        self.set_loading(False)

    def handle_failure(self, error: Exception, action: str = "") -> None:
        if action == "PUT Preferences" and isinstance(error, ApiError) and not isinstance(error, UnauthorizedError):
            error = UnexpectedApiError(error.status, f"failed to update preferences: {error.msg}")
        super().handle_failure(error, action)
