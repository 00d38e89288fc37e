"""Single record details page."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Markdown

from yatijapp_tui.api import ApiError, RecordType
from yatijapp_tui.api.models import Record
from yatijapp_tui.constants import VIEW_WIDTH
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import RecordDeleted, RecordLoaded, SwitchToEdit, SwitchToPrevious, is_stale
from yatijapp_tui.tui.pages.records import deleted_message, delete_prompt, sync_prev_src
from yatijapp_tui.tui.pages.view import record_markdown
from yatijapp_tui.tui.screens.base import YatijappScreen, column_rules
from yatijapp_tui.tui.screens.confirm import ConfirmScreen
from yatijapp_tui.tui.style import HelperItem

logger = logging.getLogger(__name__)


class RecordViewScreen(YatijappScreen):
    """Markdown report of one record in a scrollable pane."""

    DEFAULT_CSS = f"""
    RecordViewScreen #page-body {{
        align: center top;
    }}
    #view-scroll {{
        {column_rules(VIEW_WIDTH)}
        height: 1fr;
    }}
    """

    def __init__(
        self,
        ctx: AppContext,
        prev: Optional[Screen],
        record_type: RecordType,
        uuid: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(ctx, prev, **kwargs)
        self.record_type = record_type
        self.uuid = uuid
        self.record: Optional[Record] = None

    def compose_content(self) -> ComposeResult:
        with VerticalScroll(id="view-scroll"):
            yield Markdown("", id="view-markdown")

    # ── Loading ─────────────────────────────────────────────────

    def load(self) -> None:
        self.set_loading(True)
        self.spawn(self._fetch(), name="view-load")

    async def _fetch(self) -> None:
        try:
            record = await self.ctx.api.get_record(self.record_type, self.uuid)
        except ApiError as exc:
            self.report_failure(exc, f"GET {self.record_type.value}")
            return
        self.post_message(RecordLoaded(self.source_tag, record))

    def on_record_loaded(self, message: RecordLoaded) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.set_loading(False)
        self.record = message.record
        self.render_page()

    async def _delete(self, record: Record) -> None:
        try:
            await self.ctx.api.delete_record(self.record_type, record.uuid)
        except ApiError as exc:
            self.report_failure(exc, f"DELETE {self.record_type.value}")
            return
        self.post_message(RecordDeleted(self.source_tag, self.record_type, deleted_message(self.record_type)))

    def on_record_deleted(self, message: RecordDeleted) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        if self.prev is not None:
            self.prev.stale = True  # type: ignore[attr-defined]
        self.post_message(SwitchToPrevious(self.prev, message.msg))

    def failure_is_fatal(self, error: Exception, action: str) -> bool:
        return isinstance(error, ApiError) and action.startswith("GET")

    # ── Rendering ───────────────────────────────────────────────

    def title_contents(self) -> Sequence[str]:
        return [f"{self.record_type.value} Details"]

    def helper_items(self) -> Sequence[HelperItem]:
        return [("<", "back"), ("↑/↓", "scroll"), ("e", "edit"), ("d", "delete"), ("q", "quit")]

    def render_page(self) -> None:
        if not self.is_mounted or self.record is None:
            return
        self.query_one("#view-markdown", Markdown).update(record_markdown(self.record))
        self.render_chrome()

    # ── Keys ────────────────────────────────────────────────────

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        scroll = self.query_one("#view-scroll", VerticalScroll)
        if key == "q":
            self.app.exit()
        elif key == "<":
            if not self.clear_error():
                self.back()
        elif self.fatal or self.record is None:
            return key not in ("tab", "shift+tab")
        elif key in ("up", "k"):
            scroll.scroll_up()
        elif key in ("down", "j"):
            scroll.scroll_down()
        elif key == "e":
            self.post_message(SwitchToEdit(self.record_type, self.record))
        elif key == "d":
            prompt, warning = delete_prompt(self.record)
            self.app.push_screen(ConfirmScreen("Confirm Deletion", prompt, warning), self._confirmed)
        else:
            return False
        return True

    def _confirmed(self, confirmed: Optional[bool]) -> None:
        if confirmed and self.record is not None:
            self.set_loading(True)
            self.spawn(self._delete(self.record), name="view-delete")

    def back(self) -> None:
        """Return to the previous page, pointing a list at the record's parents."""
        selection = getattr(self.prev, "selection", None)
        if self.record is not None and selection is not None:
            if sync_prev_src(selection, self.record.parents):
                self.prev.stale = True  # type: ignore[union-attr]
        self.go_back()
