"""Parent record picker used by selector fields."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from rich.console import Group
from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Label, Static

from yatijapp_tui.api import ApiError, RecordParent, RecordParents, RecordType, UnauthorizedError
from yatijapp_tui.constants import FETCH_PAGE_SIZE, SELECTOR_PAGE_SIZE
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import AllRecordsLoaded, ApiFailure, SelectorSelected, SwitchToMenu, is_stale
from yatijapp_tui.tui.pages.records import RecordsSelection
from yatijapp_tui.tui.screens.base import YatijappModal, column_rules, fit_width
from yatijapp_tui.tui.style import NORMAL_DIM
from yatijapp_tui.tui.widgets.chrome import ErrorLine, HelperBar

logger = logging.getLogger(__name__)

_ROW_WIDTH = 56
# Border and padding around the rows.
_DIALOG_FRAME = 6


class SelectorScreen(YatijappModal):
    """Pages of candidate parents, six at a time.

    Dismisses with :class:`SelectorSelected` on ``enter`` and ``None`` on
    ``<``/``esc``.  An action picker without a chosen target has nothing
    to offer and stays empty.
    """

    DEFAULT_CSS = f"""
    SelectorScreen {{
        align: center middle;
    }}
    #selector-dialog {{
        {column_rules(_ROW_WIDTH + _DIALOG_FRAME)}
        height: auto;
        border: heavy $primary;
        background: $surface;
        padding: 1 2;
    }}
    #selector-title {{
        text-style: bold;
        margin-bottom: 1;
    }}
    #selector-pages {{
        margin-top: 1;
    }}
    """

    def __init__(
        self,
        ctx: AppContext,
        record_type: RecordType,
        parent_uuid: str = "",
        caller: object = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.ctx = ctx
        self.record_type = record_type
        self.caller = caller
        self._pending_move = ""
        self.source_tag = f"{type(self).__name__}-{id(self)}"
        src = RecordParents()
        if parent_uuid and record_type.parent is not None:
            src[record_type.parent] = RecordParent(uuid=parent_uuid)
        self.selection = RecordsSelection(
            record_type,
            src,
            ctx.preferences.get_filter(record_type),
            per_page=SELECTOR_PAGE_SIZE,
        )

    def compose(self) -> ComposeResult:
        with Vertical(id="selector-dialog"):
            yield Label(f"Choose {self.record_type.value}", id="selector-title")
            yield Static("", id="selector-rows")
            yield Static("", id="selector-pages")
            yield ErrorLine(id="selector-error")
            yield HelperBar(id="selector-helper")

    def on_mount(self) -> None:
        self.query_one("#selector-error", ErrorLine).show_error(None)
        self.query_one("#selector-helper", HelperBar).set_items(
            [("↑/↓", "select"), ("←/→", "page"), ("enter", "choose"), ("<", "back")]
        )
        self.render_rows()
        if self.needs_parent:
            return
        self.query_one("#selector-dialog", Vertical).loading = True
        self.run_worker(self._fetch(1), exclusive=True, name="selector-load")

    def on_resize(self, event: events.Resize) -> None:
        if self.is_mounted:
            self.render_rows()

    @property
    def row_width(self) -> int:
        return fit_width(self.size.width, _ROW_WIDTH + _DIALOG_FRAME) - _DIALOG_FRAME

    @property
    def needs_parent(self) -> bool:
        return self.record_type is RecordType.ACTION and not self.selection.src_uuid

    def fetch_more(self, move: str) -> None:
        self._pending_move = move
        self.run_worker(self._fetch(self.selection.next_server_page), exclusive=True, name="selector-more")

    async def _fetch(self, page: int) -> None:
        sel = self.selection
        try:
            result = await self.ctx.api.list_records(
                sel.record_type,
                src_uuid=sel.src_uuid,
                filter=sel.filter,
                page=page,
                page_size=FETCH_PAGE_SIZE,
            )
        except ApiError as exc:
            self.post_message(ApiFailure(self.source_tag, exc, f"GET {sel.record_type.value}s"))
            return
        self.post_message(AllRecordsLoaded(self.source_tag, result, append=page > 1))

    def on_all_records_loaded(self, message: AllRecordsLoaded) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.query_one("#selector-dialog", Vertical).loading = False
        if message.append:
            self.selection.append_records(message.result)
            move, self._pending_move = self._pending_move, ""
            if move == "next":
                self.selection.next()
            elif move == "next_page":
                self.selection.next_page()
        else:
            self.selection.set_records(message.result)
        self.render_rows()

    def on_api_failure(self, message: ApiFailure) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.query_one("#selector-dialog", Vertical).loading = False
        logger.error(
            "%s failed: %s",
            message.action,
            message.error,
            extra={"action": message.action, "type": type(message.error).__name__, "occurrence": "selector"},
        )
        if isinstance(message.error, UnauthorizedError):
            self.dismiss(None)
            self.app.post_message(SwitchToMenu())
            return
        self.query_one("#selector-error", ErrorLine).show_error(message.error)

    def render_rows(self) -> None:
        sel = self.selection
        rows: List[Text] = []
        start, _ = sel.page_bounds()
        for offset, record in enumerate(sel.page_records()):
            rows.append(record.list_item_view(False, start + offset == sel.selected, self.row_width))
        if not rows:
            empty = "Choose a target first" if self.needs_parent else "No records found"
            rows.append(Text(empty, style=NORMAL_DIM))
        self.query_one("#selector-rows", Static).update(Group(*rows))
        pages = sel.paginator.render() if sel.paginator.total_pages > 1 else Text("")
        self.query_one("#selector-pages", Static).update(pages)

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        sel = self.selection
        if key in ("<", "esc"):
            self.dismiss(None)
            return True
        if key in ("up", "k"):
            sel.prev()
        elif key in ("down", "j"):
            if sel.next():
                self.fetch_more("next")
        elif key in ("left", "h"):
            sel.prev_page()
        elif key in ("right", "l"):
            if sel.next_page():
                self.fetch_more("next_page")
        elif key == "enter":
            current = sel.current
            if current is not None:
                self.dismiss(SelectorSelected(self.caller, self.record_type, current.title, current.uuid))
            return True
        self.render_rows()
        return True
