"""Record list and search-result pages."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional, Sequence

from rich.console import Group
from rich.text import Text
from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Static

from yatijapp_tui.api import ApiError, RecordParent, RecordParents, RecordType, Session
from yatijapp_tui.api.models import Record
from yatijapp_tui.constants import FETCH_PAGE_SIZE, VIEW_WIDTH
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import (
    AllRecordsLoaded,
    ApiSuccess,
    RecordDeleted,
    RecordLoaded,
    SwitchToCreate,
    SwitchToEdit,
    SwitchToFilter,
    SwitchToList,
    SwitchToMenu,
    SwitchToSearchList,
    SwitchToView,
    is_stale,
)
from yatijapp_tui.tui.pages.records import RecordsSelection, deleted_message, delete_prompt, list_title
from yatijapp_tui.tui.screens.base import YatijappScreen, column_rules
from yatijapp_tui.tui.screens.confirm import ConfirmScreen, HelpScreen
from yatijapp_tui.tui.screens.search import SearchScreen
from yatijapp_tui.tui.style import NORMAL_DIM, HelperItem

logger = logging.getLogger(__name__)

REFRESHED_MSG = "Records refreshed"
SESSION_ENDED_MSG = "Session ended"


class RecordListScreen(YatijappScreen):
    """Paged list of one record kind, narrowed to the parents in *src*.

    Records are fetched from the server in large pages and paginated
    locally; moving past the last loaded record fetches the next server
    page and appends it.
    """

    DEFAULT_CSS = f"""
    RecordListScreen #page-body {{
        align: center top;
    }}
    #list-rows, #list-detail, #list-pages {{
        {column_rules(VIEW_WIDTH)}
        height: auto;
    }}
    #list-detail {{
        margin-top: 1;
    }}
    #list-pages {{
        content-align: center middle;
        margin-top: 1;
    }}
    """

    def __init__(
        self,
        ctx: AppContext,
        prev: Optional[Screen],
        record_type: RecordType,
        src: Optional[RecordParents] = None,
        search: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(ctx, prev, **kwargs)
        self.record_type = record_type
        query_filter = None
        if record_type is not RecordType.ALL:
            query_filter = ctx.preferences.get_filter(record_type)
        self.selection = RecordsSelection(record_type, src, query_filter, search)
        self._pending_move = ""

    def compose_content(self) -> ComposeResult:
        yield Static("", id="list-rows")
        yield Static("", id="list-detail")
        yield Static("", id="list-pages")

    # ── Loading ─────────────────────────────────────────────────

    def load(self, msg: str = "") -> None:
        self.set_loading(True)
        self.spawn(self._fetch(page=1, append=False, msg=msg), name="list-load")

    def fetch_more(self, move: str) -> None:
        self._pending_move = move
        self.set_loading(True)
        self.spawn(
            self._fetch(page=self.selection.next_server_page, append=True, msg=""),
            name="list-more",
        )

    async def _fetch(self, page: int, append: bool, msg: str) -> None:
        sel = self.selection
        try:
            result = await self.ctx.api.list_records(
                sel.record_type,
                src_uuid=sel.src_uuid,
                filter=sel.filter,
                search=sel.search,
                page=page,
                page_size=FETCH_PAGE_SIZE,
            )
        except ApiError as exc:
            self.report_failure(exc, f"GET {sel.record_type.value}s")
            return
        self.post_message(AllRecordsLoaded(self.source_tag, result, msg=msg, append=append))

    def on_all_records_loaded(self, message: AllRecordsLoaded) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.set_loading(False)
        if message.append:
            self.selection.append_records(message.result)
            move, self._pending_move = self._pending_move, ""
            if move == "next":
                self.selection.next()
            elif move == "next_page":
                self.selection.next_page()
        else:
            self.selection.set_records(message.result)
        if message.msg:
            self.show_message(message.msg)
        self.render_page()

    async def _load_one(self, record_type: RecordType, uuid: str) -> None:
        try:
            record = await self.ctx.api.get_record(record_type, uuid)
        except ApiError as exc:
            self.report_failure(exc, f"GET {record_type.value}")
            return
        self.post_message(RecordLoaded(self.source_tag, record, intent="edit"))

    def on_record_loaded(self, message: RecordLoaded) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.set_loading(False)
        record = message.record
        self.post_message(SwitchToEdit(record.actual_type, record))

    async def _delete(self, record: Record) -> None:
        record_type = record.actual_type
        try:
            await self.ctx.api.delete_record(record_type, record.uuid)
        except ApiError as exc:
            self.report_failure(exc, f"DELETE {record_type.value}")
            return
        self.post_message(RecordDeleted(self.source_tag, record_type, deleted_message(record_type)))

    def on_record_deleted(self, message: RecordDeleted) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.load(message.msg)

    async def _end_session(self, session: Session) -> None:
        try:
            await self.ctx.api.end_session(session, datetime.now().astimezone())
        except ApiError as exc:
            self.report_failure(exc, "PATCH Session")
            return
        self.post_message(ApiSuccess(self.source_tag, SESSION_ENDED_MSG))

    def on_api_success(self, message: ApiSuccess) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.load(message.msg)

    def failure_is_fatal(self, error: Exception, action: str) -> bool:
        # A failed write keeps the list on screen.
        return isinstance(error, ApiError) and action.startswith("GET")

    # ── Rendering ───────────────────────────────────────────────

    @property
    def show_parent(self) -> bool:
        if self.record_type is RecordType.ALL:
            return True
        return self.record_type is not RecordType.TARGET and self.selection.src.is_empty()

    def title_contents(self) -> Sequence[str]:
        contents = list_title(self.record_type, self.selection.src)
        if self.selection.search:
            contents.append(f'Search: "{self.selection.search}"')
        return contents

    def helper_items(self) -> Sequence[HelperItem]:
        return [("↑/↓", "select"), ("←/→", "page"), ("enter", "open"), ("n", "new"), ("?", "help"), ("q", "quit")]

    def help_items(self) -> List[HelperItem]:
        items: List[HelperItem] = [
            ("↑/k ↓/j", "move"),
            ("←/h →/l", "previous/next page"),
        ]
        if self.record_type is RecordType.SESSION:
            items.append(("enter", "end in-progress session"))
        elif self.record_type is not RecordType.ALL:
            items.append(("enter", f"list {self.record_type.child.label}s"))  # type: ignore[union-attr]
        else:
            items.append(("enter", "open target/action"))
        items += [("v", "view"), ("e", "edit"), ("d", "delete")]
        if self.record_type is not RecordType.ALL:
            items += [("n", "new"), ("f", "filter"), ("/", "search " + self.record_type.label + "s")]
        items += [
            ("s, C-/", "search all"),
            ("C-r", "refresh"),
            ("m", "menu"),
            ("<", "back"),
            ("?", "toggle help"),
            ("q", "quit"),
        ]
        return items

    def render_page(self) -> None:
        if not self.is_mounted:
            return
        sel = self.selection
        width = self.content_width
        rows: List[Text] = []
        start, _ = sel.page_bounds()
        for offset, record in enumerate(sel.page_records()):
            rows.append(record.list_item_view(self.show_parent, start + offset == sel.selected, width))
        if not rows:
            rows.append(Text("No records found", style=NORMAL_DIM, justify="center"))
        self.query_one("#list-rows", Static).update(Group(*rows))

        current = sel.current
        detail = current.list_item_detail_view(self.show_parent, width) if current is not None else Text("")
        self.query_one("#list-detail", Static).update(detail)
        pages = sel.paginator.render() if sel.paginator.total_pages > 1 else Text("")
        self.query_one("#list-pages", Static).update(pages)
        self.render_chrome()

    # ── Keys ────────────────────────────────────────────────────

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        sel = self.selection
        if key == "q":
            self.app.exit()
            return True
        if key == "<":
            if self.clear_error():
                return True
            if self.selection.search and self.record_type is not RecordType.ALL:
                self.selection.selection_search_clear()
                self.selection.reset_cursor()
                self.load()
            else:
                self.go_back()
            return True
        if key == "m":
            self.post_message(SwitchToMenu())
            return True
        if self.fatal:
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
            self.drill_down()
        elif key == "v":
            if sel.current is not None:
                self.post_message(SwitchToView(sel.current.actual_type, sel.current.uuid))
        elif key == "e":
            if sel.current is not None:
                self.set_loading(True)
                self.spawn(self._load_one(sel.current.actual_type, sel.current.uuid), name="list-load-one")
        elif key == "d":
            self.confirm_delete()
        elif key == "n" and self.record_type is not RecordType.ALL:
            self.post_message(SwitchToCreate(self.record_type, sel.src))
        elif key == "f" and self.record_type is not RecordType.ALL:
            self.post_message(SwitchToFilter(self.record_type))
        elif key == "/" and self.record_type is not RecordType.ALL:
            self.app.push_screen(SearchScreen(self.record_type, sel), self._searched)
        elif key in ("s", "ctrl+/"):
            self.app.push_screen(SearchScreen(RecordType.ALL), self._searched)
        elif key == "ctrl+r":
            self.load(REFRESHED_MSG)
        elif key == "?":
            self.app.push_screen(HelpScreen(self.help_items()))
        else:
            return False
        self.render_page()
        return True

    def drill_down(self) -> None:
        current = self.selection.current
        if current is None:
            return
        record_type = current.actual_type
        if record_type is RecordType.SESSION:
            if current.ends_at is None:  # type: ignore[union-attr]
                self.app.push_screen(
                    ConfirmScreen("End Session", f'End session "{current.title}" now?'),
                    lambda confirmed: self._ended(confirmed, current),
                )
            return
        src = current.parents.copy()
        src[record_type] = RecordParent(uuid=current.uuid, title=current.title)
        self.post_message(SwitchToList(record_type.child, src))  # type: ignore[arg-type]

    def _ended(self, confirmed: Optional[bool], session: Record) -> None:
        if confirmed:
            self.set_loading(True)
            self.spawn(self._end_session(session), name="list-end-session")  # type: ignore[arg-type]

    def confirm_delete(self) -> None:
        current = self.selection.current
        if current is None:
            return
        prompt, warning = delete_prompt(current)
        self.app.push_screen(
            ConfirmScreen("Confirm Deletion", prompt, warning),
            lambda confirmed: self._deleted(confirmed, current),
        )

    def _deleted(self, confirmed: Optional[bool], record: Record) -> None:
        if confirmed:
            self.set_loading(True)
            self.spawn(self._delete(record), name="list-delete")

    def _searched(self, result: Optional[SwitchToSearchList]) -> None:
        if result is not None:
            self.post_message(result)
        elif self.selection.changed:
            self.selection.reset_cursor()
            self.load()


class SearchListScreen(RecordListScreen):
    """Results of a search across every record kind."""

    def __init__(self, ctx: AppContext, prev: Optional[Screen], query: str, **kwargs: Any) -> None:
        super().__init__(ctx, prev, RecordType.ALL, search=query, **kwargs)

    def title_contents(self) -> Sequence[str]:
        return [f'Search: "{self.selection.search}"']

    def helper_items(self) -> Sequence[HelperItem]:
        return [("↑/↓", "select"), ("←/→", "page"), ("enter", "open"), ("v", "view"), ("?", "help"), ("q", "quit")]
