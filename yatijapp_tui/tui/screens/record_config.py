"""Create/edit page for targets, actions and sessions."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from textual.app import ComposeResult, SuspendNotSupported
from textual.containers import VerticalScroll
from textual.message import Message
from textual.screen import Screen

from yatijapp_tui.api import ApiError, RecordParents, RecordType
from yatijapp_tui.api.models import Record, RecordRequest
from yatijapp_tui.constants import FORM_WIDTH
from yatijapp_tui.errors import EditorError, ValidationError
from yatijapp_tui.tui import editor
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import (
    ApiSuccess,
    EditorFinished,
    OpenEditor,
    SelectorSelected,
    ShowSelector,
    ValidationFailed,
    is_stale,
)
from yatijapp_tui.tui.keys import is_fn_key
from yatijapp_tui.tui.pages.record_form import RecordForm
from yatijapp_tui.tui.screens.base import YatijappScreen, column_rules
from yatijapp_tui.tui.screens.selector import SelectorScreen
from yatijapp_tui.tui.style import HelperItem
from yatijapp_tui.tui.widgets.form_view import FormView

logger = logging.getLogger(__name__)


class RecordConfigScreen(YatijappScreen):
    """Form page with a normal view (a field holds focus) and a highlight view.

    In the normal view keys go to the focused field; ``esc`` switches to
    the highlight view where ``e`` resumes editing, ``ctrl+s`` submits
    and ``<`` goes back.

    Raises :class:`~yatijapp_tui.errors.InternalError` at construction
    when *record* cannot be loaded into the form.
    """

    DEFAULT_CSS = f"""
    RecordConfigScreen #page-body {{
        align: center top;
    }}
    #config-scroll {{
        {column_rules(FORM_WIDTH + 6)}
        height: 1fr;
    }}
    """

    def __init__(
        self,
        ctx: AppContext,
        prev: Optional[Screen],
        record_type: RecordType,
        record: Optional[Record] = None,
        src: Optional[RecordParents] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(ctx, prev, **kwargs)
        self.record_type = record_type
        self.form = RecordForm(record_type, record, src)

    def compose_content(self) -> ComposeResult:
        with VerticalScroll(id="config-scroll"):
            yield FormView(self.form, id="config-form")

    # ── Rendering ───────────────────────────────────────────────

    def title_contents(self) -> Sequence[str]:
        verb = "Edit" if self.form.editing else "New"
        return [f"{verb} {self.record_type.value}"]

    def helper_items(self) -> Sequence[HelperItem]:
        if self.form.highlight:
            return [("e", "edit"), ("<C-s>", "save"), ("<", "back"), ("q", "quit")]
        return [("tab/shift+tab", "navigate"), ("F1-F%d" % len(self.form.fields), "jump"), ("esc", "done"), ("<C-c>", "quit")]

    def render_page(self) -> None:
        if not self.is_mounted:
            return
        self.query_one("#config-form", FormView).refresh_form()
        self.render_chrome()

    # ── Keys ────────────────────────────────────────────────────

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        form = self.form
        if key == "ctrl+s":
            self.submit()
        elif form.highlight:
            if key == "q":
                self.app.exit()
            elif key == "e":
                form.leave_highlight()
            elif key == "<":
                if not self.clear_error():
                    self.go_back()
            elif is_fn_key(key):
                form.jump(key)
            else:
                return False
        elif key == "esc":
            form.enter_highlight()
        elif key in ("tab", "enter"):
            form.next()
        elif key == "shift+tab":
            form.prev()
        elif is_fn_key(key):
            form.jump(key)
        else:
            reply = form.handle_key(key, character)
            if reply is not None:
                self.dispatch_field_message(reply)
        self.render_page()
        return True

    def dispatch_field_message(self, message: Message) -> None:
        if isinstance(message, ShowSelector):
            parent_uuid = self.form.selector_parent_uuid(message.record_type)
            self.app.push_screen(
                SelectorScreen(self.ctx, message.record_type, parent_uuid, caller=self),
                self._selected,
            )
        elif isinstance(message, OpenEditor):
            self.open_editor(message.path)

    def _selected(self, result: Optional[SelectorSelected]) -> None:
        if result is not None and result.caller is self:
            self.form.apply_selection(result.record_type, result.title, result.uuid)
            self.render_page()

    # ── Editor ──────────────────────────────────────────────────

    def open_editor(self, path: str) -> None:
        """Run the external editor with the terminal handed over to it."""
        error: Optional[Exception] = None
        try:
            with self.app.suspend():
                editor.run_editor(path)
        except EditorError as exc:
            logger.error("Editor failed: %s", exc, extra={"occurrence": "note editor"})
            error = exc
        except SuspendNotSupported as exc:
            logger.error("Cannot suspend for editor: %s", exc, extra={"occurrence": "note editor"})
            error = EditorError("editor cannot run in this terminal")
        self.post_message(EditorFinished(self.source_tag, path, error))

    def on_editor_finished(self, message: EditorFinished) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.form.note.editor_finished(message.error)
        self.render_page()

    # ── Submit ──────────────────────────────────────────────────

    def submit(self) -> None:
        try:
            request = self.form.submit()
        except ValidationError as exc:
            self.post_message(ValidationFailed(self.source_tag, exc))
            return
        self.error = None
        self.set_loading(True)
        self.spawn(self._save(request), name="config-save")

    async def _save(self, request: RecordRequest) -> None:
        api = self.ctx.api
        record = self.form.record
        try:
            if record is None:
                await api.create_record(self.record_type, request)
            else:
                await api.update_record(self.record_type, record.uuid, request)
        except ApiError as exc:
            verb = "PATCH" if record is not None else "POST"
            self.report_failure(exc, f"{verb} {self.record_type.value}")
            return
        self.post_message(ApiSuccess(self.source_tag, self.form.success_message, redirect=self.prev))

    def on_api_success(self, message: ApiSuccess) -> None:
        if is_stale(message, self.source_tag):
            return
        # The app shows the redirect; only the previous list is updated here.
        self.set_loading(False)
        selection = getattr(message.redirect, "selection", None)
        if selection is not None:
            self.form.sync_prev(selection)
