"""Base screens with the chrome and key plumbing shared by every page."""

from __future__ import annotations

import logging
from typing import Any, Coroutine, List, Optional, Sequence

from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen, Screen

from yatijapp_tui.api.errors import ApiError, UnauthorizedError
from yatijapp_tui.constants import MIN_CONTENT_WIDTH, VIEW_WIDTH
from yatijapp_tui.tui.context import AppContext
from yatijapp_tui.tui.events import ApiFailure, SwitchToMenu, SwitchToPrevious, ValidationFailed, is_stale
from yatijapp_tui.tui.keys import normalize_key
from yatijapp_tui.tui.style import HelperItem
from yatijapp_tui.tui.widgets.chrome import ErrorLine, HelperBar, TitleBar

logger = logging.getLogger(__name__)

# Keys Textual would otherwise consume for focus traversal, plus the
# shortcuts pages need even while a widget has focus.
_PAGE_KEYS = (
    "tab",
    "shift+tab",
    "enter",
    "escape",
    "ctrl+s",
    "ctrl+r",
) + tuple(f"f{n}" for n in range(1, 13))


def page_bindings() -> List[Binding]:
    return [Binding(key, f"page_key('{key}')", show=False, priority=True) for key in _PAGE_KEYS]


def fit_width(available: int, preferred: int) -> int:
    """Width for a column that wants *preferred* cells out of *available*."""
    return max(MIN_CONTENT_WIDTH, min(available, preferred))


def column_rules(preferred: int) -> str:
    """CSS rules for a column that shrinks with the terminal down to the minimum."""
    return f"width: 100%; max-width: {preferred}; min-width: {MIN_CONTENT_WIDTH};"


class PageKeys:
    """Routes every key press through :meth:`handle_page_key`."""

    def action_page_key(self, key: str) -> None:
        self.handle_page_key(normalize_key(key), None)

    def on_key(self, event: events.Key) -> None:
        key = normalize_key(event.key, event.character)
        if self.handle_page_key(key, event.character):
            event.stop()
            event.prevent_default()

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        """Return ``True`` when *key* was consumed."""
        return False


class YatijappScreen(PageKeys, Screen):
    """A full page: title bar, body, error line and helper bar.

    Parameters
    ----------
    ctx:
        Shared runtime state.
    prev:
        The page to go back to.

    Subclasses override :meth:`compose_content`, :meth:`title_contents`,
    :meth:`helper_items` and usually :meth:`load`.  Worker results are
    tagged with :attr:`source_tag`; anything carrying another tag is
    dropped.  A page marked :attr:`stale` reloads when it is shown again.
    """

    BINDINGS = page_bindings()

    def __init__(self, ctx: AppContext, prev: Optional[Screen] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.ctx = ctx
        self.prev = prev
        self.source_tag = f"{type(self).__name__}-{id(self)}"
        self.stale = False
        self.msg = ""
        self.error: Optional[BaseException] = None
        self.fatal = False

    # ── Compose ─────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield TitleBar(id="title-bar")
        with Vertical(id="page-body"):
            yield from self.compose_content()
        yield ErrorLine(id="error-line")
        yield HelperBar(id="helper-bar")

    def compose_content(self) -> ComposeResult:
        """Override in subclasses to add the page body."""
        return
        yield  # pragma: no cover

    def on_mount(self) -> None:
        self.render_chrome()
        self.render_page()
        self.load()

    def on_screen_resume(self) -> None:
        if self.stale:
            self.stale = False
            self.load()
        else:
            self.render_page()

    def on_resize(self, event: events.Resize) -> None:
        self.render_page()

    @property
    def content_width(self) -> int:
        """Width of the body column at the current terminal size."""
        return fit_width(self.size.width, VIEW_WIDTH)

    # ── Hooks ───────────────────────────────────────────────────

    def load(self) -> None:
        """Start fetching whatever the page shows."""

    def render_page(self) -> None:
        """Redraw the body from the page state."""

    def title_contents(self) -> Sequence[str]:
        return ()

    def helper_items(self) -> Sequence[HelperItem]:
        return ()

    # ── Chrome ──────────────────────────────────────────────────

    def render_chrome(self) -> None:
        if not self.is_mounted:
            return
        title = self.query_one("#title-bar", TitleBar)
        if self.msg:
            title.set_title([self.msg], msg=True)
        else:
            title.set_title(self.title_contents())
        self.query_one("#error-line", ErrorLine).show_error(self.error)
        self.query_one("#helper-bar", HelperBar).set_items(self.helper_items())
        self.query_one("#page-body", Vertical).display = not self.fatal

    def show_message(self, msg: str) -> None:
        self.msg = msg
        self.error = None
        self.fatal = False
        self.render_chrome()

    def show_error(self, error: BaseException, fatal: bool = False) -> None:
        self.error = error
        self.fatal = fatal
        self.msg = ""
        self.render_chrome()

    def on_validation_failed(self, message: ValidationFailed) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        logger.debug("Form rejected: %s", message.error, extra={"occurrence": type(self).__name__})
        self.show_error(message.error)
        self.render_page()

    def clear_error(self) -> bool:
        """Drop a shown error; ``False`` when there was none."""
        if self.error is None:
            return False
        self.error = None
        self.fatal = False
        self.render_chrome()
        self.render_page()
        return True

    def set_loading(self, loading: bool) -> None:
        if self.is_mounted:
            self.query_one("#page-body", Vertical).loading = loading

    # ── Workers ─────────────────────────────────────────────────

    def spawn(self, work: Coroutine[Any, Any, None], name: str) -> None:
        self.run_worker(work, exclusive=True, name=name, group=self.source_tag)

    def report_failure(self, error: Exception, action: str = "") -> None:
        self.post_message(ApiFailure(self.source_tag, error, action))

    def on_api_failure(self, message: ApiFailure) -> None:
        if is_stale(message, self.source_tag):
            return
        message.stop()
        self.set_loading(False)
        self.handle_failure(message.error, message.action)

    def handle_failure(self, error: Exception, action: str = "") -> None:
        """Log *error*; unauthorised sends the user to the menu."""
        extra = {"action": action, "type": type(error).__name__, "occurrence": type(self).__name__}
        if isinstance(error, ApiError):
            extra["status"] = error.status
        logger.error("%s failed: %s", action or "Request", error, extra=extra)
        if isinstance(error, UnauthorizedError):
            self.post_message(SwitchToMenu())
            return
        self.show_error(error, fatal=self.failure_is_fatal(error, action))

    def failure_is_fatal(self, error: Exception, action: str) -> bool:
        """Whether *error* replaces the whole page body."""
        return False

    def go_back(self) -> None:
        if self.prev is None:
            self.post_message(SwitchToMenu())
        else:
            self.post_message(SwitchToPrevious(self.prev))


class YatijappModal(PageKeys, ModalScreen[Any]):
    """Overlay page; keys go through :meth:`handle_page_key` like full pages."""

    BINDINGS = page_bindings()
