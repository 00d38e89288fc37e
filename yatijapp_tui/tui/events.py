"""Custom Textual messages for the yatijapp TUI.

Navigation messages bubble from a screen to the app, which owns the
screen stack.  Result messages are posted by workers back onto the
screen that started them and carry that screen's ``source`` tag; a
screen ignores results whose tag is not its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from textual.message import Message

from yatijapp_tui.api.models import ListResult, Record, RecordParents, RecordType, User
from yatijapp_tui.api.preferences import Preferences

if TYPE_CHECKING:
    from textual.screen import Screen


def is_stale(message: "ResultMessage", source: str) -> bool:
    """``True`` when *message* was produced for another page."""
    return message.source != source


# ── Navigation ──────────────────────────────────────────────────────


class SwitchToMenu(Message):
    """Reset the stack to a fresh menu."""

    def __init__(self, msg: str = "") -> None:
        self.msg = msg
        super().__init__()


class SwitchToSignin(Message):
    pass


class SwitchToSignup(Message):
    pass


class SwitchToResetPassword(Message):
    pass


class SwitchToList(Message):
    """Open the list of *record_type*, narrowed to the parents in *src*."""

    def __init__(self, record_type: RecordType, src: Optional[RecordParents] = None) -> None:
        self.record_type = record_type
        self.src = src.copy() if src is not None else RecordParents()
        super().__init__()


class SwitchToView(Message):
    def __init__(self, record_type: RecordType, uuid: str) -> None:
        self.record_type = record_type
        self.uuid = uuid
        super().__init__()


class SwitchToCreate(Message):
    """Open an empty config form, pre-filled with the parents in *src*."""

    def __init__(self, record_type: RecordType, src: Optional[RecordParents] = None) -> None:
        self.record_type = record_type
        self.src = src.copy() if src is not None else RecordParents()
        super().__init__()


class SwitchToEdit(Message):
    def __init__(self, record_type: RecordType, record: Record) -> None:
        self.record_type = record_type
        self.record = record
        super().__init__()


class SwitchToFilter(Message):
    def __init__(self, record_type: RecordType) -> None:
        self.record_type = record_type
        super().__init__()


class SwitchToSearchList(Message):
    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__()


class SwitchToPrevious(Message):
    """Go back to *target*, optionally showing *msg* in its title bar."""

    def __init__(self, target: Optional["Screen"], msg: str = "") -> None:
        self.target = target
        self.msg = msg
        super().__init__()


# ── Async results ───────────────────────────────────────────────────


class ResultMessage(Message):
    """Base for worker results; ``source`` names the page that asked."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__()


class AllRecordsLoaded(ResultMessage):
    """A page of records arrived; *append* adds it to the loaded ones."""

    def __init__(self, source: str, result: ListResult, msg: str = "", append: bool = False) -> None:
        self.result = result
        self.msg = msg
        self.append = append
        super().__init__(source)


class RecordLoaded(ResultMessage):
    """A single record arrived; *intent* says what to do with it."""

    def __init__(self, source: str, record: Record, msg: str = "", intent: str = "view") -> None:
        self.record = record
        self.msg = msg
        self.intent = intent
        super().__init__(source)


class UserLoaded(ResultMessage):
    """The signed-in user, or ``None`` when the server rejected the token."""

    def __init__(self, source: str, user: Optional[User]) -> None:
        self.user = user
        super().__init__(source)


class PreferencesLoaded(ResultMessage):
    def __init__(self, source: str, preferences: Preferences) -> None:
        self.preferences = preferences
        super().__init__(source)


class RecordDeleted(ResultMessage):
    def __init__(self, source: str, record_type: RecordType, msg: str) -> None:
        self.record_type = record_type
        self.msg = msg
        super().__init__(source)


class ApiSuccess(ResultMessage):
    """A write succeeded; go to *redirect* (or stay) showing *msg*."""

    def __init__(self, source: str, msg: str, redirect: Optional["Screen"] = None) -> None:
        self.msg = msg
        self.redirect = redirect
        super().__init__(source)


class ApiFailure(ResultMessage):
    """An API call raised; *action* names it for the log."""

    def __init__(self, source: str, error: Exception, action: str = "") -> None:
        self.error = error
        self.action = action
        super().__init__(source)


# ── Internal ────────────────────────────────────────────────────────


class EditorFinished(ResultMessage):
    """The external editor exited; *error* is set when it could not run."""

    def __init__(self, source: str, path: str, error: Optional[Exception] = None) -> None:
        self.path = path
        self.error = error
        super().__init__(source)


class ValidationFailed(ResultMessage):
    """A form refused to submit; the page shows *error*."""

    def __init__(self, source: str, error: Exception) -> None:
        self.error = error
        super().__init__(source)


class ShowSelector(Message):
    """A selector field asked for a picker of *record_type* records."""

    def __init__(self, record_type: RecordType) -> None:
        self.record_type = record_type
        super().__init__()


class SelectorSelected(Message):
    """A record was picked in the selector opened by *caller*."""

    def __init__(self, caller: object, record_type: RecordType, title: str, uuid: str) -> None:
        self.caller = caller
        self.record_type = record_type
        self.title = title
        self.uuid = uuid
        super().__init__()


class ButtonPressed(Message):
    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__()


class OpenEditor(Message):
    """A note field wants the external editor opened on *path*."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__()
