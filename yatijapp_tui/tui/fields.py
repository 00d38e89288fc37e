"""Form fields as plain state machines.

Every field implements the :class:`Focusable` contract: it can be
focused and blurred, reacts to normalised key names through
:meth:`Focusable.handle_key` (optionally returning a message for the
page to post), renders itself as a :class:`rich.text.Text`, exposes its
value(s) and validates itself.  Nothing here touches the terminal, so
forms can be driven entirely from tests.
"""

from __future__ import annotations

import logging
import string
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from rich.style import Style
from rich.text import Text
from textual.message import Message

from yatijapp_tui import validator as v
from yatijapp_tui.api.models import RecordType
from yatijapp_tui.constants import FORM_WIDTH
from yatijapp_tui.tui import editor
from yatijapp_tui.tui.events import ButtonPressed, OpenEditor, ShowSelector
from yatijapp_tui.tui.style import CHOICE, HIGHLIGHT, NORMAL, NORMAL_DIM, PROMPT_SELECTED

logger = logging.getLogger(__name__)

NAME_LIMIT = 80
DESCRIPTION_LIMIT = 200


class Focusable:
    """Base class for form fields."""

    def __init__(self, label: str) -> None:
        self.label = label
        self._focused = False
        self._error = ""

    # ── Focus ───────────────────────────────────────────────────

    def focus(self) -> None:
        self._focused = True

    def blur(self) -> None:
        self._focused = False

    @property
    def focused(self) -> bool:
        return self._focused

    # ── Input / output ──────────────────────────────────────────

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        return None

    def render(self) -> Text:
        raise NotImplementedError

    @property
    def value(self) -> str:
        raise NotImplementedError

    @property
    def values(self) -> List[str]:
        return [self.value]

    def set_value(self, value: str) -> None:
        raise NotImplementedError

    def set_values(self, *values: str) -> None:
        if len(values) != 1:
            raise ValueError(f"{type(self).__name__} expects a single value")
        self.set_value(values[0])

    # ── Validation ──────────────────────────────────────────────

    def validate(self) -> str:
        """Re-check the value; returns (and stores) the error text."""
        return self._error

    @property
    def error(self) -> str:
        return self._error

    def set_error(self, msg: str) -> None:
        self._error = msg


# ── Text ─────────────────────────────────────────────────────────────


class TextField(Focusable):
    """Single-line text input with an optional validator chain."""

    def __init__(
        self,
        label: str,
        *,
        char_limit: int = 0,
        placeholder: str = "",
        password: bool = False,
        validator: Optional[v.Validator] = None,
        width: int = FORM_WIDTH,
    ) -> None:
        super().__init__(label)
        self.char_limit = char_limit
        self.placeholder = placeholder
        self.password = password
        self.validator = validator
        self.width = width
        self._value = ""
        self._cursor = 0

    @property
    def value(self) -> str:
        return self._value

    @property
    def cursor(self) -> int:
        return self._cursor

    def set_value(self, value: str) -> None:
        if self.char_limit and len(value) > self.char_limit:
            value = value[: self.char_limit]
        self._value = value
        self._cursor = len(value)

    def clear(self) -> None:
        self.set_value("")

    def validate(self) -> str:
        self._error = v.run_validator(self.validator, self._value)
        return self._error

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        if not self._focused:
            return None
        if key == "backspace":
            if self._cursor > 0:
                self._value = self._value[: self._cursor - 1] + self._value[self._cursor :]
                self._cursor -= 1
        elif key == "delete":
            self._value = self._value[: self._cursor] + self._value[self._cursor + 1 :]
        elif key == "left":
            self._cursor = max(self._cursor - 1, 0)
        elif key == "right":
            self._cursor = min(self._cursor + 1, len(self._value))
        elif key in ("home", "ctrl+a"):
            self._cursor = 0
        elif key in ("end", "ctrl+e"):
            self._cursor = len(self._value)
        elif key == "ctrl+u":
            self._value = self._value[self._cursor :]
            self._cursor = 0
        elif key == "ctrl+k":
            self._value = self._value[: self._cursor]
        elif character and len(character) == 1 and character.isprintable():
            if self.char_limit and len(self._value) >= self.char_limit:
                return None
            self._value = self._value[: self._cursor] + character + self._value[self._cursor :]
            self._cursor += 1
        return None

    def render(self) -> Text:
        if not self._value and not self._focused:
            return Text(self.placeholder, style=NORMAL_DIM, no_wrap=True)

        shown = "•" * len(self._value) if self.password else self._value
        visible = max(self.width - 2, 1)
        start = max(self._cursor - visible + 1, 0)
        window = shown[start : start + visible]
        cursor = self._cursor - start

        text = Text("> ", style=PROMPT_SELECTED if self._focused else NORMAL_DIM, no_wrap=True)
        if not self._value:
            if self._focused:
                text.append(self.placeholder[:1] or " ", style=Style(reverse=True))
                text.append(self.placeholder[1:], style=NORMAL_DIM)
            return text
        text.append(window[:cursor], style=NORMAL)
        if self._focused:
            text.append(window[cursor : cursor + 1] or " ", style=Style(reverse=True))
            text.append(window[cursor + 1 :], style=NORMAL)
        else:
            text.append(window[cursor:], style=NORMAL)
        return text


# ── Choices ──────────────────────────────────────────────────────────


def choice_marker(selected: bool, focused: bool) -> str:
    return "➨ " if selected and focused else "- "


class RadioField(Focusable):
    """Exactly one of *options*.

    The default view is a horizontal row navigated with ``left``/``h`` and
    ``right``/``l``.  The list view is vertical (``up``/``k``,
    ``down``/``j``) and skips empty-string separators.  Both wrap.
    """

    DEFAULT_VIEW = "default"
    LIST_VIEW = "list"

    def __init__(self, label: str, options: Sequence[str], *, view: str = DEFAULT_VIEW) -> None:
        super().__init__(label)
        if not any(options):
            raise ValueError("radio field needs at least one option")
        self.options = list(options)
        self.view = view
        self.selected = 0
        if self.options[0] == "":
            self._step(1)

    @property
    def value(self) -> str:
        return self.options[self.selected]

    def set_value(self, value: str) -> None:
        if value == "" or value not in self.options:
            raise ValueError(f"value {value} not found in options")
        self.selected = self.options.index(value)

    def _step(self, delta: int) -> None:
        while True:
            self.selected = (self.selected + delta) % len(self.options)
            if self.options[self.selected] != "":
                return

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        if not self._focused:
            return None
        if self.view == self.LIST_VIEW:
            if key in ("up", "k"):
                self._step(-1)
            elif key in ("down", "j"):
                self._step(1)
        elif key in ("left", "h"):
            self._step(-1)
        elif key in ("right", "l"):
            self._step(1)
        return None

    def render(self) -> Text:
        text = Text()
        if self.view == self.LIST_VIEW:
            for i, option in enumerate(self.options):
                if i:
                    text.append("\n")
                text.append(f" {option} ".ljust(26), style=CHOICE if i == self.selected else NORMAL)
            return text
        for i, option in enumerate(self.options):
            if i:
                text.append("   ")
            chosen = i == self.selected
            text.append(
                choice_marker(chosen, self._focused) + option,
                style=HIGHLIGHT if chosen else NORMAL_DIM,
            )
        return text


class CheckboxField(Focusable):
    """Any subset of *options*; ``space`` toggles the one under the cursor."""

    def __init__(self, label: str, options: Sequence[str]) -> None:
        super().__init__(label)
        if not options:
            raise ValueError("checkbox field needs at least one option")
        self.options = list(options)
        self.cursor = 0
        self.checked = [False] * len(self.options)

    @property
    def value(self) -> str:
        return ",".join(self.values)

    @property
    def values(self) -> List[str]:
        return [opt for opt, on in zip(self.options, self.checked) if on]

    def set_value(self, value: str) -> None:
        self.set_values(*[part for part in value.split(",") if part])

    def set_values(self, *values: str) -> None:
        unknown = [val for val in values if val not in self.options]
        if unknown:
            raise ValueError(f"value {unknown[0]} not found in options")
        self.checked = [opt in values for opt in self.options]

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        if not self._focused:
            return None
        if key in ("left", "h"):
            self.cursor = (self.cursor - 1) % len(self.options)
        elif key in ("right", "l"):
            self.cursor = (self.cursor + 1) % len(self.options)
        elif key == "space":
            self.checked[self.cursor] = not self.checked[self.cursor]
        return None

    def render(self) -> Text:
        text = Text()
        for i, option in enumerate(self.options):
            if i:
                text.append("   ")
            mark = "[x] " if self.checked[i] else "[ ] "
            under = i == self.cursor and self._focused
            style = HIGHLIGHT if self.checked[i] else NORMAL_DIM
            text.append(choice_marker(under, self._focused), style=PROMPT_SELECTED if under else style)
            text.append(mark + option, style=style)
        return text


class ButtonField(Focusable):
    """``enter`` while focused emits :class:`ButtonPressed`."""

    @property
    def value(self) -> str:
        return self.label

    def set_value(self, value: str) -> None:
        self.label = value

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        if self._focused and key == "enter":
            return ButtonPressed(self.label)
        return None

    def render(self) -> Text:
        return Text(f" {self.label} ", style=CHOICE if self._focused else NORMAL)


# ── Selector ─────────────────────────────────────────────────────────


class SelectorField(Focusable):
    """Shows a chosen record title; ``e`` asks for a picker of *record_type*."""

    def __init__(
        self,
        label: str,
        record_type: RecordType,
        *,
        validator: Optional[v.Validator] = None,
        placeholder: str = "",
    ) -> None:
        super().__init__(label)
        self.record_type = record_type
        self.validator = validator
        self.placeholder = placeholder or f"press e to choose a {record_type.label}"
        self._text = ""

    @property
    def value(self) -> str:
        return self._text

    def set_value(self, value: str) -> None:
        self._text = value

    def validate(self) -> str:
        self._error = v.run_validator(self.validator, self._text)
        return self._error

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        if self._focused and key == "e":
            return ShowSelector(self.record_type)
        return None

    def render(self) -> Text:
        if not self._text:
            return Text(self.placeholder, style=NORMAL_DIM)
        return Text(self._text, style=HIGHLIGHT if self._focused else NORMAL)


# ── Note ─────────────────────────────────────────────────────────────

NOTE_TEMPLATES: Dict[RecordType, str] = {
    RecordType.TARGET: "# ${name}\n\n## Goal\n\n## Notes\n",
    RecordType.ACTION: "# ${name}\n\n> Target: ${target}\n\n## Steps\n\n## Notes\n",
    RecordType.SESSION: "# Session\n\n> Target: ${target}\n> Action: ${action}\n\n## Progress\n",
}

NoteContext = Callable[[], Dict[str, str]]


class NoteField(Focusable):
    """Markdown note edited in the external editor.

    ``e`` while focused prepares a temp file (seeded with a template
    when the note is empty) and returns :class:`OpenEditor`; the page
    runs the editor and reports back through :meth:`editor_finished`.
    The value is the content with ``${name}``, ``${target}`` and
    ``${action}`` filled in from *context*.
    """

    def __init__(self, label: str, record_type: RecordType, context: Optional[NoteContext] = None) -> None:
        super().__init__(label)
        self.record_type = record_type
        self.context = context or (lambda: {})
        self.path: Optional[str] = None
        self._content = ""

    @property
    def content(self) -> str:
        return self._content

    @property
    def value(self) -> str:
        info = {"name": "", "target": "", "action": ""}
        info.update(self.context())
        return string.Template(self._content).safe_substitute(info)

    def set_value(self, value: str) -> None:
        self._content = value

    def default_content(self) -> str:
        return NOTE_TEMPLATES.get(self.record_type, "")

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        if not self._focused or key != "e":
            return None
        if self.path is None:
            try:
                self.path = editor.create_temp_note()
            except OSError as exc:
                logger.error("Failed to create note: %s", exc, extra={"occurrence": "note field"})
                self._error = "failed to create note"
                return None
        try:
            editor.write_note(self.path, self._content or self.default_content())
        except OSError as exc:
            logger.error("Failed to write note: %s", exc, extra={"occurrence": "note field"})
            self._error = "failed to create note"
            return None
        self._error = ""
        return OpenEditor(self.path)

    def editor_finished(self, error: Optional[Exception] = None) -> None:
        if error is not None:
            self._error = str(error)
            return
        if self.path is None:
            return
        try:
            self._content = editor.read_note(self.path)
        except OSError as exc:
            logger.error("Failed to read note: %s", exc, extra={"occurrence": "note field"})
            self._error = "failed to read note content"
            return
        self._error = ""

    def render(self) -> Text:
        if not self._content.strip():
            return Text("(Empty Note)  press e to edit", style=NORMAL_DIM)
        lines = self._content.strip().splitlines()
        preview = Text("\n".join(lines[:3]), style=NORMAL)
        if len(lines) > 3:
            preview.append(f"\n… {len(lines) - 3} more line(s)", style=NORMAL_DIM)
        return preview


# ── Builders ─────────────────────────────────────────────────────────


def name_field(record_type: RecordType, width: int = FORM_WIDTH) -> TextField:
    return TextField(
        "Name",
        char_limit=NAME_LIMIT,
        placeholder=f"Give {record_type.label} a name",
        validator=v.multiple(v.required("title is required"), v.max_length(NAME_LIMIT)),
        width=width,
    )


def due_field(record_exists: bool, today: Optional[date] = None, width: int = FORM_WIDTH) -> TextField:
    """Due date; new records may not be due before yesterday."""
    checks = [v.date_format()]
    if not record_exists:
        checks.append(v.date_after((today or date.today()) - timedelta(days=1)))
    return TextField("Due Date", placeholder="YYYY-mm-dd", validator=v.multiple(*checks), width=width)


def description_field(width: int = FORM_WIDTH) -> TextField:
    return TextField(
        "Description",
        char_limit=DESCRIPTION_LIMIT,
        placeholder="Information about the record",
        validator=v.reach_max_length(DESCRIPTION_LIMIT),
        width=width,
    )


def status_field(options: Sequence[str]) -> RadioField:
    return RadioField("Status", options)


def time_field(label: str, width: int = FORM_WIDTH) -> TextField:
    return TextField(
        label,
        placeholder="YYYY-mm-dd HH:MM:SS",
        validator=v.date_format(v.DATETIME_FORMATS),
        width=width,
    )


def email_field(width: int) -> TextField:
    return TextField(
        "Email",
        placeholder="email",
        validator=v.multiple(v.required("email is required"), v.email()),
        width=width,
    )


def password_field(width: int, label: str = "Password") -> TextField:
    return TextField(
        label,
        password=True,
        placeholder="password",
        validator=v.multiple(v.required("password is required"), v.password_length(8, 72)),
        width=width,
    )


def password_confirm_field(width: int, peer: TextField) -> TextField:
    return TextField(
        "Confirm Password",
        password=True,
        placeholder="confirm password",
        validator=v.multiple(
            v.required("password confirmation is required"),
            v.match(lambda: peer.value, "password not match"),
        ),
        width=width,
    )


def username_field(width: int) -> TextField:
    return TextField(
        "Username",
        char_limit=30,
        placeholder="username",
        validator=v.multiple(v.required("username is required"), v.min_length(2), v.max_length(30)),
        width=width,
    )


def token_field(width: int, placeholder: str) -> TextField:
    return TextField(
        "Token",
        placeholder=placeholder,
        validator=v.required("token is required"),
        width=width,
    )


def selector_field(record_type: RecordType) -> SelectorField:
    return SelectorField(
        record_type.value,
        record_type,
        validator=v.required(f"{record_type.label} is required"),
    )
