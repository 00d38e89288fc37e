"""Focus bookkeeping shared by every form page."""

from __future__ import annotations

from typing import List, Optional

from textual.message import Message

from yatijapp_tui.errors import ValidationError
from yatijapp_tui.tui.fields import Focusable
from yatijapp_tui.tui.keys import fn_key_number, is_fn_key


def validate_fields(fields: List[Focusable], msg: str = "input validation failed") -> None:
    """Validate every field, then raise once if any of them failed.

    All fields are checked so each one shows its own error.
    """
    failed = [field for field in fields if field.validate()]
    if failed:
        raise ValidationError(msg)


class FormState:
    """An ordered list of fields with exactly one focus position.

    In *highlight* mode no field holds focus; the page reacts to its own
    shortcuts instead of forwarding keys.
    """

    def __init__(self, fields: List[Focusable], focused: int = 0) -> None:
        self.fields: List[Focusable] = []
        self.focused = 0
        self.highlight = False
        self.set_fields(fields, focused)

    def set_fields(self, fields: List[Focusable], focused: int = 0) -> None:
        for field in self.fields:
            field.blur()
        self.fields = fields
        self.focused = focused if 0 <= focused < len(fields) else 0
        self.highlight = False
        if self.fields:
            self.fields[self.focused].focus()

    @property
    def current(self) -> Optional[Focusable]:
        if not self.fields or self.highlight:
            return None
        return self.fields[self.focused]

    def focus_index(self, index: int) -> None:
        """Move focus to *index*, validating the field being left."""
        if not self.fields:
            return
        leaving = self.fields[self.focused]
        leaving.validate()
        leaving.blur()
        self.focused = index % len(self.fields)
        self.highlight = False
        self.fields[self.focused].focus()

    def next(self) -> None:
        self.focus_index(self.focused + 1)

    def prev(self) -> None:
        self.focus_index(self.focused - 1)

    def jump(self, key: str) -> bool:
        """Focus the field numbered by function key *key*; ``False`` if out of range."""
        if not is_fn_key(key):
            return False
        index = fn_key_number(key) - 1
        if index >= len(self.fields):
            return False
        self.focus_index(index)
        return True

    def enter_highlight(self) -> None:
        if self.fields:
            self.fields[self.focused].validate()
            self.fields[self.focused].blur()
        self.highlight = True

    def leave_highlight(self) -> None:
        self.highlight = False
        if self.fields:
            self.fields[self.focused].focus()

    def handle_key(self, key: str, character: Optional[str] = None) -> Optional[Message]:
        """Forward *key* to the focused field."""
        field = self.current
        if field is None:
            return None
        return field.handle_key(key, character)

    def validate(self, msg: str = "input validation failed") -> None:
        validate_fields(self.fields, msg)
