"""Static rendering of a :class:`~yatijapp_tui.tui.pages.form.FormState`."""

from __future__ import annotations

from typing import Optional

from rich.console import Group
from rich.text import Text
from textual.widgets import Static

from yatijapp_tui.tui.pages.form import FormState
from yatijapp_tui.tui.style import NORMAL_DIM, field_prompt


class FormView(Static):
    """Draws every field as a prompt line followed by the field itself.

    With *numbered* set each prompt is prefixed by the function key that
    jumps to it.
    """

    DEFAULT_CSS = """
    FormView {
        height: auto;
        padding: 0 2;
    }
    """

    def __init__(self, form: Optional[FormState] = None, *, numbered: bool = True, **kwargs: object) -> None:
        super().__init__("", **kwargs)  # type: ignore[arg-type]
        self.form = form
        self.numbered = numbered

    def show_form(self, form: FormState) -> None:
        self.form = form
        self.refresh_form()

    def refresh_form(self) -> None:
        if self.form is None:
            self.update("")
            return
        parts = []
        for index, field in enumerate(self.form.fields):
            prompt = Text()
            if self.numbered:
                prompt.append(f"F{index + 1} ", style=NORMAL_DIM)
            prompt.append_text(field_prompt(field.label, field.focused, field.error))
            parts.append(prompt)
            parts.append(field.render())
            parts.append(Text(""))
        self.update(Group(*parts))
