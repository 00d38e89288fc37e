"""Yes/no confirmation and key-help overlays."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Label, Static

from yatijapp_tui.tui.events import ButtonPressed
from yatijapp_tui.tui.fields import ButtonField
from yatijapp_tui.tui.screens.base import YatijappModal, column_rules
from yatijapp_tui.tui.style import NORMAL, HelperItem, helper_bar, warning_line

YES = "Yes"
NO = "No"


class ConfirmScreen(YatijappModal):
    """Dismisses with ``True`` on ``y`` and ``False`` on ``n``/``esc``.

    The ``Yes``/``No`` buttons below the prompt can also be chosen with
    ``←/→`` or ``tab`` and pressed with ``enter``; ``No`` starts focused.
    """

    DEFAULT_CSS = f"""
    ConfirmScreen {{
        align: center middle;
    }}
    #confirm-dialog {{
        {column_rules(60)}
        height: auto;
        border: thick $error;
        background: $surface;
        padding: 1 2;
    }}
    #confirm-title {{
        text-style: bold;
        color: $error;
        width: 100%;
        content-align: center middle;
        margin-bottom: 1;
    }}
    #confirm-warning {{
        margin-top: 1;
    }}
    #confirm-buttons {{
        margin-top: 1;
    }}
    #confirm-helper {{
        margin-top: 1;
    }}
    """

    def __init__(self, title: str, prompt: str, warning: str = "", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._title = title
        self._prompt = prompt
        self._warning = warning
        self.buttons: List[ButtonField] = [ButtonField(YES), ButtonField(NO)]
        self.buttons[1].focus()

    @property
    def focused_button(self) -> ButtonField:
        return next(button for button in self.buttons if button.focused)

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self._title, id="confirm-title")
            yield Static(Text(self._prompt, style=NORMAL, justify="center"), id="confirm-prompt")
            if self._warning:
                yield Static(warning_line(self._warning), id="confirm-warning")
            yield Static(self.render_buttons(), id="confirm-buttons")
            yield Static(helper_bar([("y", "yes"), ("n", "no"), ("←/→", "choose"), ("enter", "press")]), id="confirm-helper")

    def render_buttons(self) -> Text:
        text = Text(justify="center")
        for i, button in enumerate(self.buttons):
            if i:
                text.append("      ")
            text.append_text(button.render())
        return text

    def switch_button(self) -> None:
        for button in self.buttons:
            if button.focused:
                button.blur()
            else:
                button.focus()
        self.query_one("#confirm-buttons", Static).update(self.render_buttons())

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        if key == "y":
            self.dismiss(True)
        elif key in ("n", "esc"):
            self.dismiss(False)
        elif key in ("left", "right", "h", "l", "tab", "shift+tab"):
            self.switch_button()
        elif key == "enter":
            pressed = self.focused_button.handle_key(key, character)
            if isinstance(pressed, ButtonPressed):
                self.dismiss(pressed.label == YES)
        return True


class HelpScreen(YatijappModal):
    """Lists a page's key bindings; ``?``, ``esc`` or ``q`` closes it."""

    DEFAULT_CSS = f"""
    HelpScreen {{
        align: center middle;
    }}
    #help-dialog {{
        {column_rules(50)}
        height: auto;
        border: heavy $primary;
        background: $surface;
        padding: 1 2;
    }}
    #help-title {{
        text-style: bold;
        margin-bottom: 1;
    }}
    """

    def __init__(self, items: Sequence[HelperItem], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._items = list(items)

    def compose(self) -> ComposeResult:
        width = max((len(key) for key, _ in self._items), default=0) + 2
        lines = Text()
        for i, (key, action) in enumerate(self._items):
            if i:
                lines.append("\n")
            lines.append(key.ljust(width), style="bold")
            lines.append(action, style="italic")
        with Vertical(id="help-dialog"):
            yield Label("Keys", id="help-title")
            yield Static(lines)

    def handle_page_key(self, key: str, character: Optional[str]) -> bool:
        if key in ("?", "esc", "q", "<"):
            self.dismiss(None)
        return True
