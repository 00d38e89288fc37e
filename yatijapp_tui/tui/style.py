"""Rich renderables shared by the screens.

Title bars, helper bars, error lines and list rows are built here as
:class:`rich.text.Text` so the page state classes can render without a
running Textual app.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

from rich.style import Style
from rich.text import Text

from yatijapp_tui.constants import APP_NAME

if TYPE_CHECKING:
    from yatijapp_tui.api.models import RecordParents, RecordType

# ── Palette ──────────────────────────────────────────────────────────

TEXT = "#FEF0DD"
TEXT_MUTED = "#BDB09E"
PRIMARY = "#D6A966"
SECONDARY = "#84B3F0"
BG_LIGHT = "#1A150E"
DANGER = "#E37D6D"
WARNING = "#B2A12E"
SUCCESS = "#45B581"
INFO = "#6C9EEF"
HELPER = "grey46"
HELPER_DIM = "grey35"

STATUS_COLORS = {
    "queued": WARNING,
    "in progress": INFO,
    "completed": SUCCESS,
    "canceled": DANGER,
}

HIGHLIGHT = Style(color=TEXT, bold=True)
NORMAL = Style(color=TEXT)
NORMAL_DIM = Style(color=TEXT_MUTED)
MSG = Style(color=SUCCESS, bold=True)
WARN = Style(color=WARNING, bold=True)
ERROR = Style(color=DANGER, bold=True)
PROMPT = Style(color=PRIMARY, bold=True)
PROMPT_SELECTED = Style(color=SECONDARY, bold=True)
CHOICE = Style(color=BG_LIGHT, bgcolor=TEXT, bold=True)

HelperItem = Tuple[str, str]


def status_style(status: str) -> Style:
    return Style(color=STATUS_COLORS.get(status, TEXT))


# ── Chrome ───────────────────────────────────────────────────────────


def title_bar(contents: Sequence[str] = (), msg: bool = False) -> Text:
    """``Yatijapp - a - b`` with the last segment dimmed.

    With *msg* set the segments are success messages instead of a path.
    """
    title = Text(APP_NAME, style=HIGHLIGHT)
    if not contents:
        return title
    if msg:
        for content in contents:
            title.append(" - ", style=NORMAL)
            title.append(content, style=MSG)
        return title
    if len(contents) > 1:
        title.append(" - " + " - ".join(contents[:-1]), style=NORMAL)
    title.append(" - " + contents[-1], style=NORMAL_DIM)
    return title


def helper_bar(items: Iterable[HelperItem], highlight: bool = False) -> Text:
    """Key hints: ``key action`` pairs separated by wide gaps."""
    key_style = Style(color=TEXT, bold=True) if highlight else Style(color=HELPER, bold=True, italic=True)
    action_style = Style(color=TEXT_MUTED, italic=True) if highlight else Style(color=HELPER_DIM, italic=True)
    text = Text(justify="center")
    for i, (key, action) in enumerate(items):
        if i:
            text.append("    ")
        text.append(key, style=key_style)
        text.append(" ")
        text.append(action, style=action_style)
    return text


def error_line(error: Optional[BaseException]) -> Text:
    if error is None:
        return Text("")
    return Text(f"Error: {_error_text(error)}", style=ERROR, justify="center")


def _error_text(error: BaseException) -> str:
    return str(getattr(error, "msg", None) or error)


def warning_line(text: str) -> Text:
    return Text(text, style=WARN, justify="center")


def field_prompt(label: str, focused: bool, error: str = "") -> Text:
    """Field label, highlighted while focused, followed by its error."""
    text = Text(label, style=PROMPT_SELECTED if focused else PROMPT)
    if error:
        text.append(" ")
        text.append(error, style=ERROR)
    return text


def menu_title() -> Text:
    """Acrostic of the application name."""
    text = Text()
    parts = (("Y", "et"), ("A", "nother"), ("Ti", "me"), ("J", "ournaling"), ("App", "lication"))
    for i, (head, rest) in enumerate(parts):
        if i:
            text.append("\n")
        text.append(head, style=HIGHLIGHT)
        text.append(rest, style=NORMAL_DIM)
    return text


# ── Records ──────────────────────────────────────────────────────────


def render_list_item(
    title: str,
    status: str,
    parents: "RecordParents",
    selected: bool,
    width: int,
) -> Text:
    """One list row: a status-coloured marker, the title and the status.

    The selected row is drawn as a solid bar without the status text.
    """
    from yatijapp_tui.api.models import RecordType

    label = title
    if parents:
        trail = [parents.title(rt) for rt in (RecordType.TARGET, RecordType.ACTION) if rt in parents]
        label = " / ".join(t for t in trail + [title] if t)

    row = Text(" ∎ ", style=status_style(status), no_wrap=True, overflow="ellipsis")
    inner = max(width - 4, 1)
    if selected:
        row.append(f" {label}".ljust(inner)[:inner], style=CHOICE)
        return row

    status_text = status.lower()
    gap = inner - len(label) - len(status_text) - 1
    if gap < 1:
        label = label[: max(inner - len(status_text) - 3, 1)] + "…"
        gap = 1
    row.append(f" {label}", style=NORMAL)
    row.append(" " * gap)
    row.append(status_text, style=status_style(status))
    return row


def render_list_item_detail(
    *,
    record_type: "RecordType",
    description: str,
    status: str,
    due_date: Optional[date],
    parents: "RecordParents",
    has_notes: bool,
    children_count: int,
    width: int,
) -> Text:
    """Detail block shown under the list for the highlighted record."""
    from yatijapp_tui.api.models import RecordType

    text = Text()
    if record_type is not RecordType.SESSION:
        text.append("  Description:\n", style=PROMPT)
        text.append(f"  {description.strip() or '---'}\n", style=NORMAL)

    if parents:
        if record_type in (RecordType.ACTION, RecordType.SESSION):
            text.append("  Target: ", style=PROMPT)
            text.append(parents.title(RecordType.TARGET) + "\n", style=NORMAL)
        if record_type is RecordType.SESSION:
            text.append("  Action: ", style=PROMPT)
            text.append(parents.title(RecordType.ACTION) + "\n", style=NORMAL)

    text.append("  Due at: ", style=PROMPT)
    text.append(due_date.strftime("%Y-%m-%d") if due_date else "--", style=NORMAL)
    text.append("    Status: ", style=PROMPT)
    text.append(status.lower(), style=status_style(status))
    if record_type is RecordType.TARGET:
        text.append("    Actions count: ", style=PROMPT)
        text.append(str(children_count), style=NORMAL)
    elif record_type is RecordType.ACTION:
        text.append("    Sessions count: ", style=PROMPT)
        text.append(str(children_count), style=NORMAL)
    text.append("    Notes: ", style=PROMPT)
    if has_notes:
        text.append("✔", style=Style(color=SUCCESS))
    else:
        text.append("✘", style=Style(color=DANGER))
    return text
