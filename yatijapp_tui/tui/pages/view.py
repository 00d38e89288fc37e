"""Markdown report shown on the record view page."""

from __future__ import annotations

from datetime import timedelta
from typing import List

from yatijapp_tui.api.models import DATE_FORMAT, TIMESTAMP_FORMAT, Record, RecordType


def format_duration(span: timedelta) -> str:
    """Whole-second duration as ``1h2m3s`` (``0s`` for nothing)."""
    total = int(span.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def record_markdown(record: Record) -> str:
    record_type = record.actual_type
    parents = record.parents
    lines: List[str] = [f"# {record.title}", ""]
    if record.description:
        lines += [record.description, ""]

    if record_type is RecordType.ACTION:
        lines += ["## Upstream", f"- **Target:** {parents.title(RecordType.TARGET)}", ""]
    elif record_type is RecordType.SESSION:
        lines += [
            "## Upstream",
            f"- **Target:** {parents.title(RecordType.TARGET)}",
            f"- **Action:** {parents.title(RecordType.ACTION)}",
            "",
        ]

    lines += ["## Status", record.status.upper(), "", "## Timestamp"]
    if record_type is RecordType.SESSION:
        lines.append(f"- **Starts At:** {record.starts_at.strftime(TIMESTAMP_FORMAT)}")  # type: ignore[union-attr]
        ends_at = record.ends_at  # type: ignore[union-attr]
        if ends_at is not None:
            lines.append(f"- **Ends At:** {ends_at.strftime(TIMESTAMP_FORMAT)}")
            lines.append(f"- **Duration:** {format_duration(ends_at - record.starts_at)}")  # type: ignore[union-attr]
        else:
            lines.append("- **Ends At:** --")
    else:
        due = record.due_date
        lines.append(f"- **Due Date:** {due.strftime(DATE_FORMAT) if due else '--'}")
        lines.append(f"- **Created At:** {record.created_at.strftime(TIMESTAMP_FORMAT)}")
        lines.append(f"- **Updated At:** {record.updated_at.strftime(TIMESTAMP_FORMAT)}")
        last_active = record.last_active
        lines.append(f"- **Last Active:** {last_active.strftime(TIMESTAMP_FORMAT) if last_active else '--'}")

    lines += ["", "## Notes", "---", record.notes or "(Empty Note)"]
    return "\n".join(lines)
