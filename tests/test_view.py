"""Tests for the record view report."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from yatijapp_tui.tui.pages.view import format_duration, record_markdown


@pytest.mark.parametrize(
    "span, expected",
    [
        (timedelta(hours=1, minutes=2, seconds=3), "1h2m3s"),
        (timedelta(seconds=45), "45s"),
        (timedelta(0), "0s"),
        (timedelta(minutes=2), "2m0s"),
        (timedelta(hours=26), "26h0m0s"),
        (timedelta(seconds=3.9), "3s"),
        (timedelta(seconds=-90), "-1m30s"),
    ],
)
def test_format_duration(span: timedelta, expected: str) -> None:
    assert format_duration(span) == expected


class TestRecordMarkdown:
    def test_target(self, make_target) -> None:
        md = record_markdown(make_target(1))
        assert md.startswith("# Target 1\n")
        assert "## Status\nQUEUED" in md
        assert "- **Due Date:** --" in md
        assert "- **Last Active:** --" in md
        assert "## Upstream" not in md
        assert md.endswith("(Empty Note)")

    def test_target_with_details(self, make_target) -> None:
        md = record_markdown(
            make_target(1, description="A long book", due_date=date(2025, 7, 1), notes="# plan", status="in progress")
        )
        assert "A long book" in md
        assert "- **Due Date:** 2025-07-01" in md
        assert "IN PROGRESS" in md
        assert md.endswith("# plan")

    def test_action_upstream(self, make_action) -> None:
        md = record_markdown(make_action(2))
        assert "## Upstream\n- **Target:** Target 1" in md

    def test_finished_session(self, make_session) -> None:
        session = make_session(1, ends_at=datetime(2025, 6, 1, 11, 30, 5))
        md = record_markdown(session)
        assert "- **Target:** Target 1\n- **Action:** Action 1" in md
        assert "COMPLETED" in md
        assert "- **Starts At:** 2025-06-01 10:00:00" in md
        assert "- **Duration:** 1h30m5s" in md

    def test_running_session(self, make_session) -> None:
        md = record_markdown(make_session(1))
        assert "IN PROGRESS" in md
        assert "- **Ends At:** --" in md
        assert "Duration" not in md
