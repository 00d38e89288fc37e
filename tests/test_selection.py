"""Tests for the paginator and the record selection cursor."""

from __future__ import annotations

import pytest

from yatijapp_tui.api import RecordParent, RecordParents, RecordType
from yatijapp_tui.api.models import ListResult, Metadata
from yatijapp_tui.tui.pages.records import (
    RecordsSelection,
    deleted_message,
    delete_prompt,
    list_title,
    sync_prev_src,
)
from yatijapp_tui.tui.paginator import Paginator


def _result(records, current_page: int = 1, last_page: int = 1) -> ListResult:
    return ListResult(
        metadata=Metadata(current_page=current_page, last_page=last_page, total_records=len(records)),
        records=records,
    )


@pytest.fixture
def targets(make_target):
    return lambda count: [make_target(i) for i in range(count)]


# ── Paginator ───────────────────────────────────────────────────────────


class TestPaginator:
    def test_total_pages(self) -> None:
        p = Paginator(10)
        assert p.set_total_pages(0) == 1
        assert p.set_total_pages(10) == 1
        assert p.set_total_pages(11) == 2
        assert p.set_total_pages(23) == 3

    def test_slice_bounds_last_page(self) -> None:
        p = Paginator(10)
        p.set_total_pages(23)
        p.page = 2
        assert p.slice_bounds(23) == (20, 23)
        assert p.items_on_page(23) == 3
        assert p.on_last_page

    def test_page_moves_stop_at_edges(self) -> None:
        p = Paginator(6)
        p.set_total_pages(7)
        p.prev_page()
        assert p.page == 0 and p.on_first_page
        p.next_page()
        p.next_page()
        assert p.page == 1

    def test_render_has_a_dot_per_page(self) -> None:
        p = Paginator(10)
        p.set_total_pages(31)
        assert p.render().plain == "••••"

    def test_rejects_empty_pages(self) -> None:
        with pytest.raises(ValueError):
            Paginator(0)


# ── Selection cursor ────────────────────────────────────────────────────


class TestRecordsSelection:
    def test_reload_clamps_cursor(self, targets) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.set_records(_result(targets(23)))
        sel.paginator.page = 2
        sel.selected = 22

        sel.set_records(_result(targets(20)))
        assert sel.paginator.page == 1
        assert sel.selected == 19
        assert sel.current.uuid == "t19"

    def test_reload_clears_changed(self, targets) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.selection_search_query("book")
        assert sel.changed
        sel.set_records(_result(targets(3)))
        assert not sel.changed

    def test_empty_list(self) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.set_records(_result([]))
        assert sel.current is None
        assert sel.page_records() == []
        assert sel.selected == 0

    def test_next_crosses_pages(self, targets) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.set_records(_result(targets(12)))
        for _ in range(10):
            assert sel.next() is False
        assert sel.selected == 10
        assert sel.paginator.page == 1
        sel.prev()
        assert sel.selected == 9
        assert sel.paginator.page == 0

    def test_next_at_end_asks_for_more(self, targets) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.set_records(_result(targets(2), current_page=1, last_page=2))
        sel.next()
        assert sel.next() is True
        assert sel.selected == 1

        sel.set_records(_result(targets(2), current_page=2, last_page=2))
        assert sel.next() is False

    def test_next_page_and_append(self, targets, make_target) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.set_records(_result(targets(10), current_page=1, last_page=2))
        assert sel.next_page() is True
        assert sel.paginator.page == 0

        sel.append_records(_result([make_target(i) for i in range(10, 15)], current_page=2, last_page=2))
        assert len(sel.records) == 15
        assert not sel.has_more
        assert sel.next_page() is False
        assert sel.paginator.page == 1
        assert sel.selected == 10
        assert [r.uuid for r in sel.page_records()] == ["t10", "t11", "t12", "t13", "t14"]

    def test_prev_page_lands_on_first_row(self, targets) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.set_records(_result(targets(25)))
        sel.next_page()
        sel.next_page()
        assert sel.selected == 20
        sel.prev_page()
        assert (sel.paginator.page, sel.selected) == (1, 10)
        sel.prev_page()
        sel.prev_page()
        assert (sel.paginator.page, sel.selected) == (0, 0)

    def test_reset_cursor(self, targets) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.set_records(_result(targets(15)))
        sel.next_page()
        sel.reset_cursor()
        assert (sel.paginator.page, sel.selected) == (0, 0)

    def test_src_uuid(self) -> None:
        src = RecordParents({RecordType.TARGET: RecordParent(uuid="t1", title="Book")})
        assert RecordsSelection(RecordType.ACTION, src).src_uuid == "t1"
        assert RecordsSelection(RecordType.TARGET, src).src_uuid == ""
        assert RecordsSelection(RecordType.ALL, src).src_uuid == ""

    def test_src_is_copied(self) -> None:
        src = RecordParents({RecordType.TARGET: RecordParent(uuid="t1", title="Book")})
        sel = RecordsSelection(RecordType.ACTION, src)
        src[RecordType.TARGET] = RecordParent(uuid="t9", title="Other")
        assert sel.src_uuid == "t1"

    def test_search_clear(self) -> None:
        sel = RecordsSelection(RecordType.TARGET)
        sel.selection_search_clear()
        assert not sel.changed
        sel.search = "x"
        sel.selection_search_clear()
        assert sel.search == "" and sel.changed


# ── Helpers ─────────────────────────────────────────────────────────────


class TestHelpers:
    def test_sync_prev_src_session_list(self) -> None:
        src = RecordParents(
            {
                RecordType.TARGET: RecordParent(uuid="t1", title="Book"),
                RecordType.ACTION: RecordParent(uuid="a1", title="Outline"),
            }
        )
        sel = RecordsSelection(RecordType.SESSION, src)
        fresh = RecordParents(
            {
                RecordType.TARGET: RecordParent(uuid="t1", title="Book"),
                RecordType.ACTION: RecordParent(uuid="a2", title="Draft"),
            }
        )
        assert sync_prev_src(sel, fresh)
        assert sel.src[RecordType.ACTION].uuid == "a2"
        assert sel.src[RecordType.TARGET].uuid == "t1"

    def test_list_title(self) -> None:
        src = RecordParents(
            {
                RecordType.TARGET: RecordParent(uuid="t1", title="Book"),
                RecordType.ACTION: RecordParent(uuid="a1", title="Outline"),
            }
        )
        assert list_title(RecordType.TARGET, RecordParents()) == ["Targets"]
        assert list_title(RecordType.ACTION, src) == ["Book, Actions"]
        assert list_title(RecordType.SESSION, src) == ["Book, Outline, Sessions"]
        assert list_title(RecordType.SESSION, RecordParents()) == ["Sessions"]

    def test_delete_prompt_warns_about_children(self, make_target, make_action, make_session) -> None:
        prompt, warning = delete_prompt(make_target(1))
        assert prompt == 'Proceed to delete target "Target 1"?'
        assert "actions and sessions" in warning
        _, warning = delete_prompt(make_action(1))
        assert "sessions under this action" in warning
        _, warning = delete_prompt(make_session(1))
        assert warning == ""

    def test_deleted_message(self) -> None:
        assert deleted_message(RecordType.ACTION) == "Action deleted successfully."
