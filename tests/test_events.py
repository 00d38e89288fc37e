"""Tests for the TUI message types."""

from __future__ import annotations

from yatijapp_tui.api.models import RecordParent, RecordParents, RecordType
from yatijapp_tui.tui.events import ApiSuccess, RecordDeleted, SwitchToCreate, is_stale


class TestIsStale:
    def test_matching_source(self) -> None:
        message = ApiSuccess("records:Target", "Created")
        assert not is_stale(message, "records:Target")

    def test_other_source(self) -> None:
        message = RecordDeleted("view:Action", RecordType.ACTION, "Deleted")
        assert is_stale(message, "records:Action")


class TestSwitchToCreate:
    def test_parents_copied(self) -> None:
        src = RecordParents({RecordType.TARGET: RecordParent(uuid="t-1", title="Thesis")})
        message = SwitchToCreate(RecordType.ACTION, src)
        src[RecordType.TARGET].title = "Changed"
        assert isinstance(message.src, RecordParents)
        assert message.src.title(RecordType.TARGET) == "Thesis"

    def test_no_parents(self) -> None:
        message = SwitchToCreate(RecordType.TARGET)
        assert message.src.is_empty()
