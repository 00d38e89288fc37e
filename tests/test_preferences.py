"""Tests for the sort-key vocabulary and user preferences."""

from __future__ import annotations

import pytest

from yatijapp_tui.api import Filter, Preferences, RecordType, default_preferences
from yatijapp_tui.api.preferences import (
    ASCENDING,
    DESCENDING,
    SORT_KEYS,
    sort_options,
    status_options,
    to_human,
    to_wire,
)


class TestSortKeys:
    @pytest.mark.parametrize("column", sorted(SORT_KEYS))
    @pytest.mark.parametrize("prefix", ["", "-"])
    def test_wire_round_trip(self, column: str, prefix: str) -> None:
        wire = prefix + column
        assert to_wire(*to_human(wire)) == wire

    @pytest.mark.parametrize("human", sorted(SORT_KEYS.values()))
    @pytest.mark.parametrize("order", [ASCENDING, DESCENDING])
    def test_human_round_trip(self, human: str, order: str) -> None:
        assert to_human(to_wire(human, order)) == (human, order)

    def test_known_pairs(self) -> None:
        assert to_human("-last_active") == ("last active", DESCENDING)
        assert to_human("serial_id") == ("id", ASCENDING)
        assert to_wire("starts at", DESCENDING) == "-starts_at"

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValueError):
            to_human("-priority")
        with pytest.raises(ValueError):
            to_wire("priority", ASCENDING)
        with pytest.raises(ValueError):
            to_wire("id", "sideways")

    def test_options_per_kind(self) -> None:
        assert "starts at" in sort_options(RecordType.SESSION)
        assert "due date" in sort_options(RecordType.ACTION)
        assert status_options(RecordType.SESSION) == ("in progress", "completed")
        assert "canceled" in status_options(RecordType.TARGET)


class TestFilter:
    def test_query_params(self) -> None:
        f = Filter(sort_by="due date", sort_order=ASCENDING, status=["queued", "completed"])
        assert f.query() == {"sort_by": "due_date", "status": "queued,completed"}

    def test_empty_status_omitted(self) -> None:
        assert Filter(sort_by="id").query() == {"sort_by": "-serial_id"}

    def test_wire_round_trip(self) -> None:
        f = Filter(sort_by="created at", sort_order=DESCENDING, status=["in progress"])
        assert Filter.from_wire(f.to_wire()) == f


class TestPreferences:
    def test_defaults(self) -> None:
        prefs = default_preferences()
        for kind in (RecordType.TARGET, RecordType.ACTION):
            f = prefs.get_filter(kind)
            assert (f.sort_by, f.sort_order) == ("last active", DESCENDING)
            assert f.status == ["queued", "in progress"]
        session = prefs.get_filter(RecordType.SESSION)
        assert (session.sort_by, session.sort_order) == ("starts at", DESCENDING)
        assert session.status == ["in progress", "completed"]

    def test_defaults_are_fresh_copies(self) -> None:
        a = default_preferences()
        a.target.status.append("canceled")
        assert default_preferences().target.status == ["queued", "in progress"]

    def test_set_filter(self) -> None:
        prefs = default_preferences()
        chosen = Filter(sort_by="id", sort_order=ASCENDING, status=[])
        prefs.set_filter(RecordType.ACTION, chosen)
        assert prefs.action == chosen
        assert prefs.target != chosen

    def test_all_has_no_filter(self) -> None:
        prefs = default_preferences()
        with pytest.raises(ValueError):
            prefs.get_filter(RecordType.ALL)
        with pytest.raises(ValueError):
            prefs.set_filter(RecordType.ALL, Filter(sort_by="id"))

    def test_wire_round_trip(self) -> None:
        prefs = default_preferences()
        assert Preferences.from_wire(prefs.to_wire()) == prefs

    def test_missing_version_uses_current(self) -> None:
        wire = default_preferences().to_wire()
        del wire["version"]
        assert Preferences.from_wire(wire).version == default_preferences().version
