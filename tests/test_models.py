"""Tests for record decoding."""

from __future__ import annotations

import logging
from datetime import datetime

from yatijapp_tui.api.models import RecordType

_MODELS_LOGGER = "yatijapp_tui.api.models"


class TestTimestampChecks:
    def test_consistent_record_logs_nothing(self, make_target, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=_MODELS_LOGGER):
            make_target(1, last_active=datetime(2025, 6, 3, 9, 0, 0))
        assert caplog.records == []

    def test_updated_before_created(self, make_target, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=_MODELS_LOGGER):
            target = make_target(1, updated_at=datetime(2025, 5, 1, 9, 0, 0))
        assert target.uuid == "t1"
        assert [r.getMessage() for r in caplog.records] == ["Record t1 has updated_at before created_at"]

    def test_target_last_active_before_created(self, make_target, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=_MODELS_LOGGER):
            make_target(2, last_active=datetime(2025, 5, 1, 9, 0, 0))
        assert [r.getMessage() for r in caplog.records] == ["Record t2 has last_active before created_at"]
        assert caplog.records[0].levelno == logging.WARNING

    def test_action_last_active_before_created(self, make_action, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=_MODELS_LOGGER):
            action = make_action(3, last_active=datetime(2025, 5, 1, 9, 0, 0))
        assert action.actual_type is RecordType.ACTION
        assert [r.getMessage() for r in caplog.records] == ["Record a3 has last_active before created_at"]

    def test_session_warns_once_for_early_update(self, make_session, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=_MODELS_LOGGER):
            make_session(5, updated_at=datetime(2025, 5, 1, 9, 0, 0))
        assert [r.getMessage() for r in caplog.records] == ["Record s5 has updated_at before created_at"]

    def test_blank_last_active_is_none(self, make_target, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=_MODELS_LOGGER):
            target = make_target(4, last_active="")
        assert target.last_active is None
        assert caplog.records == []
