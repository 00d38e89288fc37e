"""Tests for the JSON-lines log setup and secret redaction."""

from __future__ import annotations

import json
import logging
import os
import sys
import time

import pytest

from yatijapp_tui.display.logging_config import (
    JsonLineFormatter,
    SecretRedactionFilter,
    prune_old_logs,
    secret_redaction_filter,
    setup_logging,
)


def _record(msg: str, *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord("yatijapp_tui.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonLineFormatter:
    def test_fields_and_extras(self) -> None:
        line = JsonLineFormatter().format(_record("loaded %d records", 3, occurrence="list", type="Target"))
        entry = json.loads(line)
        assert entry["level"] == "INFO"
        assert entry["logger"] == "yatijapp_tui.test"
        assert entry["msg"] == "loaded 3 records"
        assert entry["occurrence"] == "list"
        assert entry["type"] == "Target"
        assert "args" not in entry and "levelno" not in entry

    def test_exception_included(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
        entry = json.loads(JsonLineFormatter().format(record))
        assert "RuntimeError: boom" in entry["exc"]


class TestSecretRedaction:
    def test_scrubs_message_and_args(self) -> None:
        flt = SecretRedactionFilter()
        flt.register("tok-ABCDEF")
        record = _record("sending tok-ABCDEF and %s", "tok-ABCDEF")
        assert flt.filter(record)
        assert record.getMessage() == "sending ***REDACTED*** and ***REDACTED***"

    def test_short_values_ignored(self) -> None:
        flt = SecretRedactionFilter()
        flt.register("abc")
        assert flt.scrub("abc") == "abc"

    def test_longest_secret_wins(self) -> None:
        flt = SecretRedactionFilter()
        flt.register("secret")
        flt.register("secret-extended")
        assert flt.scrub("secret-extended") == "***REDACTED***"


class TestPruneOldLogs:
    def test_only_stale_backups_removed(self, tmp_path) -> None:
        log_file = tmp_path / "tui.log"
        log_file.write_text("current")
        fresh = tmp_path / "tui.log.1"
        stale = tmp_path / "tui.log.2"
        fresh.write_text("1")
        stale.write_text("2")
        old = time.time() - 30 * 24 * 60 * 60
        os.utime(stale, (old, old))

        removed = prune_old_logs(str(log_file), max_age_days=7)
        assert removed == [str(stale)]
        assert log_file.exists() and fresh.exists() and not stale.exists()


class TestSetupLogging:
    @pytest.mark.usefixtures("restore_logging")
    def test_writes_json_lines(self, tmp_path) -> None:
        log_file = str(tmp_path / "logs" / "tui.log")
        path, level = setup_logging("debug", log_file)
        assert (path, level) == (log_file, "DEBUG")

        secret_redaction_filter.register("very-secret-token")
        logging.getLogger("yatijapp_tui.api").info("token very-secret-token used", extra={"occurrence": "t"})
        for handler in logging.getLogger("yatijapp_tui").handlers:
            handler.flush()

        with open(log_file, encoding="utf-8") as fh:
            entries = [json.loads(line) for line in fh if line.strip()]
        assert entries[-1]["msg"] == "token ***REDACTED*** used"
        assert entries[-1]["occurrence"] == "t"

    @pytest.mark.usefixtures("restore_logging")
    def test_invalid_level_falls_back(self, tmp_path) -> None:
        _, level = setup_logging("chatty", str(tmp_path / "tui.log"))
        assert level == "INFO"
        assert logging.getLogger("yatijapp_tui").level == logging.INFO
