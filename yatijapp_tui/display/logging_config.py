"""Logging configuration setup.

Everything goes to a size-rotated JSON-lines file; nothing is written to
the terminal while the TUI owns it.
"""

import copy
import glob
import json
import logging
import logging.config
import os
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Set, Tuple  # noqa: UP035

from yatijapp_tui.constants import LOG_BACKUP_COUNT, LOG_FILE, LOG_MAX_AGE_DAYS, LOG_MAX_BYTES

# ── Secret redaction filter ──────────────────────────────────────────────

_REDACTED = "***REDACTED***"


class SecretRedactionFilter(logging.Filter):
    """Logging filter that replaces registered secret values with a placeholder.

    Tokens and passwords are registered as they pass through the client.
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: Set[str] = set()
        self._pattern: re.Pattern[str] | None = None

    def register(self, value: str) -> None:
        """Register a secret value for redaction."""
        if value and len(value) >= 4:  # skip trivially short values
            self._secrets.add(value)
            escaped = sorted((re.escape(s) for s in self._secrets), key=len, reverse=True)
            self._pattern = re.compile("|".join(escaped))

    def scrub(self, text: str) -> str:
        if self._pattern is None:
            return text
        return self._pattern.sub(_REDACTED, text)

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is not None:
            if isinstance(record.msg, str):
                record.msg = self.scrub(record.msg)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {
                        k: self.scrub(v) if isinstance(v, str) else v
                        for k, v in record.args.items()
                    }
                elif isinstance(record.args, tuple):
                    record.args = tuple(
                        self.scrub(a) if isinstance(a, str) else a for a in record.args
                    )
        return True


# Module-level singleton so the auth layer can register values as it sees them.
secret_redaction_filter = SecretRedactionFilter()


# ── JSON lines ───────────────────────────────────────────────────────────

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys() | {"message", "asctime"}
)


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, msg and extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            entry[key] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


BASE_LOG_CFG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json_lines": {"()": JsonLineFormatter},
    },
    "handlers": {
        "file_handler": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "json_lines",
            "filename": LOG_FILE,
            "maxBytes": LOG_MAX_BYTES,
            "backupCount": LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "yatijapp_tui": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
        "httpx": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "WARNING",
        },
        "textual": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "WARNING",
        },
    },
    "root": {
        "handlers": ["file_handler"],
        "level": "WARNING",
    },
}


def prune_old_logs(log_file: str = LOG_FILE, max_age_days: int = LOG_MAX_AGE_DAYS) -> List[str]:
    """Delete rotated backups of *log_file* older than *max_age_days*.

    Returns the removed paths.
    """
    cutoff = time.time() - max_age_days * 24 * 60 * 60
    removed: List[str] = []
    for path in glob.glob(f"{glob.escape(log_file)}.*"):
        try:
            if os.path.getmtime(path) < cutoff:
                os.remove(path)
                removed.append(path)
        except FileNotFoundError:
            continue
    return removed


def setup_logging(log_lvl_str: str, log_file: str = LOG_FILE) -> Tuple[str, str]:
    """
    Set up the logging system.

    Args:
        log_lvl_str: The desired log level string (e.g., 'debug', 'info').
        log_file: Path of the rotating JSON-lines log file.

    Returns:
        A tuple of (log_file_path, validated_log_level).
    """
    log_lvl_valid = log_lvl_str.upper()
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    fallback = log_lvl_valid not in valid_levels
    if fallback:
        log_lvl_valid = "INFO"

    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
    removed = prune_old_logs(log_file)

    log_cfg: Dict[str, Any] = copy.deepcopy(BASE_LOG_CFG)
    log_cfg["handlers"]["file_handler"]["filename"] = log_file
    log_cfg["loggers"]["yatijapp_tui"]["level"] = log_lvl_valid
    log_cfg["root"]["level"] = log_lvl_valid if log_lvl_valid == "DEBUG" else "WARNING"

    logging.config.dictConfig(log_cfg)
    for handler in logging.getLogger("yatijapp_tui").handlers:
        handler.addFilter(secret_redaction_filter)

    logger = logging.getLogger(__name__)
    if fallback:
        logger.warning("Invalid log level '%s', using INFO", log_lvl_str)
    if removed:
        logger.info("Pruned %d old log file(s)", len(removed))
    logger.info("Logging initialized. Level: %s, file: %s", log_lvl_valid, log_file)
    return log_file, log_lvl_valid
