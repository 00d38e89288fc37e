"""On-disk token document with reader/writer locking.

The token lives in a single JSON document (``access_token``,
``refresh_token``, ``session_uuid``).  Reads may run concurrently;
writes and removal are exclusive.  Writes go through a temporary file
created with mode ``0600`` and are moved into place with
:func:`os.replace`, so a reader never sees a half-written document.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
from typing import Iterator

from pydantic import AliasChoices, BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from yatijapp_tui.errors import InvalidTokenError

logger = logging.getLogger(__name__)

_DIR_MODE = 0o700
_FILE_MODE = 0o600


class Token(BaseModel):
    """Bearer credentials issued by the authentication endpoints."""

    access_token: str = ""
    refresh_token: str = ""
    session_uuid: str = Field(
        default="",
        validation_alias=AliasChoices("session_uuid", "session_id"),
    )

    @property
    def is_valid(self) -> bool:
        return bool(self.access_token) and bool(self.refresh_token)


class ReadWriteLock:
    """Many readers or a single writer.

    Writers wait for active readers to drain; new readers queue behind a
    waiting writer so a steady stream of reads cannot starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextlib.contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class TokenStore:
    """Persist a :class:`Token` at *path*.

    Parameters
    ----------
    path:
        Location of the JSON document, normally
        ``~/.yatijapp/creds/token.json``.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = ReadWriteLock()

    def get(self) -> Token:
        """Return the stored token.

        Raises :class:`InvalidTokenError` when the document is missing or
        cannot be parsed.
        """
        with self._lock.read_locked():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
                return Token.model_validate(raw)
            except (OSError, ValueError, PydanticValidationError) as exc:
                logger.debug("Token read failed: %s", exc)
                raise InvalidTokenError() from exc

    def set(self, token: Token) -> None:
        """Atomically replace the stored token."""
        with self._lock.write_locked():
            directory = os.path.dirname(self.path) or "."
            os.makedirs(directory, mode=_DIR_MODE, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".token-", suffix=".json")
            try:
                os.chmod(tmp_path, _FILE_MODE)
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(token.model_dump_json())
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
                raise
            logger.info("Token saved to %s", self.path)

    def clear(self) -> None:
        """Remove the stored token; a missing document is not an error."""
        with self._lock.write_locked():
            try:
                os.remove(self.path)
                logger.info("Token removed from %s", self.path)
            except FileNotFoundError:
                pass

    def exists(self) -> bool:
        with self._lock.read_locked():
            return os.path.isfile(self.path)
