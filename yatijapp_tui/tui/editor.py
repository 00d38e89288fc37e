"""External editor support for record notes.

Notes are edited in temporary Markdown files under
``$TMPDIR/yatijapp-tui/notes``.  The editor runs in the foreground while
the app is suspended (see :meth:`textual.app.App.suspend`).
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from typing import List, Optional

from yatijapp_tui.constants import NOTES_SUBDIR
from yatijapp_tui.errors import EditorError

logger = logging.getLogger(__name__)

_DIR_MODE = 0o755
_FILE_MODE = 0o644
_FALLBACK_EDITORS = ("vim", "nano")

NO_EDITOR_MSG = "no valid editor found, please set $EDITOR environment variable or install vim/nano"


def notes_dir() -> str:
    return os.path.join(tempfile.gettempdir(), NOTES_SUBDIR)


def resolve_editor(env_editor: Optional[str] = None) -> List[str]:
    """Return the editor command line: ``$EDITOR``, else vim, else nano.

    Raises :class:`EditorError` when none is available.
    """
    editor = env_editor if env_editor is not None else os.environ.get("EDITOR", "")
    if editor.strip():
        return shlex.split(editor)
    for candidate in _FALLBACK_EDITORS:
        found = shutil.which(candidate)
        if found:
            return [found]
    raise EditorError(NO_EDITOR_MSG)


def create_temp_note() -> str:
    """Create an empty, uniquely named note file and return its path."""
    directory = notes_dir()
    os.makedirs(directory, mode=_DIR_MODE, exist_ok=True)
    fd, path = tempfile.mkstemp(suffix=".md", dir=directory)
    os.close(fd)
    os.chmod(path, _FILE_MODE)
    logger.debug("Created temp note %s", path)
    return path


def read_note(path: str) -> str:
    with open(path, "r", encoding="utf-8") as fh:
        return fh.read()


def write_note(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(content)


def run_editor(path: str) -> None:
    """Open *path* in the editor and block until it exits.

    Must be called while the terminal is released by the app.
    """
    command = resolve_editor() + [path]
    logger.info("Opening editor: %s", command[0], extra={"occurrence": "note editor"})
    try:
        completed = subprocess.run(command, check=False)
    except OSError as exc:
        raise EditorError(f"failed to start editor: {exc}") from exc
    if completed.returncode != 0:
        raise EditorError(f"editor exited with status {completed.returncode}")
