"""Tests for key normalisation and the external editor helpers."""

from __future__ import annotations

import os
import stat
import subprocess
from unittest.mock import MagicMock

import pytest

from yatijapp_tui.errors import EditorError
from yatijapp_tui.tui import editor
from yatijapp_tui.tui.keys import fn_key_number, is_fn_key, normalize_key


# ── Keys ────────────────────────────────────────────────────────────────


class TestKeys:
    @pytest.mark.parametrize(
        "key, character, expected",
        [
            ("less_than_sign", "<", "<"),
            ("greater_than_sign", ">", ">"),
            ("question_mark", "?", "?"),
            ("ctrl+underscore", None, "ctrl+/"),
            ("ctrl+slash", None, "ctrl+/"),
            ("escape", None, "esc"),
            ("space", " ", "space"),
            ("enter", "\r", "enter"),
            ("upper_a", "A", "A"),
            ("ctrl+s", None, "ctrl+s"),
        ],
    )
    def test_normalize(self, key, character, expected) -> None:
        assert normalize_key(key, character) == expected

    def test_fn_keys(self) -> None:
        assert is_fn_key("f1") and is_fn_key("f12")
        assert not is_fn_key("f13")
        assert fn_key_number("f3") == 3
        with pytest.raises(ValueError):
            fn_key_number("x")


# ── Editor ──────────────────────────────────────────────────────────────


class TestResolveEditor:
    def test_env_editor_is_split(self) -> None:
        assert editor.resolve_editor("code --wait") == ["code", "--wait"]

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("EDITOR", "emacs -nw")
        assert editor.resolve_editor() == ["emacs", "-nw"]

    def test_falls_back_to_vim_then_nano(self, monkeypatch) -> None:
        found = {"nano": "/usr/bin/nano"}
        monkeypatch.setattr(editor.shutil, "which", lambda name: found.get(name))
        assert editor.resolve_editor("") == ["/usr/bin/nano"]
        found["vim"] = "/usr/bin/vim"
        assert editor.resolve_editor("  ") == ["/usr/bin/vim"]

    def test_no_editor(self, monkeypatch) -> None:
        monkeypatch.setattr(editor.shutil, "which", lambda name: None)
        with pytest.raises(EditorError, match="no valid editor found"):
            editor.resolve_editor("")


class TestNotes:
    @pytest.fixture(autouse=True)
    def _notes_in_tmp(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(editor, "notes_dir", lambda: str(tmp_path / "notes"))

    def test_create_temp_note(self, tmp_path) -> None:
        path = editor.create_temp_note()
        assert os.path.dirname(path) == str(tmp_path / "notes")
        assert path.endswith(".md")
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
        assert editor.create_temp_note() != path

    def test_write_then_read(self) -> None:
        path = editor.create_temp_note()
        editor.write_note(path, "# héllo\n")
        assert editor.read_note(path) == "# héllo\n"


class TestRunEditor:
    def test_success(self, monkeypatch) -> None:
        run = MagicMock(return_value=subprocess.CompletedProcess(["vi"], 0))
        monkeypatch.setenv("EDITOR", "vi")
        monkeypatch.setattr(editor.subprocess, "run", run)
        editor.run_editor("/tmp/note.md")
        run.assert_called_once_with(["vi", "/tmp/note.md"], check=False)

    def test_non_zero_exit(self, monkeypatch) -> None:
        monkeypatch.setenv("EDITOR", "vi")
        monkeypatch.setattr(
            editor.subprocess, "run", MagicMock(return_value=subprocess.CompletedProcess(["vi"], 2))
        )
        with pytest.raises(EditorError, match="editor exited with status 2"):
            editor.run_editor("/tmp/note.md")

    def test_missing_binary(self, monkeypatch) -> None:
        monkeypatch.setenv("EDITOR", "does-not-exist")
        monkeypatch.setattr(editor.subprocess, "run", MagicMock(side_effect=FileNotFoundError("nope")))
        with pytest.raises(EditorError, match="failed to start editor"):
            editor.run_editor("/tmp/note.md")
