"""Unit tests for editor, subprocess, and clipboard glue."""

import subprocess
from pathlib import Path

import pytest

from cmdstash import shell
from cmdstash.errors import CommandFailed, EditorError, EmptyCommand
from cmdstash.models import Command


class _Completed:
    def __init__(self, returncode: int) -> None:
        self.returncode = returncode


class TestEditor:
    def test_visual_wins(self, monkeypatch):
        monkeypatch.setenv("VISUAL", "code --wait")
        monkeypatch.setenv("EDITOR", "nano")
        assert shell.editor() == "code --wait"

    def test_editor_fallback(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.setenv("EDITOR", "nano")
        assert shell.editor() == "nano"

    def test_vi_default(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.delenv("EDITOR", raising=False)
        assert shell.editor() == "vi"


class TestEditText:
    def test_returns_edited_text_and_removes_temp_file(self, monkeypatch):
        """
        Given an editor that rewrites the file it is given
        When edit_text is called
        Then the new contents are returned and the temp file is deleted
        """
        seen: list[list[str]] = []

        def fake_run(args, **kwargs):
            seen.append(args)
            Path(args[-1]).write_text("echo edited\n")
            return _Completed(0)

        monkeypatch.setenv("VISUAL", "myeditor --flag")
        monkeypatch.setattr(subprocess, "run", fake_run)

        assert shell.edit_text("echo original\n") == "echo edited\n"
        assert seen[0][:2] == ["myeditor", "--flag"]
        assert not Path(seen[0][-1]).exists()

    def test_initial_text_is_written(self, monkeypatch):
        def fake_run(args, **kwargs):
            return _Completed(0)

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert shell.edit_text("keep me", suffix=".toml") == "keep me"

    def test_editor_failure_raises(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", lambda args, **kwargs: _Completed(2))
        with pytest.raises(EditorError):
            shell.edit_text("x")


class TestRunCommand:
    def test_runs_through_sh_in_working_dir(self, monkeypatch, tmp_path: Path):
        """
        Given a command with a working directory
        When run_command is called
        Then sh -c receives the body and cwd is set
        """
        calls: list[tuple[list[str], dict]] = []

        def fake_run(args, **kwargs):
            calls.append((args, kwargs))
            return _Completed(0)

        monkeypatch.setattr(subprocess, "run", fake_run)
        shell.run_command(Command(name="ls", body="ls -la\n", working_dir=str(tmp_path)))

        assert calls == [(["sh", "-c", "ls -la\n"], {"cwd": str(tmp_path)})]

    def test_no_working_dir_uses_current_directory(self, monkeypatch):
        calls: list[dict] = []

        def fake_run(args, **kwargs):
            calls.append(kwargs)
            return _Completed(0)

        monkeypatch.setattr(subprocess, "run", fake_run)
        shell.run_command(Command(name="ls", body="ls"))
        assert calls == [{"cwd": None}]

    def test_non_zero_exit_raises_with_code(self, monkeypatch):
        monkeypatch.setattr(subprocess, "run", lambda args, **kwargs: _Completed(3))
        with pytest.raises(CommandFailed) as exc_info:
            shell.run_command(Command(name="bad", body="false"))
        assert exc_info.value.exit_code == 3

    def test_blank_body_is_rejected_before_spawning(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("should not spawn")

        monkeypatch.setattr(subprocess, "run", fail)
        with pytest.raises(EmptyCommand):
            shell.run_command(Command(name="blank", body="  \n"))

    def test_real_shell_exit_code(self):
        with pytest.raises(CommandFailed) as exc_info:
            shell.run_command(Command(name="exit", body="exit 4"))
        assert exc_info.value.exit_code == 4


class TestClipboard:
    def test_copies_via_pyperclip(self, monkeypatch):
        copied: list[str] = []
        monkeypatch.setattr("pyperclip.copy", copied.append)
        shell.copy_to_clipboard("make deploy")
        assert copied == ["make deploy"]
