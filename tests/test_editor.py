"""Tests for the editor round-trip."""

import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest  # type: ignore[import-not-found]

from ttrk.core import editor as editor_module
from ttrk.core.editor import FIXUP_HEADER, edit_log, resolve_editor
from ttrk.core.errors import EditorError, LogParseError
from ttrk.core.models import Log, Session

CDT = timezone(timedelta(hours=-5))
NOW = datetime(2022, 6, 24, 17, 56, 57, tzinfo=CDT)
EDITED = (
    "# kept comment\n"
    "06-24-2022 09:00:00 (UTC-05:00) -> 06-24-2022 10:00:00 (UTC-05:00) (): rewritten\n"
)


def fake_editor(
    calls: list[dict[str, Any]], new_text: str, returncode: int = 0
) -> Callable[..., subprocess.CompletedProcess]:
    """Build a subprocess.run replacement that rewrites the edited file."""

    def run(command: list[str], *args: Any, **kwargs: Any) -> subprocess.CompletedProcess:
        path = Path(command[-1])
        calls.append({"command": command, "path": path, "before": path.read_text()})
        path.write_text(new_text)
        return subprocess.CompletedProcess(command, returncode)

    return run


@pytest.fixture
def log() -> Log:
    """Log with a completed and a current session."""
    return Log(
        completed=[
            Session(
                start=datetime(2022, 6, 24, 16, 55, 46, tzinfo=CDT),
                end=datetime(2022, 6, 24, 16, 55, 49, tzinfo=CDT),
                message="Message here",
            )
        ],
        current=Session(start=datetime(2022, 6, 24, 17, 21, 10, tzinfo=CDT)),
    )


class TestResolveEditor:
    """Test resolve_editor."""

    def test_uses_environment(self) -> None:
        """Test that $EDITOR wins over the config."""
        assert resolve_editor("nano", environ={"EDITOR": "vim"}) == "vim"

    def test_falls_back_to_config(self) -> None:
        """Test the config fallback when $EDITOR is unset or empty."""
        assert resolve_editor("nano", environ={}) == "nano"
        assert resolve_editor("nano", environ={"EDITOR": ""}) == "nano"

    def test_missing_editor(self) -> None:
        """Test that a missing editor is an error."""
        with pytest.raises(EditorError, match="EDITOR"):
            resolve_editor(None, environ={})


class TestEditLog:
    """Test edit_log."""

    def test_edit_replaces_log(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test that the edited text becomes the new log."""
        calls: list[dict[str, Any]] = []
        monkeypatch.setattr(editor_module.subprocess, "run", fake_editor(calls, EDITED))

        edited = edit_log(log, "vim", NOW)

        assert edited.current is None
        assert len(edited.completed) == 1
        assert edited.completed[0].message == "rewritten"

    def test_editor_sees_header_and_log(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test the content handed to the editor."""
        calls: list[dict[str, Any]] = []
        monkeypatch.setattr(editor_module.subprocess, "run", fake_editor(calls, EDITED))

        edit_log(log, "vim", NOW)

        before = calls[0]["before"]
        assert before.startswith(FIXUP_HEADER)
        assert "(3 seconds): Message here\n" in before
        assert "[now]                           (35 minutes, 47 seconds)\n" in before

    def test_editor_command_is_split(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test that editors with arguments are supported."""
        calls: list[dict[str, Any]] = []
        monkeypatch.setattr(editor_module.subprocess, "run", fake_editor(calls, EDITED))

        edit_log(log, "code --wait", NOW)

        assert calls[0]["command"][:2] == ["code", "--wait"]

    def test_unchanged_text_round_trips(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test that saving without changes gives back the same log."""

        def run(command: list[str], *args: Any, **kwargs: Any) -> subprocess.CompletedProcess:
            return subprocess.CompletedProcess(command, 0)

        monkeypatch.setattr(editor_module.subprocess, "run", run)

        assert edit_log(log, "true", NOW) == log

    def test_temp_file_removed(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test that the temporary file is cleaned up."""
        calls: list[dict[str, Any]] = []
        monkeypatch.setattr(editor_module.subprocess, "run", fake_editor(calls, EDITED))

        edit_log(log, "vim", NOW)

        assert not calls[0]["path"].exists()

    def test_editor_failure(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test that a non-zero exit aborts the edit."""
        calls: list[dict[str, Any]] = []
        monkeypatch.setattr(
            editor_module.subprocess, "run", fake_editor(calls, EDITED, returncode=1)
        )

        with pytest.raises(EditorError, match="exited with status 1"):
            edit_log(log, "vim", NOW)
        assert not calls[0]["path"].exists()

    def test_editor_not_found(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test that an editor that cannot start is reported."""

        def run(command: list[str], *args: Any, **kwargs: Any) -> subprocess.CompletedProcess:
            raise FileNotFoundError(2, "No such file or directory", command[0])

        monkeypatch.setattr(editor_module.subprocess, "run", run)

        with pytest.raises(EditorError, match="Failed to open an editor"):
            edit_log(log, "no-such-editor", NOW)

    def test_invalid_editor_command(self, log: Log) -> None:
        """Test that an unparsable editor command is reported."""
        with pytest.raises(EditorError, match="Invalid editor command"):
            edit_log(log, 'vim "unterminated', NOW)

    def test_parse_failure(self, monkeypatch: pytest.MonkeyPatch, log: Log) -> None:
        """Test that invalid edited text raises a parse error."""
        calls: list[dict[str, Any]] = []
        monkeypatch.setattr(
            editor_module.subprocess, "run", fake_editor(calls, "this is not a log\n")
        )

        with pytest.raises(LogParseError, match="Line 1"):
            edit_log(log, "vim", NOW)
        assert not calls[0]["path"].exists()
