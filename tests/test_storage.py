"""Tests for JSON log storage."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from ttrk.core.errors import LogFormatError, StorageError
from ttrk.core.models import Log, Session
from ttrk.core.storage import LogStorage, default_logfile
from ttrk.core.tracker import TimeTracker

CDT = timezone(timedelta(hours=-5))
START = datetime(2022, 6, 24, 16, 55, 46, tzinfo=CDT)
END = datetime(2022, 6, 24, 16, 55, 49, tzinfo=CDT)


@pytest.fixture
def logfile(tmp_path: Path) -> Path:
    """Path of a log file that does not exist yet."""
    return tmp_path / "ttrk.json"


class TestLogStorage:
    """Test LogStorage."""

    def test_default_logfile(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test that the default log file lives in the home directory."""
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert default_logfile() == tmp_path / ".ttrk.json"
        assert LogStorage().logfile == tmp_path / ".ttrk.json"

    def test_default_logfile_without_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a missing home directory is reported."""

        def no_home(cls: type) -> Path:
            raise RuntimeError("Could not determine home directory.")

        monkeypatch.setattr(Path, "home", classmethod(no_home))
        with pytest.raises(StorageError, match="home directory"):
            default_logfile()

    def test_load_creates_missing_file(self, logfile: Path) -> None:
        """Test that loading a missing log creates an empty file."""
        log = LogStorage(logfile).load()

        assert log == Log()
        assert logfile.exists()
        assert logfile.read_text() == ""

    def test_load_empty_file(self, logfile: Path) -> None:
        """Test that an empty file is an empty log."""
        logfile.write_text("")
        assert LogStorage(logfile).load() == Log()

    def test_save_and_load(self, logfile: Path) -> None:
        """Test saving and loading a log."""
        storage = LogStorage(logfile)
        log = Log(
            completed=[Session(start=START, end=END, message="Message here")],
            current=Session(start=END + timedelta(minutes=30)),
        )

        storage.save(log)

        assert storage.load() == log

    def test_saved_document_shape(self, logfile: Path) -> None:
        """Test the JSON written to disk."""
        LogStorage(logfile).save(
            Log(completed=[Session(start=START, end=END, message="Message here")])
        )
        data = json.loads(logfile.read_text())

        assert data == {
            "completed": [
                {
                    "start": "2022-06-24T16:55:46-05:00",
                    "end": "2022-06-24T16:55:49-05:00",
                    "message": "Message here",
                }
            ],
            "current": None,
        }

    def test_save_overwrites(self, logfile: Path) -> None:
        """Test that saving replaces the whole file instead of appending."""
        storage = LogStorage(logfile)
        storage.save(Log(completed=[Session(start=START, end=END, message="x" * 500)]))
        storage.save(Log())

        assert json.loads(logfile.read_text()) == {"completed": [], "current": None}

    def test_load_malformed_json(self, logfile: Path) -> None:
        """Test that malformed JSON raises and leaves the file alone."""
        logfile.write_text("{not json")

        with pytest.raises(LogFormatError, match="Failed to parse log file"):
            LogStorage(logfile).load()

        assert logfile.read_text() == "{not json"

    def test_load_wrong_shape(self, logfile: Path) -> None:
        """Test that valid JSON that is not a log raises."""
        logfile.write_text("[1, 2, 3]")

        with pytest.raises(LogFormatError):
            LogStorage(logfile).load()

    def test_create_failure(self, tmp_path: Path) -> None:
        """Test that a log file that cannot be created is reported."""
        storage = LogStorage(tmp_path / "missing-dir" / "ttrk.json")

        with pytest.raises(StorageError, match="Failed to create log file"):
            storage.load()

    @pytest.mark.known_limitation
    def test_concurrent_writers_last_one_wins(self, logfile: Path) -> None:
        """Two invocations on one file are not locked: the last save wins.

        This documents a known limitation rather than desired behavior.
        """
        first = TimeTracker(LogStorage(logfile), clock=lambda: START)
        second = TimeTracker(LogStorage(logfile), clock=lambda: END)

        first.begin()
        first.end("from the first invocation")
        second.begin()

        first.save()
        second.save()

        log = LogStorage(logfile).load()
        assert log.completed == []
        assert log.current == Session(start=END)
