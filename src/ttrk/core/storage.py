"""JSON storage for the session log."""

import json
import logging
from pathlib import Path
from typing import Optional

from ttrk.core.errors import LogFormatError, StorageError
from ttrk.core.models import Log

logger = logging.getLogger(__name__)

DEFAULT_LOGFILE_NAME = ".ttrk.json"


def default_logfile() -> Path:
    """Get the default log file path (``~/.ttrk.json``).

    Raises:
        StorageError: If the home directory cannot be determined
    """
    try:
        home = Path.home()
    except (KeyError, RuntimeError) as e:
        raise StorageError(f"Failed to find home directory: {e}") from e
    return home / DEFAULT_LOGFILE_NAME


class LogStorage:
    """Reads and writes the session log as a single JSON document.

    The file is read once with :meth:`load` and rewritten in full with
    :meth:`save`. There is no locking: two processes saving the same file
    race, and the last writer wins.
    """

    def __init__(self, logfile: Optional[Path] = None):
        """Initialize storage.

        Args:
            logfile: Path of the JSON log file. Defaults to ~/.ttrk.json
        """
        self.logfile = Path(logfile).expanduser() if logfile else default_logfile()

    def load(self) -> Log:
        """Load the log, creating an empty log file if there is none.

        Returns:
            The stored log (empty if the file is new or empty)

        Raises:
            StorageError: If the file cannot be created or read
            LogFormatError: If the file is not a valid log
        """
        if not self.logfile.is_file():
            try:
                self.logfile.touch(exist_ok=False)
            except OSError as e:
                raise StorageError(f"Failed to create log file at `{self.logfile}`: {e}") from e
            logger.info(f"Created log file at `{self.logfile}`")
            return Log()

        try:
            content = self.logfile.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read log file at `{self.logfile}`: {e}") from e
        logger.info(f"Using log file at `{self.logfile}`")

        if not content.strip():
            return Log()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise LogFormatError(f"Failed to parse log file `{self.logfile}`: {e}") from e

        return Log.from_dict(data)

    def save(self, log: Log) -> None:
        """Overwrite the log file with ``log``.

        Raises:
            StorageError: If the file cannot be written
        """
        try:
            with open(self.logfile, "w", encoding="utf-8") as f:
                json.dump(log.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            raise StorageError(f"Failed to write to log file `{self.logfile}`: {e}") from e
        logger.debug(
            f"Saved {len(log.completed)} completed session(s) to `{self.logfile}`"
        )
