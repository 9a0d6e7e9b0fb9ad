"""Exception types raised by the time tracking core."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ttrk.core.models import Session


class TtrkError(Exception):
    """Base class for all ttrk errors."""


class TrackerError(TtrkError, ValueError):
    """A command's precondition on the current session was not met."""


class NoCurrentSessionError(TrackerError):
    """Raised when a command needs a current session and there is none."""

    def __init__(self) -> None:
        super().__init__("There is no current session.")


class SessionAlreadyRunningError(TrackerError):
    """Raised by ``begin`` when a session is already in progress.

    Attributes:
        session: The session that is already running
    """

    def __init__(self, session: "Session") -> None:
        from ttrk.core.timefmt import render_prose

        self.session = session
        super().__init__(
            f"There is already a current session, started {render_prose(session.start)}."
        )


class InvalidMessageError(TtrkError, ValueError):
    """Raised when a completion message spans more than one line."""


class LogParseError(TtrkError, ValueError):
    """Raised when fixup text cannot be turned back into a log.

    Attributes:
        line_number: 1-based number of the offending line (None if unknown)
        line: The offending line (None if unknown)
    """

    def __init__(
        self,
        reason: str,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.line_number = line_number
        self.line = line
        if line_number is not None:
            message = f"Line {line_number}: {reason}"
            if line is not None:
                message += f"\n  {line}"
        else:
            message = reason
        super().__init__(message)


class LogFormatError(TtrkError, ValueError):
    """Raised when the JSON log file does not have the expected shape."""


class EditorError(TtrkError):
    """Raised when the external editor cannot be found, started or fails."""


class StorageError(TtrkError):
    """Raised when the log file cannot be created, read or written."""


class ConfigError(TtrkError, ValueError):
    """Raised when the configuration file is missing values or invalid."""
