"""Core data models for time tracking."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Optional

from ttrk.core.errors import InvalidMessageError, LogFormatError
from ttrk.core.timefmt import parse_rfc3339, render_rfc3339


@dataclass
class Session:
    """A tracked interval of work.

    A session without an end time is the *current* session and has no
    message. A completed session always has both.

    Attributes:
        start: When the session started
        end: When the session ended (None if in progress)
        message: What was done (None if in progress)
    """

    start: datetime
    end: Optional[datetime] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if self.end is None and self.message is not None:
            raise ValueError("A current session cannot have a message")
        if self.end is not None and self.message is None:
            raise ValueError("A completed session must have a message")

    @property
    def is_current(self) -> bool:
        """Check if this session is still in progress."""
        return self.end is None

    @property
    def duration(self) -> Optional[timedelta]:
        """Elapsed time of a completed session. None if in progress."""
        if self.end is None:
            return None
        return self.end - self.start

    def elapsed(self, now: datetime) -> timedelta:
        """Elapsed time up to ``now`` (or to the end, if completed)."""
        return (self.end or now) - self.start

    def complete(self, end: datetime, message: str) -> "Session":
        """Create the completed version of this session.

        Args:
            end: When the session ended
            message: What was done; must be a single line

        Returns:
            New completed session

        Raises:
            InvalidMessageError: If the message spans more than one line
            ValueError: If this session is already completed
        """
        if not self.is_current:
            raise ValueError("Session is already completed")
        if message and ("\n" in message or "\r" in message):
            raise InvalidMessageError("A message for a completed session must be one line.")
        return replace(self, end=end, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "start": render_rfc3339(self.start),
            "end": render_rfc3339(self.end) if self.end else None,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        """Create Session from dictionary (JSON deserialization)."""
        return cls(
            start=parse_rfc3339(data["start"]),
            end=parse_rfc3339(data["end"]) if data.get("end") else None,
            message=data.get("message"),
        )


@dataclass
class Log:
    """All completed sessions plus at most one current session.

    Attributes:
        completed: Completed sessions in the order they were completed
        current: The session in progress, if any
    """

    completed: list[Session] = field(default_factory=list)
    current: Optional[Session] = None

    @property
    def is_empty(self) -> bool:
        """Check if the log holds no sessions at all."""
        return not self.completed and self.current is None

    @property
    def last_completed(self) -> Optional[Session]:
        """Most recently completed session, if any."""
        return self.completed[-1] if self.completed else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "completed": [session.to_dict() for session in self.completed],
            "current": self.current.to_dict() if self.current else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Log":
        """Create Log from a decoded JSON document.

        Raises:
            LogFormatError: If the document does not describe a log
        """
        if not isinstance(data, dict):
            raise LogFormatError("Log file must contain a JSON object")

        completed_data = data.get("completed", [])
        if not isinstance(completed_data, list):
            raise LogFormatError("'completed' must be an array")

        completed = []
        for index, session_data in enumerate(completed_data):
            try:
                session = Session.from_dict(session_data)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise LogFormatError(f"Invalid completed session #{index + 1}: {e}") from e
            if session.is_current:
                raise LogFormatError(f"Completed session #{index + 1} has no end time")
            completed.append(session)

        current = None
        if data.get("current") is not None:
            try:
                current = Session.from_dict(data["current"])
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise LogFormatError(f"Invalid current session: {e}") from e
            if not current.is_current:
                raise LogFormatError("Current session must not have an end time")

        return cls(completed=completed, current=current)
