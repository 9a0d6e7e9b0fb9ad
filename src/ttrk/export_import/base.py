"""Base class for exporters."""

from abc import ABC, abstractmethod
from typing import Any, TextIO

from ttrk.core.models import Log, Session


class Exporter(ABC):
    """Base class for all exporters.

    Exporters write to an open text stream (stdout for the CLI).
    """

    def __init__(self, output: TextIO):
        """Initialize exporter.

        Args:
            output: Stream the exported data is written to
        """
        self.output = output

    @abstractmethod
    def export_sessions(self, sessions: list[Session], **kwargs: Any) -> None:
        """Export completed sessions to the output format.

        Args:
            sessions: Completed sessions to export
            **kwargs: Format-specific options
        """
        pass

    def export_log(self, log: Log, **kwargs: Any) -> None:
        """Export the completed sessions of a log. The current session is skipped."""
        self.export_sessions(log.completed, **kwargs)
