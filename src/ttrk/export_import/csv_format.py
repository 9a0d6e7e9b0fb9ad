"""CSV export."""

import csv
from typing import Any

from ttrk.core.duration import split_duration
from ttrk.core.models import Session
from ttrk.core.timefmt import render_csv
from ttrk.export_import.base import Exporter

CSV_HEADER = ["UTC-Start", "UTC-End", "Hours", "Minutes", "Seconds", "Message"]


class CSVExporter(Exporter):
    """Export completed sessions as CSV rows.

    Columns are the UTC start and end, the elapsed time split into whole
    hours, minutes (mod 60) and seconds (mod 60), and the message.
    """

    def export_sessions(self, sessions: list[Session], **kwargs: Any) -> None:
        """Write a header row and one row per completed session.

        Args:
            sessions: Completed sessions to export
            **kwargs: Additional options
                - header (bool): Write the header row (default: True)
        """
        writer = csv.writer(self.output, lineterminator="\n")

        if kwargs.get("header", True):
            writer.writerow(CSV_HEADER)

        for session in sessions:
            if session.end is None:
                raise ValueError("Cannot export a session that is still in progress")
            hours, minutes, seconds = split_duration(session.end - session.start)
            writer.writerow(
                [
                    render_csv(session.start),
                    render_csv(session.end),
                    hours,
                    minutes,
                    seconds,
                    session.message,
                ]
            )
