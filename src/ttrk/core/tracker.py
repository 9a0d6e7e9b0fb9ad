"""Core time tracking engine."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ttrk.core.errors import NoCurrentSessionError, SessionAlreadyRunningError
from ttrk.core.models import Log, Session
from ttrk.core.storage import LogStorage
from ttrk.core.timefmt import now as local_now

Clock = Callable[[], datetime]

WEEK_STARTS = {"monday": 0, "sunday": 6}


def week_start_date(day: date, week_start: str = "sunday") -> date:
    """Get the first day of the week containing ``day``.

    Args:
        day: Any date
        week_start: 'sunday' or 'monday'
    """
    offset = (day.weekday() - WEEK_STARTS[week_start]) % 7
    return day - timedelta(days=offset)


@dataclass
class StatusSummary:
    """Totals over completed sessions plus the latest and current sessions.

    Attributes:
        completed_count: Number of completed sessions
        total: Elapsed time over all completed sessions
        today: Elapsed time over sessions that started and ended today
        this_week: Elapsed time over sessions that started and ended this week
        last_completed: Most recently completed session
        current: Session in progress
        current_elapsed: Elapsed time of the current session so far
    """

    completed_count: int
    total: timedelta
    today: timedelta
    this_week: timedelta
    last_completed: Optional[Session] = None
    current: Optional[Session] = None
    current_elapsed: Optional[timedelta] = None


class TimeTracker:
    """Begin, end and cancel sessions on a loaded log.

    The log is read from storage once when the tracker is created and is
    only written back by :meth:`save`.
    """

    def __init__(
        self,
        storage: Optional[LogStorage] = None,
        clock: Clock = local_now,
        week_start: str = "sunday",
    ):
        """Initialize time tracker.

        Args:
            storage: Storage manager instance. Creates default if None.
            clock: Callable returning the current time
            week_start: First day of the week for weekly totals
        """
        if week_start not in WEEK_STARTS:
            raise ValueError(f"Unknown week start: {week_start}")
        self.storage = storage or LogStorage()
        self.clock = clock
        self.week_start = week_start
        self.log = self.storage.load()

    def begin(self) -> Session:
        """Start a new current session.

        Returns:
            The new session

        Raises:
            SessionAlreadyRunningError: If a session is already in progress
        """
        if self.log.current is not None:
            raise SessionAlreadyRunningError(self.log.current)

        self.log.current = Session(start=self.clock())
        return self.log.current

    def end(self, message: str) -> Session:
        """Complete the current session with a message.

        Args:
            message: What was done; must be a single line

        Returns:
            The completed session

        Raises:
            NoCurrentSessionError: If no session is in progress
            InvalidMessageError: If the message spans more than one line
        """
        if self.log.current is None:
            raise NoCurrentSessionError()

        completed = self.log.current.complete(self.clock(), message)
        self.log.current = None
        self.log.completed.append(completed)
        return completed

    def cancel(self) -> Session:
        """Discard the current session without recording it.

        Returns:
            The discarded session

        Raises:
            NoCurrentSessionError: If no session is in progress
        """
        if self.log.current is None:
            raise NoCurrentSessionError()

        cancelled = self.log.current
        self.log.current = None
        return cancelled

    def status(self) -> StatusSummary:
        """Summarize the log.

        Only completed sessions count toward the totals. A session counts
        toward today (or this week) only if it both started and ended today
        (or this week).
        """
        now = self.clock()
        today = now.date()
        this_week = week_start_date(today, self.week_start)

        total = timedelta(0)
        today_total = timedelta(0)
        week_total = timedelta(0)
        for session in self.log.completed:
            if session.end is None:
                raise ValueError("Completed session has no end time")
            elapsed = session.end - session.start
            total += elapsed
            start_day = session.start.date()
            end_day = session.end.date()
            if start_day == today and end_day == today:
                today_total += elapsed
            if (
                week_start_date(start_day, self.week_start) == this_week
                and week_start_date(end_day, self.week_start) == this_week
            ):
                week_total += elapsed

        current = self.log.current
        return StatusSummary(
            completed_count=len(self.log.completed),
            total=total,
            today=today_total,
            this_week=week_total,
            last_completed=self.log.last_completed,
            current=current,
            current_elapsed=current.elapsed(now) if current else None,
        )

    def replace_log(self, log: Log) -> None:
        """Replace the whole log, e.g. with the result of a fixup."""
        self.log = log

    def save(self) -> None:
        """Write the log back to storage."""
        self.storage.save(self.log)
