"""The fixup format: a plain-text rendering of a log meant for hand editing.

One session per line::

    06-24-2022 16:55:46 (UTC-05:00) -> 06-24-2022 16:55:49 (UTC-05:00) (3 seconds): Message here
    06-24-2022 17:21:10 (UTC-05:00) -> [now]                           (35 minutes, 47 seconds)

Durations in parentheses are informational. They are recomputed on every
render and ignored when parsing.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ttrk.core.duration import format_duration
from ttrk.core.errors import LogParseError
from ttrk.core.models import Log, Session
from ttrk.core.timefmt import DISPLAY_PATTERN, from_display_match, render_display

NOW_TOKEN = "[now]"
ARROW = " -> "
# Pads "[now]" to the width of a display timestamp plus the space before "(".
NOW_PADDING = " " * 27


def format_log(log: Log, now: datetime) -> str:
    """Render a log in the fixup format.

    Completed sessions come first, in stored order, followed by the current
    session. An empty log renders as an empty string.

    Args:
        log: Log to render
        now: Instant used to compute the current session's duration
    """
    lines = []
    for session in log.completed:
        if session.end is None:
            raise ValueError("Cannot format a completed session without an end time")
        lines.append(
            f"{render_display(session.start)}{ARROW}{render_display(session.end)} "
            f"({format_duration(session.end - session.start)}): {session.message}"
        )
    if log.current is not None:
        start = log.current.start
        lines.append(
            f"{render_display(start)}{ARROW}{NOW_TOKEN}{NOW_PADDING}"
            f"({format_duration(now - start)})"
        )
    return "".join(f"{line}\n" for line in lines)


@dataclass(frozen=True)
class CompletedLine:
    """A line with an explicit end timestamp."""

    start: datetime
    end: datetime
    message: Optional[str]


@dataclass(frozen=True)
class CurrentLine:
    """A line ending in ``[now]``."""

    start: datetime
    message: Optional[str]


@dataclass(frozen=True)
class MalformedLine:
    """A line that does not follow the fixup grammar."""

    reason: str


LineKind = Union[CompletedLine, CurrentLine, MalformedLine]


class _Scanner:
    """Cursor over a single line of fixup text."""

    def __init__(self, line: str):
        self.line = line
        self.pos = 0

    def skip_whitespace(self) -> int:
        start = self.pos
        while self.pos < len(self.line) and self.line[self.pos].isspace():
            self.pos += 1
        return self.pos - start

    def literal(self, text: str) -> bool:
        if self.line.startswith(text, self.pos):
            self.pos += len(text)
            return True
        return False

    def timestamp(self) -> Optional["re.Match[str]"]:
        match = DISPLAY_PATTERN.match(self.line, self.pos)
        if match is not None:
            self.pos = match.end()
        return match

    def annotation(self) -> bool:
        """Consume ``( ... )`` where the content holds no parentheses."""
        if not self.literal("("):
            return False
        close = self.line.find(")", self.pos)
        if close == -1 or "(" in self.line[self.pos : close]:
            return False
        self.pos = close + 1
        return True

    def rest(self) -> str:
        return self.line[self.pos :]


def _message(rest: str) -> Union[Optional[str], MalformedLine]:
    if rest.startswith(": "):
        return rest[2:]
    if rest == ":":
        return ""
    if not rest.strip():
        return None
    return MalformedLine("unexpected text after the duration; expected ': <message>'")


def classify_line(line: str) -> LineKind:
    """Classify one non-comment line of fixup text.

    Grammar::

        line     := ws? timestamp " -> " (timestamp | "[now]") ws annotation tail
        tail     := ws? EOL | ": " message | ":" EOL
        annotation := "(" any text without parentheses ")"
    """
    scanner = _Scanner(line)
    scanner.skip_whitespace()

    start_match = scanner.timestamp()
    if start_match is None:
        return MalformedLine(
            "expected a start timestamp like 06-24-2022 16:55:46 (UTC-05:00)"
        )
    if not scanner.literal(ARROW):
        return MalformedLine(f"expected '{ARROW.strip()}' after the start timestamp")

    end_match = None
    is_current = scanner.literal(NOW_TOKEN)
    if not is_current:
        end_match = scanner.timestamp()
        if end_match is None:
            return MalformedLine(f"expected an end timestamp or {NOW_TOKEN}")

    if not scanner.skip_whitespace():
        return MalformedLine("expected whitespace before the duration")
    if not scanner.annotation():
        return MalformedLine("expected a duration in parentheses, e.g. (3 seconds)")

    message = _message(scanner.rest())
    if isinstance(message, MalformedLine):
        return message

    try:
        start = from_display_match(start_match)
        end = from_display_match(end_match) if end_match is not None else None
    except ValueError as e:
        return MalformedLine(str(e))

    if end is None:
        return CurrentLine(start=start, message=message)
    return CompletedLine(start=start, end=end, message=message)


def _split_lines(text: str) -> list[str]:
    """Split fixup text on newlines only, dropping one trailing carriage return per line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _is_ignored(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def parse_log(text: str) -> Log:
    """Parse fixup text back into a log.

    Empty lines and lines starting with ``#`` are skipped. Completed
    sessions keep the order of their lines; no chronological checks are
    made.

    Args:
        text: Fixup text, typically edited by hand

    Returns:
        Parsed log

    Raises:
        LogParseError: On the first line that is malformed or breaks a rule
    """
    log = Log()
    for line_number, line in enumerate(_split_lines(text), start=1):
        if _is_ignored(line):
            continue

        kind = classify_line(line)
        if isinstance(kind, MalformedLine):
            raise LogParseError(f"Failed to parse log line: {kind.reason}", line_number, line)

        if isinstance(kind, CurrentLine):
            if kind.message is not None:
                raise LogParseError(
                    "Log lines must not have a message if they are current.", line_number, line
                )
            if log.current is not None:
                raise LogParseError(
                    "There can only be one current log line.", line_number, line
                )
            log.current = Session(start=kind.start)

        elif isinstance(kind, CompletedLine):
            if kind.message is None:
                raise LogParseError("A completed log must have a message.", line_number, line)
            log.completed.append(Session(start=kind.start, end=kind.end, message=kind.message))

    return log
