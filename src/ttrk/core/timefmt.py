"""Timestamp encodings used by the log file, the fixup format and exports.

All timestamps handled by ttrk are timezone-aware and truncated to whole
seconds. Four encodings exist:

* persistent (RFC 3339), used in the JSON log file
* display, ``MM-DD-YYYY HH:MM:SS (UTC+HH:MM)``, used on screen and in the
  fixup format
* CSV, ``YYYY-MM-DDTHH:MM:SS`` normalized to UTC
* prose, ``on MM-DD-YYYY at HH:MM:SS (UTC+HH:MM)``, used in status messages

The ``render_*``/``parse_*`` pairs are pure functions; only :func:`now` reads
the clock.
"""

import re
from datetime import datetime, timedelta, timezone

DISPLAY_PATTERN = re.compile(
    r"(?P<month>\d{2})-(?P<day>\d{2})-(?P<year>\d{4}) "
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2}) "
    r"\(UTC(?P<sign>[-+])(?P<offset_hours>\d{2}):(?P<offset_minutes>\d{2})\)",
    re.ASCII,
)

_FRACTION = re.compile(r"\.[0-9]+(?=[+-][0-9]{2}:[0-9]{2}$)")

CSV_FORMAT = "%Y-%m-%dT%H:%M:%S"


def now() -> datetime:
    """Get the current local time, truncated to whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


def truncate(value: datetime) -> datetime:
    """Drop sub-second precision from a timestamp."""
    return value.replace(microsecond=0)


def _require_aware(value: datetime) -> timedelta:
    offset = value.utcoffset()
    if offset is None:
        raise ValueError(f"Timestamp has no timezone offset: {value!r}")
    return offset


def render_offset(value: datetime) -> str:
    """Render the UTC offset of a timestamp as ``+HH:MM``/``-HH:MM``."""
    offset = _require_aware(value)
    total_minutes = int(offset.total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def render_display(value: datetime) -> str:
    """Render a timestamp in the display encoding.

    Example:
        >>> render_display(datetime(2022, 6, 24, 16, 55, 46, tzinfo=timezone(timedelta(hours=-5))))
        '06-24-2022 16:55:46 (UTC-05:00)'
    """
    return f"{value:%m-%d-%Y %H:%M:%S} (UTC{render_offset(value)})"


def parse_display(text: str) -> datetime:
    """Parse a timestamp in the display encoding.

    Args:
        text: The complete timestamp, without surrounding text

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the text is not a display timestamp or names an
            impossible date, time or offset
    """
    match = DISPLAY_PATTERN.fullmatch(text)
    if match is None:
        raise ValueError(f"Not a timestamp in MM-DD-YYYY HH:MM:SS (UTC+HH:MM) form: {text!r}")
    return from_display_match(match)


def from_display_match(match: "re.Match[str]") -> datetime:
    """Build a datetime from a match of :data:`DISPLAY_PATTERN`.

    Raises:
        ValueError: If the matched fields name an impossible date, time or offset
    """
    parts = {name: int(value) for name, value in match.groupdict().items() if name != "sign"}

    if parts["offset_hours"] > 23 or parts["offset_minutes"] > 59:
        raise ValueError(f"Invalid UTC offset in timestamp: {match.group(0)!r}")
    offset = timedelta(hours=parts["offset_hours"], minutes=parts["offset_minutes"])
    if match.group("sign") == "-":
        offset = -offset

    try:
        return datetime(
            parts["year"],
            parts["month"],
            parts["day"],
            parts["hour"],
            parts["minute"],
            parts["second"],
            tzinfo=timezone(offset),
        )
    except ValueError as e:
        raise ValueError(f"Invalid timestamp {match.group(0)!r}: {e}") from e


def render_rfc3339(value: datetime) -> str:
    """Render a timestamp in the persistent (RFC 3339) encoding.

    UTC timestamps use the ``Z`` suffix, all others a numeric offset.
    """
    offset = _require_aware(value)
    rendered = truncate(value).isoformat()
    if offset == timedelta(0):
        rendered = rendered[: -len("+00:00")] + "Z"
    return rendered


def parse_rfc3339(text: str) -> datetime:
    """Parse a timestamp in the persistent (RFC 3339) encoding.

    Fractional seconds are accepted and truncated.

    Raises:
        ValueError: If the text is not an RFC 3339 timestamp with an offset
    """
    value = text.strip()
    if value[-1:] in ("Z", "z"):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub("", value)
    parsed = datetime.fromisoformat(value)
    if parsed.utcoffset() is None:
        raise ValueError(f"Timestamp has no timezone offset: {text!r}")
    return truncate(parsed)


def render_csv(value: datetime) -> str:
    """Render a timestamp for CSV export, normalized to UTC."""
    _require_aware(value)
    return value.astimezone(timezone.utc).strftime(CSV_FORMAT)


def render_prose(value: datetime) -> str:
    """Render a timestamp for status messages (``on ... at ...``)."""
    return f"on {value:%m-%d-%Y} at {value:%H:%M:%S} (UTC{render_offset(value)})"
