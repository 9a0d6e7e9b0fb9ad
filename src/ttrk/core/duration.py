"""Human readable durations."""

from datetime import timedelta
from typing import Union

Span = Union[timedelta, int]


def whole_seconds(span: Span) -> int:
    """Get the number of whole seconds in a span, truncated toward zero."""
    if isinstance(span, timedelta):
        # Exact integer microseconds
        micros = (span.days * 86400 + span.seconds) * 1_000_000 + span.microseconds
        return _trunc_div(micros, 1_000_000)
    return int(span)


def _trunc_div(dividend: int, divisor: int) -> int:
    quotient = abs(dividend) // divisor
    return -quotient if dividend < 0 else quotient


def _trunc_mod(dividend: int, divisor: int) -> int:
    return dividend - _trunc_div(dividend, divisor) * divisor


def split_duration(span: Span) -> tuple[int, int, int]:
    """Split a span into hours, minutes and seconds.

    Minutes and seconds are taken modulo 60. Division truncates toward zero,
    so a negative span yields non-positive components.

    Returns:
        Tuple of (hours, minutes, seconds)
    """
    seconds = whole_seconds(span)
    return (
        _trunc_div(seconds, 3600),
        _trunc_mod(_trunc_div(seconds, 60), 60),
        _trunc_mod(seconds, 60),
    )


def _clause(value: int, unit: str) -> str:
    if value == 1:
        return f"1 {unit}"
    return f"{value} {unit}s"


def format_duration(span: Span) -> str:
    """Format a span as e.g. ``"1 hour, 1 minute, 1 second"``.

    Components below one are left out. Zero and negative spans (clock skew)
    render as ``"N/A"``.

    Example:
        >>> format_duration(61)
        '1 minute, 1 second'
        >>> format_duration(timedelta(0))
        'N/A'
    """
    seconds = whole_seconds(span)
    components = [
        _clause(value, unit)
        for value, unit in zip(split_duration(seconds), ("hour", "minute", "second"))
        if value >= 1
    ]
    if seconds <= 0:
        components.append("N/A")
    return ", ".join(components)
