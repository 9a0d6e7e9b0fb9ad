"""Core functionality for time tracking."""

from ttrk.core.models import Log, Session
from ttrk.core.tracker import TimeTracker

__all__ = ["Log", "Session", "TimeTracker"]
