"""Logging configuration for the command line tool."""

import logging
import sys

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Send ttrk log records to stderr.

    Args:
        level: Log level name (DEBUG, INFO, WARNING or ERROR)
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    package_logger = logging.getLogger("ttrk")
    package_logger.setLevel(log_level)

    # Replace handlers from an earlier call in the same process
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(console_handler)
    package_logger.propagate = False
