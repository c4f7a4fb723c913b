"""Logging configuration for the procview command."""

import logging
import sys


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """
    Configure Python logging for procview.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Write records to this file instead of stderr. The terminal
            belongs to the UI while it runs, so anything below WARNING
            should go to a file.

    Log Format:
        YYYY-MM-DD HH:MM:SS [LEVEL] Message
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler],
        force=True,
    )
