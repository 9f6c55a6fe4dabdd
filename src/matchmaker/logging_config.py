"""Logging setup for applications embedding the matchmaker."""

import logging
import sys

from matchmaker.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | int | None = None) -> logging.Handler:
    """Configure console logging for the matchmaker.

    Installs a stdout handler on the root logger and sets the level of the
    ``matchmaker`` logger hierarchy.

    Args:
        level: Level name (e.g. "DEBUG") or numeric level; defaults to the
            configured ``log_level``

    Returns:
        The installed handler, so callers can remove it again
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(console_handler)

    logging.getLogger("matchmaker").setLevel(level)

    return console_handler
