"""Logging configuration for the content console.

Log records go to stderr so tables printed on stdout can be piped. A
rotating log file can be added with ``--log-file``.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
FILE_LOG_FORMAT = (
    "%(asctime)s %(levelname)-8s %(name)s (%(filename)s:%(lineno)d): %(message)s"
)


class LevelColorFormatter(logging.Formatter):
    """Colours the level name by severity for terminal output."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        levelname = record.levelname
        record.levelname = f"{color}{levelname:<8}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 2,
) -> None:
    """Configure the root logger for a console run.

    Args:
        log_level: Level name; unknown names fall back to INFO
        log_file: Optional rotating log file
        max_bytes: Size at which the log file is rotated
        backup_count: Rotated files kept next to ``log_file``
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    if sys.stderr.isatty():
        stderr_handler.setFormatter(LevelColorFormatter(LOG_FORMAT, "%H:%M:%S"))
    else:
        stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT, "%H:%M:%S"))
    root.addHandler(stderr_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        root.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug("Logging at %s", logging.getLevelName(level))
    if log_file:
        logger.debug("Log file: %s", log_file)


def configure_third_party_loggers() -> None:
    """Quiet the HTTP client and event loop loggers."""
    for name in ("aiohttp", "aiohttp.client", "aiohttp.access", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)
