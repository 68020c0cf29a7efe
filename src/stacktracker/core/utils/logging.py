"""
Loguru setup for the tracker.

Library code only calls ``logger``; the CLI calls setup_logging() once.
Console output is kept short because it shares stderr with command
warnings. The optional file sink carries timestamps and module names.
"""

import os
import sys

from loguru import logger

from stacktracker.core.exceptions import ConfigurationError

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} | {message}"


def _resolve_level(level: str) -> str:
    name = str(level).strip().upper()
    try:
        logger.level(name)
    except ValueError as e:
        raise ConfigurationError(f"Unknown log level: {level!r}") from e
    return name


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    rotation: str = "1 MB",
    retention: str = "14 days",
) -> None:
    """
    Replace loguru's sinks with a stderr sink and, optionally, a rotating file.

    Args:
        level: Minimum level name, case-insensitive.
        log_file: File to append to. Its directory is created if missing.
        rotation: Size at which the log file rotates.
        retention: How long rotated files are kept.
    """
    level = _resolve_level(level)
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        logger.add(log_file, level=level, format=FILE_FORMAT, rotation=rotation, retention=retention)
