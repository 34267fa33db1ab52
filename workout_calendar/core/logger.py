"""Logger configuration for the workout calendar service.

Schedule code logs with structured kwargs (``owner_id``, ``series_id``,
``day`` ...). The console sink renders them as ``key=value`` pairs after the
message; the file sink can write one JSON object per line instead.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _with_context(base: str, colored: bool = False):
    """Build a loguru format callable that appends bound context to ``base``."""

    def _format(record) -> str:
        context = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
        if not context:
            return base + "\n{exception}"
        suffix = f" <dim>| {context}</dim>" if colored else f" | {context}"
        return base + suffix + "\n{exception}"

    return _format


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
    compression: str | None = "zip",
) -> None:
    """Configure loguru with a console sink and an optional file sink.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only console logging.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")
        serialize: Write the file sink as JSON lines, context included
        compression: Archive format for rotated files, or None
    """
    logger.remove()

    logger.add(sys.stderr, format=_with_context(CONSOLE_FORMAT, colored=True), level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format="{message}" if serialize else _with_context(FILE_FORMAT),
            serialize=serialize,
            level=level,
            rotation=rotation,
            retention=retention,
            compression=compression,
            backtrace=True,
            diagnose=False,
        )

    logger.info("Logger initialized", level=level, log_file=log_file, serialize=serialize)
