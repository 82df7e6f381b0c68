"""Loguru setup for the walk simulator and session tooling.

The console sink is kept short because the CLI prints phase changes and
cues with rich on stdout; log lines go to stderr and must stay readable
when the two interleave. The optional file sink records a walk for later
inspection, either as plain text or as JSON lines (one record per log call)
when serialize is set.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> <cyan>{name}</cyan> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
    compression: str | None = None,
) -> list[int]:
    """Replace loguru's handlers with the walk console sink and an optional file sink.

    Args:
        level: Minimum level for both sinks
        log_file: Session log path; parent directories are created
        rotation: When to start a new log file (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept
        serialize: Write JSON lines instead of formatted text to the file
        compression: Archive format for rotated files (e.g. "zip"), None keeps them as-is

    Returns:
        Handler ids, console first, so callers can remove a sink on its own
    """
    logger.remove()

    handler_ids = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_options: dict = {"serialize": True} if serialize else {"format": FILE_FORMAT}
        handler_ids.append(
            logger.add(
                log_path,
                level=level,
                rotation=rotation,
                retention=retention,
                compression=compression,
                backtrace=True,
                diagnose=False,
                **file_options,
            )
        )

    logger.debug(f"Walk logging ready: level={level} file={log_file or '-'} json={serialize}")
    return handler_ids
