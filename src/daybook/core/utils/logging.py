"""Loguru sink setup for applications embedding daybook.

The library itself only emits through ``loguru.logger`` and never adds sinks
on import. Call :func:`setup_logging` directly, or
:func:`setup_logging_from_config` to take level and log file from a
``DaybookConfig`` (``Diary.from_config(..., configure_logging=True)`` does).
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from daybook.core.config_schema import DaybookConfig


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    fmt: str = "<level>[{level.name}]</level> {message}",
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Configure loguru with console and optional file output.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file. If None, only logs to stderr.
        fmt: Loguru format string.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=fmt)

    if log_file:
        logger.add(
            log_file,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}",
            rotation=rotation,
            retention=retention,
        )


def setup_logging_from_config(settings: "DaybookConfig") -> Path | None:
    """Configure sinks from the ``logging`` and ``paths`` config sections.

    A relative ``logging.file`` is placed under ``paths.log_dir`` (or
    ``paths.data_dir`` when no log directory is set) and its directory is
    created. Returns the log file path, or None when logging only to stderr.
    """
    log_file = None
    if settings.logging.file:
        log_file = Path(settings.logging.file).expanduser()
        if not log_file.is_absolute():
            log_file = (settings.paths.log_dir or settings.paths.data_dir) / log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)

    setup_logging(level=settings.logging.level, log_file=str(log_file) if log_file else None)
    return log_file
