"""Root logger setup for the AniVault service.

Log lines go to stderr and, when a log file is configured, to a file that
rolls over at midnight. Every handler carries the FileContextFilter so
lines from concurrent transformations are tagged with their slot and file.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from anivault.logging.context import FileContextFilter
from anivault.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from anivault.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname).3s] %(context_tag)s%(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def build_formatter(log_format: str) -> logging.Formatter:
    """Return the formatter for "text" or "json" output."""
    if log_format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def open_daily_log(path: Path, keep: int) -> TimedRotatingFileHandler | None:
    """Open a log file rotated at midnight, keeping ``keep`` old files.

    Returns:
        The handler, or None if the file cannot be opened. The reason is
        written to stderr since logging is not set up yet.
    """
    path = path.expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return TimedRotatingFileHandler(
            path, when="midnight", backupCount=keep, encoding="utf-8"
        )
    except OSError as e:
        sys.stderr.write(f"Warning: logging to stderr only, cannot open {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to ``config``.

    stderr is always used when the log file is unavailable.
    """
    level = logging.getLevelName(config.level.upper())
    formatter = build_formatter(config.format)
    context_filter = FileContextFilter()

    handlers: list[logging.Handler] = []
    if config.file:
        file_handler = open_daily_log(Path(config.file), config.backup_count)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
