"""Logging setup for AniVault.

Provides text/JSON formatting, daily file rotation and a per-file context
tag for log lines emitted by concurrent transformation tasks.
"""

from anivault.logging.config import configure_logging
from anivault.logging.context import (
    FileContextFilter,
    clear_file_context,
    file_context,
    get_file_context,
    set_file_context,
)
from anivault.logging.handlers import JSONFormatter

__all__ = [
    "FileContextFilter",
    "JSONFormatter",
    "clear_file_context",
    "configure_logging",
    "file_context",
    "get_file_context",
    "set_file_context",
]
