"""File context for structured logging.

Transformations for different files run on different worker threads. The
context set here travels with the thread through contextvars and is
injected into every log record, so interleaved lines can be told apart.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_slot_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "slot_id", default=None
)
_file_name: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_name", default=None
)


def set_file_context(slot_id: str, file_name: str | None = None) -> None:
    """Set the current file context.

    Args:
        slot_id: Concurrency slot identifier (e.g., "1", "2").
        file_name: Name of the file being processed.
    """
    _slot_id.set(slot_id)
    _file_name.set(file_name)


def clear_file_context() -> None:
    """Clear the current file context."""
    _slot_id.set(None)
    _file_name.set(None)


@contextmanager
def file_context(
    slot_id: str, file_name: str | None = None
) -> Generator[None, None, None]:
    """Context manager for per-file processing context.

    Restores the previous context on exit.

    Example:
        with file_context("1", "episode01.mkv"):
            logger.info("Transcoding")  # Logged as "[S1:episode01.mkv] Transcoding"
    """
    old_slot_id = _slot_id.get()
    old_file_name = _file_name.get()
    try:
        set_file_context(slot_id, file_name)
        yield
    finally:
        _slot_id.set(old_slot_id)
        _file_name.set(old_file_name)


def get_file_context() -> tuple[str | None, str | None]:
    """Get current file context as (slot_id, file_name)."""
    return _slot_id.get(), _file_name.get()


class FileContextFilter(logging.Filter):
    """Logging filter that injects file context into log records.

    Adds ``slot_id`` and ``file_name`` attributes for JSON output and a
    compact ``context_tag`` such as ``[S1:episode01.mkv] `` for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        slot_id, file_name = get_file_context()

        record.slot_id = slot_id
        record.file_name = file_name

        if slot_id and file_name:
            record.context_tag = f"[S{slot_id}:{file_name}] "
        elif slot_id:
            record.context_tag = f"[S{slot_id}] "
        else:
            record.context_tag = ""

        return True
