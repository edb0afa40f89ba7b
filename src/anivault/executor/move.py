"""Move operations for relocating files into the output folder.

Used for files that need no transformation at all, and for promoting a
finished temp output to its final name.
"""

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class MoveErrorType(Enum):
    """Categorization of move operation errors."""

    DISK_SPACE = "disk_space"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    IO_ERROR = "io_error"
    UNKNOWN = "unknown"


_ERRNO_TO_TYPE = {
    errno.ENOSPC: MoveErrorType.DISK_SPACE,
    errno.EACCES: MoveErrorType.PERMISSION,
    errno.EPERM: MoveErrorType.PERMISSION,
    errno.ENOENT: MoveErrorType.NOT_FOUND,
    errno.EEXIST: MoveErrorType.ALREADY_EXISTS,
    errno.EIO: MoveErrorType.IO_ERROR,
    errno.EROFS: MoveErrorType.IO_ERROR,
}


@dataclass
class MoveResult:
    """Result of a move operation."""

    success: bool
    source_path: Path
    destination_path: Path | None = None
    error_message: str | None = None
    error_type: MoveErrorType | None = None


def move_file(source: Path, destination: Path, overwrite: bool = False) -> MoveResult:
    """Move a file, across filesystems if needed.

    Args:
        source: File to move.
        destination: Target path, including the file name.
        overwrite: Replace an existing file at ``destination``.

    Returns:
        MoveResult with success status and details.
    """
    if not source.is_file():
        return MoveResult(
            success=False,
            source_path=source,
            error_message=f"Source file does not exist: {source}",
            error_type=MoveErrorType.NOT_FOUND,
        )
    if destination.exists() and not overwrite:
        return MoveResult(
            success=False,
            source_path=source,
            error_message=f"Destination already exists: {destination}",
            error_type=MoveErrorType.ALREADY_EXISTS,
        )

    try:
        logger.info("Moving file: %s -> %s", source, destination)
        if overwrite:
            try:
                os.replace(source, destination)
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise
                shutil.move(str(source), str(destination))
        else:
            shutil.move(str(source), str(destination))
        return MoveResult(
            success=True, source_path=source, destination_path=destination
        )

    except OSError as e:
        error_type = _ERRNO_TO_TYPE.get(e.errno, MoveErrorType.UNKNOWN)
        logger.error("Move failed (%s): %s", error_type.value, e)
        return MoveResult(
            success=False,
            source_path=source,
            error_message=str(e),
            error_type=error_type,
        )
