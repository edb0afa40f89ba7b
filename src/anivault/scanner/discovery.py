"""Discovery of candidate files in the downloads folder.

Two scan passes use complementary eligibility filters on the same folder:

- STABLE: allowed extension, name without the in-progress prefix.
- IN_PROGRESS: allowed extension, name with the in-progress prefix, and no
  modification for at least ``settle_seconds``. The finished file is named
  without the prefix.
"""

import logging
import os
import time
from collections.abc import Collection
from pathlib import Path

from anivault.domain.enums import ScanMode
from anivault.domain.models import CandidateFile

logger = logging.getLogger(__name__)


def _is_settled(entry: os.DirEntry, settle_seconds: float, now: float) -> bool:
    try:
        modified = entry.stat().st_mtime
    except OSError as e:
        logger.debug("Could not stat %s: %s", entry.path, e)
        return False
    return now - modified >= settle_seconds


def discover_candidates(
    folder: Path,
    mode: ScanMode,
    allowed_extensions: Collection[str],
    downloading_prefix: str,
    settle_seconds: float = 0.0,
    now: float | None = None,
) -> list[CandidateFile]:
    """List eligible files of ``folder`` in name order.

    Args:
        folder: Downloads folder to scan (not recursive).
        mode: Which scan pass to run.
        allowed_extensions: Extensions to accept, including the dot.
        downloading_prefix: Name prefix of files still being written.
        settle_seconds: Quiet period for IN_PROGRESS files.
        now: Current time as a timestamp (defaults to time.time()).

    Returns:
        Eligible candidates, sorted by file name.

    Raises:
        OSError: If the folder cannot be listed.
    """
    now = time.time() if now is None else now
    candidates = []

    with os.scandir(folder) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if not entry.is_file():
                continue
            path = Path(entry.path)
            if path.suffix not in allowed_extensions:
                continue

            has_prefix = entry.name.startswith(downloading_prefix)
            if mode is ScanMode.STABLE:
                if has_prefix:
                    continue
                candidates.append(CandidateFile.from_path(path))
            else:
                output_name = entry.name[len(downloading_prefix) :]
                if not has_prefix or output_name == path.suffix:
                    continue
                if not _is_settled(entry, settle_seconds, now):
                    logger.debug("Still being written, skipping: %s", entry.name)
                    continue
                candidates.append(CandidateFile.from_path(path, output_name))

    logger.debug(
        "Found %d %s candidate(s) in %s", len(candidates), mode.value, folder
    )
    return candidates
