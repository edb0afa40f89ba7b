"""Scratch files for subtitle extraction and merging."""

import logging
import uuid
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


class ScratchArea:
    """Per-invocation set of temporary subtitle files.

    File names carry a random token, so concurrent merges for files with
    the same stem never collide. Every path handed out is deleted on exit,
    whether or not the block raised.

    Example:
        with ScratchArea(scratch_dir, "episode01") as scratch:
            track = scratch.track_path(2)  # episode01_1a2b3c4d_sub02.ass
    """

    def __init__(self, root: Path, stem: str) -> None:
        self.root = root
        self.stem = stem
        self.token = uuid.uuid4().hex[:8]
        self._paths: list[Path] = []

    def __enter__(self) -> "ScratchArea":
        self.root.mkdir(parents=True, exist_ok=True)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    def _register(self, name: str) -> Path:
        path = self.root / name
        self._paths.append(path)
        return path

    def track_path(self, track_index: int) -> Path:
        """Path for an extracted subtitle track."""
        return self._register(f"{self.stem}_{self.token}_sub{track_index:02d}.ass")

    def combined_path(self) -> Path:
        """Path for the merged subtitle track."""
        return self._register(f"{self.stem}_{self.token}_subCombined.ass")

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def cleanup(self) -> None:
        """Delete every file handed out by this scratch area."""
        for path in self._paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove scratch file %s: %s", path, e)
