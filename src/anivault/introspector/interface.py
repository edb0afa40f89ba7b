"""Probe client interface for video metadata extraction."""

import threading
from pathlib import Path
from typing import Protocol

from anivault.domain.models import ProbeResult


class ProbeError(Exception):
    """Raised when codec or subtitle metadata is unavailable for a file."""


class MediaIntrospector(Protocol):
    """Protocol for probe client implementations.

    Implementations report the first video stream's codec and the ordered
    list of subtitle streams of a file.
    """

    def probe(
        self, path: Path, cancel_event: threading.Event | None = None
    ) -> ProbeResult:
        """Extract metadata from a video file.

        Args:
            path: Path to the video file.
            cancel_event: Event that aborts the probe once set.

        Returns:
            ProbeResult for the file.

        Raises:
            ProbeError: If the file cannot be introspected.
            CommandCancelled: If cancel_event was set during the probe.
        """
        ...
