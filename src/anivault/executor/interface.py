"""Transform executor protocol and tool availability utilities.

This module defines the boundary between the conversion workflow and the
external media tool, plus helpers to locate that tool.
"""

import shutil
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class TransformError(Exception):
    """Raised when an external tool invocation fails for a file."""


@dataclass(frozen=True)
class SubtitleSource:
    """Subtitles to burn into the video.

    ``stream_index`` selects an embedded subtitle stream of ``path``; None
    means ``path`` is a standalone subtitle file.
    """

    path: Path
    stream_index: int | None = None


@dataclass(frozen=True)
class TranscodeRequest:
    """Everything a transcode needs besides the fixed encoder settings."""

    input_path: Path
    output_path: Path
    source_codec: str | None = None
    """Codec of the input video stream, used to pick a hardware decoder."""

    subtitle: SubtitleSource | None = None


class TransformExecutor(Protocol):
    """Protocol for the external media tool.

    Both operations block until the tool exits and can be stopped through
    ``cancel_event``.
    """

    def extract_track(
        self,
        input_path: Path,
        track_index: int,
        output_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Copy one subtitle stream into a standalone ASS file.

        Raises:
            TransformError: If extraction fails.
            CommandCancelled: If cancel_event was set while running.
        """
        ...

    def transcode(
        self,
        request: TranscodeRequest,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Re-encode video, copy audio, optionally burning in subtitles.

        Raises:
            TransformError: If the transcode fails.
            CommandCancelled: If cancel_event was set while running.
        """
        ...


# =============================================================================
# Tool Resolution Functions
# =============================================================================


def resolve_tool(name: str, configured: Path | None = None) -> Path | None:
    """Resolve an external tool path.

    Args:
        name: Tool name (e.g., "ffmpeg").
        configured: Explicitly configured path, preferred over PATH lookup.

    Returns:
        Path to the tool, or None if it cannot be found.
    """
    if configured is not None:
        return configured if configured.is_file() else None
    found = shutil.which(name)
    return Path(found) if found else None


def require_tool(name: str, configured: Path | None = None) -> Path:
    """Get path to a required tool, raising if not available.

    Args:
        name: Tool name.
        configured: Explicitly configured path.

    Returns:
        Path to the tool executable.

    Raises:
        RuntimeError: If the tool is not available.
    """
    path = resolve_tool(name, configured)
    if path is None:
        raise RuntimeError(
            f"{name} is not available. Install ffmpeg or configure the "
            f"tool path via ANIVAULT_{name.upper()}_PATH."
        )
    return path
