"""ffprobe-based implementation of the MediaIntrospector protocol."""

import json
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
import threading
from pathlib import Path

from anivault.core.subprocess_utils import run_cancellable
from anivault.domain.models import ProbeResult
from anivault.executor.interface import resolve_tool
from anivault.introspector.interface import ProbeError
from anivault.introspector.parsers import parse_ffprobe_output


class FFprobeIntrospector:
    """ffprobe-based probe client.

    Reads stream metadata as JSON and reduces it to the video codec and the
    subtitle track list.
    """

    PROBE_TIMEOUT: float = 60.0  # Prevent hangs on corrupted files

    def __init__(self, ffprobe_path: Path | None = None) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                ffprobe is looked up in PATH.

        Raises:
            ProbeError: If ffprobe is not available.
        """
        tool = resolve_tool("ffprobe", ffprobe_path)
        if tool is None:
            raise ProbeError(
                "ffprobe is not installed or not in PATH. "
                "Install ffmpeg or set ANIVAULT_FFPROBE_PATH."
            )
        self._ffprobe_path = tool

    def probe(
        self, path: Path, cancel_event: threading.Event | None = None
    ) -> ProbeResult:
        """Extract codec and subtitle metadata from a video file.

        Args:
            path: Path to the video file.
            cancel_event: Event that aborts the probe once set.

        Returns:
            ProbeResult for the file.

        Raises:
            ProbeError: If the file cannot be introspected.
            CommandCancelled: If cancel_event was set during the probe.
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        try:
            result = run_cancellable(
                [
                    self._ffprobe_path,
                    "-v",
                    "error",
                    "-print_format",
                    "json",
                    "-show_streams",
                    str(path),
                ],
                cancel_event,
                timeout=self.PROBE_TIMEOUT,
                capture_stdout=True,
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"ffprobe timed out for {path} after {e.timeout}s") from e
        except OSError as e:
            raise ProbeError(f"Could not run ffprobe for {path}: {e}") from e

        if not result.success:
            raise ProbeError(
                f"ffprobe failed for {path} (exit {result.returncode}): "
                f"{result.stderr or 'no output'}"
            )

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e

        return parse_ffprobe_output(path, data)
