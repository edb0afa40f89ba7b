"""ffmpeg implementation of the TransformExecutor protocol.

Builds the ffmpeg command lines for subtitle extraction and hardware
transcoding and runs them through the cancellable subprocess runner.
"""

import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
import threading
from pathlib import Path

from anivault.config.models import EncodingConfig
from anivault.core.subprocess_utils import run_cancellable
from anivault.executor.ffmpeg_utils import escape_filter_path, format_stderr_tail
from anivault.executor.interface import (
    SubtitleSource,
    TranscodeRequest,
    TransformError,
    require_tool,
)

logger = logging.getLogger(__name__)

BASE_ARGS = ["-hide_banner", "-nostdin", "-y"]


def build_subtitle_filter(subtitle: SubtitleSource) -> str:
    """Build the ``subtitles`` video filter for a burn-in.

    Args:
        subtitle: Subtitle file, optionally with an embedded stream index.

    Returns:
        Filter expression for ``-vf``.
    """
    expr = f"subtitles=filename={escape_filter_path(subtitle.path)}"
    if subtitle.stream_index is not None:
        expr += f":si={subtitle.stream_index}"
    return expr


class FFmpegExecutor:
    """Runs extraction and transcode operations with ffmpeg."""

    def __init__(
        self,
        encoding: EncodingConfig,
        ffmpeg_path: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            encoding: Fixed encoder settings.
            ffmpeg_path: Explicit ffmpeg path (None = look up in PATH).
            timeout: Maximum seconds per ffmpeg run. None = no limit.
        """
        self._encoding = encoding
        self._configured_path = ffmpeg_path
        self._tool_path: Path | None = None
        self._timeout = timeout

    @property
    def tool_path(self) -> Path:
        """Get path to ffmpeg, verifying availability.

        Raises:
            TransformError: If ffmpeg is not available.
        """
        if self._tool_path is None:
            try:
                self._tool_path = require_tool("ffmpeg", self._configured_path)
            except RuntimeError as e:
                raise TransformError(str(e)) from e
        return self._tool_path

    def build_extract_command(
        self, input_path: Path, track_index: int, output_path: Path
    ) -> list[str]:
        """Build the command copying one subtitle stream to an ASS file."""
        return [
            str(self.tool_path),
            *BASE_ARGS,
            "-i",
            str(input_path),
            "-map",
            f"0:s:{track_index}",
            "-c",
            "copy",
            "-f",
            "ass",
            str(output_path),
        ]

    def build_transcode_command(self, request: TranscodeRequest) -> list[str]:
        """Build the hardware transcode command for a request.

        The first video and first audio stream are kept; video is re-encoded
        with the configured encoder and audio is copied. When burning in
        subtitles with hardware decoding, frames are downloaded to system
        memory first since the subtitles filter works on software frames.
        """
        enc = self._encoding
        cmd = [str(self.tool_path), *BASE_ARGS]

        if enc.hwaccel:
            cmd.extend(
                [
                    "-hwaccel",
                    enc.hwaccel,
                    "-hwaccel_output_format",
                    enc.hwaccel_output_format,
                ]
            )
            decoder = enc.hw_decoders.get((request.source_codec or "").casefold())
            if decoder:
                cmd.extend(["-c:v", decoder])

        cmd.extend(["-i", str(request.input_path)])
        cmd.extend(["-map", "0:v:0", "-map", "0:a:0?"])

        if request.subtitle is not None:
            video_filter = build_subtitle_filter(request.subtitle)
            if enc.hwaccel:
                video_filter = (
                    f"hwdownload,format={enc.hwaccel_output_format},{video_filter}"
                )
            cmd.extend(["-vf", video_filter])

        cmd.extend(
            [
                "-c:v",
                enc.video_encoder,
                "-preset",
                enc.preset,
                "-global_quality",
                str(enc.global_quality),
                "-c:a",
                enc.audio_codec,
                str(request.output_path),
            ]
        )
        return cmd

    def extract_track(
        self,
        input_path: Path,
        track_index: int,
        output_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Copy subtitle stream ``track_index`` of ``input_path`` to an ASS file.

        Raises:
            TransformError: If extraction fails.
            CommandCancelled: If cancel_event was set while running.
        """
        logger.info(
            "Extracting subtitle track %d of %s", track_index, input_path.name
        )
        cmd = self.build_extract_command(input_path, track_index, output_path)
        self._run(cmd, f"subtitle extraction (track {track_index})", cancel_event)

    def transcode(
        self,
        request: TranscodeRequest,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Transcode ``request.input_path`` into ``request.output_path``.

        Raises:
            TransformError: If the transcode fails.
            CommandCancelled: If cancel_event was set while running.
        """
        cmd = self.build_transcode_command(request)
        self._run(cmd, "transcode", cancel_event)

    def _run(
        self,
        cmd: list[str],
        description: str,
        cancel_event: threading.Event | None,
    ) -> None:
        """Run an ffmpeg command, translating failures into TransformError."""
        try:
            result = run_cancellable(cmd, cancel_event, timeout=self._timeout)
        except subprocess.TimeoutExpired as e:
            raise TransformError(
                f"ffmpeg {description} timed out after {e.timeout}s"
            ) from e
        except OSError as e:
            raise TransformError(f"Could not run ffmpeg for {description}: {e}") from e

        if not result.success:
            raise TransformError(
                f"ffmpeg {description} failed (exit {result.returncode}): "
                f"{format_stderr_tail(result.stderr_tail)}"
            )
