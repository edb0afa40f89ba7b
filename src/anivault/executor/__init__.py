"""Executor module for AniVault.

- TransformExecutor: Protocol for the external media tool
- FFmpegExecutor: ffmpeg implementation (subtitle extraction, transcoding)
- move_file: Relocation of finished or untouched files
"""

from anivault.executor.ffmpeg import FFmpegExecutor, build_subtitle_filter
from anivault.executor.interface import (
    SubtitleSource,
    TranscodeRequest,
    TransformError,
    TransformExecutor,
    require_tool,
    resolve_tool,
)
from anivault.executor.move import MoveErrorType, MoveResult, move_file

__all__ = [
    "FFmpegExecutor",
    "MoveErrorType",
    "MoveResult",
    "SubtitleSource",
    "TranscodeRequest",
    "TransformError",
    "TransformExecutor",
    "build_subtitle_filter",
    "move_file",
    "require_tool",
    "resolve_tool",
]
