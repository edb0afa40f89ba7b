"""Configuration data models.

All configuration objects are frozen: the loader builds and validates them
once at startup and they are then passed explicitly to whoever needs them.
"""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_SCRATCH_DIRECTORY = Path(tempfile.gettempdir()) / "anivaultConverter"


@dataclass(frozen=True)
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass(frozen=True)
class EncodingConfig:
    """Fixed encoder settings applied to every transcode.

    The speed/quality pair is a deployment constant, never a per-file
    decision.
    """

    # Hardware acceleration for decoding (None = software decode)
    hwaccel: str | None = "qsv"
    hwaccel_output_format: str = "nv12"

    # Hardware decoders keyed by source codec; codecs not listed here are
    # decoded by ffmpeg's default decoder
    hw_decoders: dict[str, str] = field(default_factory=lambda: {"h264": "h264_qsv"})

    video_encoder: str = "hevc_qsv"
    preset: str = "slow"
    global_quality: int = 18
    audio_codec: str = "copy"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.global_quality <= 51:
            raise ValueError(
                f"global_quality must be between 1 and 51, got {self.global_quality}"
            )
        if not self.video_encoder:
            raise ValueError("video_encoder must not be empty")


@dataclass(frozen=True)
class SchedulerConfig:
    """Configuration for the periodic watch loop."""

    # Seconds between the starts of two consecutive runs
    interval_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.interval_seconds <= 0:
            raise ValueError(
                f"interval_seconds must be positive, got {self.interval_seconds}"
            )


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging output."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = True

    # Number of daily log files to keep
    backup_count: int = 7

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        if self.backup_count < 0:
            raise ValueError(
                f"backup_count must be non-negative, got {self.backup_count}"
            )


@dataclass(frozen=True)
class ConverterConfig:
    """Complete converter configuration."""

    downloading_folder_path: Path
    """Inbound folder the downloader writes into."""

    to_watch_folder_path: Path
    """Outbound folder receiving finished files."""

    subtitle_language: str = "ita"
    """Language tag of subtitle tracks to burn in."""

    passthrough_codec: str = "hevc"
    """Video codec the output accepts as-is."""

    allowed_extensions: tuple[str, ...] = (".mp4", ".mkv")
    downloading_prefix: str = "downloading_"

    max_concurrent: int = 2
    """Maximum number of simultaneous transformations per batch."""

    settle_seconds: float = 300.0
    """Quiet period after which a prefixed file counts as fully written."""

    scratch_directory: Path = DEFAULT_SCRATCH_DIRECTORY

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_concurrent < 1:
            raise ValueError(
                f"max_concurrent must be at least 1, got {self.max_concurrent}"
            )
        if self.settle_seconds < 0:
            raise ValueError(
                f"settle_seconds must be non-negative, got {self.settle_seconds}"
            )
        if not self.subtitle_language:
            raise ValueError("subtitle_language must not be empty")
        if not self.downloading_prefix:
            raise ValueError("downloading_prefix must not be empty")
