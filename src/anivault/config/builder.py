"""Configuration builder with explicit layering.

ConfigBuilder composes ConverterConfig from several ConfigSources. Later
sources override earlier ones for every value they actually set.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from anivault.config.env import EnvReader
from anivault.config.models import (
    DEFAULT_SCRATCH_DIRECTORY,
    ConverterConfig,
    EncodingConfig,
    LoggingConfig,
    SchedulerConfig,
    ToolPathsConfig,
)

# Environment variable names recognised for the two required folders
DOWNLOADING_FOLDER_VAR = "DownloadingFolderPath"
TO_WATCH_FOLDER_VAR = "ToWatchFolderPath"


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values mean "not specified in this source" and never override
    values from lower-precedence sources.
    """

    # Folders
    downloading_folder_path: Path | None = None
    to_watch_folder_path: Path | None = None
    scratch_directory: Path | None = None

    # Conversion behavior
    subtitle_language: str | None = None
    passthrough_codec: str | None = None
    downloading_prefix: str | None = None
    max_concurrent: int | None = None
    settle_seconds: float | None = None

    # Tool paths
    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    # Encoding
    hwaccel: str | None = None
    video_encoder: str | None = None
    preset: str | None = None
    global_quality: int | None = None

    # Scheduler
    interval_seconds: float | None = None

    # Logging
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds ConverterConfig by layering ConfigSources with precedence.

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply a configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value with fallback to default."""
        return self._values.get(key, default)

    def build(self) -> ConverterConfig:
        """Build the final ConverterConfig with defaults for unset values.

        Returns:
            Complete ConverterConfig.

        Raises:
            KeyError: If a required folder path was never set.
            ValueError: If a value fails model validation.
        """
        tools = ToolPathsConfig(
            ffmpeg=self.get("ffmpeg_path"),
            ffprobe=self.get("ffprobe_path"),
        )

        # hwaccel = "none" in a config file disables hardware decoding
        hwaccel = self.get("hwaccel", "qsv")
        encoding = EncodingConfig(
            hwaccel=None if hwaccel == "none" else hwaccel,
            video_encoder=self.get("video_encoder", "hevc_qsv"),
            preset=self.get("preset", "slow"),
            global_quality=self.get("global_quality", 18),
        )

        scheduler = SchedulerConfig(
            interval_seconds=self.get("interval_seconds", 30.0),
        )

        logging_config = LoggingConfig(
            level=self.get("logging_level", "info"),
            file=self.get("logging_file"),
            format=self.get("logging_format", "text"),
            include_stderr=self.get("logging_include_stderr", True),
            backup_count=self.get("logging_backup_count", 7),
        )

        return ConverterConfig(
            downloading_folder_path=self._values["downloading_folder_path"],
            to_watch_folder_path=self._values["to_watch_folder_path"],
            subtitle_language=self.get("subtitle_language", "ita"),
            passthrough_codec=self.get("passthrough_codec", "hevc"),
            downloading_prefix=self.get("downloading_prefix", "downloading_"),
            max_concurrent=self.get("max_concurrent", 2),
            settle_seconds=self.get("settle_seconds", 300.0),
            scratch_directory=self.get("scratch_directory", DEFAULT_SCRATCH_DIRECTORY),
            tools=tools,
            encoding=encoding,
            scheduler=scheduler,
            logging=logging_config,
        )


def _path_or_none(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


# Accepted TOML value types per table and key; other keys are ignored
FILE_SCHEMA: dict[str, dict[str, tuple[type, ...]]] = {
    "folders": {"downloading": (str,), "to_watch": (str,), "scratch": (str,)},
    "conversion": {
        "subtitle_language": (str,),
        "passthrough_codec": (str,),
        "downloading_prefix": (str,),
        "max_concurrent": (int,),
        "settle_seconds": (int, float),
    },
    "tools": {"ffmpeg": (str,), "ffprobe": (str,)},
    "encoding": {
        "hwaccel": (str,),
        "video_encoder": (str,),
        "preset": (str,),
        "global_quality": (int,),
    },
    "scheduler": {"interval_seconds": (int, float)},
    "logging": {
        "level": (str,),
        "file": (str,),
        "format": (str,),
        "include_stderr": (bool,),
        "backup_count": (int,),
    },
}


def _check_file_types(file_config: dict[str, Any]) -> None:
    """Check parsed TOML values against FILE_SCHEMA.

    Raises:
        ValueError: Naming the first table or key with a wrong type.
    """
    for table, keys in FILE_SCHEMA.items():
        section = file_config.get(table, {})
        if not isinstance(section, dict):
            raise ValueError(f"[{table}] must be a table")
        for key, kinds in keys.items():
            value = section.get(key)
            if value is None:
                continue
            # TOML booleans are ints to isinstance
            if isinstance(value, bool) and bool not in kinds:
                valid = False
            else:
                valid = isinstance(value, kinds)
            if not valid:
                expected = " or ".join(kind.__name__ for kind in kinds)
                raise ValueError(
                    f"{table}.{key} must be {expected}, "
                    f"got {type(value).__name__} {value!r}"
                )


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from a parsed TOML config file.

    Args:
        file_config: Parsed configuration dictionary.

    Returns:
        ConfigSource with values from the config file.

    Raises:
        ValueError: If a value has the wrong type.
    """
    _check_file_types(file_config)
    folders = file_config.get("folders", {})
    conversion = file_config.get("conversion", {})
    tools = file_config.get("tools", {})
    encoding = file_config.get("encoding", {})
    scheduler = file_config.get("scheduler", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        # Folders
        downloading_folder_path=_path_or_none(folders.get("downloading")),
        to_watch_folder_path=_path_or_none(folders.get("to_watch")),
        scratch_directory=_path_or_none(folders.get("scratch")),
        # Conversion
        subtitle_language=conversion.get("subtitle_language"),
        passthrough_codec=conversion.get("passthrough_codec"),
        downloading_prefix=conversion.get("downloading_prefix"),
        max_concurrent=conversion.get("max_concurrent"),
        settle_seconds=conversion.get("settle_seconds"),
        # Tools
        ffmpeg_path=_path_or_none(tools.get("ffmpeg")),
        ffprobe_path=_path_or_none(tools.get("ffprobe")),
        # Encoding
        hwaccel=encoding.get("hwaccel"),
        video_encoder=encoding.get("video_encoder"),
        preset=encoding.get("preset"),
        global_quality=encoding.get("global_quality"),
        # Scheduler
        interval_seconds=scheduler.get("interval_seconds"),
        # Logging
        logging_level=logging_conf.get("level"),
        logging_file=_path_or_none(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from environment variables.

    Args:
        reader: EnvReader instance for reading environment variables.

    Returns:
        ConfigSource with values from environment variables.
    """
    return ConfigSource(
        # Folders
        downloading_folder_path=reader.get_path(DOWNLOADING_FOLDER_VAR),
        to_watch_folder_path=reader.get_path(TO_WATCH_FOLDER_VAR),
        scratch_directory=reader.get_path("ANIVAULT_SCRATCH_DIR"),
        # Conversion
        subtitle_language=reader.get_str("ANIVAULT_SUBTITLE_LANGUAGE"),
        passthrough_codec=reader.get_str("ANIVAULT_PASSTHROUGH_CODEC"),
        max_concurrent=reader.get_int("ANIVAULT_MAX_CONCURRENT"),
        settle_seconds=reader.get_float("ANIVAULT_SETTLE_SECONDS"),
        # Tools
        ffmpeg_path=reader.get_path("ANIVAULT_FFMPEG_PATH"),
        ffprobe_path=reader.get_path("ANIVAULT_FFPROBE_PATH"),
        # Encoding
        hwaccel=reader.get_str("ANIVAULT_HWACCEL"),
        # Scheduler
        interval_seconds=reader.get_float("ANIVAULT_INTERVAL_SECONDS"),
        # Logging
        logging_level=reader.get_str("ANIVAULT_LOG_LEVEL"),
        logging_file=reader.get_path("ANIVAULT_LOG_FILE"),
        logging_format=reader.get_str("ANIVAULT_LOG_FORMAT"),
    )
