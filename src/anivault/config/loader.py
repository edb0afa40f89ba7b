"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed as an override ConfigSource)
2. Environment variables
3. Config file (~/.anivault/config.toml)
4. Default values

Environment variables:
- DownloadingFolderPath: Inbound folder (required)
- ToWatchFolderPath: Outbound folder (required)
- ANIVAULT_CONFIG_PATH: Path to config file (overrides default location)
- ANIVAULT_FFMPEG_PATH / ANIVAULT_FFPROBE_PATH: Tool paths
- ANIVAULT_SCRATCH_DIR: Directory for subtitle merge artifacts
- ANIVAULT_SUBTITLE_LANGUAGE: Subtitle language to burn in (default "ita")
- ANIVAULT_PASSTHROUGH_CODEC: Codec moved without re-encoding (default "hevc")
- ANIVAULT_MAX_CONCURRENT: Simultaneous transformations (default 2)
- ANIVAULT_SETTLE_SECONDS: Quiet period for in-progress files (default 300)
- ANIVAULT_HWACCEL: Hardware decode API, "none" to disable (default "qsv")
- ANIVAULT_INTERVAL_SECONDS: Watch loop interval (default 30)
- ANIVAULT_LOG_LEVEL / ANIVAULT_LOG_FILE / ANIVAULT_LOG_FORMAT: Logging
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from anivault.config.builder import (
    DOWNLOADING_FOLDER_VAR,
    TO_WATCH_FOLDER_VAR,
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from anivault.config.env import EnvReader
from anivault.config.models import ConverterConfig
from anivault.config.toml_parser import TomlParseError, load_toml_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".anivault"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class ConfigurationError(Exception):
    """Raised when the configuration is missing or invalid.

    This is fatal: the process must not start without a valid configuration.
    """


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path.

    Can be overridden by the ANIVAULT_CONFIG_PATH environment variable.
    """
    reader = env_reader or EnvReader()
    return reader.get_path("ANIVAULT_CONFIG_PATH", DEFAULT_CONFIG_FILE)


def load_config(
    config_path: Path | None = None,
    overrides: ConfigSource | None = None,
    env_reader: EnvReader | None = None,
    *,
    check_folders: bool = True,
) -> ConverterConfig:
    """Load, merge and validate the converter configuration.

    Args:
        config_path: Path to config file (overrides ANIVAULT_CONFIG_PATH).
        overrides: Values from the command line.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        check_folders: Verify that the inbound and outbound folders exist.

    Returns:
        Validated ConverterConfig.

    Raises:
        ConfigurationError: If a required folder is missing or invalid, the
            config file cannot be parsed, or a value fails validation.
    """
    reader = env_reader or EnvReader()
    path = config_path or get_default_config_path(reader)

    try:
        file_config = load_toml_file(path, strict=True)
    except TomlParseError as e:
        raise ConfigurationError(str(e)) from e

    try:
        file_source = source_from_file(file_config)
    except ValueError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    builder = ConfigBuilder()
    builder.apply(file_source)
    builder.apply(source_from_env(reader))
    if overrides is not None:
        builder.apply(overrides)

    if builder.get("downloading_folder_path") is None:
        raise ConfigurationError(f"{DOWNLOADING_FOLDER_VAR} is missing")
    if builder.get("to_watch_folder_path") is None:
        raise ConfigurationError(f"{TO_WATCH_FOLDER_VAR} is missing")

    try:
        config = builder.build()
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    if check_folders:
        errors = validate_config(config)
        if errors:
            raise ConfigurationError("; ".join(errors))

    logger.debug(
        "Configuration loaded: downloading=%s, to_watch=%s, language=%s, "
        "max_concurrent=%d",
        config.downloading_folder_path,
        config.to_watch_folder_path,
        config.subtitle_language,
        config.max_concurrent,
    )
    return config


def validate_config(config: ConverterConfig) -> list[str]:
    """Validate filesystem-level configuration constraints.

    Args:
        config: The configuration to validate.

    Returns:
        List of error strings. Empty list means configuration is valid.
    """
    errors: list[str] = []

    for name, folder in (
        (DOWNLOADING_FOLDER_VAR, config.downloading_folder_path),
        (TO_WATCH_FOLDER_VAR, config.to_watch_folder_path),
    ):
        if not folder.is_dir():
            errors.append(f"{name} is not a directory: {folder}")

    if not os.access(config.to_watch_folder_path, os.W_OK) and not errors:
        errors.append(
            f"{TO_WATCH_FOLDER_VAR} is not writable: {config.to_watch_folder_path}"
        )

    return errors
