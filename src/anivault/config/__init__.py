"""Configuration management for AniVault.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables
3. Config file (~/.anivault/config.toml)
4. Default values (lowest priority)
"""

from anivault.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from anivault.config.env import EnvReader
from anivault.config.loader import (
    ConfigurationError,
    get_default_config_path,
    load_config,
    validate_config,
)
from anivault.config.models import (
    ConverterConfig,
    EncodingConfig,
    LoggingConfig,
    SchedulerConfig,
    ToolPathsConfig,
)
from anivault.config.toml_parser import TomlParseError, load_toml_file

__all__ = [
    # Models
    "ConverterConfig",
    "EncodingConfig",
    "LoggingConfig",
    "SchedulerConfig",
    "ToolPathsConfig",
    # Loader
    "ConfigurationError",
    "get_default_config_path",
    "load_config",
    "validate_config",
    # Layering
    "EnvReader",
    "ConfigBuilder",
    "ConfigSource",
    "source_from_env",
    "source_from_file",
    "TomlParseError",
    "load_toml_file",
]
