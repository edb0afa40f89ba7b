"""TOML config file loading."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class TomlParseError(Exception):
    """Raised when a config file exists but is not valid TOML."""


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Load a TOML file into a dictionary.

    Args:
        path: Path to the TOML file.
        strict: If True, raise TomlParseError when the file cannot be read
            or parsed. If False, log a warning and return an empty dict.

    Returns:
        Parsed content, or an empty dict if the file does not exist.

    Raises:
        TomlParseError: When strict=True and the file is unreadable or invalid.
    """
    if not path.exists():
        return {}

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise TomlParseError(f"Failed to parse config file {path}: {e}") from e
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
