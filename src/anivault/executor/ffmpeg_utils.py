"""Shared helpers for ffmpeg-based operations."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".anivault_tmp_"


def create_temp_output(
    output_path: Path,
    temp_dir: Path | None = None,
    prefix: str = TEMP_PREFIX,
) -> Path:
    """Generate temp output path for the write-then-rename pattern.

    Args:
        output_path: Final output path.
        temp_dir: Directory for temp files (None = same as output).
        prefix: Prefix for temp file name.

    Returns:
        Path for temporary output file.
    """
    if temp_dir:
        return temp_dir / f"{prefix}{output_path.name}"
    return output_path.with_name(f"{prefix}{output_path.name}")


def cleanup_temp_file(path: Path) -> None:
    """Remove a temporary file, logging any errors.

    Args:
        path: Path to temp file to remove.
    """
    if path.exists():
        try:
            path.unlink()
            logger.debug("Cleaned up temp file: %s", path)
        except OSError as e:
            logger.warning("Could not clean up temp file %s: %s", path, e)


# Backslash comes first so later escapes are not doubled
OPTION_SPECIALS = ("\\", "'", ":")
FILTERGRAPH_SPECIALS = ("\\", "'", "[", "]", ",", ";")


def _backslash_escape(value: str, specials: tuple[str, ...]) -> str:
    for char in specials:
        value = value.replace(char, "\\" + char)
    return value


def escape_filter_path(path: Path) -> str:
    """Escape a path for use as an unquoted filter option value.

    ffmpeg unescapes a filter argument twice: once when parsing the
    filtergraph and once when parsing the filter's options. The path is
    escaped for the option level first, then for the filtergraph level.
    """
    escaped = _backslash_escape(path.as_posix(), OPTION_SPECIALS)
    return _backslash_escape(escaped, FILTERGRAPH_SPECIALS)


def format_stderr_tail(lines: tuple[str, ...], limit: int = 5) -> str:
    """Return the last meaningful stderr lines as a single string."""
    meaningful = [line.strip() for line in lines if line.strip()]
    return " | ".join(meaningful[-limit:]) or "no output"
