"""Exit codes for AniVault CLI commands.

Exit code ranges:
    0: Success
    1-9: General and configuration errors
    30-39: Tool/dependency errors
    130: Interrupted by a signal
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for AniVault CLI commands."""

    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Ctrl+C / SIGINT / SIGTERM
    INTERRUPTED = 130
