"""Core utilities shared across AniVault modules."""

from anivault.core.subprocess_utils import (
    CommandCancelled,
    CommandResult,
    run_cancellable,
)

__all__ = [
    "CommandCancelled",
    "CommandResult",
    "run_cancellable",
]
