"""Scanner module for discovering files to convert."""

from anivault.scanner.discovery import discover_candidates

__all__ = ["discover_candidates"]
