"""Domain enums for AniVault."""

from enum import Enum


class ScanMode(Enum):
    """Which files a scan pass over the downloads folder picks up.

    The two modes use complementary eligibility filters on the same folder:
    STABLE ignores names carrying the in-progress prefix, IN_PROGRESS only
    considers those names, and only once the writer has left them alone.
    """

    STABLE = "stable"
    IN_PROGRESS = "in-progress"
