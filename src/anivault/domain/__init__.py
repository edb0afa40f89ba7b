"""Domain models shared across AniVault modules."""

from anivault.domain.enums import ScanMode
from anivault.domain.models import (
    CandidateFile,
    DirectMove,
    MultiSubtitleMerge,
    PlainTranscode,
    ProbeResult,
    SingleSubtitleBurn,
    SubtitleTrack,
    TransformPlan,
)

__all__ = [
    "CandidateFile",
    "DirectMove",
    "MultiSubtitleMerge",
    "PlainTranscode",
    "ProbeResult",
    "ScanMode",
    "SingleSubtitleBurn",
    "SubtitleTrack",
    "TransformPlan",
]
