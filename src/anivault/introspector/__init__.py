"""Probe client for AniVault.

- MediaIntrospector: Protocol defining the probe interface
- FFprobeIntrospector: Production implementation using ffprobe
- ProbeError: Exception for probe failures
"""

from anivault.introspector.ffprobe import FFprobeIntrospector
from anivault.introspector.interface import MediaIntrospector, ProbeError
from anivault.introspector.parsers import parse_ffprobe_output, parse_subtitle_tracks

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospector",
    "ProbeError",
    "parse_ffprobe_output",
    "parse_subtitle_tracks",
]
