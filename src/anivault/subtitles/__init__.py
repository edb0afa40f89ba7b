"""Subtitle merge engine for AniVault.

Combines several ASS subtitle tracks of the same language into one track
whose dialogue events are ordered by start time.
"""

from anivault.subtitles.ass import (
    MergedSubtitleFile,
    MergeError,
    SubtitleEvent,
    extract_events,
    extract_header,
    merge_tracks,
    parse_start_time,
    read_subtitle_lines,
    write_merged,
)
from anivault.subtitles.scratch import ScratchArea

__all__ = [
    "MergeError",
    "MergedSubtitleFile",
    "ScratchArea",
    "SubtitleEvent",
    "extract_events",
    "extract_header",
    "merge_tracks",
    "parse_start_time",
    "read_subtitle_lines",
    "write_merged",
]
