"""Pure parsing functions for ffprobe JSON output.

These functions turn ffprobe JSON data into domain objects. They perform no
I/O so they can be tested directly against fixture dictionaries.
"""

import logging
from pathlib import Path

from anivault.domain.models import ProbeResult, SubtitleTrack
from anivault.introspector.interface import ProbeError

logger = logging.getLogger(__name__)

UNDEFINED_LANGUAGE = "und"


def parse_subtitle_tracks(streams: list[dict]) -> tuple[SubtitleTrack, ...]:
    """Collect subtitle streams in container order.

    The track index is the position among subtitle streams only, which is
    what ffmpeg's ``0:s:<n>`` specifier and the ``si`` filter option expect.

    Args:
        streams: The ``streams`` list from ffprobe JSON.

    Returns:
        Subtitle tracks ordered as they appear in the container.
    """
    subtitle_streams = [s for s in streams if s.get("codec_type") == "subtitle"]
    tracks = []
    for position, stream in enumerate(subtitle_streams):
        tags = stream.get("tags") or {}
        language = tags.get("language") or UNDEFINED_LANGUAGE
        tracks.append(SubtitleTrack(index=position, language=language))
    return tuple(tracks)


def parse_ffprobe_output(path: Path, data: dict) -> ProbeResult:
    """Build a ProbeResult from parsed ffprobe JSON.

    Args:
        path: File the output belongs to, for error messages.
        data: Parsed ffprobe JSON with a ``streams`` list.

    Returns:
        ProbeResult with the first video stream's codec.

    Raises:
        ProbeError: If the output has no video stream or no codec name.
    """
    streams = data.get("streams")
    if not isinstance(streams, list):
        raise ProbeError(
            f"Missing 'streams' in ffprobe output for {path}. "
            "File may be corrupted or not a valid media file."
        )

    video_streams = [
        s
        for s in streams
        if s.get("codec_type") == "video"
        # Cover art is reported as a video stream
        and not (s.get("disposition") or {}).get("attached_pic", 0)
    ]
    if not video_streams:
        raise ProbeError(f"No video stream found in {path}")

    codec = video_streams[0].get("codec_name")
    if not codec:
        raise ProbeError(f"Video stream of {path} has no codec name")

    subtitle_tracks = parse_subtitle_tracks(streams)
    logger.debug(
        "Probed %s: codec=%s, subtitles=%s",
        path.name,
        codec,
        [t.language for t in subtitle_tracks],
    )
    return ProbeResult(video_codec=codec, subtitle_tracks=subtitle_tracks)
