"""Domain models for AniVault.

These models describe a single unit of work: the file found in the
downloads folder, what ffprobe reported about it, and the plan chosen to
turn it into a watchable output. All of them are immutable snapshots owned
by the task handling that file.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CandidateFile:
    """A video file discovered in the downloads folder."""

    path: Path
    name: str
    extension: str
    # Name used in the output folder; differs from ``name`` only for files
    # picked up by the in-progress pass, which drop their prefix.
    output_name: str

    @classmethod
    def from_path(cls, path: Path, output_name: str | None = None) -> "CandidateFile":
        """Build a candidate from a filesystem path.

        Args:
            path: Path to the file.
            output_name: Name to give the finished file. Defaults to the
                source file name.

        Returns:
            CandidateFile for the path.
        """
        return cls(
            path=path,
            name=path.name,
            extension=path.suffix,
            output_name=output_name or path.name,
        )


@dataclass(frozen=True)
class SubtitleTrack:
    """A subtitle stream within a container.

    ``index`` is the position among the container's subtitle streams
    (ffmpeg's ``0:s:<index>``), not the position in any filtered subset.
    """

    index: int
    language: str


@dataclass(frozen=True)
class ProbeResult:
    """What the probe client reported for a file."""

    video_codec: str
    subtitle_tracks: tuple[SubtitleTrack, ...] = ()

    def tracks_for_language(self, language: str) -> tuple[SubtitleTrack, ...]:
        """Return subtitle tracks tagged with ``language``, in container order."""
        wanted = language.casefold()
        return tuple(
            track
            for track in self.subtitle_tracks
            if track.language.casefold() == wanted
        )


@dataclass(frozen=True)
class DirectMove:
    """File is already acceptable and has nothing to burn in."""


@dataclass(frozen=True)
class PlainTranscode:
    """Re-encode the video stream without subtitles."""


@dataclass(frozen=True)
class SingleSubtitleBurn:
    """Re-encode and burn in one embedded subtitle stream."""

    track_index: int


@dataclass(frozen=True)
class MultiSubtitleMerge:
    """Extract several subtitle streams, merge them and burn in the result."""

    track_indices: tuple[int, ...]


TransformPlan = DirectMove | PlainTranscode | SingleSubtitleBurn | MultiSubtitleMerge
