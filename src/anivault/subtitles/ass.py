"""ASS (Advanced SubStation Alpha) track merging.

An ASS file is a header (script info, styles) followed by an ``[Events]``
section of ``Dialogue:`` lines. Merging several tracks keeps the header of
the first track only and interleaves every track's dialogue lines by start
time.

Dialogue lines are never dropped: a line whose start time cannot be read
is kept and placed after all timed lines.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import timedelta
from itertools import takewhile
from pathlib import Path

from anivault.executor.interface import TransformError

logger = logging.getLogger(__name__)

DIALOGUE_MARKER = "dialogue:"
EVENTS_MARKER = "[events]"

# A Dialogue line has 10 fields; the last one (Text) may contain commas
FIELD_SPLIT_LIMIT = 10
START_FIELD = 1
MIN_FIELDS = 3

# H:MM:SS.cc
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})\.(\d{2})$")

# Sort position of events without a readable start time
UNTIMED = timedelta.max

OUTPUT_ENCODING = "utf-8-sig"


class MergeError(TransformError):
    """Raised when subtitle tracks cannot be read, combined or written."""


def parse_start_time(value: str) -> timedelta | None:
    """Parse an ASS timestamp in ``H:MM:SS.cc`` form.

    Args:
        value: Timestamp text, surrounding whitespace allowed.

    Returns:
        The timestamp as a timedelta, or None if it is not a valid
        ``H:MM:SS.cc`` value.
    """
    match = _TIME_PATTERN.match(value.strip())
    if match is None:
        return None
    hours, minutes, seconds, centiseconds = (int(g) for g in match.groups())
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return timedelta(
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        milliseconds=centiseconds * 10,
    )


@dataclass(frozen=True)
class SubtitleEvent:
    """One dialogue line of an ASS track."""

    raw_line: str
    fields: tuple[str, ...]
    start_time: timedelta | None

    @classmethod
    def parse(cls, line: str) -> "SubtitleEvent":
        """Parse a ``Dialogue:`` line.

        Lines with fewer than three fields or an unreadable start time get
        ``start_time=None``.
        """
        fields = tuple(line.split(",", FIELD_SPLIT_LIMIT - 1))
        start_time = None
        if len(fields) >= MIN_FIELDS:
            start_time = parse_start_time(fields[START_FIELD])
        return cls(raw_line=line, fields=fields, start_time=start_time)

    @property
    def sort_key(self) -> timedelta:
        return self.start_time if self.start_time is not None else UNTIMED


@dataclass(frozen=True)
class MergedSubtitleFile:
    """A header block followed by time-ordered dialogue events."""

    header: tuple[str, ...]
    events: tuple[SubtitleEvent, ...]

    def lines(self) -> list[str]:
        return [*self.header, *(event.raw_line for event in self.events)]


def read_subtitle_lines(path: Path) -> list[str]:
    """Read an ASS file as a list of lines.

    A UTF-8 byte-order mark is stripped and undecodable bytes are replaced.
    Lines break only at ``\\n``, ``\\r\\n`` and ``\\r``; other Unicode line
    separators are dialogue text and stay inside their line.

    Raises:
        MergeError: If the file cannot be read.
    """
    try:
        # Universal newlines turn \r\n and \r into \n
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        raise MergeError(f"Could not read subtitle track {path}: {e}") from e
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _is_dialogue(line: str) -> bool:
    return line.lstrip().casefold().startswith(DIALOGUE_MARKER)


def extract_header(lines: Iterable[str]) -> list[str]:
    """Return every line before the first ``Dialogue:`` line."""
    return list(takewhile(lambda line: not _is_dialogue(line), lines))


def extract_events(lines: Iterable[str]) -> list[SubtitleEvent]:
    """Return the ``Dialogue:`` lines that follow the ``[Events]`` marker."""
    events = []
    in_events = False
    for line in lines:
        if not in_events:
            in_events = line.strip().casefold() == EVENTS_MARKER
            continue
        if _is_dialogue(line):
            events.append(SubtitleEvent.parse(line))
    return events


def merge_tracks(track_files: Sequence[Path]) -> MergedSubtitleFile:
    """Merge ASS tracks into one time-ordered track.

    The header comes from the first track only; the other tracks' headers
    are discarded. Events of all tracks are stably sorted by start time, so
    events with equal timestamps keep their original relative order.

    Args:
        track_files: Extracted ASS files, the first one providing the header.

    Returns:
        The merged track.

    Raises:
        MergeError: If no tracks were given or a track cannot be read.
    """
    if not track_files:
        raise MergeError("No subtitle tracks to merge")

    all_lines = [read_subtitle_lines(path) for path in track_files]
    header = extract_header(all_lines[0])

    events: list[SubtitleEvent] = []
    for path, lines in zip(track_files, all_lines):
        track_events = extract_events(lines)
        untimed = sum(1 for event in track_events if event.start_time is None)
        if untimed:
            logger.warning(
                "%d dialogue line(s) in %s have no readable start time; "
                "placing them at the end",
                untimed,
                path.name,
            )
        events.extend(track_events)

    events.sort(key=lambda event: event.sort_key)
    logger.debug(
        "Merged %d track(s) into %d event(s)", len(track_files), len(events)
    )
    return MergedSubtitleFile(header=tuple(header), events=tuple(events))


def write_merged(merged: MergedSubtitleFile, output_path: Path) -> Path:
    """Write a merged track as UTF-8 with a byte-order mark.

    The burn-in step's subtitle parser relies on the BOM to detect the
    encoding.

    Args:
        merged: Track to write.
        output_path: Destination file.

    Returns:
        ``output_path``.

    Raises:
        MergeError: If the file cannot be written.
    """
    try:
        with output_path.open("w", encoding=OUTPUT_ENCODING, newline="\n") as f:
            for line in merged.lines():
                f.write(line)
                f.write("\n")
    except OSError as e:
        raise MergeError(f"Could not write merged subtitles {output_path}: {e}") from e
    return output_path
