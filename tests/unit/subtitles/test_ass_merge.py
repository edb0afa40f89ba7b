"""Tests for ASS subtitle track merging."""

from datetime import timedelta
from pathlib import Path

import pytest

from anivault.executor.interface import TransformError
from anivault.subtitles import (
    MergeError,
    SubtitleEvent,
    extract_events,
    extract_header,
    merge_tracks,
    parse_start_time,
    write_merged,
)

HEADER_B = ["[Script Info]", "Title: Other track", "", "[Events]"]


def _dialogue(start: str, text: str) -> str:
    return f"Dialogue: 0,{start},0:59:59.00,Default,,0,0,0,,{text}"


def _starts(merged) -> list[str]:
    return [event.fields[1] for event in merged.events]


class TestParseStartTime:
    """Tests for parse_start_time."""

    def test_valid_timestamp(self) -> None:
        assert parse_start_time("1:02:03.45") == timedelta(
            hours=1, minutes=2, seconds=3, milliseconds=450
        )

    def test_two_digit_hours_and_whitespace(self) -> None:
        assert parse_start_time(" 10:00:00.00 ") == timedelta(hours=10)

    @pytest.mark.parametrize(
        "value", ["", "0:00:01", "0:00:01.5", "0:60:00.00", "abc", "0:00:01.000"]
    )
    def test_invalid_timestamps(self, value: str) -> None:
        assert parse_start_time(value) is None


class TestSubtitleEvent:
    """Tests for SubtitleEvent.parse."""

    def test_text_commas_are_preserved(self) -> None:
        event = SubtitleEvent.parse(_dialogue("0:00:01.00", "Hello, world, again"))
        assert len(event.fields) == 10
        assert event.fields[-1] == "Hello, world, again"
        assert event.start_time == timedelta(seconds=1)

    def test_too_few_fields(self) -> None:
        event = SubtitleEvent.parse("Dialogue: 0")
        assert event.start_time is None
        assert event.sort_key == timedelta.max


class TestExtractHeaderAndEvents:
    """Tests for header and event extraction."""

    def test_header_stops_at_first_dialogue(self) -> None:
        lines = ["[Script Info]", "[Events]", "Format: ...", "Dialogue: x", "tail"]
        assert extract_header(lines) == ["[Script Info]", "[Events]", "Format: ..."]

    def test_events_only_after_marker(self) -> None:
        lines = [
            "Dialogue: 0,0:00:09.00,stray before events",
            "  [EVENTS]  ",
            "Format: Layer, Start",
            "Comment: 0,0:00:01.00,not dialogue",
            "  dialogue: 0,0:00:02.00,lowercase marker",
        ]
        events = extract_events(lines)
        assert [e.raw_line for e in events] == [
            "  dialogue: 0,0:00:02.00,lowercase marker"
        ]


class TestMergeTracks:
    """Tests for merge_tracks."""

    def test_orders_events_across_tracks(self, ass_file) -> None:
        track_a = ass_file(
            "a.ass",
            [_dialogue("0:00:05.00", "A late"), _dialogue("0:00:01.00", "A early")],
        )
        track_b = ass_file("b.ass", [_dialogue("0:00:03.00", "B")], header=HEADER_B)

        merged = merge_tracks([track_a, track_b])

        assert _starts(merged) == ["0:00:01.00", "0:00:03.00", "0:00:05.00"]
        header_a = track_a.read_text(encoding="utf-8").splitlines()[:10]
        assert list(merged.header) == header_a
        assert "Title: Other track" not in merged.header

    def test_malformed_lines_sort_last(self, ass_file) -> None:
        track = ass_file(
            "a.ass",
            [
                "Dialogue: broken",
                _dialogue("9:99:99.99", "bad time"),
                _dialogue("0:00:02.00", "ok"),
            ],
        )
        merged = merge_tracks([track])
        texts = [event.raw_line for event in merged.events]
        assert texts == [
            _dialogue("0:00:02.00", "ok"),
            "Dialogue: broken",
            _dialogue("9:99:99.99", "bad time"),
        ]

    def test_equal_times_keep_track_order(self, ass_file) -> None:
        track_a = ass_file("a.ass", [_dialogue("0:00:01.00", "first")])
        track_b = ass_file("b.ass", [_dialogue("0:00:01.00", "second")])
        merged = merge_tracks([track_a, track_b])
        assert [e.fields[-1] for e in merged.events] == ["first", "second"]

    def test_empty_track_list(self) -> None:
        with pytest.raises(MergeError, match="No subtitle tracks"):
            merge_tracks([])

    def test_missing_track(self, tmp_path: Path) -> None:
        with pytest.raises(MergeError, match="Could not read"):
            merge_tracks([tmp_path / "missing.ass"])

    def test_merge_error_is_transform_error(self) -> None:
        assert issubclass(MergeError, TransformError)

    def test_reads_bom_and_bad_bytes(self, tmp_path: Path) -> None:
        path = tmp_path / "bom.ass"
        content = "[Events]\n" + _dialogue("0:00:01.00", "caf\xe9") + "\n"
        path.write_bytes(b"\xef\xbb\xbf" + content.encode("utf-8") + b"\xff\n")
        merged = merge_tracks([path])
        assert merged.header == ("[Events]",)
        assert merged.events[0].fields[-1] == "caf\xe9"

    @pytest.mark.parametrize(
        "separator", ["\u2028", "\u2029", "\x85", "\x0b", "\x0c", "\x1c", "\x1e"]
    )
    def test_unicode_separators_stay_in_dialogue_text(
        self, ass_file, separator: str
    ) -> None:
        line = _dialogue("0:00:01.00", f"first{separator}second")
        merged = merge_tracks([ass_file("a.ass", [line])])
        assert [event.raw_line for event in merged.events] == [line]
        assert merged.events[0].fields[-1] == f"first{separator}second"

    def test_crlf_and_cr_line_endings(self, tmp_path: Path) -> None:
        path = tmp_path / "crlf.ass"
        early = _dialogue("0:00:01.00", "early")
        late = _dialogue("0:00:02.00", "late")
        path.write_bytes(f"[Events]\r\n{late}\r{early}\r\n".encode())
        merged = merge_tracks([path])
        assert merged.header == ("[Events]",)
        assert [event.raw_line for event in merged.events] == [early, late]


class TestWriteMerged:
    """Tests for write_merged."""

    def test_writes_utf8_with_bom(self, ass_file, tmp_path: Path) -> None:
        track = ass_file("a.ass", [_dialogue("0:00:01.00", "Ciao è")])
        output = tmp_path / "combined.ass"

        write_merged(merge_tracks([track]), output)

        raw = output.read_bytes()
        assert raw.startswith(b"\xef\xbb\xbf")
        text = raw[3:].decode("utf-8")
        assert text.endswith(_dialogue("0:00:01.00", "Ciao è") + "\n")
        assert "\r\n" not in text

    def test_unwritable_destination(self, ass_file, tmp_path: Path) -> None:
        track = ass_file("a.ass", [_dialogue("0:00:01.00", "x")])
        with pytest.raises(MergeError, match="Could not write"):
            write_merged(merge_tracks([track]), tmp_path / "nope" / "combined.ass")
