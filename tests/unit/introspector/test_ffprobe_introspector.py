"""Tests for FFprobeIntrospector with the subprocess layer mocked."""

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from anivault.core.subprocess_utils import CommandCancelled, CommandResult
from anivault.introspector.ffprobe import FFprobeIntrospector
from anivault.introspector.interface import ProbeError

RUN_CANCELLABLE = "anivault.introspector.ffprobe.run_cancellable"

FFPROBE_JSON = json.dumps(
    {
        "streams": [
            {"codec_type": "video", "codec_name": "h264"},
            {
                "codec_type": "subtitle",
                "codec_name": "ass",
                "tags": {"language": "ita"},
            },
        ]
    }
)


@pytest.fixture
def introspector():
    with patch(
        "anivault.introspector.ffprobe.resolve_tool",
        return_value=Path("/usr/bin/ffprobe"),
    ):
        yield FFprobeIntrospector()


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "episode01.mkv"
    path.write_bytes(b"")
    return path


class TestFFprobeIntrospector:
    """Tests for FFprobeIntrospector.probe."""

    def test_missing_tool(self) -> None:
        with patch("anivault.introspector.ffprobe.resolve_tool", return_value=None):
            with pytest.raises(ProbeError, match="ffprobe is not installed"):
                FFprobeIntrospector()

    def test_probe_parses_output(self, introspector, media_file: Path) -> None:
        result = CommandResult(returncode=0, stdout=FFPROBE_JSON, stderr_tail=())
        with patch(RUN_CANCELLABLE, return_value=result) as run:
            probe = introspector.probe(media_file)

        assert probe.video_codec == "h264"
        assert probe.subtitle_tracks[0].language == "ita"
        args = run.call_args.args[0]
        assert args[1:] == [
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_streams",
            str(media_file),
        ]
        assert run.call_args.kwargs["capture_stdout"] is True

    def test_missing_file(self, introspector, tmp_path: Path) -> None:
        with pytest.raises(ProbeError, match="File not found"):
            introspector.probe(tmp_path / "gone.mkv")

    def test_nonzero_exit(self, introspector, media_file: Path) -> None:
        result = CommandResult(
            returncode=1, stdout="", stderr_tail=("Invalid data found",)
        )
        with patch(RUN_CANCELLABLE, return_value=result):
            with pytest.raises(ProbeError, match="Invalid data found"):
                introspector.probe(media_file)

    def test_invalid_json(self, introspector, media_file: Path) -> None:
        result = CommandResult(returncode=0, stdout="not json", stderr_tail=())
        with patch(RUN_CANCELLABLE, return_value=result):
            with pytest.raises(ProbeError, match="Invalid ffprobe output"):
                introspector.probe(media_file)

    def test_timeout(self, introspector, media_file: Path) -> None:
        with patch(
            RUN_CANCELLABLE,
            side_effect=subprocess.TimeoutExpired(["ffprobe"], 60),
        ):
            with pytest.raises(ProbeError, match="timed out"):
                introspector.probe(media_file)

    def test_cancellation_propagates(self, introspector, media_file: Path) -> None:
        with patch(
            RUN_CANCELLABLE,
            side_effect=CommandCancelled("ffprobe cancelled"),
        ):
            with pytest.raises(CommandCancelled):
                introspector.probe(media_file)
