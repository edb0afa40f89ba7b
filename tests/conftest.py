"""Shared test fixtures for AniVault."""

import threading
import time
from pathlib import Path

import pytest

from anivault.config.models import ConverterConfig, EncodingConfig
from anivault.core.subprocess_utils import CommandCancelled
from anivault.domain.models import ProbeResult
from anivault.executor.interface import TransformError, TranscodeRequest
from anivault.logging import get_file_context

ASS_HEADER = [
    "[Script Info]",
    "Title: Episode",
    "ScriptType: v4.00+",
    "",
    "[V4+ Styles]",
    "Format: Name, Fontname, Fontsize",
    "Style: Default,Arial,20",
    "",
    "[Events]",
    "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, "
    "Effect, Text",
]


def dialogue(start: str, text: str, end: str = "0:59:59.00") -> str:
    """Build an ASS Dialogue line."""
    return f"Dialogue: 0,{start},{end},Default,,0,0,0,,{text}"


def write_ass(path: Path, events: list[str], header: list[str] | None = None) -> Path:
    """Write an ASS file with the given dialogue lines."""
    lines = (header if header is not None else ASS_HEADER) + events
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def folders(tmp_path: Path) -> dict[str, Path]:
    """Create downloads, library and scratch folders."""
    paths = {
        "downloading": tmp_path / "downloads",
        "to_watch": tmp_path / "library",
        "scratch": tmp_path / "scratch",
    }
    for path in paths.values():
        path.mkdir()
    return paths


@pytest.fixture
def make_config(folders: dict[str, Path]):
    """Factory for ConverterConfig pointing at the temp folders."""

    def _make(**overrides) -> ConverterConfig:
        values = {
            "downloading_folder_path": folders["downloading"],
            "to_watch_folder_path": folders["to_watch"],
            "scratch_directory": folders["scratch"],
            "settle_seconds": 0.0,
            "encoding": EncodingConfig(),
        }
        values.update(overrides)
        return ConverterConfig(**values)

    return _make


class FakeIntrospector:
    """MediaIntrospector returning canned results keyed by file name."""

    def __init__(
        self,
        results: dict[str, ProbeResult | Exception] | None = None,
        default: ProbeResult | None = None,
    ) -> None:
        self.results = results or {}
        self.default = default or ProbeResult(video_codec="h264")
        self.probed: list[str] = []
        self.cancel_events: list[threading.Event | None] = []
        self._lock = threading.Lock()

    def probe(self, path: Path, cancel_event: threading.Event | None = None):
        with self._lock:
            self.probed.append(path.name)
            self.cancel_events.append(cancel_event)
        result = self.results.get(path.name, self.default)
        if isinstance(result, Exception):
            raise result
        return result


class FakeExecutor:
    """TransformExecutor that writes small output files.

    Records the peak number of concurrent transcodes and the log slot each
    one ran under. ``delay`` keeps each transcode busy long enough for
    overlap to be observable.
    """

    def __init__(
        self,
        delay: float = 0.0,
        fail_for: set[str] | None = None,
        subtitle_content: dict[int, list[str]] | None = None,
        block_until_cancelled: bool = False,
    ) -> None:
        self.delay = delay
        self.block_until_cancelled = block_until_cancelled
        self.started = threading.Event()
        self.fail_for = fail_for or set()
        self.subtitle_content = subtitle_content or {}
        self.requests: list[TranscodeRequest] = []
        self.extracted: list[tuple[str, int]] = []
        self.cancel_events: list[threading.Event | None] = []
        self.active = 0
        self.peak = 0
        self.slots: list[str | None] = []
        self.shared_slots: list[str | None] = []
        self._running_slots: set[str | None] = set()
        self._lock = threading.Lock()

    def extract_track(
        self,
        input_path: Path,
        track_index: int,
        output_path: Path,
        cancel_event: threading.Event | None = None,
    ) -> None:
        with self._lock:
            self.extracted.append((input_path.name, track_index))
        events = self.subtitle_content.get(
            track_index, [dialogue("0:00:01.00", f"track {track_index}")]
        )
        write_ass(output_path, events)

    def transcode(
        self,
        request: TranscodeRequest,
        cancel_event: threading.Event | None = None,
    ) -> None:
        slot_id, _ = get_file_context()
        with self._lock:
            self.requests.append(request)
            self.cancel_events.append(cancel_event)
            self.active += 1
            self.peak = max(self.peak, self.active)
            self.slots.append(slot_id)
            if slot_id in self._running_slots:
                self.shared_slots.append(slot_id)
            self._running_slots.add(slot_id)
        self.started.set()
        try:
            if self.block_until_cancelled and cancel_event is not None:
                cancel_event.wait(timeout=10)
                raise CommandCancelled("ffmpeg cancelled")
            if self.delay:
                time.sleep(self.delay)
            if request.input_path.name in self.fail_for:
                raise TransformError(f"ffmpeg failed for {request.input_path.name}")
            request.output_path.write_bytes(b"converted")
        finally:
            with self._lock:
                self.active -= 1
                self._running_slots.discard(slot_id)


@pytest.fixture
def make_introspector():
    """Factory for FakeIntrospector."""
    return FakeIntrospector


@pytest.fixture
def make_executor():
    """Factory for FakeExecutor."""
    return FakeExecutor


@pytest.fixture
def ass_file(tmp_path: Path):
    """Factory writing an ASS file with the given dialogue lines."""

    def _write(name: str, events: list[str], header: list[str] | None = None) -> Path:
        return write_ass(tmp_path / name, events, header)

    return _write
