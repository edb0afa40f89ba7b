"""Unit tests for logging context module."""

import logging
import threading

from anivault.logging.context import (
    FileContextFilter,
    clear_file_context,
    file_context,
    get_file_context,
    set_file_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "message", (), None)


class TestSetAndGetFileContext:
    """Tests for set_file_context and get_file_context."""

    def test_set_and_get_full_context(self) -> None:
        set_file_context("1", "episode01.mkv")
        assert get_file_context() == ("1", "episode01.mkv")
        clear_file_context()

    def test_set_slot_only(self) -> None:
        set_file_context("2")
        assert get_file_context() == ("2", None)
        clear_file_context()

    def test_clear_context(self) -> None:
        set_file_context("1", "episode01.mkv")
        clear_file_context()
        assert get_file_context() == (None, None)


class TestFileContextManager:
    """Tests for the file_context context manager."""

    def test_sets_values_inside_block(self) -> None:
        with file_context("1", "episode01.mkv"):
            assert get_file_context() == ("1", "episode01.mkv")

    def test_restores_previous_context(self) -> None:
        set_file_context("1", "outer.mkv")
        with file_context("2", "inner.mkv"):
            assert get_file_context() == ("2", "inner.mkv")
        assert get_file_context() == ("1", "outer.mkv")
        clear_file_context()

    def test_restores_on_exception(self) -> None:
        clear_file_context()
        try:
            with file_context("1", "episode01.mkv"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert get_file_context() == (None, None)

    def test_context_is_per_thread(self) -> None:
        """A context set on one thread is not visible on another."""
        seen = []

        def worker() -> None:
            seen.append(get_file_context())

        with file_context("1", "episode01.mkv"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == [(None, None)]


class TestFileContextFilter:
    """Tests for FileContextFilter."""

    def test_tag_with_slot_and_file(self) -> None:
        record = _record()
        with file_context("1", "episode01.mkv"):
            assert FileContextFilter().filter(record) is True
        assert record.context_tag == "[S1:episode01.mkv] "
        assert record.slot_id == "1"
        assert record.file_name == "episode01.mkv"

    def test_tag_with_slot_only(self) -> None:
        record = _record()
        with file_context("2"):
            FileContextFilter().filter(record)
        assert record.context_tag == "[S2] "

    def test_empty_tag_without_context(self) -> None:
        clear_file_context()
        record = _record()
        FileContextFilter().filter(record)
        assert record.context_tag == ""
        assert record.slot_id is None
