"""Tests for run_cancellable using short-lived Python child processes."""

import subprocess
import sys
import threading
import time

import pytest

from anivault.core.subprocess_utils import (
    STDERR_TAIL_LINES,
    CommandCancelled,
    run_cancellable,
)

SLEEP_FOREVER = [sys.executable, "-c", "import time; time.sleep(30)"]


class TestRunCancellable:
    """Tests for run_cancellable."""

    def test_captures_stdout(self) -> None:
        result = run_cancellable(
            [sys.executable, "-c", "print('hello')"], capture_stdout=True
        )
        assert result.success
        assert result.stdout == "hello"

    def test_stdout_discarded_by_default(self) -> None:
        result = run_cancellable([sys.executable, "-c", "print('hello')"])
        assert result.stdout == ""

    def test_nonzero_exit_keeps_stderr_tail(self) -> None:
        script = (
            "import sys\n"
            "for i in range(100):\n"
            "    print(f'line {i}', file=sys.stderr)\n"
            "sys.exit(3)\n"
        )
        result = run_cancellable([sys.executable, "-c", script])
        assert result.returncode == 3
        assert not result.success
        assert len(result.stderr_tail) == STDERR_TAIL_LINES
        assert result.stderr_tail[-1] == "line 99"

    def test_cancelled_before_start(self) -> None:
        event = threading.Event()
        event.set()
        with pytest.raises(CommandCancelled, match="before start"):
            run_cancellable(SLEEP_FOREVER, event)

    def test_cancel_stops_running_process(self) -> None:
        event = threading.Event()
        timer = threading.Timer(0.3, event.set)
        timer.start()
        started = time.monotonic()
        try:
            with pytest.raises(CommandCancelled):
                run_cancellable(SLEEP_FOREVER, event, poll_interval=0.05)
        finally:
            timer.cancel()
        assert time.monotonic() - started < 10

    def test_timeout(self) -> None:
        with pytest.raises(subprocess.TimeoutExpired):
            run_cancellable(SLEEP_FOREVER, timeout=0.3, poll_interval=0.05)

    def test_missing_command_raises_oserror(self) -> None:
        with pytest.raises(OSError):
            run_cancellable(["/nonexistent/anivault-tool"])
