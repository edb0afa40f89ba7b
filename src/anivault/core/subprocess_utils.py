"""Subprocess utilities for external tool invocation.

ffprobe and ffmpeg calls run through run_cancellable(), which watches a
threading.Event while the child runs. When the event is set the child is
asked to stop (SIGTERM), then killed if it does not exit in time.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
import threading
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)

# Number of trailing stderr lines kept for error reporting
STDERR_TAIL_LINES = 40


class CommandCancelled(Exception):
    """Raised when a running command was stopped by its cancellation event."""


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a finished command."""

    returncode: int
    stdout: str
    stderr_tail: tuple[str, ...]

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def stderr(self) -> str:
        return "\n".join(self.stderr_tail)


def _drain(stream: IO[str], sink: list[str] | deque[str]) -> None:
    """Read a pipe to EOF into ``sink``."""
    try:
        for line in stream:
            sink.append(line.rstrip("\n"))
    except (ValueError, OSError) as e:
        # Pipe closed while the process was being stopped
        logger.debug("Pipe reader stopped: %s", e)


def run_cancellable(
    args: list[str | Path],
    cancel_event: threading.Event | None = None,
    *,
    timeout: float | None = None,
    capture_stdout: bool = False,
    poll_interval: float = 0.5,
    terminate_grace: float = 10.0,
) -> CommandResult:
    """Run an external command that can be stopped from another thread.

    stdout and stderr are read on helper threads so a chatty child never
    blocks on a full pipe.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        cancel_event: Event that, once set, stops the command.
        timeout: Maximum run time in seconds. None = no limit.
        capture_stdout: Collect stdout (otherwise it is discarded).
        poll_interval: Seconds between cancellation checks.
        terminate_grace: Seconds to wait after SIGTERM before killing.

    Returns:
        CommandResult with the return code, captured stdout and the last
        STDERR_TAIL_LINES lines of stderr.

    Raises:
        CommandCancelled: If cancel_event was set before the command exited.
        subprocess.TimeoutExpired: If the command ran longer than ``timeout``.
        OSError: If the command could not be started.
    """
    str_args = [str(arg) for arg in args]
    command_name = Path(str_args[0]).name if str_args else "unknown"

    if cancel_event is not None and cancel_event.is_set():
        raise CommandCancelled(f"{command_name} cancelled before start")

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": command_name},
    )

    start_time = time.monotonic()
    process = subprocess.Popen(  # nosec B603 - caller validates args
        str_args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE if capture_stdout else subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
    )

    stdout_lines: list[str] = []
    stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
    readers = []
    if process.stdout is not None:
        readers.append(
            threading.Thread(
                target=_drain, args=(process.stdout, stdout_lines), daemon=True
            )
        )
    if process.stderr is not None:
        readers.append(
            threading.Thread(
                target=_drain, args=(process.stderr, stderr_tail), daemon=True
            )
        )
    for reader in readers:
        reader.start()

    cancelled = False
    timed_out = False
    while True:
        try:
            process.wait(timeout=poll_interval)
            break
        except subprocess.TimeoutExpired:
            pass

        if cancel_event is not None and cancel_event.is_set():
            cancelled = True
            break
        if timeout is not None and time.monotonic() - start_time >= timeout:
            timed_out = True
            break

    if cancelled or timed_out:
        _stop_process(process, command_name, terminate_grace)

    for reader in readers:
        reader.join(timeout=5.0)

    elapsed = time.monotonic() - start_time
    if cancelled:
        logger.info("%s stopped after %.1fs (cancelled)", command_name, elapsed)
        raise CommandCancelled(f"{command_name} cancelled after {elapsed:.1f}s")
    if timed_out:
        logger.warning(
            "Command timed out after %ss: %s",
            timeout,
            " ".join(str_args[:3]) + ("..." if len(str_args) > 3 else ""),
        )
        raise subprocess.TimeoutExpired(str_args, timeout or 0.0)

    logger.debug(
        "Command completed",
        extra={
            "command": command_name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": process.returncode,
        },
    )
    return CommandResult(
        returncode=process.returncode,
        stdout="\n".join(stdout_lines),
        stderr_tail=tuple(stderr_tail),
    )


def _stop_process(
    process: subprocess.Popen, command_name: str, terminate_grace: float
) -> None:
    """Terminate a child process, escalating to kill after a grace period."""
    process.terminate()
    try:
        process.wait(timeout=terminate_grace)
    except subprocess.TimeoutExpired:
        logger.warning(
            "%s did not exit %ss after SIGTERM, killing", command_name, terminate_grace
        )
        process.kill()
        process.wait()
