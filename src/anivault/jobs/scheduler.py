"""Fixed-interval runner for the watch mode."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PeriodicRunner:
    """Runs a task immediately, then once per interval until stopped.

    Intervals are measured from the start of the previous run. A run that
    takes longer than the interval is followed directly by the next one;
    missed ticks are dropped, so two runs never overlap.

    Example:
        stop = threading.Event()
        runner = PeriodicRunner(orchestrator.run, 30.0, stop)
        runner.run_forever()
    """

    def __init__(
        self,
        task: Callable[[], object],
        interval: float,
        stop_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.task = task
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self._clock = clock
        self.runs = 0

    def stop(self) -> None:
        self.stop_event.set()

    def run_once(self) -> None:
        """Run the task, logging and swallowing any exception it raises."""
        self.runs += 1
        try:
            self.task()
        except Exception as e:
            logger.exception("Scheduled run %d failed: %s", self.runs, e)

    def run_forever(self, max_runs: int | None = None) -> int:
        """Run until the stop event is set.

        Args:
            max_runs: Stop after this many runs (None for no limit).

        Returns:
            Number of runs performed.
        """
        logger.info("Running every %.0f seconds", self.interval)
        while not self.stop_event.is_set():
            started = self._clock()
            self.run_once()
            if max_runs is not None and self.runs >= max_runs:
                break

            elapsed = self._clock() - started
            if elapsed >= self.interval:
                logger.warning(
                    "Run took %.1fs, longer than the %.0fs interval",
                    elapsed,
                    self.interval,
                )
                continue
            self.stop_event.wait(self.interval - elapsed)

        logger.info("Scheduler stopped after %d run(s)", self.runs)
        return self.runs
