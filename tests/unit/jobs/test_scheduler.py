"""Tests for PeriodicRunner."""

import threading

import pytest

from anivault.jobs import PeriodicRunner


class FakeClock:
    """Monotonic clock advanced by the task under test."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RecordingEvent(threading.Event):
    """Stop event that records wait timeouts instead of sleeping."""

    def __init__(self) -> None:
        super().__init__()
        self.waits: list[float] = []

    def wait(self, timeout=None) -> bool:
        self.waits.append(timeout)
        return self.is_set()


class TestPeriodicRunner:
    """Tests for the watch loop timing."""

    def test_runs_immediately(self) -> None:
        calls = []
        runner = PeriodicRunner(lambda: calls.append(1), 30.0, RecordingEvent())
        assert runner.run_forever(max_runs=1) == 1
        assert calls == [1]

    def test_interval_measured_from_run_start(self) -> None:
        clock = FakeClock()
        event = RecordingEvent()

        def task() -> None:
            clock.now += 10.0

        runner = PeriodicRunner(task, 30.0, event, clock=clock)
        runner.run_forever(max_runs=3)

        assert event.waits == [20.0, 20.0]

    def test_overrun_starts_next_run_immediately(self, caplog) -> None:
        clock = FakeClock()
        event = RecordingEvent()
        durations = iter([75.0, 5.0])

        def task() -> None:
            clock.now += next(durations)

        runner = PeriodicRunner(task, 30.0, event, clock=clock)
        runner.run_forever(max_runs=2)

        # No wait after the long run; missed ticks are not replayed
        assert event.waits == []
        assert runner.runs == 2
        assert "longer than the 30s interval" in caplog.text

    def test_task_exception_does_not_stop_loop(self, caplog) -> None:
        calls = []

        def task() -> None:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("disk unplugged")

        runner = PeriodicRunner(task, 30.0, RecordingEvent())
        runner.run_forever(max_runs=2)

        assert len(calls) == 2
        assert "Scheduled run 1 failed" in caplog.text

    def test_stop_event_ends_loop(self) -> None:
        event = RecordingEvent()
        runner = PeriodicRunner(event.set, 30.0, event)
        assert runner.run_forever() == 1

    def test_stop_before_start(self) -> None:
        calls = []
        runner = PeriodicRunner(lambda: calls.append(1), 30.0)
        runner.stop()
        assert runner.run_forever() == 0
        assert calls == []

    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValueError, match="interval"):
            PeriodicRunner(lambda: None, 0)
