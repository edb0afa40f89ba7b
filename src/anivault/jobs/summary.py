"""Batch run summaries."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from anivault.domain.enums import ScanMode


class FileOutcome(Enum):
    """Final state of one candidate within a batch run."""

    MOVED = "moved"
    TRANSCODED = "transcoded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    NOT_DISPATCHED = "not_dispatched"


@dataclass
class BatchSummary:
    """Outcome counts for one batch run.

    Transformation tasks record their outcome from worker threads, so
    updates go through record().
    """

    mode: ScanMode
    discovered: int = 0
    outcomes: Counter[FileOutcome] = field(default_factory=Counter)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def record(self, outcome: FileOutcome, count: int = 1) -> None:
        with self._lock:
            self.outcomes[outcome] += count

    def count(self, outcome: FileOutcome) -> int:
        with self._lock:
            return self.outcomes[outcome]

    @property
    def moved(self) -> int:
        return self.count(FileOutcome.MOVED)

    @property
    def transcoded(self) -> int:
        return self.count(FileOutcome.TRANSCODED)

    @property
    def failed(self) -> int:
        return self.count(FileOutcome.FAILED)

    @property
    def cancelled(self) -> int:
        return self.count(FileOutcome.CANCELLED) + self.count(
            FileOutcome.NOT_DISPATCHED
        )

    def to_text(self) -> str:
        """Human-readable one-line summary, e.g. for the end-of-batch log line."""
        parts = [f"{self.discovered} {self.mode.value} file(s) found"]
        if self.moved:
            parts.append(f"{self.moved} moved")
        if self.transcoded:
            parts.append(f"{self.transcoded} transcoded")
        if self.failed:
            parts.append(f"{self.failed} failed")
        if self.cancelled:
            parts.append(f"{self.cancelled} cancelled")
        return ", ".join(parts)
