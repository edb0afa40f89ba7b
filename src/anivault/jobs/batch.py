"""Batch orchestrator.

One batch run scans the downloads folder and converts every eligible file:

- Candidates are probed and classified one at a time, in name order.
- Files that need no transformation are moved right away.
- Transformations run on a thread pool. A bounded semaphore caps the number
  in flight; the dispatch loop blocks on it before handling the next file.
- After the last candidate the run waits for every launched task.

A failure for one file is logged and never affects other files. The batch
cancellation event is checked while waiting for a slot and handed to every
probe and tool invocation, which stop their subprocess when it is set.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait

from anivault.config.models import ConverterConfig
from anivault.core.subprocess_utils import CommandCancelled
from anivault.domain.enums import ScanMode
from anivault.domain.models import (
    CandidateFile,
    DirectMove,
    ProbeResult,
    TransformPlan,
)
from anivault.executor.interface import TransformError, TransformExecutor
from anivault.introspector.interface import MediaIntrospector, ProbeError
from anivault.jobs.summary import BatchSummary, FileOutcome
from anivault.logging import file_context
from anivault.scanner import discover_candidates
from anivault.workflow import FileTransformer, classify, describe_plan

logger = logging.getLogger(__name__)

# Seconds between cancellation checks while waiting for a free slot
SLOT_POLL_INTERVAL = 0.5


class SlotPool:
    """Numbered transformation slots gated by a bounded semaphore.

    A held slot number is unique among running tasks, so it can tag their
    log lines. The lowest free number is handed out first.
    """

    def __init__(self, size: int) -> None:
        self._semaphore = threading.BoundedSemaphore(size)
        self._lock = threading.Lock()
        self._free = set(range(1, size + 1))

    def acquire(self, timeout: float | None = None) -> int | None:
        """Take a free slot, waiting up to ``timeout`` seconds.

        Returns:
            The slot number, or None if none became free in time.
        """
        if not self._semaphore.acquire(timeout=timeout):
            return None
        with self._lock:
            slot = min(self._free)
            self._free.remove(slot)
        return slot

    def release(self, slot: int) -> None:
        with self._lock:
            if slot in self._free:
                raise ValueError(f"Slot {slot} released twice")
            self._free.add(slot)
        self._semaphore.release()


class BatchOrchestrator:
    """Runs conversion batches over the downloads folder."""

    def __init__(
        self,
        config: ConverterConfig,
        introspector: MediaIntrospector,
        executor: TransformExecutor,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Validated converter configuration.
            introspector: Probe client.
            executor: External media tool.
            cancel_event: Cancellation signal shared with the caller. A new
                event is created if not given.
        """
        self._config = config
        self._introspector = introspector
        self._transformer = FileTransformer(
            executor,
            output_dir=config.to_watch_folder_path,
            scratch_dir=config.scratch_directory,
        )
        self.cancel_event = cancel_event or threading.Event()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Stop dispatching new files and ask running tools to stop."""
        logger.info("Cancellation requested")
        self.cancel_event.set()

    def run(
        self, modes: tuple[ScanMode, ...] = (ScanMode.STABLE, ScanMode.IN_PROGRESS)
    ) -> list[BatchSummary]:
        """Run one batch per scan mode, in order, until cancelled."""
        summaries = []
        for mode in modes:
            if self.cancelled:
                break
            summaries.append(self.run_batch(mode))
        return summaries

    def run_batch(self, mode: ScanMode = ScanMode.STABLE) -> BatchSummary:
        """Convert every eligible file of the downloads folder.

        Returns only once every launched transformation has finished.

        Args:
            mode: Which scan pass to run.

        Returns:
            Outcome counts for the run.
        """
        config = self._config
        summary = BatchSummary(mode=mode)

        try:
            candidates = discover_candidates(
                config.downloading_folder_path,
                mode,
                allowed_extensions=config.allowed_extensions,
                downloading_prefix=config.downloading_prefix,
                settle_seconds=config.settle_seconds,
            )
        except OSError as e:
            logger.error(
                "Cannot list downloads folder %s: %s",
                config.downloading_folder_path,
                e,
            )
            return summary

        summary.discovered = len(candidates)
        if not candidates:
            logger.debug("No %s files to process", mode.value)
            return summary

        logger.info("Processing %d %s file(s)", len(candidates), mode.value)
        cap = config.max_concurrent
        slots = SlotPool(cap)
        launched: list[Future] = []

        with ThreadPoolExecutor(max_workers=cap, thread_name_prefix="anivault") as pool:
            for position, candidate in enumerate(candidates, start=1):
                slot = self._acquire_slot(slots)
                if slot is None:
                    remaining = len(candidates) - position + 1
                    logger.info(
                        "Batch cancelled, %d file(s) not dispatched", remaining
                    )
                    summary.record(FileOutcome.NOT_DISPATCHED, remaining)
                    break

                slot_id = str(slot)
                future = None
                try:
                    with file_context(slot_id, candidate.name):
                        future = self._dispatch(candidate, pool, slot_id, summary)
                finally:
                    if future is None:
                        slots.release(slot)
                    else:
                        future.add_done_callback(
                            lambda _, held=slot: slots.release(held)
                        )
                if future is not None:
                    launched.append(future)

            # Wait for the tail of the batch, which may hold fewer than
            # ``cap`` tasks and would otherwise never be waited on
            wait(launched)

        logger.info(
            "Batch finished: %s", summary.to_text(), extra={"mode": mode.value}
        )
        return summary

    def _acquire_slot(self, slots: SlotPool) -> int | None:
        """Block until a transformation slot is free.

        Returns:
            The held slot number, or None if the batch was cancelled.
        """
        while not self.cancelled:
            slot = slots.acquire(timeout=SLOT_POLL_INTERVAL)
            if slot is not None:
                if self.cancelled:
                    slots.release(slot)
                    return None
                return slot
        return None

    def _dispatch(
        self,
        candidate: CandidateFile,
        pool: ThreadPoolExecutor,
        slot_id: str,
        summary: BatchSummary,
    ) -> Future | None:
        """Probe and classify a file, then move it or launch its transformation.

        Returns:
            The launched task, or None if the file was handled (or skipped)
            synchronously.
        """
        try:
            probe = self._introspector.probe(candidate.path, self.cancel_event)
            plan = classify(
                probe,
                target_language=self._config.subtitle_language,
                passthrough_codec=self._config.passthrough_codec,
            )
        except CommandCancelled:
            logger.info("Probe of %s cancelled", candidate.name)
            _finish(summary, candidate, FileOutcome.CANCELLED)
            return None
        except ProbeError as e:
            logger.error("Error probing file %s: %s", candidate.name, e)
            _finish(summary, candidate, FileOutcome.FAILED)
            return None
        except Exception as e:
            logger.exception("Error processing file %s: %s", candidate.name, e)
            _finish(summary, candidate, FileOutcome.FAILED)
            return None

        description = describe_plan(plan)
        logger.info(
            "%s (%s): %s",
            candidate.name,
            probe.video_codec,
            description,
            extra={"plan": description},
        )

        if isinstance(plan, DirectMove):
            try:
                self._transformer.relocate(candidate)
                _finish(summary, candidate, FileOutcome.MOVED)
            except TransformError as e:
                logger.error("Error moving file %s: %s", candidate.name, e)
                _finish(summary, candidate, FileOutcome.FAILED)
            return None

        return pool.submit(
            self._run_transform, candidate, plan, probe, slot_id, summary
        )

    def _run_transform(
        self,
        candidate: CandidateFile,
        plan: TransformPlan,
        probe: ProbeResult,
        slot_id: str,
        summary: BatchSummary,
    ) -> None:
        """Transformation task body. Never raises."""
        with file_context(slot_id, candidate.name):
            try:
                self._transformer.transform(candidate, plan, probe, self.cancel_event)
                _finish(summary, candidate, FileOutcome.TRANSCODED)
            except CommandCancelled:
                logger.info("Conversion of %s cancelled", candidate.name)
                _finish(summary, candidate, FileOutcome.CANCELLED)
            except TransformError as e:
                logger.error(
                    "Error converting file %s: %s", candidate.name, e, exc_info=True
                )
                _finish(summary, candidate, FileOutcome.FAILED)
            except Exception as e:
                logger.exception("Error processing file %s: %s", candidate.name, e)
                _finish(summary, candidate, FileOutcome.FAILED)


def _finish(
    summary: BatchSummary, candidate: CandidateFile, outcome: FileOutcome
) -> None:
    """Record a file's final state and log it with an ``outcome`` field."""
    summary.record(outcome)
    logger.info(
        "%s: %s", candidate.name, outcome.value, extra={"outcome": outcome.value}
    )
