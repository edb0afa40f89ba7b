"""Execution of a transformation plan for a single file.

FileTransformer owns the filesystem side of a transformation: temp output
naming, the subtitle scratch area, promotion of the finished output and
removal of the source. The media work itself is delegated to a
TransformExecutor.
"""

import logging
import threading
from pathlib import Path

from anivault.domain.models import (
    CandidateFile,
    MultiSubtitleMerge,
    PlainTranscode,
    ProbeResult,
    SingleSubtitleBurn,
    TransformPlan,
)
from anivault.executor.ffmpeg_utils import cleanup_temp_file, create_temp_output
from anivault.executor.interface import (
    SubtitleSource,
    TranscodeRequest,
    TransformError,
    TransformExecutor,
)
from anivault.executor.move import move_file
from anivault.subtitles import ScratchArea, merge_tracks, write_merged

logger = logging.getLogger(__name__)


class FileTransformer:
    """Applies transformation plans to candidate files."""

    def __init__(
        self,
        executor: TransformExecutor,
        output_dir: Path,
        scratch_dir: Path,
    ) -> None:
        """Initialize the transformer.

        Args:
            executor: External media tool.
            output_dir: Folder receiving finished files.
            scratch_dir: Folder for subtitle extraction and merge artifacts.
        """
        self._executor = executor
        self._output_dir = output_dir
        self._scratch_dir = scratch_dir

    def output_path_for(self, candidate: CandidateFile) -> Path:
        return self._output_dir / candidate.output_name

    def relocate(self, candidate: CandidateFile) -> Path:
        """Move a file that needs no transformation to the output folder.

        Raises:
            TransformError: If the move fails.
        """
        destination = self.output_path_for(candidate)
        result = move_file(candidate.path, destination)
        if not result.success:
            raise TransformError(
                f"Could not move {candidate.name}: {result.error_message}"
            )
        return destination

    def transform(
        self,
        candidate: CandidateFile,
        plan: TransformPlan,
        probe: ProbeResult,
        cancel_event: threading.Event | None = None,
    ) -> Path:
        """Transcode a file according to its plan.

        The output is written under a temporary name in the output folder and
        renamed once complete. The source is deleted only after that. On any
        failure or cancellation the partial output is removed and the source
        stays in place.

        Args:
            candidate: File to transform.
            plan: PlainTranscode, SingleSubtitleBurn or MultiSubtitleMerge.
            probe: Probe result for the file.
            cancel_event: Event that stops running tool invocations.

        Returns:
            Path of the finished output.

        Raises:
            TransformError: If any step fails (MergeError for subtitle merging).
            CommandCancelled: If cancel_event was set while a tool was running.
        """
        output_path = self.output_path_for(candidate)
        temp_output = create_temp_output(output_path)
        completed = False
        try:
            if isinstance(plan, MultiSubtitleMerge):
                stem = Path(candidate.name).stem
                with ScratchArea(self._scratch_dir, stem) as scratch:
                    combined = self._merge_subtitles(
                        candidate, plan.track_indices, scratch, cancel_event
                    )
                    logger.info("Starting transcode with merged subtitles")
                    subtitle = SubtitleSource(combined)
                    self._executor.transcode(
                        self._request(candidate, probe, temp_output, subtitle),
                        cancel_event,
                    )
            elif isinstance(plan, SingleSubtitleBurn):
                logger.info(
                    "Starting transcode with subtitle track %d", plan.track_index
                )
                subtitle = SubtitleSource(candidate.path, stream_index=plan.track_index)
                self._executor.transcode(
                    self._request(candidate, probe, temp_output, subtitle),
                    cancel_event,
                )
            elif isinstance(plan, PlainTranscode):
                logger.info("Starting transcode")
                self._executor.transcode(
                    self._request(candidate, probe, temp_output, None),
                    cancel_event,
                )
            else:
                raise TypeError(f"Plan {plan!r} does not transcode")

            result = move_file(temp_output, output_path, overwrite=True)
            if not result.success:
                raise TransformError(
                    f"Could not finalize output {output_path}: {result.error_message}"
                )
            completed = True
        finally:
            if not completed:
                cleanup_temp_file(temp_output)

        try:
            candidate.path.unlink()
        except OSError as e:
            raise TransformError(
                f"Output {output_path} written but source could not be removed: {e}"
            ) from e

        logger.info("Finished: %s", output_path)
        return output_path

    def _request(
        self,
        candidate: CandidateFile,
        probe: ProbeResult,
        output_path: Path,
        subtitle: SubtitleSource | None,
    ) -> TranscodeRequest:
        return TranscodeRequest(
            input_path=candidate.path,
            output_path=output_path,
            source_codec=probe.video_codec,
            subtitle=subtitle,
        )

    def _merge_subtitles(
        self,
        candidate: CandidateFile,
        track_indices: tuple[int, ...],
        scratch: ScratchArea,
        cancel_event: threading.Event | None,
    ) -> Path:
        """Extract the given subtitle tracks and merge them into one file."""
        logger.info(
            "Extracting %d subtitle tracks for merging", len(track_indices)
        )
        track_files = []
        for index in track_indices:
            track_file = scratch.track_path(index)
            self._executor.extract_track(
                candidate.path, index, track_file, cancel_event
            )
            track_files.append(track_file)

        merged = merge_tracks(track_files)
        return write_merged(merged, scratch.combined_path())
