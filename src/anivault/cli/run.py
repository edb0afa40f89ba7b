"""Conversion commands: single batch run and the watch loop."""

from __future__ import annotations

import logging
import threading

import click

from anivault.cli.context import build_orchestrator, cancel_on_signal, load_cli_config
from anivault.cli.exit_codes import ExitCode
from anivault.domain.enums import ScanMode
from anivault.jobs import BatchOrchestrator, PeriodicRunner

logger = logging.getLogger(__name__)

MODE_CHOICES = {
    "stable": (ScanMode.STABLE,),
    "in-progress": (ScanMode.IN_PROGRESS,),
    "all": (ScanMode.STABLE, ScanMode.IN_PROGRESS),
}


@click.command("run")
@click.option(
    "--mode",
    type=click.Choice(list(MODE_CHOICES), case_sensitive=False),
    default="all",
    show_default=True,
    help="Which files to pick up: finished downloads, settled in-progress "
    "downloads, or both.",
)
@click.pass_context
def run_command(ctx: click.Context, mode: str) -> None:
    """Convert every eligible file once and exit.

    Exit codes:
      0 - Batch completed (individual file failures are logged)
      2 - Configuration missing or invalid
      30 - ffmpeg or ffprobe not available
      130 - Interrupted
    """
    config = load_cli_config(ctx)
    cancel_event = threading.Event()
    orchestrator = build_orchestrator(ctx, config, cancel_event)

    with cancel_on_signal(cancel_event):
        summaries = orchestrator.run(MODE_CHOICES[mode.lower()])

    for summary in summaries:
        click.echo(summary.to_text())

    if cancel_event.is_set():
        ctx.exit(ExitCode.INTERRUPTED)


@click.command("watch")
@click.option(
    "--interval",
    type=click.FloatRange(min=1.0),
    default=None,
    help="Seconds between batch starts (default: 30, or as configured).",
)
@click.pass_context
def watch_command(ctx: click.Context, interval: float | None) -> None:
    """Convert eligible files now and then on a fixed interval.

    Batches never overlap. SIGINT or SIGTERM stops running conversions and
    exits the loop.
    """
    config = load_cli_config(ctx, interval=interval)
    cancel_event = threading.Event()
    orchestrator = build_orchestrator(ctx, config, cancel_event)

    logger.info(
        "Watching %s -> %s",
        config.downloading_folder_path,
        config.to_watch_folder_path,
    )
    runner = PeriodicRunner(
        lambda: _run_all(orchestrator),
        config.scheduler.interval_seconds,
        stop_event=cancel_event,
    )
    with cancel_on_signal(cancel_event):
        runner.run_forever()


def _run_all(orchestrator: BatchOrchestrator) -> None:
    orchestrator.run(MODE_CHOICES["all"])
