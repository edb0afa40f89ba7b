"""Shared helpers for CLI commands: configuration, logging and signals."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from anivault.cli.exit_codes import ExitCode
from anivault.config import (
    ConfigSource,
    ConfigurationError,
    ConverterConfig,
    load_config,
)
from anivault.executor import FFmpegExecutor, require_tool
from anivault.introspector import FFprobeIntrospector, ProbeError
from anivault.jobs import BatchOrchestrator
from anivault.logging import configure_logging

logger = logging.getLogger(__name__)


def cli_overrides(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    interval: float | None = None,
) -> ConfigSource:
    """Build the highest-precedence config source from CLI options."""
    return ConfigSource(
        logging_level=log_level,
        logging_file=log_file,
        logging_format="json" if log_json else None,
        interval_seconds=interval,
    )


def load_cli_config(
    ctx: click.Context, interval: float | None = None
) -> ConverterConfig:
    """Load the configuration for a command and configure logging from it.

    Exits with ExitCode.CONFIG_ERROR if the configuration is missing or
    invalid.
    """
    obj = ctx.find_root().obj or {}
    overrides = cli_overrides(
        obj.get("log_level"),
        obj.get("log_file"),
        obj.get("log_json", False),
        interval=interval,
    )
    try:
        config = load_config(obj.get("config_path"), overrides=overrides)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.CONFIG_ERROR)

    configure_logging(config.logging)
    return config


def build_orchestrator(
    ctx: click.Context,
    config: ConverterConfig,
    cancel_event: threading.Event,
) -> BatchOrchestrator:
    """Create the orchestrator with the ffprobe and ffmpeg clients.

    Exits with ExitCode.TOOL_NOT_AVAILABLE if either tool is missing.
    """
    try:
        require_tool("ffmpeg", config.tools.ffmpeg)
        introspector = FFprobeIntrospector(config.tools.ffprobe)
    except (RuntimeError, ProbeError) as e:
        logger.error("%s", e)
        click.echo(f"Error: {e}", err=True)
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)

    executor = FFmpegExecutor(config.encoding, ffmpeg_path=config.tools.ffmpeg)
    return BatchOrchestrator(config, introspector, executor, cancel_event)


@contextmanager
def cancel_on_signal(cancel_event: threading.Event) -> Iterator[threading.Event]:
    """Set ``cancel_event`` on SIGINT or SIGTERM while the block runs.

    The previous handlers are restored on exit.
    """

    def _signal_handler(signum: int, frame) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s, requesting shutdown...", sig_name)
        cancel_event.set()

    previous = {
        signal.SIGINT: signal.signal(signal.SIGINT, _signal_handler),
        signal.SIGTERM: signal.signal(signal.SIGTERM, _signal_handler),
    }
    try:
        yield cancel_event
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
