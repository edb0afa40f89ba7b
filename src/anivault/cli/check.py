"""AniVault check command for verifying tools and configuration."""

import click

from anivault.cli.context import cli_overrides
from anivault.cli.exit_codes import ExitCode
from anivault.config import ConfigurationError, load_config
from anivault.executor import resolve_tool


def _format_status(available: bool) -> str:
    return "✓" if available else "✗"


@click.command("check")
@click.pass_context
def check_command(ctx: click.Context) -> None:
    """Check configuration and external tool availability.

    Exit codes:
      0 - Configuration valid and tools available
      2 - Configuration missing or invalid
      30 - ffmpeg or ffprobe not available
    """
    obj = ctx.find_root().obj or {}
    overrides = cli_overrides(
        obj.get("log_level"), obj.get("log_file"), obj.get("log_json", False)
    )
    try:
        config = load_config(obj.get("config_path"), overrides=overrides)
    except ConfigurationError as e:
        click.echo(f"{_format_status(False)} configuration: {e}")
        ctx.exit(ExitCode.CONFIG_ERROR)

    click.echo(f"{_format_status(True)} configuration")
    click.echo(f"    downloading: {config.downloading_folder_path}")
    click.echo(f"    to watch:    {config.to_watch_folder_path}")
    click.echo(f"    scratch:     {config.scratch_directory}")

    missing = []
    for name, configured in (
        ("ffmpeg", config.tools.ffmpeg),
        ("ffprobe", config.tools.ffprobe),
    ):
        path = resolve_tool(name, configured)
        if path is None:
            missing.append(name)
            click.echo(f"{_format_status(False)} {name}: not found")
        else:
            click.echo(f"{_format_status(True)} {name}: {path}")

    if missing:
        ctx.exit(ExitCode.TOOL_NOT_AVAILABLE)
