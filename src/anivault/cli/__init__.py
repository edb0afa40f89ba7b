"""CLI module for AniVault."""

from pathlib import Path

import click


@click.group()
@click.version_option(package_name="anivault-converter")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.anivault/config.toml or ANIVAULT_CONFIG_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """AniVault - Convert downloaded episodes and hand them to the media library."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file
    ctx.obj["log_json"] = log_json


# Defer import to avoid circular dependency
def _register_commands():
    from anivault.cli.check import check_command
    from anivault.cli.run import run_command, watch_command

    main.add_command(run_command)
    main.add_command(watch_command)
    main.add_command(check_command)


_register_commands()
