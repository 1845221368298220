"""CLI module for vconv."""

import logging
import sys
from pathlib import Path

import click

from vconv.cli.exit_codes import ExitCode

logger = logging.getLogger(__name__)


def _load_config(config_path: Path | None):
    """Load configuration, exiting with CONFIG_ERROR if it is invalid."""
    from vconv.config import ConfigError, get_config

    try:
        return get_config(config_path=config_path, strict=config_path is not None)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)


def _configure_logging(
    config,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from the loaded config and CLI options.

    Args:
        config: Loaded VConvConfig.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    from vconv.config.logging_factory import build_logging_config
    from vconv.logging import configure_logging

    logging_config = build_logging_config(
        config.logging,
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    configure_logging(logging_config)


@click.group()
@click.version_option(package_name="vconv")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.vconv/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: warning).",
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
    """vconv - Convert videos between containers, remuxing when possible."""
    ctx.ensure_object(dict)
    config = _load_config(config_path)
    ctx.obj["config"] = config
    _configure_logging(config, log_level, log_file, log_json)
    logger.debug(
        "vconv starting: log_level=%s, config=%s",
        config.logging.level if log_level is None else log_level,
        config_path or "default",
    )


# Defer import to avoid circular dependency
def _register_commands() -> None:
    from vconv.cli.convert import convert_command
    from vconv.cli.doctor import doctor_command
    from vconv.cli.formats import formats_command
    from vconv.cli.inspect import inspect_command

    main.add_command(convert_command)
    main.add_command(doctor_command)
    main.add_command(formats_command)
    main.add_command(inspect_command)


_register_commands()
