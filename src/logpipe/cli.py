"""Click command line for logpipe.

Purpose
-------
Expose the forwarding daemon and its helpers (`check`, `example-config`,
`info`) behind one ``logpipe`` command while ``lib_cli_exit_tools`` handles
exit codes and traceback rendering.

Contents
--------
* :func:`cli` - root group; running it without a subcommand starts forwarding.
* :func:`main` - entry point used by ``python -m logpipe`` and the console script.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

import click
import lib_cli_exit_tools
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __init__conf__
from . import config as config_module
from . import runtime
from .application.use_cases import FailurePolicy
from .domain import ConfigurationError

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_LEVEL_ENV_VAR = "LOGPIPE_LOG_LEVEL"

_HANDLER: logging.Handler | None = None


def configure_logging(level: str) -> None:
    """Route the ``logpipe`` logger hierarchy to a Rich handler on stderr."""

    global _HANDLER
    package_logger = logging.getLogger("logpipe")
    if _HANDLER is not None:
        package_logger.removeHandler(_HANDLER)
    _HANDLER = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
    package_logger.addHandler(_HANDLER)
    package_logger.setLevel(level.upper())


def _fail_configuration(error: ConfigurationError, config_path: Path) -> None:
    click.echo(f"Configuration error: {error}")
    click.echo(config_module.usage_text(config_path), nl=False)
    raise SystemExit(runtime.EXIT_CONFIG_ERROR)


@click.group(help=__init__conf__.title, context_settings=CLICK_CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Pipe configuration file (default: ${config_module.CONFIG_ENV_VAR} or {config_module.DEFAULT_CONFIG_PATH}).",
)
@click.option(
    "--sink",
    type=click.Choice(sorted(runtime.SINKS)),
    default="syslog",
    show_default=True,
    help="Log sink receiving forwarded records.",
)
@click.option(
    "--fail-fast/--isolate",
    default=False,
    help="Stop every pipe when one fails (default: keep the others running).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar=LOG_LEVEL_ENV_VAR,
    default="INFO",
    show_default=True,
    help="Verbosity of logpipe's own diagnostics on stderr.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load a nearby .env before reading configuration (default: ${config_module.DOTENV_ENV_VAR}).",
)
@click.option(
    "--traceback/--no-traceback",
    default=False,
    help="Show full Python tracebacks on errors.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    sink: str,
    fail_fast: bool,
    log_level: str,
    use_dotenv: bool,
    traceback: bool,
) -> None:
    """Forward FIFO lines to the local system log."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not click.core.ParameterSource.DEFAULT:
        explicit = use_dotenv
    env_toggle = os.getenv(config_module.DOTENV_ENV_VAR)
    if config_module.should_use_dotenv(explicit=explicit, env_value=env_toggle):
        config_module.enable_dotenv()

    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj.update(
        config_path=config_module.resolve_config_path(config_path),
        sink=sink,
        policy=FailurePolicy.FAIL_FAST if fail_fast else FailurePolicy.ISOLATE,
    )
    if ctx.invoked_subcommand is None:
        ctx.invoke(run_command)


@cli.command("run")
@click.option("--once", is_flag=True, help="Stop each pipe after its first writer detaches.")
@click.pass_context
def run_command(ctx: click.Context, once: bool = False) -> None:
    """Forward every configured pipe until the process is stopped."""

    options = ctx.obj
    try:
        code = runtime.run(options["config_path"], sink=options["sink"], policy=options["policy"], reopen=not once)
    except ConfigurationError as error:
        _fail_configuration(error, options["config_path"])
        return
    if code != runtime.EXIT_OK:
        raise SystemExit(code)


@cli.command("check")
@click.pass_context
def check_command(ctx: click.Context) -> None:
    """Validate the configuration and list the pipes it defines."""

    config_path = ctx.obj["config_path"]
    try:
        specs = config_module.load_pipe_specs(config_path)
    except ConfigurationError as error:
        _fail_configuration(error, config_path)
        return

    table = Table(title=f"Pipes in {config_path}")
    for column in ("path", "facility", "severity", "tag", "priority"):
        table.add_column(column)
    for spec in specs:
        table.add_row(spec.path, spec.facility.label, spec.severity.label, spec.tag, str(spec.priority))
    Console().print(table)


@cli.command("example-config")
@click.pass_context
def example_config_command(ctx: click.Context) -> None:
    """Print an example configuration file."""

    click.echo(config_module.usage_text(ctx.obj["config_path"]), nl=False)


@cli.command("info")
def info_command() -> None:
    """Print package metadata."""

    click.echo(runtime.summary_info(), nl=False)


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI and return its exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    so embedding callers keep their own settings.
    """

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "configure_logging", "main"]
