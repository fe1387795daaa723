"""Root CLI group for cqbus with global flags and command registration."""

from __future__ import annotations

import click

from cqbus import __version__
from cqbus.commands import register_commands
from cqbus.commands._context import AppContext
from cqbus.config.settings import CqbusSettings
from cqbus.domain.errors import ConfigurationError


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="cqbus")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """cqbus — command/query dispatcher tooling."""
    try:
        settings = CqbusSettings.load(config_path=config_path, json_output=json_output)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    if verbose or log_json:
        logging_cfg = settings.logging.model_copy(
            update={
                "verbose": verbose or settings.logging.verbose,
                "log_json": log_json or settings.logging.log_json,
            }
        )
        settings = settings.model_copy(update={"logging": logging_cfg})

    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
