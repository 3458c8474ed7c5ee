"""Entry point for the ``hawkeye`` command."""

import click

from hawkeye_cli import __version__
from hawkeye_cli.cli.commands import config_cmd, investigate_cmd
from hawkeye_cli.cli.logging import configure_logging
from hawkeye_cli.cli.output import emit_exception
from hawkeye_cli.cli.registry import CLIContext
from hawkeye_cli.config import HawkeyeConfig
from hawkeye_cli.core.errors import ConfigError

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Read settings from this TOML file only.",
)
@click.option("--profile", default=None, help="Config profile (XDG config-<profile>.toml).")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
@click.option("--verbose", "-v", is_flag=True, help="Shorthand for --log-level DEBUG.")
@click.version_option(__version__, prog_name="hawkeye")
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str,
    profile: str,
    log_level: str,
    verbose: bool,
) -> None:
    """Hawkeye investigation client."""
    try:
        config = HawkeyeConfig.from_env(config_file=config_file, profile=profile)
    except ConfigError as exc:
        emit_exception(exc)

    if verbose:
        config.log_level = "DEBUG"
    elif log_level:
        config.log_level = log_level.upper()
    configure_logging(config.log_level)

    ctx.obj = CLIContext(config=config, verbose=verbose)


cli.add_command(investigate_cmd)
cli.add_command(config_cmd)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
