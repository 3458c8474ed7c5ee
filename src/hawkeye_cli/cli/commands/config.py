"""``hawkeye config``: show the effective configuration."""

import click

from hawkeye_cli.cli.logging import cli_command
from hawkeye_cli.cli.output import emit_success
from hawkeye_cli.cli.registry import get_context


@click.command("config")
@click.pass_context
@cli_command("config")
def config_cmd(ctx: click.Context) -> None:
    """Print the merged configuration (token masked) as JSON."""
    config = get_context(ctx).config
    emit_success({"config": config.to_display_dict()})
