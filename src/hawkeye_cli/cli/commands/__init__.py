"""CLI commands."""

from hawkeye_cli.cli.commands.config import config_cmd
from hawkeye_cli.cli.commands.investigate import investigate_cmd

__all__ = [
    "config_cmd",
    "investigate_cmd",
]
