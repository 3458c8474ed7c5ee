"""Per-invocation CLI context stored on ``click.Context.obj``."""

from dataclasses import dataclass

import click

from hawkeye_cli.config import HawkeyeConfig


@dataclass
class CLIContext:
    config: HawkeyeConfig
    verbose: bool = False


def get_context(ctx: click.Context) -> CLIContext:
    """Return the ``CLIContext`` set up by the root group."""
    obj = ctx.find_object(CLIContext)
    if obj is None:
        # Commands invoked without the root group (tests, embedding)
        obj = CLIContext(config=HawkeyeConfig.from_env())
        ctx.obj = obj
    return obj
