"""``hawkeye investigate``: run one investigation and stream it to the terminal.

Creates (or reuses) a session, streams the prompt's response through a
``StreamingBridge`` and renders every block as it arrives. On a terminal a
live spinner shows the latest progress status while the stream is quiet.
"""

from typing import Any, Optional, Tuple

import click
from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.text import Text

from hawkeye_cli.cli.logging import cli_command, get_cli_logger
from hawkeye_cli.cli.output import emit_error, emit_exception
from hawkeye_cli.cli.registry import get_context
from hawkeye_cli.cli.render import BlockRenderer
from hawkeye_cli.cli.resilience import handle_keyboard_interrupt
from hawkeye_cli.core.errors import ConfigError, TransportError
from hawkeye_cli.core.responses import ErrorCode, ErrorType
from hawkeye_cli.core.stream import StreamingBridge
from hawkeye_cli.core.transport import InvestigationClient

logger = get_cli_logger()

DEFAULT_STATUS = "Investigating..."


class _StatusLine:
    """Spinner renderable that reads the bridge's latest status on each refresh."""

    def __init__(self, bridge: StreamingBridge):
        self._bridge = bridge
        self._spinner = Spinner("dots", style="cyan")

    def __rich__(self) -> Any:
        status = self._bridge.last_status() or DEFAULT_STATUS
        self._spinner.update(text=Text(f" {status}", style="dim"))
        return self._spinner


def _make_console(plain: bool) -> Console:
    if plain:
        return Console(color_system=None, highlight=False, soft_wrap=True)
    return Console(highlight=False, soft_wrap=True)


def _stream(bridge: StreamingBridge, renderer: BlockRenderer, use_spinner: bool) -> None:
    if not use_spinner:
        renderer.render_all(bridge.blocks())
        return

    with Live(
        _StatusLine(bridge),
        console=renderer.console,
        refresh_per_second=10,
        transient=True,
    ):
        renderer.render_all(bridge.blocks())


@click.command("investigate")
@click.argument("prompt", nargs=-1, required=True)
@click.option("--session", "-s", "session_id", default=None, help="Continue an existing session.")
@click.option("--project", "-p", "project_id", default=None, help="Project id (overrides config).")
@click.option("--plain", is_flag=True, help="Plain output: no colors and no spinner.")
@click.option("--no-spinner", is_flag=True, help="Print progress lines instead of a live spinner.")
@click.pass_context
@cli_command("investigate")
@handle_keyboard_interrupt("Investigation cancelled")
def investigate_cmd(
    ctx: click.Context,
    prompt: Tuple[str, ...],
    session_id: Optional[str],
    project_id: Optional[str],
    plain: bool,
    no_spinner: bool,
) -> None:
    """Ask Hawkeye to investigate PROMPT and stream the answer.

    Press Ctrl+C to stop; anything already received is still printed.
    """
    cli_ctx = get_context(ctx)
    config = cli_ctx.config
    if project_id:
        config.project_id = project_id

    prompt_text = " ".join(prompt).strip()
    if not prompt_text:
        emit_error(
            "Prompt is empty",
            code=ErrorCode.MISSING_REQUIRED.value,
            error_type=ErrorType.VALIDATION.value,
            remediation="Pass the question to investigate as arguments",
        )

    try:
        config.validate()
    except ConfigError as exc:
        emit_exception(exc)

    client = InvestigationClient.from_config(config)

    if not session_id:
        try:
            session_id = client.new_session(config.project_id)
        except TransportError as exc:
            emit_exception(exc)

    console = _make_console(plain)
    use_spinner = config.spinner and not (plain or no_spinner) and console.is_terminal
    renderer = BlockRenderer(console, show_progress=not use_spinner)
    console_url = config.console_session_url(session_id)
    renderer.render_header(prompt_text, session_id, console_url)

    bridge = StreamingBridge(
        client.stream_investigation(config.project_id, session_id, prompt_text),
        queue_size=config.queue_size,
    )
    try:
        _stream(bridge, renderer, use_spinner)
    except KeyboardInterrupt:
        logger.debug("Cancelling stream for session %s", session_id)
        renderer.show_progress = True
        renderer.render_all(bridge.cancel())
        raise
    except TransportError as exc:
        emit_exception(exc)

    renderer.render_footer(session_id, console_url)
