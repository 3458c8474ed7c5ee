"""Logging setup and command instrumentation for the CLI.

All library modules log through ``logging.getLogger(__name__)``; the CLI
attaches one stderr handler to the ``hawkeye_cli`` root logger so stdout
stays reserved for command output.
"""

import functools
import logging
import sys
import time
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_ROOT_LOGGER = "hawkeye_cli"
_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_cli_logger() -> logging.Logger:
    """Logger shared by CLI command modules."""
    return logging.getLogger(f"{_ROOT_LOGGER}.cli")


def configure_logging(level: str = "WARNING") -> None:
    """Send ``hawkeye_cli`` logs at *level* and above to the current stderr.

    Safe to call repeatedly; the handler installed by a previous call is
    replaced.
    """
    root = logging.getLogger(_ROOT_LOGGER)
    for handler in list(root.handlers):
        if getattr(handler, "_hawkeye_cli", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%H:%M:%S"))
    handler._hawkeye_cli = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.propagate = False


def cli_command(name: str) -> Callable[[F], F]:
    """Decorator logging command start, finish and duration at DEBUG."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_cli_logger()
            logger.debug("command %s started", name)
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.debug("command %s finished in %.1fms", name, elapsed_ms)

        return wrapper  # type: ignore[return-value]

    return decorator
