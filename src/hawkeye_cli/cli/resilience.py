"""Interrupt handling for long-running commands."""

import functools
from typing import Any, Callable, TypeVar

from hawkeye_cli.cli.logging import get_cli_logger
from hawkeye_cli.cli.output import emit_error
from hawkeye_cli.core.responses import ErrorCode, ErrorType

F = TypeVar("F", bound=Callable[..., Any])

# Conventional exit status for SIGINT
INTERRUPTED_EXIT_CODE = 130


def handle_keyboard_interrupt(message: str = "Operation cancelled by user") -> Callable[[F], F]:
    """Turn Ctrl+C into a CANCELLED error envelope and exit code 130.

    Commands that need cleanup catch ``KeyboardInterrupt`` themselves and
    re-raise it once done.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                get_cli_logger().debug("%s interrupted", func.__name__)
                emit_error(
                    message,
                    code=ErrorCode.CANCELLED.value,
                    error_type=ErrorType.CANCELLED.value,
                    exit_code=INTERRUPTED_EXIT_CODE,
                )

        return wrapper  # type: ignore[return-value]

    return decorator
