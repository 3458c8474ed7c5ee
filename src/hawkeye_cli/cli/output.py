"""JSON envelope output for CLI commands.

Every non-interactive result is printed to stdout as a single JSON object
``{"success", "data", "error", "meta"}``. Errors exit the process.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, Mapping, NoReturn, Optional

import click

from hawkeye_cli.core.errors import error_to_response
from hawkeye_cli.core.responses import (
    ErrorCode,
    ErrorType,
    error_response,
    success_response,
)


def _emit(payload: Dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def emit_success(data: Optional[Mapping[str, Any]] = None) -> None:
    """Print a success envelope."""
    _emit(asdict(success_response(data)))


def emit_error(
    message: str,
    *,
    code: str = ErrorCode.INTERNAL_ERROR.value,
    error_type: str = ErrorType.INTERNAL.value,
    remediation: Optional[str] = None,
    exit_code: int = 1,
) -> NoReturn:
    """Print an error envelope and exit with *exit_code*."""
    response = error_response(
        message,
        error_code=code,
        error_type=error_type,
        remediation=remediation,
    )
    _emit(asdict(response))
    sys.exit(exit_code)


def emit_exception(exc: Exception, *, exit_code: int = 1) -> NoReturn:
    """Print the envelope registered for *exc* (or an internal error) and exit."""
    payload = error_to_response(exc)
    if payload is None:
        emit_error(
            str(exc) or type(exc).__name__,
            code=ErrorCode.INTERNAL_ERROR.value,
            error_type=ErrorType.INTERNAL.value,
            exit_code=exit_code,
        )
    _emit(payload)
    sys.exit(exit_code)
