"""Constructors for ``CommandResponse`` envelopes."""

from enum import Enum
from typing import Any, Mapping, Optional, Union

from hawkeye_cli.core.responses.types import CommandResponse, ErrorCode, ErrorType


def _enum_value(value: Union[Enum, str]) -> str:
    return value.value if isinstance(value, Enum) else value


def success_response(data: Optional[Mapping[str, Any]] = None) -> CommandResponse:
    """Success envelope carrying a copy of *data*."""
    return CommandResponse(success=True, data=dict(data or {}))


def error_response(
    message: str,
    *,
    error_code: Union[ErrorCode, str] = ErrorCode.INTERNAL_ERROR,
    error_type: Union[ErrorType, str] = ErrorType.INTERNAL,
    remediation: Optional[str] = None,
) -> CommandResponse:
    """Error envelope.

    Args:
        message: Human-readable description, stored in ``error``.
        error_code: ``ErrorCode`` member or its string value.
        error_type: ``ErrorType`` member or its string value.
        remediation: What the user can do about it, when known.

    Example:
        >>> error_response(
        ...     "not authenticated",
        ...     error_code=ErrorCode.NOT_CONFIGURED,
        ...     error_type=ErrorType.CONFIGURATION,
        ...     remediation="Set HAWKEYE_TOKEN or [auth] token",
        ... ).data["error_code"]
        'NOT_CONFIGURED'
    """
    payload = {"error_code": _enum_value(error_code), "error_type": _enum_value(error_type)}
    if remediation is not None:
        payload["remediation"] = remediation
    return CommandResponse(success=False, data=payload, error=message)
