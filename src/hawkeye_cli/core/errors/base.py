"""Error-to-ErrorCode mapping registry.

Provides a centralized mapping from exception types to (ErrorCode, ErrorType)
tuples, so every command reports failures with the same envelope.

Usage:
    from hawkeye_cli.core.errors.base import error_to_response

    try:
        do_something()
    except Exception as e:
        result = error_to_response(e)
        if result is not None:
            return result
        raise  # Unknown error, re-raise
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple, Type

from hawkeye_cli.core.errors.config import ConfigError, MissingConfigError
from hawkeye_cli.core.errors.transport import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ServerResponseError,
    SessionCreationError,
    StreamConnectionError,
    StreamTimeoutError,
    TransportError,
)
from hawkeye_cli.core.responses.types import ErrorCode, ErrorType

ERROR_MAPPINGS: Dict[Type[Exception], Tuple[ErrorCode, ErrorType]] = {
    # --- Configuration errors ---
    ConfigError: (ErrorCode.CONFIG_INVALID, ErrorType.CONFIGURATION),
    MissingConfigError: (ErrorCode.NOT_CONFIGURED, ErrorType.CONFIGURATION),
    # --- Transport errors ---
    TransportError: (ErrorCode.STREAM_FAILED, ErrorType.UNAVAILABLE),
    StreamConnectionError: (ErrorCode.CONNECTION_FAILED, ErrorType.UNAVAILABLE),
    StreamTimeoutError: (ErrorCode.TIMEOUT, ErrorType.UNAVAILABLE),
    AuthenticationError: (ErrorCode.UNAUTHORIZED, ErrorType.AUTHENTICATION),
    PermissionDeniedError: (ErrorCode.FORBIDDEN, ErrorType.AUTHORIZATION),
    NotFoundError: (ErrorCode.NOT_FOUND, ErrorType.NOT_FOUND),
    ServerResponseError: (ErrorCode.SERVER_ERROR, ErrorType.INTERNAL),
    SessionCreationError: (ErrorCode.SESSION_CREATE_FAILED, ErrorType.INTERNAL),
}


def error_to_response(exc: Exception) -> Optional[dict]:
    """Convert a known exception to a standard error_response dict, or None if unknown.

    Looks up the exception's *exact* type in ERROR_MAPPINGS and, if found,
    generates a standardized error response using the mapped ErrorCode and ErrorType.
    """
    mapping = ERROR_MAPPINGS.get(type(exc))
    if mapping is None:
        return None

    from dataclasses import asdict

    from hawkeye_cli.core.responses.builders import error_response

    code, error_type = mapping
    remediation = getattr(exc, "remediation", None)
    return asdict(error_response(str(exc), error_code=code, error_type=error_type, remediation=remediation))
