"""Unified error hierarchy for hawkeye-cli.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from hawkeye_cli.core.errors.transport import ServerResponseError
    from hawkeye_cli.core.errors import error_to_response
"""

# --- Base / Registry ---
from hawkeye_cli.core.errors.base import ERROR_MAPPINGS, error_to_response

# --- Configuration errors ---
from hawkeye_cli.core.errors.config import ConfigError, MissingConfigError

# --- Transport errors ---
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

__all__ = [
    "ERROR_MAPPINGS",
    "AuthenticationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConfigError",
    "MissingConfigError",
    "ServerResponseError",
    "SessionCreationError",
    "StreamConnectionError",
    "StreamTimeoutError",
    "TransportError",
    "error_to_response",
]
