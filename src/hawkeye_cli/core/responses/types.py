"""Response envelope types and error vocabulary."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

RESPONSE_VERSION = "response-v2"


class ErrorCode(str, Enum):
    """Machine-readable error codes carried in ``data.error_code``."""

    MISSING_REQUIRED = "MISSING_REQUIRED"
    CONFIG_INVALID = "CONFIG_INVALID"
    NOT_CONFIGURED = "NOT_CONFIGURED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    SESSION_CREATE_FAILED = "SESSION_CREATE_FAILED"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    STREAM_FAILED = "STREAM_FAILED"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    """Error categories; tells a script whether retrying can help."""

    VALIDATION = "validation"  # Fix the command line
    AUTHENTICATION = "authentication"  # 401, fix the token
    AUTHORIZATION = "authorization"  # 403, token lacks access to the project
    NOT_FOUND = "not_found"  # 404
    CONFIGURATION = "configuration"
    INTERNAL = "internal"  # Server-side failure, retry later
    UNAVAILABLE = "unavailable"  # Network, retry
    CANCELLED = "cancelled"  # Ctrl+C


@dataclass
class CommandResponse:
    """JSON envelope printed by every command.

    ``data`` holds the command payload on success and ``error_code``,
    ``error_type`` and an optional ``remediation`` on failure.
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": RESPONSE_VERSION})
