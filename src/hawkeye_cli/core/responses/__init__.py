"""Standard response envelope used by every CLI command's JSON output."""

from hawkeye_cli.core.responses.builders import error_response, success_response
from hawkeye_cli.core.responses.types import CommandResponse, ErrorCode, ErrorType

__all__ = [
    "CommandResponse",
    "ErrorCode",
    "ErrorType",
    "error_response",
    "success_response",
]
