"""Transport error classes for the investigation API client."""

from typing import Optional


class TransportError(RuntimeError):
    """Base exception for failures talking to the Hawkeye server."""

    remediation: Optional[str] = None

    def __init__(self, message: str, *, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class StreamConnectionError(TransportError):
    """Raised when the server cannot be reached."""

    remediation = "Check the server URL (HAWKEYE_SERVER) and your network connection"


class StreamTimeoutError(TransportError):
    """Raised when connecting to the server times out."""

    remediation = "Retry, or raise [stream] connect_timeout"


class ServerResponseError(TransportError):
    """Raised when the server answers with a non-200 status.

    Attributes:
        status_code: HTTP status returned by the server
        body: Response body text, as sent
    """

    def __init__(self, status_code: int, body: str = "", *, url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"server returned {status_code}: {body}", url=url)


class AuthenticationError(ServerResponseError):
    """Raised on 401 responses."""

    remediation = "Check the API token (HAWKEYE_TOKEN or [auth] token)"


class PermissionDeniedError(AuthenticationError):
    """Raised on 403 responses: the token is valid but lacks access."""

    remediation = "Check that the token's organization owns the project (HAWKEYE_ORG_UUID, HAWKEYE_PROJECT_ID)"


class NotFoundError(ServerResponseError):
    """Raised on 404 responses, typically an unknown session id or a wrong server URL."""

    remediation = "Check --session, or the server URL (HAWKEYE_SERVER)"


class SessionCreationError(TransportError):
    """Raised when the server rejects a new-session request.

    Attributes:
        error_code: Non-zero application error code from the response envelope
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        self.error_code = error_code
        super().__init__(message, url=url)
