"""HTTP client for the Hawkeye inference API.

Two calls are made per investigation:

- ``new_session``: ``POST /v1/inference/new_session`` returns a session id.
- ``stream_investigation``: ``POST /v1/inference/session`` returns an SSE
  body that is decoded into ``InputFragment`` values as it arrives.

The client never sets a read timeout. Investigations can run for half an
hour or more and the server ends the stream itself with an ``end_turn``
message.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import httpx

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
from hawkeye_cli.core.stream.models import InputFragment
from hawkeye_cli.core.transport.sse import (
    ContentType,
    decode_stream_payload,
    iter_sse_events,
    response_to_fragments,
)

logger = logging.getLogger(__name__)

CLIENT_IDENTIFIER = "hawkeye-cli"
NEW_SESSION_PATH = "/v1/inference/new_session"
SESSION_PATH = "/v1/inference/session"

DEFAULT_CONNECT_TIMEOUT = 10.0
# Applies to the non-streaming new-session call only
DEFAULT_REQUEST_TIMEOUT = 30.0


class InvestigationClient:
    """Synchronous ``httpx`` client for session creation and prompt streaming.

    Example:
        client = InvestigationClient("https://hawkeye.example.com/api", token, org_uuid)
        session_id = client.new_session(project_id)
        for fragment in client.stream_investigation(project_id, session_id, "why is p99 up?"):
            ...
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        org_uuid: str = "",
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._org_uuid = org_uuid
        self._connect_timeout = connect_timeout
        self._request_timeout = request_timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    @classmethod
    def from_config(cls, config: Any, **kwargs: Any) -> "InvestigationClient":
        """Build a client from a ``HawkeyeConfig``."""
        return cls(
            config.server_url,
            config.token,
            config.org_uuid,
            connect_timeout=config.connect_timeout,
            **kwargs,
        )

    # -- Requests -------------------------------------------------------------

    def new_session(self, project_id: str) -> str:
        """Create an investigation session and return its id.

        Raises:
            SessionCreationError: The server reported an application error or
                returned no session id.
            ServerResponseError: Non-200 reply.
            TransportError: Network failure.
        """
        body = {
            "request": self._request_header(),
            "organization_uuid": self._org_uuid,
            "project_uuid": project_id,
            "gendb_spec": {"uuid": str(uuid.uuid4())},
        }
        url = self._url(NEW_SESSION_PATH)
        timeout = httpx.Timeout(self._request_timeout, connect=self._connect_timeout)

        with _translate_errors(url):
            with self._client(timeout) as client:
                response = client.post(url, json=body, headers=self._headers())
                self._raise_for_status(response, url)
                try:
                    payload = response.json()
                except ValueError as exc:
                    raise SessionCreationError(f"invalid new-session response: {exc}", url=url) from exc

        if not isinstance(payload, dict):
            raise SessionCreationError("invalid new-session response", url=url)

        status = payload.get("response") or {}
        if not isinstance(status, dict):
            raise SessionCreationError("invalid new-session response: malformed status", url=url)
        error_code = status.get("error_code") or 0
        if error_code:
            raise SessionCreationError(
                f"server error: {status.get('error_message', '')}",
                error_code=error_code,
                url=url,
            )

        session_id = payload.get("session_uuid") or ""
        if not session_id:
            raise SessionCreationError("server returned no session id", url=url)
        logger.debug("Created session %s for project %s", session_id, project_id)
        return session_id

    def stream_investigation(self, project_id: str, session_id: str, prompt: str) -> Iterator[InputFragment]:
        """Send *prompt* and yield fragments until the stream ends.

        The generator stops after the first message flagged ``end_turn`` or
        when the server closes the body. Closing the generator closes the
        underlying connection.
        """
        body = {
            "request": self._request_header(),
            "action": "ACTION_NEXT",
            "session_uuid": session_id,
            "project_uuid": project_id,
            "messages": [
                {
                    "content": {
                        "content_type": ContentType.CHAT_PROMPT,
                        "parts": [prompt],
                    }
                }
            ],
        }
        url = self._url(SESSION_PATH)
        timeout = httpx.Timeout(None, connect=self._connect_timeout)

        with _translate_errors(url):
            with self._client(timeout) as client:
                with client.stream("POST", url, json=body, headers=self._headers()) as response:
                    if response.status_code != httpx.codes.OK:
                        response.read()
                    self._raise_for_status(response, url)
                    logger.debug("Stream Content-Type: %s", response.headers.get("Content-Type", ""))

                    for event in iter_sse_events(response.iter_lines()):
                        decoded = decode_stream_payload(event.data)
                        if decoded is None:
                            continue
                        fragments = response_to_fragments(decoded, event.event)
                        if logger.isEnabledFor(logging.DEBUG):
                            _log_event(event.event, decoded)
                        for fragment in fragments:
                            yield fragment
                        if decoded.end_turn:
                            logger.debug("end_turn received; closing stream")
                            return

    # -- Helpers --------------------------------------------------------------

    def _client(self, timeout: httpx.Timeout) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self._transport)

    def _url(self, path: str) -> str:
        return self._base_url + path

    def _request_header(self) -> Dict[str, str]:
        return {"client_identifier": CLIENT_IDENTIFIER, "uuid": self._org_uuid}

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        if response.status_code == httpx.codes.OK:
            return
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise AuthenticationError(response.status_code, response.text, url=url)
        if response.status_code == httpx.codes.FORBIDDEN:
            raise PermissionDeniedError(response.status_code, response.text, url=url)
        if response.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(response.status_code, response.text, url=url)
        raise ServerResponseError(response.status_code, response.text, url=url)


@contextmanager
def _translate_errors(url: str) -> Iterator[None]:
    """Re-raise ``httpx`` errors as ``TransportError`` subclasses."""
    try:
        yield
    except httpx.TimeoutException as exc:
        raise StreamTimeoutError(f"timed out talking to {url}: {exc}", url=url) from exc
    except httpx.ConnectError as exc:
        raise StreamConnectionError(f"cannot connect to {url}: {exc}", url=url) from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"sending request: {exc}", url=url) from exc


def _log_event(event_type: str, response: Any) -> None:
    """Compact one-line DEBUG trace of a stream event."""
    message = response.message
    if message is None or message.content is None:
        return
    parts = message.content.parts
    flags = ""
    if message.metadata is not None and message.metadata.is_delta_true:
        flags += " [delta]"
    if len(parts) > 1:
        flags += f" [{len(parts)} parts]"
    snippet = parts[0] if parts else ""
    if len(snippet) > 120:
        snippet = snippet[:120] + "..."
    logger.debug("evt=%-16s ct=%-40s%s | %s", event_type, message.content.content_type, flags, snippet)
