"""Tests for InvestigationClient using an in-process httpx transport."""

import json

import httpx
import pytest

from hawkeye_cli.config import HawkeyeConfig
from hawkeye_cli.core.errors import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ServerResponseError,
    SessionCreationError,
    StreamConnectionError,
    StreamTimeoutError,
)
from hawkeye_cli.core.stream import DeltaKind, FragmentCategory
from hawkeye_cli.core.transport import ContentType, InvestigationClient

BASE_URL = "https://hawkeye.test/api"


def _client(handler, **kwargs):
    return InvestigationClient(
        BASE_URL + "/",
        "tok-123",
        "org-1",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _sse(*events):
    """Encode (event_type, record) pairs as an SSE body."""
    chunks = []
    for event_type, record in events:
        if event_type:
            chunks.append(f"event: {event_type}\n")
        chunks.append(f"data: {json.dumps(record)}\n\n")
    return "".join(chunks).encode()


def _msg(content_type, parts, **fields):
    return {"message": {"content": {"content_type": content_type, "parts": parts}, **fields}}


class TestNewSession:
    """Tests for InvestigationClient.new_session()."""

    def test_returns_session_id(self):
        captured = {}

        def handler(request):
            captured["request"] = request
            return httpx.Response(200, json={"session_uuid": "sess-1", "response": {"error_code": 0}})

        assert _client(handler).new_session("proj-1") == "sess-1"

        request = captured["request"]
        assert str(request.url) == BASE_URL + "/v1/inference/new_session"
        assert request.headers["Authorization"] == "Bearer tok-123"
        body = json.loads(request.content)
        assert body["request"] == {"client_identifier": "hawkeye-cli", "uuid": "org-1"}
        assert body["organization_uuid"] == "org-1"
        assert body["project_uuid"] == "proj-1"
        assert body["gendb_spec"]["uuid"]

    def test_no_auth_header_without_token(self):
        captured = {}

        def handler(request):
            captured["request"] = request
            return httpx.Response(200, json={"session_uuid": "s"})

        client = InvestigationClient(BASE_URL, transport=httpx.MockTransport(handler))
        client.new_session("p")
        assert "Authorization" not in captured["request"].headers

    def test_application_error_code(self):
        def handler(request):
            return httpx.Response(200, json={"response": {"error_code": 5, "error_message": "quota"}})

        with pytest.raises(SessionCreationError, match="quota") as exc_info:
            _client(handler).new_session("p")
        assert exc_info.value.error_code == 5

    def test_missing_session_id(self):
        def handler(request):
            return httpx.Response(200, json={"response": {}})

        with pytest.raises(SessionCreationError, match="no session id"):
            _client(handler).new_session("p")

    def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(SessionCreationError):
            _client(handler).new_session("p")

    @pytest.mark.parametrize("status", ["oops", ["x"], 7])
    def test_non_object_status(self, status):
        def handler(request):
            return httpx.Response(200, json={"response": status})

        with pytest.raises(SessionCreationError, match="malformed status"):
            _client(handler).new_session("p")

    @pytest.mark.parametrize(
        "status,exc_type",
        [(401, AuthenticationError), (403, PermissionDeniedError), (404, NotFoundError)],
    )
    def test_status_translation(self, status, exc_type):
        def handler(request):
            return httpx.Response(status, text="denied")

        with pytest.raises(exc_type) as exc_info:
            _client(handler).new_session("p")
        assert type(exc_info.value) is exc_type
        assert exc_info.value.status_code == status
        assert exc_info.value.body == "denied"

    def test_server_error(self):
        def handler(request):
            return httpx.Response(500, text="boom")

        with pytest.raises(ServerResponseError, match="server returned 500: boom"):
            _client(handler).new_session("p")

    def test_connect_error_translated(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(StreamConnectionError) as exc_info:
            _client(handler).new_session("p")
        assert exc_info.value.url == BASE_URL + "/v1/inference/new_session"

    def test_timeout_translated(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        with pytest.raises(StreamTimeoutError):
            _client(handler).new_session("p")


class TestStreamInvestigation:
    """Tests for InvestigationClient.stream_investigation()."""

    def test_request_body(self):
        captured = {}

        def handler(request):
            captured["request"] = request
            return httpx.Response(200, content=_sse(("", _msg(ContentType.SESSION_NAME, ["t"], end_turn=True))))

        list(_client(handler).stream_investigation("proj-1", "sess-1", "why?"))

        request = captured["request"]
        assert str(request.url) == BASE_URL + "/v1/inference/session"
        body = json.loads(request.content)
        assert body["action"] == "ACTION_NEXT"
        assert body["session_uuid"] == "sess-1"
        assert body["project_uuid"] == "proj-1"
        assert body["messages"] == [{"content": {"content_type": ContentType.CHAT_PROMPT, "parts": ["why?"]}}]

    def test_yields_fragments_in_order(self):
        body = _sse(
            ("", _msg(ContentType.PROGRESS_STATUS, ["Gate (Querying)"])),
            ("cot_start", _msg(ContentType.CHAIN_OF_THOUGHT, ['{"id": "s1", "description": "Check"}'])),
            ("chat_delta", _msg(ContentType.CHAT_RESPONSE, ["Hello"])),
            ("", {"result": _msg(ContentType.EXECUTION_TIME, ["1200"], end_turn=True)}),
        )

        def handler(request):
            return httpx.Response(200, content=body)

        fragments = list(_client(handler).stream_investigation("p", "s", "q"))

        assert [f.category for f in fragments] == [
            FragmentCategory.PROGRESS,
            FragmentCategory.REASONING,
            FragmentCategory.ANSWER,
            FragmentCategory.DURATION,
        ]
        assert fragments[1].delta_kind is DeltaKind.START
        assert fragments[2].delta_kind is DeltaKind.DELTA

    def test_stops_at_end_turn(self):
        body = _sse(
            ("", _msg(ContentType.SESSION_NAME, ["Title"], end_turn=True)),
            ("", _msg(ContentType.PROGRESS_STATUS, ["never"])),
        )

        def handler(request):
            return httpx.Response(200, content=body)

        fragments = list(_client(handler).stream_investigation("p", "s", "q"))
        assert [f.payload for f in fragments] == ["Title"]

    def test_skips_undecodable_events(self):
        body = b"data: not-json\n\n" + _sse(("", _msg(ContentType.SESSION_NAME, ["ok"])))

        def handler(request):
            return httpx.Response(200, content=body)

        fragments = list(_client(handler).stream_investigation("p", "s", "q"))
        assert [f.payload for f in fragments] == ["ok"]

    def test_non_200_raises_with_body(self):
        def handler(request):
            return httpx.Response(502, text="bad gateway")

        with pytest.raises(ServerResponseError) as exc_info:
            list(_client(handler).stream_investigation("p", "s", "q"))
        assert exc_info.value.status_code == 502
        assert exc_info.value.body == "bad gateway"


class TestFromConfig:
    def test_uses_config_values(self):
        config = HawkeyeConfig(server_url="https://h.test/api/", token="t", org_uuid="o", connect_timeout=3.0)
        client = InvestigationClient.from_config(config)
        assert client.base_url == "https://h.test/api"
