"""Tests for the error registry and response envelopes."""

import pytest

from hawkeye_cli.core.errors import (
    ERROR_MAPPINGS,
    AuthenticationError,
    ConfigError,
    MissingConfigError,
    NotFoundError,
    PermissionDeniedError,
    ServerResponseError,
    SessionCreationError,
    StreamConnectionError,
    StreamTimeoutError,
    TransportError,
    error_to_response,
)
from hawkeye_cli.core.responses import ErrorCode, ErrorType, error_response, success_response


class TestErrorToResponse:
    @pytest.mark.parametrize(
        "exc,code,error_type",
        [
            (ConfigError("bad"), "CONFIG_INVALID", "configuration"),
            (MissingConfigError("missing"), "NOT_CONFIGURED", "configuration"),
            (TransportError("x"), "STREAM_FAILED", "unavailable"),
            (StreamConnectionError("x"), "CONNECTION_FAILED", "unavailable"),
            (StreamTimeoutError("x"), "TIMEOUT", "unavailable"),
            (AuthenticationError(401), "UNAUTHORIZED", "authentication"),
            (PermissionDeniedError(403), "FORBIDDEN", "authorization"),
            (NotFoundError(404), "NOT_FOUND", "not_found"),
            (ServerResponseError(500), "SERVER_ERROR", "internal"),
            (SessionCreationError("x"), "SESSION_CREATE_FAILED", "internal"),
        ],
    )
    def test_mapped_codes(self, exc, code, error_type):
        payload = error_to_response(exc)
        assert payload["success"] is False
        assert payload["data"]["error_code"] == code
        assert payload["data"]["error_type"] == error_type

    def test_unknown_exception(self):
        assert error_to_response(KeyError("x")) is None

    def test_exact_type_lookup(self):
        class CustomTransportError(TransportError):
            pass

        assert error_to_response(CustomTransportError("x")) is None

    def test_remediation_included(self):
        payload = error_to_response(MissingConfigError("missing", remediation="Set HAWKEYE_TOKEN"))
        assert payload["data"]["remediation"] == "Set HAWKEYE_TOKEN"

    def test_class_remediation(self):
        payload = error_to_response(AuthenticationError(401, "denied"))
        assert "HAWKEYE_TOKEN" in payload["data"]["remediation"]
        assert payload["error"] == "server returned 401: denied"

    def test_forbidden_remediation_names_project(self):
        payload = error_to_response(PermissionDeniedError(403, "denied"))
        assert "HAWKEYE_PROJECT_ID" in payload["data"]["remediation"]
        assert payload["error"] == "server returned 403: denied"

    def test_all_mappings_use_enums(self):
        for code, error_type in ERROR_MAPPINGS.values():
            assert isinstance(code, ErrorCode)
            assert isinstance(error_type, ErrorType)


class TestResponses:
    def test_success_response(self):
        response = success_response({"a": 1})
        assert response.success is True
        assert response.data == {"a": 1}
        assert response.error is None
        assert response.meta == {"version": "response-v2"}

    def test_error_response_defaults(self):
        response = error_response("boom")
        assert response.success is False
        assert response.error == "boom"
        assert response.data == {"error_code": "INTERNAL_ERROR", "error_type": "internal"}

    def test_error_response_string_code(self):
        response = error_response("bad", error_code="CUSTOM")
        assert response.data["error_code"] == "CUSTOM"
        assert response.data["error_type"] == "internal"
        assert "remediation" not in response.data

    def test_error_response_remediation(self):
        response = error_response(
            "denied",
            error_code=ErrorCode.FORBIDDEN,
            error_type=ErrorType.AUTHORIZATION,
            remediation="Check HAWKEYE_PROJECT_ID",
        )
        assert response.data == {
            "error_code": "FORBIDDEN",
            "error_type": "authorization",
            "remediation": "Check HAWKEYE_PROJECT_ID",
        }

    def test_success_response_copies_data(self):
        source = {"a": 1}
        response = success_response(source)
        source["a"] = 2
        assert response.data == {"a": 1}
        assert success_response().data == {}
