"""
Core client tests - request construction, response decoding and error classification.

Run with: python -m pytest tests/test_client.py -v
"""

import json
import socket
import urllib.error
import urllib.request

import pytest

from lettr import __version__
from lettr.core.client import (
    DEFAULT_BASE_URL,
    APIClient,
    APIError,
    DecodeError,
    LettrError,
    RequestError,
    Transport,
    TransportError,
    ValidationError,
    escape_path,
    has_error_code,
    is_not_found,
    is_unauthorized,
    is_validation_error,
    parse_error,
)

API_KEY = "test-api-key"


@pytest.fixture
def api(mock_api) -> APIClient:
    transport = Transport(timeout=5, handlers=(urllib.request.ProxyHandler({}),))
    return APIClient(API_KEY, base_url=mock_api.url + "/", transport=transport)


class _FailingTransport:
    """Transport double whose open() always raises ``exc``."""

    def __init__(self, exc: BaseException):
        self.exc = exc
        self.calls = 0

    def open(self, request, timeout=None):
        self.calls += 1
        raise self.exc


# =============================================================================
# Construction & Base URL
# =============================================================================


class TestConstruction:
    """Client configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LETTR_BASE_URL", raising=False)
        api = APIClient("my-api-key")
        assert api.api_key == "my-api-key"
        assert api.base_url == DEFAULT_BASE_URL
        assert isinstance(api.transport, Transport)
        assert api.transport.timeout == 30
        assert api.user_agent == f"lettr-python/{__version__}"

    def test_api_key_is_stripped(self):
        assert APIClient("  my-api-key\n").api_key == "my-api-key"

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("LETTR_API_KEY", "env-key")
        assert APIClient().api_key == "env-key"

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("LETTR_API_KEY", raising=False)
        api = APIClient()
        assert api.api_key == ""
        with pytest.raises(ValidationError, match="API key is required"):
            api.build_request("GET", "domains")

    def test_blank_api_key(self, monkeypatch):
        monkeypatch.delenv("LETTR_API_KEY", raising=False)
        transport = _FailingTransport(AssertionError("must not be sent"))
        api = APIClient("   ", transport=transport)
        with pytest.raises(ValidationError):
            api.get("domains")
        assert transport.calls == 0

    def test_unauthenticated_request_without_api_key(self, monkeypatch):
        monkeypatch.delenv("LETTR_API_KEY", raising=False)
        monkeypatch.delenv("LETTR_BASE_URL", raising=False)
        request = APIClient().build_request("GET", "health", authenticated=False)
        assert request.full_url == DEFAULT_BASE_URL + "health"

    def test_custom_transport_is_used(self):
        transport = Transport(timeout=2)
        api = APIClient(API_KEY, transport=transport)
        assert api.transport is transport

    def test_none_transport_falls_back_to_default(self):
        api = APIClient(API_KEY, transport=None, timeout=7)
        assert api.transport.timeout == 7

    def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("LETTR_BASE_URL", "https://staging.lettr.test/api")
        assert APIClient(API_KEY).base_url == "https://staging.lettr.test/api/"


class TestBaseURL:
    """set_base_url() normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("https://example.com/api", "https://example.com/api/"),
            ("https://example.com/api/", "https://example.com/api/"),
            ("https://example.com", "https://example.com/"),
            ("http://127.0.0.1:8080/v1/lettr", "http://127.0.0.1:8080/v1/lettr/"),
        ],
    )
    def test_trailing_slash(self, raw, expected):
        api = APIClient(API_KEY)
        api.set_base_url(raw)
        assert api.base_url == expected

    def test_idempotent(self):
        api = APIClient(API_KEY)
        api.set_base_url("https://example.com/api")
        first = api.base_url
        api.set_base_url(first)
        assert api.base_url == first
        assert api.base_url.endswith("/")
        assert not api.base_url.endswith("//")

    @pytest.mark.parametrize("raw", ["not a url", "/relative/path", "example.com/api", "http://[::1"])
    def test_malformed(self, raw):
        api = APIClient(API_KEY, base_url="https://example.com/api/")
        with pytest.raises(RequestError):
            api.set_base_url(raw)
        assert api.base_url == "https://example.com/api/"


# =============================================================================
# Request Builder
# =============================================================================


class TestBuildRequest:
    """Headers, URL resolution and body encoding."""

    def test_headers_without_body(self):
        req = APIClient(API_KEY).build_request("GET", "domains")
        assert req.get_method() == "GET"
        assert req.get_header("Accept") == "application/json"
        assert req.get_header("User-agent") == f"lettr-python/{__version__}"
        assert req.get_header("Authorization") == f"Bearer {API_KEY}"
        assert not req.has_header("Content-type")
        assert req.data is None

    def test_body_is_json_encoded(self):
        req = APIClient(API_KEY).build_request("POST", "domains", {"domain": "example.com"})
        assert req.get_header("Content-type") == "application/json"
        assert json.loads(req.data) == {"domain": "example.com"}

    @pytest.mark.parametrize(
        "base,path,expected",
        [
            ("https://app.lettr.com/api/", "emails", "https://app.lettr.com/api/emails"),
            ("https://app.lettr.com/api", "emails", "https://app.lettr.com/api/emails"),
            ("https://app.lettr.com/api/", "auth/check", "https://app.lettr.com/api/auth/check"),
            ("https://app.lettr.com/api/", "emails?per_page=5", "https://app.lettr.com/api/emails?per_page=5"),
        ],
    )
    def test_relative_resolution(self, base, path, expected):
        api = APIClient(API_KEY, base_url=base)
        assert api.build_request("GET", path).full_url == expected

    def test_unserializable_body(self):
        with pytest.raises(RequestError):
            APIClient(API_KEY).build_request("POST", "emails", {"when": object()})

    def test_escape_path(self):
        assert escape_path("example.com") == "example.com"
        assert escape_path("a/b c?d#e") == "a%2Fb%20c%3Fd%23e"


# =============================================================================
# Response Decoder
# =============================================================================


class TestExecute:
    """Sending requests and decoding responses."""

    def test_success_is_parsed(self, api, mock_api):
        mock_api.add("GET", "/domains", body={"message": "ok", "data": {"domains": []}})
        response, result = api.execute(api.build_request("GET", "domains"), parser=lambda d: d["message"])
        assert response.status == 200
        assert result == "ok"

    def test_no_parser_skips_decoding(self, api, mock_api):
        mock_api.add("GET", "/domains", raw=b"not json")
        response, result = api.execute(api.build_request("GET", "domains"))
        assert result is None
        assert response.body == b"not json"

    def test_no_content_skips_decoding(self, api, mock_api):
        mock_api.add("DELETE", "/domains/example.com", status=204)
        calls = []
        response, result = api.execute(
            api.build_request("DELETE", "domains/example.com"),
            parser=lambda d: calls.append(d),
        )
        assert response.status == 204
        assert result is None
        assert calls == []

    def test_malformed_success_body(self, api, mock_api):
        mock_api.add("GET", "/domains", raw=b"{not json")
        with pytest.raises(DecodeError) as exc_info:
            api.execute(api.build_request("GET", "domains"), parser=lambda d: d)
        assert not isinstance(exc_info.value, APIError)

    def test_api_error_is_classified(self, api, mock_api):
        mock_api.add("GET", "/auth/check", status=401, body={"message": "Invalid API key.", "error_code": "unauthorized"})
        with pytest.raises(APIError) as exc_info:
            api.get("auth/check", parser=lambda d: d)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid API key."
        assert is_unauthorized(exc_info.value)

    def test_transport_failure(self):
        transport = _FailingTransport(urllib.error.URLError(ConnectionRefusedError("refused")))
        api = APIClient(API_KEY, transport=transport)
        with pytest.raises(TransportError) as exc_info:
            api.get("domains")
        assert transport.calls == 1
        assert not isinstance(exc_info.value, APIError)
        assert isinstance(exc_info.value.__cause__, urllib.error.URLError)

    def test_timeout(self):
        api = APIClient(API_KEY, transport=_FailingTransport(socket.timeout("timed out")))
        with pytest.raises(TransportError) as exc_info:
            api.get("domains", timeout=0.01)
        assert not is_not_found(exc_info.value)
        assert not is_validation_error(exc_info.value)
        assert not is_unauthorized(exc_info.value)

    @pytest.mark.parametrize("timeout, expected", [(None, 30), (0, 0), (2.5, 2.5)])
    def test_transport_timeout_override(self, timeout, expected):
        class RecordingOpener:
            def open(self, request, timeout=None):
                self.timeout = timeout
                return "response"

        opener = RecordingOpener()
        transport = Transport(timeout=30, opener=opener)
        request = urllib.request.Request("http://127.0.0.1/health")
        assert transport.open(request, timeout=timeout) == "response"
        assert opener.timeout == expected

    def test_connection_refused_against_real_socket(self):
        sock = socket.socket()
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
        sock.close()
        transport = Transport(timeout=2, handlers=(urllib.request.ProxyHandler({}),))
        api = APIClient(API_KEY, base_url=f"http://127.0.0.1:{port}/", transport=transport)
        with pytest.raises(TransportError):
            api.get("health")

    def test_query_params_are_encoded(self, api, mock_api):
        mock_api.add("GET", "/emails", body={"message": "ok", "data": {}})
        api.get("emails", params={"recipients": "a+b@example.com", "per_page": 5})
        assert mock_api.last.query == {"recipients": ["a+b@example.com"], "per_page": ["5"]}


# =============================================================================
# Error Classifier
# =============================================================================


class TestParseError:
    """Error body decoding and message fallback."""

    def test_full_body(self):
        body = json.dumps(
            {
                "message": "The given data was invalid.",
                "error_code": "validation_error",
                "errors": {"from": ["The from field is required."], "to": ["Too many.", "Invalid."]},
            }
        ).encode()
        error = parse_error(422, body)
        assert error.status_code == 422
        assert error.message == "The given data was invalid."
        assert error.error_code == "validation_error"
        assert error.errors == {"from": ["The from field is required."], "to": ["Too many.", "Invalid."]}

    @pytest.mark.parametrize("body", [None, b"", b"<html>Bad Gateway</html>", b"[1, 2]", b'{"message": ""}'])
    def test_falls_back_to_status_text(self, body):
        error = parse_error(502, body)
        assert error.status_code == 502
        assert error.message == "Bad Gateway"
        assert error.error_code is None
        assert error.errors == {}

    def test_unknown_status_code(self):
        error = parse_error(599, None)
        assert error.status_code == 599
        assert error.message == ""

    def test_str(self):
        error = APIError(422, "Invalid.", error_code="validation_error", errors={"from": ["required"]})
        assert str(error) == "lettr: 422 Invalid. (code: validation_error); from: required"
        assert str(APIError(404, "Not Found")) == "lettr: 404 Not Found"

    def test_to_dict(self):
        error = APIError(422, "Invalid.", error_code="validation_error", errors={"from": ["required"]})
        assert error.to_dict() == {
            "error": "Invalid.",
            "status": 422,
            "error_code": "validation_error",
            "errors": {"from": ["required"]},
        }

    def test_immutable(self):
        errors = {"from": ["required"]}
        error = APIError(422, "Invalid.", errors=errors)
        errors["from"].append("changed")
        error.errors["from"].append("also changed")
        assert error.errors == {"from": ["required"]}
        with pytest.raises(AttributeError):
            error.status_code = 500


class TestPredicates:
    """Status-code based classification."""

    @pytest.mark.parametrize(
        "status,not_found,validation,unauthorized",
        [
            (404, True, False, False),
            (422, False, True, False),
            (401, False, False, True),
            (500, False, False, False),
            (400, False, False, False),
        ],
    )
    def test_status_codes(self, status, not_found, validation, unauthorized):
        error = APIError(status, "x")
        assert is_not_found(error) is not_found
        assert is_validation_error(error) is validation
        assert is_unauthorized(error) is unauthorized

    def test_message_and_code_are_ignored(self):
        error = APIError(500, "Not Found", error_code="not_found")
        assert not is_not_found(error)

    @pytest.mark.parametrize(
        "error",
        [
            TransportError("Request failed"),
            DecodeError("bad json"),
            LettrError("generic"),
            ValueError("404"),
        ],
    )
    def test_other_errors_are_never_classified(self, error):
        assert not is_not_found(error)
        assert not is_validation_error(error)
        assert not is_unauthorized(error)
        assert not has_error_code(error, "not_found")

    def test_has_error_code(self):
        error = APIError(422, "Invalid.", error_code="validation_error")
        assert has_error_code(error, "validation_error")
        assert not has_error_code(error, "not_found")
        assert not has_error_code(APIError(422, "Invalid."), "")
