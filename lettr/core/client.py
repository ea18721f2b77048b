"""
Core HTTP client for the Lettr Email API.

Handles authentication, request construction, response decoding, and error
classification.
"""

import http.client
import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from lettr import __version__

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://app.lettr.com/api/"
DEFAULT_TIMEOUT = 30
USER_AGENT = f"lettr-python/{__version__}"
CONTENT_TYPE = "application/json"

T = TypeVar("T")


class LettrError(Exception):
    """Base error class for every failure raised by this library."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(LettrError):
    """Validation error for local input/data issues (not API errors)."""


class RequestError(LettrError):
    """A request could not be constructed. Raised before any network I/O."""


class TransportError(LettrError):
    """Network, timeout or connection failure from the underlying transport."""


class DecodeError(LettrError):
    """The API reported success but the response body could not be decoded."""


class APIError(LettrError):
    """
    Error returned by the Lettr API for any non-2xx response.

    The status code and message are always present. ``error_code`` and
    ``errors`` are filled from the response body when the API sends them.
    Attributes are read-only.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ):
        super().__init__(message)
        self._status_code = status_code
        self._error_code = error_code or None
        self._errors = {name: list(messages) for name, messages in (errors or {}).items()}

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def error_code(self) -> str | None:
        return self._error_code

    @property
    def errors(self) -> dict[str, list[str]]:
        """Field-level validation messages, keyed by field name."""
        return {name: list(messages) for name, messages in self._errors.items()}

    def __str__(self) -> str:
        text = f"lettr: {self._status_code} {self.message}"
        if self._error_code:
            text += f" (code: {self._error_code})"
        for name, messages in self._errors.items():
            for msg in messages:
                text += f"; {name}: {msg}"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["status"] = self._status_code
        if self._error_code:
            result["error_code"] = self._error_code
        if self._errors:
            result["errors"] = self.errors
        return result


# =============================================================================
# Classification
# =============================================================================


def is_not_found(error: BaseException) -> bool:
    """Check whether ``error`` is an API 404 Not Found error."""
    return isinstance(error, APIError) and error.status_code == 404


def is_validation_error(error: BaseException) -> bool:
    """Check whether ``error`` is an API 422 Unprocessable Entity error."""
    return isinstance(error, APIError) and error.status_code == 422


def is_unauthorized(error: BaseException) -> bool:
    """Check whether ``error`` is an API 401 Unauthorized error."""
    return isinstance(error, APIError) and error.status_code == 401


def has_error_code(error: BaseException, code: str) -> bool:
    """Check whether ``error`` is an API error carrying the machine-readable ``code``."""
    return isinstance(error, APIError) and error.error_code is not None and error.error_code == code


def parse_error(status_code: int, body: bytes | None) -> APIError:
    """
    Build an APIError from a non-2xx response.

    Falls back to the standard reason phrase for the status code when the
    body is missing, is not a JSON object, or carries no message.
    """
    fallback = http.client.responses.get(status_code, "")
    message = ""
    error_code = None
    errors: dict[str, list[str]] = {}

    if body:
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            payload = None

        if isinstance(payload, dict):
            raw_message = payload.get("message")
            message = raw_message if isinstance(raw_message, str) else ""
            raw_code = payload.get("error_code")
            error_code = raw_code if isinstance(raw_code, str) else None
            raw_errors = payload.get("errors")
            if isinstance(raw_errors, dict):
                for name, messages in raw_errors.items():
                    if isinstance(messages, list):
                        errors[name] = [str(m) for m in messages]
                    elif messages is not None:
                        errors[name] = [str(messages)]

    return APIError(status_code, message or fallback, error_code=error_code, errors=errors)


# =============================================================================
# Transport
# =============================================================================


class Transport:
    """
    The underlying HTTP client: a urllib opener plus a default timeout.

    Pass extra urllib handlers (proxies, custom TLS, test doubles) or a fully
    built opener to change how requests go over the wire.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        opener: urllib.request.OpenerDirector | None = None,
        handlers: tuple[urllib.request.BaseHandler, ...] = (),
    ):
        self.timeout = timeout
        self.opener = opener or urllib.request.build_opener(*handlers)

    def open(self, request: urllib.request.Request, timeout: float | None = None):
        """Send ``request`` and return the open response."""
        return self.opener.open(request, timeout=self.timeout if timeout is None else timeout)


@dataclass
class HTTPResponse:
    """Status, headers and raw body of a completed request."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


# =============================================================================
# API Client
# =============================================================================


class APIClient:
    """
    Low-level HTTP client for the Lettr API.

    Handles:
    - Base URL resolution
    - Authentication via bearer token
    - JSON request bodies and response decoding
    - Mapping non-2xx responses to APIError
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the API client.

        Args:
            api_key: Lettr API key (or LETTR_API_KEY env var)
            base_url: API base URL (or LETTR_BASE_URL env var)
            transport: Custom transport; a default one is created when omitted
            timeout: Request timeout in seconds for the default transport

        Raises:
            RequestError: If the base URL is malformed

        """
        self.api_key = (api_key or os.environ.get("LETTR_API_KEY") or "").strip()
        self.transport = transport or Transport(timeout=timeout)
        self.user_agent = USER_AGENT
        self.base_url = DEFAULT_BASE_URL
        self.set_base_url(base_url or os.environ.get("LETTR_BASE_URL") or DEFAULT_BASE_URL)

    def set_base_url(self, raw_url: str) -> None:
        """
        Override the base URL.

        The URL must be absolute. A trailing slash is added to the path so that
        relative paths resolve beneath it rather than replacing its last segment.
        """
        try:
            parts = urllib.parse.urlsplit(raw_url)
        except ValueError as e:
            raise RequestError(f"Invalid base URL {raw_url!r}: {e}") from e

        if not parts.scheme or not parts.netloc:
            raise RequestError(f"Invalid base URL {raw_url!r}: must be an absolute URL")

        if not parts.path.endswith("/"):
            parts = parts._replace(path=parts.path + "/")
        self.base_url = urllib.parse.urlunsplit(parts)

    def _ensure_api_key(self) -> str:
        """Ensure API key is configured."""
        if not self.api_key:
            raise ValidationError("API key is required. Pass it explicitly or set LETTR_API_KEY")
        return self.api_key

    def _build_url(self, path: str) -> str:
        """Resolve a relative path against the base URL."""
        try:
            return urllib.parse.urljoin(self.base_url, path)
        except ValueError as e:
            raise RequestError(f"Invalid path {path!r}: {e}") from e

    def build_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        authenticated: bool = True,
    ) -> urllib.request.Request:
        """
        Build an authenticated request.

        Args:
            method: HTTP method (GET, POST, DELETE)
            path: Path relative to the base URL (e.g. "domains/example.com")
            body: JSON-serializable request body
            authenticated: Require a configured API key. Pass False only for
                requests whose Authorization header is removed before sending.

        Returns:
            A request carrying Accept, User-Agent and Authorization headers

        Raises:
            ValidationError: If authenticated and no API key is configured
            RequestError: If the path cannot be resolved or the body cannot be serialized

        """
        if authenticated:
            self._ensure_api_key()
        url = self._build_url(path)

        data = None
        if body is not None:
            try:
                data = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise RequestError(f"Failed to serialize request body: {e}") from e

        request = urllib.request.Request(url, data=data, method=method)
        request.add_header("Accept", CONTENT_TYPE)
        request.add_header("User-Agent", self.user_agent)
        request.add_header("Authorization", f"Bearer {self.api_key}")
        if data is not None:
            request.add_header("Content-Type", CONTENT_TYPE)
        return request

    def execute(
        self,
        request: urllib.request.Request,
        parser: Callable[[Any], T] | None = None,
        timeout: float | None = None,
    ) -> tuple[HTTPResponse, T | None]:
        """
        Send a request and decode the response.

        Args:
            request: Request from build_request()
            parser: Function applied to the decoded JSON body. Skipped when
                omitted or when the response is 204 No Content.
            timeout: Per-call timeout override in seconds

        Returns:
            The raw response and the parsed result (None if nothing was parsed)

        Raises:
            APIError: On a non-2xx response
            TransportError: On network, timeout or connection failures
            DecodeError: If a success response body is not valid JSON

        """
        method = request.get_method()
        logger.debug("%s %s", method, request.full_url)

        try:
            with self.transport.open(request, timeout=timeout) as resp:
                response = HTTPResponse(
                    status=resp.status,
                    headers=dict(resp.headers.items()),
                    body=resp.read(),
                )

        except urllib.error.HTTPError as e:
            try:
                error_body = e.read()
            except OSError:
                error_body = b""
            finally:
                e.close()
            logger.debug("%s %s -> %d", method, request.full_url, e.code)
            raise parse_error(e.code, error_body) from None

        except (OSError, http.client.HTTPException) as e:
            reason = e.reason if isinstance(e, urllib.error.URLError) else e
            logger.warning("%s %s failed: %s", method, request.full_url, reason)
            raise TransportError(f"Request failed: {reason}") from e

        logger.debug("%s %s -> %d", method, request.full_url, response.status)

        if not 200 <= response.status < 300:
            raise parse_error(response.status, response.body)

        if parser is None or response.status == 204:
            return response, None

        try:
            payload = json.loads(response.body.decode("utf-8"))
            return response, parser(payload)
        except (UnicodeDecodeError, json.JSONDecodeError, AttributeError, KeyError, TypeError) as e:
            raise DecodeError(f"Failed to decode response: {e}") from e

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
        parser: Callable[[Any], T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """Build, send and decode a request in one step."""
        if params:
            query_string = urllib.parse.urlencode(params)
            separator = "&" if "?" in path else "?"
            path = f"{path}{separator}{query_string}"
        req = self.build_request(method, path, body)
        _, result = self.execute(req, parser, timeout=timeout)
        return result

    def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        parser: Callable[[Any], T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """Make a GET request."""
        return self.request("GET", path, params=params, parser=parser, timeout=timeout)

    def post(
        self,
        path: str,
        body: Any = None,
        parser: Callable[[Any], T] | None = None,
        timeout: float | None = None,
    ) -> T | None:
        """Make a POST request."""
        return self.request("POST", path, body=body, parser=parser, timeout=timeout)

    def delete(self, path: str, timeout: float | None = None) -> None:
        """Make a DELETE request. The response body is ignored."""
        self.request("DELETE", path, timeout=timeout)


def escape_path(segment: str) -> str:
    """Percent-encode a user-supplied value for use as a single path segment."""
    return urllib.parse.quote(segment, safe="")
