"""Pytest configuration - loads .env and provides an in-process mock Lettr API."""

import json
import threading
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from lettr.core.client import Transport
from lettr.sdk import LettrClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

API_KEY = "test-api-key"


@dataclass
class RecordedRequest:
    """A request received by the mock server."""

    method: str
    path: str
    query: dict[str, list[str]]
    headers: dict[str, str]
    body: bytes

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


@dataclass
class CannedResponse:
    status: int = 200
    body: Any = None
    raw: bytes | None = None


@dataclass
class MockAPI:
    """Routes (method, path) to canned responses and records every request."""

    url: str = ""
    routes: dict[tuple[str, str], CannedResponse] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)

    def add(self, method: str, path: str, status: int = 200, body: Any = None, raw: bytes | None = None) -> None:
        self.routes[(method, path)] = CannedResponse(status=status, body=body, raw=raw)

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


class _Handler(BaseHTTPRequestHandler):
    mock: MockAPI

    def _handle(self) -> None:
        parts = urllib.parse.urlsplit(self.path)
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        self.mock.requests.append(
            RecordedRequest(
                method=self.command,
                path=parts.path,
                query=urllib.parse.parse_qs(parts.query),
                headers=dict(self.headers.items()),
                body=body,
            )
        )

        canned = self.mock.routes.get((self.command, parts.path))
        if canned is None:
            canned = CannedResponse(status=404, body={"message": "Route not found.", "error_code": "not_found"})

        if canned.raw is not None:
            payload = canned.raw
        elif canned.body is not None:
            payload = json.dumps(canned.body).encode("utf-8")
        else:
            payload = b""

        self.send_response(canned.status)
        if payload:
            self.send_header("Content-Type", "application/json")
        if canned.status != 204:
            self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if payload and canned.status != 204:
            self.wfile.write(payload)

    do_GET = _handle
    do_POST = _handle
    do_DELETE = _handle

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        pass


@pytest.fixture
def mock_api():
    """Start a mock Lettr API server on a free local port."""
    mock = MockAPI()
    handler = type("Handler", (_Handler,), {"mock": mock})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    mock.url = f"http://127.0.0.1:{server.server_port}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield mock
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def client(mock_api):
    """A LettrClient pointed at the mock server, bypassing any proxy settings."""
    transport = Transport(timeout=5, handlers=(urllib.request.ProxyHandler({}),))
    lettr = LettrClient(API_KEY, transport=transport)
    lettr.set_base_url(mock_api.url + "/")
    return lettr
