"""
pytest configuration and fixtures.
"""

import json
import socket
import threading
from typing import Dict, Generator, Optional, Any
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userapi import HTTPServer, ServerConfig, create_app
from userapi.http import HTTPRequest, HTTPResponse
from userapi.users import UserStore


VALID_KEY = "api-key-12345"
ADMIN_KEY = "admin-api-key-67890"


def build_request(
    method: str,
    path: str,
    body: Any = None,
    api_key: Optional[str] = VALID_KEY,
    headers: Optional[Dict[str, str]] = None,
) -> HTTPRequest:
    """
    Build an HTTPRequest the way the parser would.

    dict/list bodies are JSON-encoded, str bodies are sent verbatim.
    api_key=None sends no X-API-Key header at all.
    """
    all_headers = {name.lower(): value for name, value in (headers or {}).items()}
    if api_key is not None:
        all_headers["x-api-key"] = api_key

    if body is None:
        raw = b""
    elif isinstance(body, (dict, list)):
        raw = json.dumps(body).encode("utf-8")
        all_headers.setdefault("content-type", "application/json")
    else:
        raw = body.encode("utf-8")

    if raw:
        all_headers["content-length"] = str(len(raw))

    return HTTPRequest(
        method=method,
        path=path,
        headers=all_headers,
        body=raw,
        client_address=("127.0.0.1", 50000),
    )


@pytest.fixture
def make_request():
    """The build_request helper, for tests that assemble requests by hand."""
    return build_request


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /api/users?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"X-API-Key: api-key-12345\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "Ada", "title": "Engineer", "email": "ada@example.com"}'
    return (
        b"POST /api/users HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"Connection: close\r\n"
        b"\r\n"
    ) + body


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=8080,
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def store() -> UserStore:
    return UserStore()


@pytest.fixture
def app(config: ServerConfig, store: UserStore) -> HTTPServer:
    """The full application, not listening on any socket."""
    return create_app(config, store=store)


@pytest.fixture
def handler(app: HTTPServer):
    """The composed middleware chain + router, callable with an HTTPRequest."""
    return app.build_handler()


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class LiveServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.config.port

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.stop()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def live_server(free_port: int) -> Generator[LiveServer, None, None]:
    """The User API listening on a free local port."""
    server = create_app(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
    ))

    live = LiveServer(server)
    live.start()

    yield live

    live.stop()


@pytest.fixture
def faulty_handler(app: HTTPServer):
    """The application chain with an extra route that always raises."""

    @app.get("/api/explode")
    def explode(request: HTTPRequest) -> HTTPResponse:
        raise RuntimeError("boom")

    return app.build_handler()
