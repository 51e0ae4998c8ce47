"""
pytest configuration and fixtures.
"""

import threading
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userapi import HTTPServer, ServerConfig, UserStore, create_app
from userapi.http import HTTPRequest


TOKEN = "my-secret-token"
AUTH_HEADER = f"Bearer {TOKEN}"


def make_request(
    method: str,
    path: str,
    body: bytes = b"",
    authorization: Optional[str] = AUTH_HEADER,
    headers: Optional[dict] = None,
) -> HTTPRequest:
    """Build an HTTPRequest as the parser would (lowercase header names)."""
    all_headers = {k.lower(): v for k, v in (headers or {}).items()}
    if authorization is not None:
        all_headers["authorization"] = authorization
    if body:
        all_headers.setdefault("content-type", "application/json")
        all_headers["content-length"] = str(len(body))
    return HTTPRequest(
        method=method,
        path=path,
        headers=all_headers,
        body=body,
        client_address=("127.0.0.1", 50000),
    )


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample authorized HTTP GET request."""
    return (
        b"GET /users?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Authorization: Bearer my-secret-token\r\n"
        b"Accept: application/json\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with JSON body."""
    body = b'{"name": "Carl", "email": "carl@x.com"}'
    head = (
        "POST /users HTTP/1.1\r\n"
        "Host: localhost:8080\r\n"
        "Authorization: Bearer my-secret-token\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(body)}\r\n"
        "Connection: close\r\n"
        "\r\n"
    )
    return head.encode() + body


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        min_workers=2,
        max_workers=4,
        timeout=5.0,
        api_token=TOKEN,
        log_level="WARNING",
    )


@pytest.fixture
def store() -> UserStore:
    """Fresh store with the Alice/Bob seed records."""
    return UserStore.seeded()


@pytest.fixture
def app(config: ServerConfig, store: UserStore) -> HTTPServer:
    """Fully assembled server, used in-process via app.handle()."""
    return create_app(config, store=store)


class TestServer:
    """Runs an HTTPServer in a background thread."""

    __test__ = False  # not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)


@pytest.fixture
def live_server(app: HTTPServer) -> Generator[TestServer, None, None]:
    """The user API listening on an ephemeral port."""
    test_srv = TestServer(app)
    test_srv.start()

    yield test_srv

    test_srv.stop()
