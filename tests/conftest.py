"""
pytest configuration and fixtures.
"""

import http.client
import socket
import threading
from typing import Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from muxserver import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /hello/Patrick?greeting=hi&greeting=hey HTTP/1.1\r\n"
        b"Host: localhost:9000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/plain\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"name=Patrick"
    head = (
        b"POST /hello HTTP/1.1\r\n"
        b"Host: localhost:9000\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        b"Content-Length: %d\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    ) % len(body)
    return head + body


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
        access_log=False,
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self) -> "TestServer":
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")
        return self

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=10.0)

    def request(
        self,
        method: str,
        path: str,
        headers: Optional[dict] = None,
    ) -> Tuple[int, dict, bytes]:
        """
        Send one request on a fresh connection.

        Returns:
            (status, headers with lowercase names, body)
        """
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5.0)
        try:
            conn.request(method, path, headers=headers or {})
            response = conn.getresponse()
            body = response.read()
            return (
                response.status,
                {name.lower(): value for name, value in response.getheaders()},
                body,
            )
        finally:
            conn.close()

    def get(self, path: str) -> Tuple[int, dict, bytes]:
        return self.request("GET", path)


@pytest.fixture
def start_server(config: ServerConfig) -> Generator:
    """
    Factory fixture: start_server(handler) runs a server for the test.

    Every server started this way is stopped at teardown.
    """
    started = []

    def _start(handler, **overrides) -> TestServer:
        for name, value in overrides.items():
            setattr(config, name, value)
        test_srv = TestServer(HTTPServer(handler, config)).start()
        started.append(test_srv)
        return test_srv

    yield _start

    for test_srv in started:
        test_srv.stop()
