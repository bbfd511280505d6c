"""
pytest configuration and fixtures.
"""

import socket
import threading
from datetime import datetime, timezone
from typing import Generator
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from geoweather import HTTPServer, ServerConfig, create_app
from geoweather.handlers import WeatherHandler
from geoweather.http import HTTPRequest, parse_request


FIXED_NOW = datetime(2026, 10, 18, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_geo_request() -> bytes:
    """Sample GET request for the geo endpoint."""
    return (
        b"GET /api/v1/geo?city=Malmo HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_weather_request() -> bytes:
    """Sample GET request for the weather endpoint."""
    return (
        b"GET /api/v1/weather?lat=55.6050&lon=13.0038 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"\r\n"
    )


@pytest.fixture
def make_request():
    """Build an HTTPRequest from a method and request target."""
    def _make(target: str, method: str = "GET") -> HTTPRequest:
        raw = f"{method} {target} HTTP/1.1\r\nHost: test\r\n\r\n".encode("utf-8")
        return parse_request(raw, ("127.0.0.1", 5000))
    return _make


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=2.0,
        log_level="WARNING",
    )


@pytest.fixture
def app(config: ServerConfig, fixed_clock) -> HTTPServer:
    """The GeoWeather app with a fixed weather clock (not listening)."""
    return create_app(
        config,
        weather_handler=WeatherHandler(
            clock=fixed_clock,
            max_query_length=config.max_query_value_length,
        ),
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class RunningServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.bound_address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.serve, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes and read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def running_server(app: HTTPServer) -> Generator[RunningServer, None, None]:
    """The GeoWeather app listening on an ephemeral port."""
    srv = RunningServer(app)
    srv.start()

    yield srv

    srv.stop()
