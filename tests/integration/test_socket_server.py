"""
Integration tests: real sockets against a server running in a thread.
"""

import json
import socket
import threading

import pytest

from geoweather.core import SocketServer


def split_response(data: bytes):
    """Return (status_code, headers, body) from raw response bytes."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    status_code = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name.lower()] = value
    return status_code, headers, body


def get(server, target: str, method: str = "GET"):
    raw = f"{method} {target} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode("utf-8")
    return split_response(server.request(raw))


class TestEndpoints:
    """Happy paths over the wire."""

    def test_geo(self, running_server):
        status, headers, body = get(running_server, "/api/v1/geo?city=Malmo")

        assert status == 200
        assert body == b'{"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}'
        assert headers["content-type"] == "application/json"
        assert headers["content-length"] == str(len(body))
        assert headers["connection"] == "close"
        assert headers["access-control-allow-origin"] == "*"

    def test_weather(self, running_server):
        status, _, body = get(running_server, "/api/v1/weather?lat=57.7089&lon=11.9746")

        assert status == 200
        assert json.loads(body) == {
            "tempC": 8.2,
            "description": "Windy",
            "updatedAt": "2026-10-18T10:00:00Z",
        }

    def test_status_line(self, running_server):
        raw = running_server.request(b"GET /api/v1/geo?city=Uppsala HTTP/1.1\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 200 OK\r\n")

    def test_serves_requests_one_after_another(self, running_server):
        for city in ("Stockholm", "Orebro", "Malmo", "Gothenburg", "Uppsala"):
            status, _, body = get(running_server, f"/api/v1/geo?city={city}")
            assert status == 200
            assert json.loads(body)["city"] == city


class TestErrors:
    """Error responses over the wire."""

    def test_unknown_city(self, running_server):
        status, headers, body = get(running_server, "/api/v1/geo?city=Atlantis")

        assert status == 404
        assert json.loads(body) == {"error": {"code": 404, "message": "city not found"}}
        assert headers["access-control-allow-methods"] == "GET, OPTIONS"

    def test_invalid_request_line(self, running_server):
        status, headers, body = split_response(running_server.request(b"HELLO\r\n\r\n"))

        assert status == 400
        assert json.loads(body)["error"]["message"] == "invalid request line"
        assert headers["access-control-allow-origin"] == "*"
        assert headers["connection"] == "close"

    def test_method_not_allowed(self, running_server):
        status, _, body = get(running_server, "/anything", method="DELETE")

        assert status == 405
        assert json.loads(body)["error"]["message"] == "method not allowed"

    def test_not_found(self, running_server):
        status, _, body = get(running_server, "/")

        assert status == 404
        assert json.loads(body)["error"]["message"] == "not found"

    def test_partial_request_gets_408(self, running_server):
        """The test config uses a 2 second connection timeout."""
        with socket.create_connection(("127.0.0.1", running_server.port), timeout=5.0) as s:
            s.sendall(b"GET /api/v1/geo?city=Malmo HTTP/1.1\r\nHost: x")
            data = b""
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                data += chunk

        status, headers, body = split_response(data)
        assert status == 408
        assert json.loads(body)["error"]["message"] == "request timeout"
        assert headers["access-control-allow-origin"] == "*"

    def test_client_disconnect_without_data(self, running_server):
        """An empty connection is closed quietly and the server keeps going."""
        with socket.create_connection(("127.0.0.1", running_server.port), timeout=5.0):
            pass

        status, _, _ = get(running_server, "/api/v1/geo?city=Malmo")
        assert status == 200


class TestPreflight:
    """OPTIONS handling over the wire."""

    def test_options(self, running_server):
        status, headers, body = get(running_server, "/api/v1/weather", method="OPTIONS")

        assert status == 204
        assert body == b""
        assert headers["content-type"] == "text/plain"
        assert headers["content-length"] == "0"
        assert headers["access-control-allow-origin"] == "*"
        assert headers["access-control-allow-methods"] == "GET, OPTIONS"
        assert headers["access-control-allow-headers"] == "Content-Type"


class TestLifecycle:
    """Startup and shutdown."""

    def test_shutdown_stops_listening(self, running_server):
        port = running_server.port
        running_server.stop()

        with pytest.raises(OSError):
            with socket.create_connection(("127.0.0.1", port), timeout=1.0):
                pass

    def test_connection_error_does_not_stop_server(self, config):
        """An OSError escaping one connection is logged; the next client is served."""
        served = []

        def handler(conn):
            with conn:
                if not served:
                    served.append("aborted")
                    raise ConnectionAbortedError("client aborted")
                served.append(conn.read_request())
                conn.send_response(b"HTTP/1.1 204 No Content\r\n\r\n")

        server = SocketServer(config)
        thread = threading.Thread(target=server.start, args=(handler,), daemon=True)
        thread.start()
        assert server.wait_until_ready(timeout=5.0)
        port = server.bound_address[1]

        try:
            with socket.create_connection(("127.0.0.1", port), timeout=5.0) as s:
                s.sendall(b"GET / HTTP/1.1\r\n\r\n")
                assert s.recv(1024) == b""

            with socket.create_connection(("127.0.0.1", port), timeout=5.0) as s:
                s.sendall(b"GET / HTTP/1.1\r\n\r\n")
                assert s.recv(1024).startswith(b"HTTP/1.1 204")
        finally:
            server.shutdown()
            thread.join(timeout=5.0)

        assert served == ["aborted", b"GET / HTTP/1.1\r\n\r\n"]
