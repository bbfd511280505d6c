"""
Unit tests for HTTPServer.process_request() and create_app().

These drive the full parse → middleware → router → handler path without
opening a socket.
"""

import logging

import pytest

from geoweather import HTTPServer, ServerConfig, create_app
from geoweather.http import HTTPStatus, ok
from geoweather.middleware import Middleware


def get(app: HTTPServer, target: str, method: str = "GET"):
    raw = f"{method} {target} HTTP/1.1\r\nHost: test\r\n\r\n".encode("utf-8")
    return app.process_request(raw, ("127.0.0.1", 5000))


def assert_cors(response):
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "GET, OPTIONS"
    assert response.headers["Access-Control-Allow-Headers"] == "Content-Type"


class TestEndpoints:
    """The two API endpoints through the whole stack."""

    def test_geo(self, app):
        response = get(app, "/api/v1/geo?city=Malmo")

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "application/json"
        assert response.headers["Connection"] == "close"
        assert response.body == b'{"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}'
        assert_cors(response)

    def test_weather(self, app):
        response = get(app, "/api/v1/weather?lat=55.6050&lon=13.0038")

        assert response.status == HTTPStatus.OK
        assert response.json() == {
            "tempC": 10.5,
            "description": "Sunny",
            "updatedAt": "2026-10-18T10:00:00Z",
        }
        assert_cors(response)

    def test_geo_then_weather_round_trip(self, app):
        """Coordinates from the geo endpoint find the same city's weather."""
        geo = get(app, "/api/v1/geo?city=Orebro").json()
        weather = get(app, f"/api/v1/weather?lat={geo['lat']}&lon={geo['lon']}").json()

        assert weather["description"] == "Overcast"

    def test_access_log_request_id(self, app):
        response = get(app, "/api/v1/geo?city=Malmo")

        assert "X-Request-ID" in response.headers

    def test_city_past_query_ceiling(self, app):
        response = get(app, "/api/v1/geo?city=" + "a" * 1025)

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json()["error"]["message"] == "city too long (max 100)"

    def test_oversized_query_value(self, app):
        response = get(app, "/api/v1/weather?lat=" + "1" * 1025 + "&lon=0")

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json()["error"]["message"] == "query param too long: lat (max 1024)"


class TestRouting:
    """Routing behavior seen through process_request()."""

    def test_prefix_routing(self, app):
        response = get(app, "/api/v1/geoXYZ?city=Malmo")

        assert response.status == HTTPStatus.OK

    def test_exact_routing(self):
        app = create_app(ServerConfig(port=0, exact_routes=True))

        assert get(app, "/api/v1/geo?city=Malmo").status == HTTPStatus.OK
        assert get(app, "/api/v1/geoXYZ?city=Malmo").status == HTTPStatus.NOT_FOUND

    def test_unknown_path(self, app):
        response = get(app, "/")

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.json() == {"error": {"code": 404, "message": "not found"}}
        assert_cors(response)

    @pytest.mark.parametrize("method", ["POST", "DELETE", "PUT", "HEAD"])
    def test_method_not_allowed(self, app, method):
        response = get(app, "/anything", method=method)

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.json()["error"]["message"] == "method not allowed"
        assert_cors(response)

    @pytest.mark.parametrize("target", ["/api/v1/geo", "/nowhere", "*"])
    def test_preflight(self, app, target):
        response = get(app, target, method="OPTIONS")

        assert response.status == HTTPStatus.NO_CONTENT
        assert response.body == b""
        assert response.headers["Content-Type"] == "text/plain"
        assert response.headers["Connection"] == "close"
        assert_cors(response)


class TestErrors:
    """Errors produced by the server itself."""

    def test_invalid_request_line(self, app):
        response = app.process_request(b"GARBAGE\r\n\r\n")

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.json() == {"error": {"code": 400, "message": "invalid request line"}}
        assert response.headers["Connection"] == "close"
        assert_cors(response)

    def test_oversized_request(self):
        app = create_app(ServerConfig(port=0, buffer_size=1024, max_request_size=1024))
        response = app.process_request(b"GET /" + b"a" * 2000 + b" HTTP/1.1\r\n\r\n")

        assert response.status == HTTPStatus.PAYLOAD_TOO_LARGE
        assert_cors(response)

    def test_handler_exception_becomes_500(self, config, caplog):
        server = HTTPServer(config)

        @server.get("/boom")
        def boom(request):
            raise RuntimeError("kaput")

        with caplog.at_level(logging.ERROR):
            response = server.process_request(b"GET /boom HTTP/1.1\r\n\r\n")

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.json() == {"error": {"code": 500, "message": "internal server error"}}
        assert_cors(response)
        assert "kaput" in caplog.text


class TestHTTPServer:
    """Construction and middleware wiring."""

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(port=70000))

    def test_custom_route(self, config):
        server = HTTPServer(config)

        @server.get("/ping")
        def ping(request):
            return ok({"pong": True})

        response = server.process_request(b"GET /ping HTTP/1.1\r\n\r\n")
        assert response.json() == {"pong": True}
        assert_cors(response)

    def test_middleware_added_after_first_request(self, config):
        server = HTTPServer(config)
        server.get("/ping")(lambda request: ok({}))
        server.process_request(b"GET /ping HTTP/1.1\r\n\r\n")

        class Tag(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.headers["X-Tag"] = "yes"
                return response

        server.use(Tag())
        response = server.process_request(b"GET /ping HTTP/1.1\r\n\r\n")

        assert response.headers["X-Tag"] == "yes"
