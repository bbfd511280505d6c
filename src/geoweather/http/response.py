"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds the HTTP/1.1 responses this server sends.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    HTTP/1.1 200 OK\r\n                              ← status line
    Content-Type: application/json\r\n
    Access-Control-Allow-Origin: *\r\n               ← CORS (middleware)
    Access-Control-Allow-Methods: GET, OPTIONS\r\n
    Access-Control-Allow-Headers: Content-Type\r\n
    Connection: close\r\n                            ← always, one request per connection
    Content-Length: 59\r\n                           ← auto-calculated
    Date: Sun, 18 Oct 2026 10:00:00 GMT\r\n          ← auto-added
    Server: GeoWeather/1.0\r\n                       ← auto-added
    \r\n
    {"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}

=============================================================================
ERROR BODIES
=============================================================================

Every error status uses the same body shape:

    {"error":{"code":404,"message":"city not found"}}

error_body() builds a fresh dict per call. Nothing is cached or shared
between requests.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
import json

from .status_codes import HTTPStatus


JSON_CONTENT_TYPE = "application/json"


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized onto the socket.

    Use ResponseBuilder or the convenience functions below rather than
    constructing this directly.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def json(self) -> Any:
        """Decode the body as JSON (used by tests and logging)."""
        return json.loads(self.body.decode("utf-8"))

    def to_bytes(self, server_name: str = "GeoWeather/1.0") -> bytes:
        """
        Serialize the response for socket.sendall().

        Content-Length, Date and Server are added unless already present.
        Header order is preserved otherwise.
        """
        response_headers = dict(self.headers)

        # Content-Length lets the client know where the body ends even
        # though we also close the connection
        if "Content-Length" not in response_headers:
            response_headers["Content-Length"] = str(len(self.body))

        if "Date" not in response_headers:
            response_headers["Date"] = format_http_date(datetime.now(timezone.utc))

        if "Server" not in response_headers:
            response_headers["Server"] = server_name

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .json(error_body(404, "city not found"))
            .build())

    Every method except build() returns self.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = HTTPStatus(status)
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def headers(self, headers: Dict[str, str]) -> "ResponseBuilder":
        self._headers.update(headers)
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set a raw body. Strings are encoded as UTF-8."""
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        return self

    def text(self, text: str, content_type: str = "text/plain") -> "ResponseBuilder":
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = content_type
        return self

    def json(self, data: Any) -> "ResponseBuilder":
        """
        Set a compact JSON body.

        Compact separators keep the wire format identical to what existing
        clients already parse: {"tempC":7.0,...} with no spaces.
        """
        self._body = json.dumps(
            data,
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self

    def json_text(self, text: str) -> "ResponseBuilder":
        """Set a body that is already serialized JSON."""
        self._body = text.encode("utf-8")
        self._headers["Content-Type"] = JSON_CONTENT_TYPE
        return self

    def close_connection(self) -> "ResponseBuilder":
        self._headers["Connection"] = "close"
        return self

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            headers=self._headers,
            body=self._body,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231), always in GMT.

    Example: Sun, 18 Oct 2026 10:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def error_body(code: int, message: str) -> Dict[str, Any]:
    """Build the {"error": {"code", "message"}} body."""
    return {"error": {"code": int(code), "message": message}}


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok({"tempC": 7.0, "description": "Cloudy", ...})
#     return bad_request("missing query param: city")
#     return not_found("city not found")
#
# =============================================================================

def ok(data: Any) -> HTTPResponse:
    """200 OK with a JSON body."""
    return ResponseBuilder().status(HTTPStatus.OK).json(data).build()


def ok_json_text(text: str) -> HTTPResponse:
    """200 OK with a body the caller serialized itself."""
    return ResponseBuilder().status(HTTPStatus.OK).json_text(text).build()


def no_content() -> HTTPResponse:
    """
    204 No Content with an empty body.

    Content-Type stays text/plain so preflight answers look the same to
    clients as they always have.
    """
    return (ResponseBuilder()
        .status(HTTPStatus.NO_CONTENT)
        .text("")
        .build())


def error_response(status: HTTPStatus, message: str) -> HTTPResponse:
    """Any error status with the standard JSON error body."""
    return (ResponseBuilder()
        .status(status)
        .json(error_body(status, message))
        .build())


def bad_request(message: str) -> HTTPResponse:
    """400 Bad Request: missing, malformed or out-of-range input."""
    return error_response(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str = "not found") -> HTTPResponse:
    """404 Not Found: unknown city or unmatched route."""
    return error_response(HTTPStatus.NOT_FOUND, message)


def method_not_allowed(allowed_methods: Optional[list[str]] = None) -> HTTPResponse:
    """
    405 Method Not Allowed.

    Includes an Allow header listing valid methods (RFC 7231).
    """
    response = error_response(HTTPStatus.METHOD_NOT_ALLOWED, "method not allowed")
    if allowed_methods:
        response.set_header("Allow", ", ".join(allowed_methods))
    return response


def internal_error(message: str = "internal server error") -> HTTPResponse:
    """500 Internal Server Error. Keep the message generic."""
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, message)
