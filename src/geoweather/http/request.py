"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes read from a client socket into an HTTPRequest.

This server only ever needs the request line. Headers are parsed too, but
leniently, and only for access logging and CORS. There is no request body:
every endpoint is a read-only GET.

=============================================================================
REQUEST LINE ANATOMY
=============================================================================

    GET /api/v1/weather?lat=55.6050&lon=13.0038 HTTP/1.1\r\n
    ─┬─ ──────────────────┬──────────────────── ────┬───
     │                    │                         │
   Method               Target                   Version (read, ignored)
                          │
               ┌──────────┴─────────────┐
               │                        │
             Path                 Query string
        /api/v1/weather     lat=55.6050&lon=13.0038

The target is split at the FIRST "?". A target without "?" has no query
string at all (None), which is different from an empty one ("/path?").

=============================================================================
WHAT COUNTS AS MALFORMED
=============================================================================

    b"GET / HTTP/1.1"            no CRLF after the first line  → 400
    b"GET\r\n"                   missing target and version    → 400
    b"GET  / HTTP/1.1\r\n"       double space (empty token)    → 400
    b"GET / HTTP/1.1 x\r\n"      four tokens                   → 400

The method is NOT checked here. "BREW / HTTP/1.1" parses fine and the
router answers it with 405, which is what a client sending an unsupported
method should see.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from .query import get_query_param


class HTTPParseError(Exception):
    """
    Raised when an HTTP request cannot be parsed.

    Carries the HTTP status the client should receive:

        400 Bad Request       - Unparseable request line
        413 Payload Too Large - Request head exceeds the size limit
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Created per connection, handed to the middleware pipeline and router,
    then discarded when the connection closes.

    Attributes:
        method:         Request method exactly as sent ("GET", "OPTIONS", ...)
        path:           Target without the query string
        query_string:   Everything after the first "?", or None
        version:        Version token from the request line (not validated)
        headers:        Header names lower-cased
        client_address: (ip, port) of the peer
        raw:            The bytes the request was parsed from
    """

    method: str
    path: str
    query_string: Optional[str] = None
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)

    client_address: tuple[str, int] = ("", 0)
    raw: bytes = field(default=b"", repr=False)

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, max_length: Optional[int] = None) -> Optional[str]:
        """
        Get the first decoded value of a query parameter.

        Args:
            name: Parameter name (case-sensitive).
            max_length: Reject decoded values longer than this.

        Returns:
            Decoded value or None if absent.

        Raises:
            QueryParamTooLong: If the value exceeds max_length.

        Example:
            # URL: /api/v1/geo?city=Malmo%20City
            request.get_query("city")  # "Malmo City"
        """
        return get_query_param(self.query_string, name, max_length)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER STEPS
    ==========================================================================

        1. Size check            too large?          → HTTPParseError(413)
        2. Find first CRLF       none?               → HTTPParseError(400)
        3. Match request line    not 3 tokens?       → HTTPParseError(400)
        4. Split target at "?"   path, query_string
        5. Parse header lines    lenient, best effort

    ==========================================================================
    """

    # Three non-empty tokens separated by single spaces, nothing else
    REQUEST_LINE_PATTERN = re.compile(r"([^ ]+) ([^ ]+) ([^ ]+)")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 64 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data.

        Args:
            data: Bytes read from the client socket.
            client_address: Client's (ip, port) for logging.

        Returns:
            Parsed HTTPRequest.

        Raises:
            HTTPParseError: If the request is oversized or the request line
                            is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"request too large: {len(data)} bytes",
                status_code=413,
            )

        line_end = data.find(b"\r\n")
        if line_end == -1:
            raise HTTPParseError("invalid request line")

        # Everything up to the blank line is the head; a request cut short
        # by the client still yields whatever header lines arrived
        head_end = data.find(b"\r\n\r\n")
        head = data[:head_end] if head_end != -1 else data
        lines = head.decode("utf-8", errors="replace").split("\r\n")

        method, path, query_string, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            query_string=query_string,
            version=version,
            headers=headers,
            client_address=client_address,
            raw=data,
        )

    def _parse_request_line(
        self,
        line: str,
    ) -> tuple[str, str, Optional[str], str]:
        """
        Split "METHOD SP TARGET SP VERSION" into its parts.

        Returns:
            Tuple of (method, path, query_string, version)
        """
        match = self.REQUEST_LINE_PATTERN.fullmatch(line)
        if not match:
            raise HTTPParseError("invalid request line")

        method, target, version = match.groups()

        path, sep, query = target.partition("?")
        query_string = query if sep else None

        return method, path, query_string, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        """
        Parse "Name: value" lines into a dict with lower-cased names.

        Malformed lines are skipped. Repeated headers are joined with ", ".
        """
        headers: Dict[str, str] = {}

        for line in lines:
            if not line:
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 64 * 1024,
) -> HTTPRequest:
    """Parse a request in one call with a throwaway RequestParser."""
    parser = RequestParser(max_request_size=max_size)
    return parser.parse(data, client_address)
