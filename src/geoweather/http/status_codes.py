"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server actually emits, with their reason phrases.

    2xx  Success        200 OK, 204 No Content (CORS preflight)
    4xx  Client error   400, 404, 405, 408, 413
    5xx  Server error   500 (unexpected handler failure)

The enum extends IntEnum so a status compares equal to its integer code
and can be dropped straight into an error body:

    >>> HTTPStatus.NOT_FOUND == 404
    True
    >>> HTTPStatus.NOT_FOUND.phrase
    'Not Found'

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """HTTP status codes with reason phrases."""

    # 2xx SUCCESS
    OK = 200                    # Lookup succeeded
    NO_CONTENT = 204            # Preflight answered, nothing to return

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400           # Malformed request line or invalid parameter
    NOT_FOUND = 404             # Unknown city or unmatched route
    METHOD_NOT_ALLOWED = 405    # Anything but GET/OPTIONS
    REQUEST_TIMEOUT = 408       # Client stalled mid-request
    PAYLOAD_TOO_LARGE = 413     # Request head exceeds max_request_size

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

        The reason phrase follows the code in the status line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
