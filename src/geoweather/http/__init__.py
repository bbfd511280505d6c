"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between raw bytes and handler functions:

    request.py       bytes → HTTPRequest (request line + lenient headers)
    query.py         query string → decoded parameter values
    response.py      HTTPResponse, ResponseBuilder, JSON error bodies
    router.py        (method, path) → handler
    status_codes.py  HTTPStatus with reason phrases

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .query import QueryParamTooLong, get_query_param, percent_decode
from .response import (
    HTTPResponse,
    ResponseBuilder,
    error_body,
    ok,
    ok_json_text,
    no_content,
    error_response,
    bad_request,
    not_found,
    method_not_allowed,
    internal_error,
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Query decoding
    "QueryParamTooLong",
    "get_query_param",
    "percent_decode",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "error_body",
    "ok",
    "ok_json_text",
    "no_content",
    "error_response",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",
]
