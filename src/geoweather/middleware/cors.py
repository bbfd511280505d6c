"""
=============================================================================
CORS MIDDLEWARE
=============================================================================

Cross-Origin Resource Sharing lets browser code served from another origin
read our JSON. The API is public and read-only, so the policy is fixed and
permissive:

    Access-Control-Allow-Origin:  *
    Access-Control-Allow-Methods: GET, OPTIONS
    Access-Control-Allow-Headers: Content-Type

These three headers go on EVERY response, errors included.

=============================================================================
PREFLIGHT
=============================================================================

Before some cross-origin requests the browser sends an OPTIONS
"preflight". We answer every OPTIONS request, whatever its path, with:

    HTTP/1.1 204 No Content
    Content-Type: text/plain
    Access-Control-Allow-*: ...
    Content-Length: 0

The router never sees OPTIONS, so an OPTIONS to a path that would 404
still gets a 204.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .base import Middleware, NextHandler
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, no_content


@dataclass
class CORSConfig:
    """CORS policy. Defaults match the public demo API."""

    allow_origin: str = "*"
    allow_methods: List[str] = field(default_factory=lambda: ["GET", "OPTIONS"])
    allow_headers: List[str] = field(default_factory=lambda: ["Content-Type"])


class CORSMiddleware(Middleware):
    """
    Answers preflight requests and stamps CORS headers on responses.

    Usage:
        pipeline.add(CORSMiddleware())

    apply() is also called directly by the server for responses produced
    before the pipeline runs (malformed requests, timeouts).
    """

    def __init__(self, config: Optional[CORSConfig] = None):
        self.config = config or CORSConfig()

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        if request.method == "OPTIONS":
            return self.apply(no_content())

        response = next(request)
        return self.apply(response)

    def apply(self, response: HTTPResponse) -> HTTPResponse:
        """Add the CORS headers to a response and return it."""
        response.headers["Access-Control-Allow-Origin"] = self.config.allow_origin
        response.headers["Access-Control-Allow-Methods"] = ", ".join(self.config.allow_methods)
        response.headers["Access-Control-Allow-Headers"] = ", ".join(self.config.allow_headers)
        return response
