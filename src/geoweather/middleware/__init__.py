"""
=============================================================================
MIDDLEWARE
=============================================================================

Cross-cutting request/response processing, applied around the router:

    LoggingMiddleware   access log line + X-Request-ID
    CORSMiddleware      preflight answers + CORS headers on every response

=============================================================================
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .logging import LoggingMiddleware, RequestLog
from .cors import CORSMiddleware, CORSConfig

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "LoggingMiddleware",
    "RequestLog",
    "CORSMiddleware",
    "CORSConfig",
]
