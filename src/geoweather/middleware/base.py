"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

Middleware wraps the router with cross-cutting behavior (access logging,
CORS) using the Chain of Responsibility pattern.

    request ──► LoggingMiddleware ──► CORSMiddleware ──► router.handle
                       │                    │                  │
    response ◄─────────┴────────────────────┴──────────────────┘

Each middleware receives the request and a `next` callable. It can:

    - return early without calling next (CORS answers OPTIONS itself)
    - call next and decorate the response on the way out

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Base class for middleware.

        class TimingMiddleware(Middleware):
            def __call__(self, request, next):
                response = next(request)
                response.set_header("X-Handled", "yes")
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain

        Returns:
            HTTP response (from next() or short-circuited)
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware around a final handler.

    First added = outermost:

        pipeline.add(LoggingMiddleware())   # sees every request first
        pipeline.add(CORSMiddleware())      # closest to the router
        handler = pipeline.wrap(router.handle)
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with every middleware in the pipeline.

        Given [MW1, MW2] and handler, builds MW1 → MW2 → handler by
        wrapping in reverse order.
        """
        current = handler
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)
        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler,
    ) -> NextHandler:
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)
        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
