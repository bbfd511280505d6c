"""
=============================================================================
URL ROUTER
=============================================================================

Maps (method, path) to a handler function.

=============================================================================
DISPATCH RULES
=============================================================================

    ┌───────────────────────────┬───────────────────────────────────────┐
    │  Request                  │  Result                               │
    ├───────────────────────────┼───────────────────────────────────────┤
    │  OPTIONS <any>            │  answered by CORSMiddleware (204)     │
    │  method not served        │  405 "method not allowed"             │
    │  GET /api/v1/geo...       │  geo handler                          │
    │  GET /api/v1/weather...   │  weather handler                      │
    │  GET <anything else>      │  404 "not found"                      │
    └───────────────────────────┴───────────────────────────────────────┘

The method check comes BEFORE path matching: "POST /nowhere" is a 405,
not a 404.

=============================================================================
PREFIX VS EXACT MATCHING
=============================================================================

Routes match by PREFIX by default:

    route "/api/v1/geo"  matches  /api/v1/geo
                                  /api/v1/geo/
                                  /api/v1/geoXYZ    ← yes, this too

Deployed clients have relied on that, so it stays the default. Passing
exact=True (ServerConfig.exact_routes) tightens matching to the path
itself, and /api/v1/geoXYZ becomes a 404.

Routes are tried in registration order; first match wins.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found, method_not_allowed


logger = logging.getLogger(__name__)


# Handler: takes a request, returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        @router.get("/api/v1/geo", name="geo")
        def geo(request): ...

        Route(path="/api/v1/geo", method="GET", handler=geo, name="geo")
    """

    path: str
    method: str
    handler: Handler
    name: Optional[str] = None

    def matches(self, path: str, exact: bool = False) -> bool:
        if exact:
            return path == self.path
        return path.startswith(self.path)


class Router:
    """
    HTTP request router.

    Usage:
        router = Router()

        @router.get("/api/v1/geo")
        def geo(request):
            return ok({...})

        response = router.handle(request)
    """

    # Advertised in the Allow header of 405 responses; OPTIONS is
    # answered by the CORS layer, never by a route
    PREFLIGHT_METHOD = "OPTIONS"

    def __init__(self, exact: bool = False):
        """
        Args:
            exact: Match the whole path instead of a prefix.
        """
        self.exact = exact
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: str = "GET",
        name: Optional[str] = None,
    ) -> Route:
        route = Route(
            path=path,
            method=method.upper(),
            handler=handler,
            name=name or getattr(handler, "__name__", None),
        )
        self._routes.append(route)
        logger.debug(f"Registered route {route.method} {route.path}")
        return route

    def route(
        self,
        path: str,
        method: str = "GET",
        name: Optional[str] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, name)
            return handler
        return decorator

    def get(self, path: str, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", name)

    # =========================================================================
    # MATCHING
    # =========================================================================

    @property
    def allowed_methods(self) -> List[str]:
        """Methods this router serves, plus OPTIONS for preflight."""
        methods = sorted({route.method for route in self._routes})
        if self.PREFLIGHT_METHOD not in methods:
            methods.append(self.PREFLIGHT_METHOD)
        return methods

    def match(self, method: str, path: str) -> Optional[Route]:
        """
        Find the first route for this method whose path matches.

        Returns:
            The Route, or None.
        """
        for route in self._routes:
            if route.method != method:
                continue
            if route.matches(path, self.exact):
                return route
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Dispatch a request.

        1. Method not served by any route → 405
        2. Matching route → its handler
        3. Otherwise → 404
        """
        served = {route.method for route in self._routes}
        if request.method not in served:
            return method_not_allowed(self.allowed_methods)

        route = self.match(request.method, request.path)
        if route is None:
            return not_found("not found")

        return route.handler(request)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def routes(self) -> List[Route]:
        return list(self._routes)

    def print_routes(self) -> None:
        """
        Print the route table at startup.

            Registered Routes (prefix match):
            ------------------------------------------------------------
              GET      /api/v1/geo
              GET      /api/v1/weather
            ------------------------------------------------------------
        """
        mode = "exact match" if self.exact else "prefix match"
        print(f"\nRegistered Routes ({mode}):")
        print("-" * 60)
        for route in self._routes:
            print(f"  {route.method:8} {route.path}")
        print("-" * 60)
