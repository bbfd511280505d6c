"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       Request Lifecycle                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.read_request()      timeout w/ data → 408               │
    │        │                         nothing sent    → close             │
    │        ▼                                                             │
    │   RequestParser.parse()          malformed → 400, oversized → 413    │
    │        │                                                             │
    │        ▼                                                             │
    │   Middleware (logging, ...)                                          │
    │        │                                                             │
    │        ▼                                                             │
    │   CORSMiddleware                 OPTIONS → 204                       │
    │        │                                                             │
    │        ▼                                                             │
    │   Router.handle()                405 / 404 / handler                 │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection.send_response() → close                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One connection is served at a time, start to finish, on the accepting
thread. There is no worker pool and no keep-alive.

=============================================================================
"""

import logging
from typing import Optional, Callable, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .http import (
    HTTPRequest, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router,
    error_response, internal_error,
)
from .middleware import MiddlewarePipeline, Middleware, CORSMiddleware


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The GeoWeather HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(port=8080))

        @server.get("/api/v1/ping")
        def ping(request):
            return ok({"pong": True})

        server.use(LoggingMiddleware())
        server.run()

    CORS is always on. The CORS middleware is installed innermost, after
    any middleware passed to use(), and its headers are also applied to
    responses the server produces itself (parse errors, timeouts, 500s).
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._router = Router(exact=self.config.exact_routes)
        self._middleware = MiddlewarePipeline()
        self._cors = CORSMiddleware()

        # middleware + CORS + router, built lazily so use() works until
        # the first request
        self._handler: Optional[Callable[[HTTPRequest], HTTPResponse]] = None

    # =========================================================================
    # CONFIGURATION METHODS
    # =========================================================================

    def use(self, middleware: Middleware) -> "HTTPServer":
        """
        Add middleware. First added runs first (outermost).

            server.use(LoggingMiddleware())
        """
        self._middleware.add(middleware)
        self._handler = None
        return self

    @property
    def router(self) -> Router:
        return self._router

    def get(self, path: str, **kwargs):
        """Register a GET route."""
        return self._router.get(path, **kwargs)

    @property
    def bound_address(self) -> Tuple[str, int]:
        return self._socket_server.bound_address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server. Blocks until SIGINT/SIGTERM or shutdown().

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        self._build_handler()

        logger.info(f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}")

        try:
            self._socket_server.start(self._process_connection, on_ready=self._print_startup_banner)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def serve(self):
        """
        Run the accept loop without touching global logging or stdout.

        Used when the server runs in a background thread (tests, embedding).
        """
        self._build_handler()
        self._socket_server.start(self._process_connection)

    def shutdown(self):
        """Stop accepting connections. Safe to call from another thread."""
        self._socket_server.shutdown()

    def _print_startup_banner(self):
        host, port = self.bound_address
        print()
        print("╔══════════════════════════════════════════════════════════════╗")
        print(f"  {self.config.server_name} running")
        print(f"  http://{host}:{port}")
        print("  Press Ctrl+C to stop")
        print("╚══════════════════════════════════════════════════════════════╝")
        print()

        self._router.print_routes()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("geoweather").setLevel(level)

    def _build_handler(self) -> Callable[[HTTPRequest], HTTPResponse]:
        if self._handler is None:
            pipeline = MiddlewarePipeline()
            for middleware in self._middleware:
                pipeline.add(middleware)
            pipeline.add(self._cors)
            self._handler = pipeline.wrap(self._router.handle)
        return self._handler

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _process_connection(self, conn: Connection):
        """Serve exactly one request on the connection, then close it."""
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError as e:
                logger.debug(f"[{conn.id}] {e}")
                self._send(conn, self._error(HTTPStatus.REQUEST_TIMEOUT, "request timeout"))
                return
            except HTTPParseError as e:
                logger.debug(f"[{conn.id}] {e}")
                self._send(conn, self._error(HTTPStatus(e.status_code), str(e)))
                return

            if raw_request is None:
                return

            response = self.process_request(raw_request, conn.address)
            self._send(conn, response)

    def process_request(
        self,
        raw: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPResponse:
        """
        Turn raw request bytes into a response. Never raises.

            HTTPParseError        → its status (400/413) with the message
            unexpected exception  → 500 "internal server error", logged
        """
        try:
            request = self._parser.parse(raw, client_address)
        except HTTPParseError as e:
            return self._error(HTTPStatus(e.status_code), str(e))

        try:
            response = self._build_handler()(request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            response = self._cors.apply(internal_error())

        response.headers["Connection"] = "close"
        return response

    def _error(self, status: HTTPStatus, message: str) -> HTTPResponse:
        response = self._cors.apply(error_response(status, message))
        response.headers["Connection"] = "close"
        return response

    def _send(self, conn: Connection, response: HTTPResponse) -> bool:
        return conn.send_response(response.to_bytes(self.config.server_name))
