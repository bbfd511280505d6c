"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

The listening socket and the accept loop:

    socket() → setsockopt(SO_REUSEADDR) → bind() → listen() → accept()...

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         Accept Loop                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   while running:                                                     │
    │       accept()            ← waits at most 1 second                   │
    │         timeout           → loop, re-check running flag              │
    │         interrupted       → loop                                     │
    │         other OSError     → log, stop                                │
    │         client            → handler(Connection) → back to accept     │
    │           handler OSError → log, close client, keep accepting        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Connections are served one after another on the accepting thread. The
handler is expected to close the connection before it returns.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


# accept() wakes up this often to notice shutdown()
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """Configured (host, port)."""
        return (self.config.host, self.config.port)

    @property
    def bound_address(self) -> Tuple[str, int]:
        """
        Actual (host, port) of the listening socket.

        Differs from `address` when port 0 was requested and the OS chose
        one. Falls back to `address` before the socket exists.
        """
        if self._socket is None:
            return self.address
        return self._socket.getsockname()[:2]

    def _create_socket(self) -> socket.socket:
        """Create the IPv4 TCP listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting during TIME_WAIT would otherwise fail with
        # "Address already in use"
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """
        Route SIGINT (Ctrl+C) and SIGTERM (docker stop, kill) to shutdown().

        signal.signal() only works on the main thread. When the server runs
        in a background thread (tests, embedding) the caller stops it with
        shutdown() instead.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(
        self,
        connection_handler: Callable[[Connection], None],
        on_ready: Optional[Callable[[], None]] = None,
    ):
        """
        Bind, listen and run the accept loop. BLOCKS until shutdown().

        Args:
            connection_handler: Called with each accepted Connection.
            on_ready: Called once the socket is listening (startup banner).

        Raises:
            OSError: If the address cannot be bound or listened on.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._running = True
        self._setup_signals()

        host, port = self.bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            if on_ready is not None:
                on_ready()
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except InterruptedError:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            )
            try:
                connection_handler(conn)
            except OSError as e:
                # One broken client must not stop the accept loop
                logger.warning(f"[{conn.id}] Connection error from {conn.client_ip}: {e}")
                conn.close()

    def shutdown(self):
        """
        Ask the accept loop to stop. Safe to call more than once and from
        any thread; the loop notices within ACCEPT_POLL_INTERVAL.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)

