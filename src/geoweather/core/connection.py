"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket with a small API for the
request/response exchange.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A client that sends

    GET /api/v1/geo?city=Malmo HTTP/1.1\r\n
    Host: localhost\r\n
    \r\n

may arrive as one recv() or as several:

    recv() → "GET /api/v1/ge"
    recv() → "o?city=Malmo HTTP/1.1\r\nHost: local"
    recv() → "host\r\n\r\n"

So we keep reading into a buffer until we see the blank line that ends
the request head (\r\n\r\n), the client closes its side, or the buffer
grows past the size limit.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

The API has no request bodies and no keep-alive:

    accept → read head → respond → close

Every response carries "Connection: close" and the socket is shut down
right after the write.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import HTTPParseError


logger = logging.getLogger(__name__)


HEAD_TERMINATOR = b"\r\n\r\n"


class ConnectionState(Enum):
    """Connection lifecycle states, used in debug logging."""

    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A single client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED READING                                                 │
    │     └── recv() until \\r\\n\\r\\n, peer close, or size limit           │
    │                                                                      │
    │  2. TIMEOUTS                                                         │
    │     └── one timeout for every recv() and sendall()                   │
    │     └── a stalled client cannot block the serial server forever      │
    │                                                                      │
    │  3. GRACEFUL CLOSE                                                   │
    │     └── shutdown(SHUT_WR), drain, close                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        buffer_size: Bytes requested per recv().
        timeout: Read/write timeout in seconds (None = blocking).
        max_request_size: Largest request head accepted.
    """

    socket: socket.socket
    address: tuple[str, int]
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = 10.0
    max_request_size: int = 64 * 1024

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    def read_request(self) -> Optional[bytes]:
        """
        Read the request head from the socket.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    read_request() Flow                           │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while no \\r\\n\\r\\n in buffer:                                   │
        │       chunk = recv()                                             │
        │       empty chunk → client closed, stop reading                  │
        │       buffer += chunk                                            │
        │       buffer too big → 413                                       │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Returns:
            The bytes received (possibly an incomplete head if the client
            closed early), or None if the client sent nothing at all.

        Raises:
            TimeoutError: The read timed out after some data arrived.
            HTTPParseError: The head exceeded max_request_size (413).
        """
        self.state = ConnectionState.READING
        buffer = b""

        try:
            while HEAD_TERMINATOR not in buffer:
                chunk = self._recv()
                if not chunk:
                    break

                buffer += chunk

                if len(buffer) > self.max_request_size:
                    raise HTTPParseError(
                        f"request too large: more than {self.max_request_size} bytes",
                        status_code=413,
                    )
        except socket.timeout:
            if not buffer:
                logger.debug(f"[{self.id}] Timed out before any data")
                return None
            raise TimeoutError(f"Request read timeout after {len(buffer)} bytes")

        return buffer or None

    def _recv(self) -> bytes:
        """recv() that treats a reset connection like a close."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response.

        sendall() loops until every byte is written; a plain send() may
        write only part of the buffer.

        Returns:
            True if sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """
        Close the connection gracefully.

            1. shutdown(SHUT_WR)  send FIN, the client sees end of response
            2. drain              discard anything the client still sends
            3. close()            release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # client already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
