"""
Networking core: the listening socket and per-client connections.

    socket_server.py   bind/listen/accept loop, signal handling
    connection.py      buffered request read, sendall, graceful close
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
]
