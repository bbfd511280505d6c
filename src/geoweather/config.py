"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass so the server, the CLI and the tests
agree on defaults:

    config = ServerConfig(port=9000, exact_routes=True)
    config = ServerConfig.from_env()

Configuration is validated once, when the server is constructed. A bad
port or timeout fails at startup instead of on the first request.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """
    Configuration for the GeoWeather server.

    NETWORK
    - host, port, backlog, buffer_size, timeout

    LIMITS
    - max_request_size, max_query_value_length

    ROUTING
    - exact_routes

    LOGGING
    - log_level, log_format
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """IPv4 address to bind to. "0.0.0.0" listens on all interfaces."""

    port: int = 8080
    """Port to listen on. 0 asks the OS for a free port."""

    backlog: int = 16
    """Maximum number of queued connections waiting for accept()."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = 10.0
    """
    Per-connection read/write timeout in seconds.

    None blocks forever, which lets one silent client stall the whole
    (serial) server.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 64 * 1024
    """Largest request head accepted. Anything bigger gets 413."""

    max_query_value_length: int = 1024
    """Longest decoded query value accepted. Anything longer gets 400."""

    # ─────────────────────────────────────────────────────────────────────
    # ROUTING
    # ─────────────────────────────────────────────────────────────────────

    exact_routes: bool = False
    """
    Match routes on the exact path.

    The default is prefix matching, so /api/v1/geoXYZ is served by the
    /api/v1/geo handler. Existing clients rely on that.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    log_format: str = "text"
    """Access log format: 'text' (Apache style) or 'json'."""

    server_name: str = "GeoWeather/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        GEOWEATHER_HOST          bind address (default: 0.0.0.0)
        GEOWEATHER_PORT          listen port (default: 8080)
        GEOWEATHER_TIMEOUT       connection timeout in seconds (default: 10)
        GEOWEATHER_LOG_LEVEL     logging level (default: INFO)
        GEOWEATHER_LOG_FORMAT    text or json (default: text)
        GEOWEATHER_EXACT_ROUTES  1/true/yes/on for exact-path routing

        Example:
            GEOWEATHER_PORT=3000 python -m geoweather
        """
        return cls(
            host=os.getenv("GEOWEATHER_HOST", "0.0.0.0"),
            port=int(os.getenv("GEOWEATHER_PORT", "8080")),
            timeout=float(os.getenv("GEOWEATHER_TIMEOUT", "10")),
            log_level=os.getenv("GEOWEATHER_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("GEOWEATHER_LOG_FORMAT", "text").lower(),
            exact_routes=os.getenv("GEOWEATHER_EXACT_ROUTES", "").lower() in _TRUTHY,
        )

    def validate(self) -> None:
        """Raise ValueError for values the server cannot run with."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if self.max_query_value_length < 1:
            raise ValueError("max_query_value_length must be >= 1")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log_format: {self.log_format!r}. "
                f"Must be one of: {', '.join(LOG_FORMATS)}"
            )
