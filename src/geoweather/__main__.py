"""
=============================================================================
GEOWEATHER CLI ENTRY POINT
=============================================================================

    # Run with defaults (0.0.0.0:8080)
    python -m geoweather

    # Custom port, local only
    python -m geoweather --host 127.0.0.1 --port 3000

    # JSON access logs, exact-path routing
    python -m geoweather --log-format json --exact-routes

Defaults come from the environment (GEOWEATHER_PORT, GEOWEATHER_HOST, ...,
see ServerConfig.from_env); flags override them.

Exit status is 1 when the server cannot bind its port or the
configuration is invalid.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .app import create_app
from .config import ServerConfig, LOG_FORMATS


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geoweather",
        description="Demo geo + weather JSON API served over raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m geoweather                        # Run with defaults
  python -m geoweather --port 3000            # Custom port
  python -m geoweather --host 127.0.0.1       # Local connections only
  python -m geoweather --log-format json      # JSON access logs
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help=f"Per-connection read/write timeout in seconds (default: {defaults.timeout})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # BEHAVIOR ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--exact-routes",
        action="store_true",
        default=defaults.exact_routes,
        help="Match routes on the exact path instead of by prefix"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"GeoWeather {__version__}"
    )

    return parser


def main(argv=None):
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"error: invalid environment configuration: {e}", file=sys.stderr)
        sys.exit(1)

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        exact_routes=args.exact_routes,
        log_level=args.log_level,
        log_format=args.log_format,
    )

    try:
        server = create_app(config)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        server.run()
    except OSError as e:
        print(f"error: cannot listen on {config.host}:{config.port}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
