"""
=============================================================================
GEOWEATHER - A Tiny Geo + Weather JSON API on Raw Sockets
=============================================================================

A demo HTTP/1.1 server that answers two questions from a built-in table
of Swedish cities:

    GET /api/v1/geo?city=Malmo
        {"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}

    GET /api/v1/weather?lat=55.605&lon=13.0038
        {"tempC":10.5,"description":"Sunny","updatedAt":"2026-10-18T10:00:00Z"}

Everything below the handlers is plain sockets: no framework, one request
per connection, one connection at a time.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    geoweather/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m geoweather)
    ├── app.py               # create_app(): server + routes
    ├── server.py            # HTTPServer orchestrator
    ├── config.py            # ServerConfig dataclass
    ├── cities.py            # Built-in city table and lookups
    ├── core/
    │   ├── socket_server.py # bind/listen/accept loop
    │   └── connection.py    # per-client read/write/close
    ├── http/
    │   ├── request.py       # request line + header parsing
    │   ├── query.py         # query string lookup, percent-decoding
    │   ├── response.py      # response building, JSON error bodies
    │   ├── router.py        # method + path dispatch
    │   └── status_codes.py  # HTTPStatus enum
    ├── middleware/
    │   ├── base.py          # Middleware ABC, pipeline
    │   ├── logging.py       # access log
    │   └── cors.py          # CORS headers, preflight
    └── handlers/
        ├── geo.py           # /api/v1/geo
        └── weather.py       # /api/v1/weather

=============================================================================
QUICK START
=============================================================================

    from geoweather import create_app, ServerConfig

    server = create_app(ServerConfig(port=8080))
    server.run()

or from a shell:

    python -m geoweather --port 8080

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import HTTPServer
from .app import create_app

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
