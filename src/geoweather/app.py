"""
Application factory: an HTTPServer with the GeoWeather routes wired in.

    GET /api/v1/geo?city=NAME
    GET /api/v1/weather?lat=X&lon=Y

    server = create_app(ServerConfig.from_env())
    server.run()
"""

import logging
from typing import Optional

from .config import ServerConfig
from .server import HTTPServer
from .handlers import GeoHandler, WeatherHandler
from .middleware import LoggingMiddleware


logger = logging.getLogger(__name__)


GEO_PATH = "/api/v1/geo"
WEATHER_PATH = "/api/v1/weather"


def create_app(
    config: Optional[ServerConfig] = None,
    weather_handler: Optional[WeatherHandler] = None,
) -> HTTPServer:
    """
    Build the GeoWeather server.

    Args:
        config: Server configuration. Defaults to ServerConfig().
        weather_handler: Replacement weather handler, e.g. one with a
                         fixed clock for tests.
    """
    config = config or ServerConfig()
    server = HTTPServer(config)

    server.use(LoggingMiddleware.from_format(config.log_format))

    geo = GeoHandler(max_query_length=config.max_query_value_length)
    weather = weather_handler or WeatherHandler(
        max_query_length=config.max_query_value_length,
    )

    server.get(GEO_PATH, name="geo")(geo.handle)
    server.get(WEATHER_PATH, name="weather")(weather.handle)

    logger.debug(f"Registered {len(server.router.routes())} routes")
    return server
