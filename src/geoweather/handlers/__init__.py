"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    geo.py       GET /api/v1/geo?city=NAME         city → coordinates
    weather.py   GET /api/v1/weather?lat=X&lon=Y   coordinates → weather

Handlers are plain objects with a handle(request) method, registered on
the router by the app factory:

    geo = GeoHandler(max_query_length=1024)
    router.get("/api/v1/geo")(geo.handle)

Validation failures are answered right here with a 4xx response; a
handler never raises for bad input.

=============================================================================
"""

from .geo import GeoHandler
from .weather import WeatherHandler, WeatherReading

__all__ = [
    "GeoHandler",
    "WeatherHandler",
    "WeatherReading",
]
