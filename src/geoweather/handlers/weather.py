"""
=============================================================================
WEATHER HANDLER: GET /api/v1/weather?lat=X&lon=Y
=============================================================================

Coordinates → synthetic weather reading.

    GET /api/v1/weather?lat=55.6050&lon=13.0038

    200 {"tempC":10.5,"description":"Sunny","updatedAt":"2026-10-18T10:00:00Z"}

There is no weather provider behind this. Coordinates that land on one of
a few demo cities get a canned reading; everything else gets the default.

    ┌────────────┬───────┬─────────────┐
    │  City      │ tempC │ description │
    ├────────────┼───────┼─────────────┤
    │ Malmo      │ 10.5  │ Sunny       │
    │ Gothenburg │  8.2  │ Windy       │
    │ Orebro     │  6.3  │ Overcast    │
    │ (other)    │  7.0  │ Cloudy      │
    └────────────┴───────┴─────────────┘

=============================================================================
VALIDATION (in order)
=============================================================================

    lat or lon absent        → 400 "missing query params: lat, lon"
    lat not a finite number  → 400 "lat is not a number"
    lat outside -90..90      → 400 "lat out of range (-90..90)"
    lon not a finite number  → 400 "lon is not a number"
    lon outside -180..180    → 400 "lon out of range (-180..180)"

Non-numeric input is rejected outright; it never silently becomes 0.

=============================================================================
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from ..cities import find_by_coordinates
from ..http.request import HTTPRequest
from ..http.query import QueryParamTooLong
from ..http.response import HTTPResponse, ok, bad_request


logger = logging.getLogger(__name__)


Clock = Callable[[], datetime]

# Plain ASCII decimal with an optional exponent; float() alone would also
# accept "5_5.605" or " 1 "
DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True)
class WeatherReading:
    temp_c: float
    description: str


DEFAULT_READING = WeatherReading(7.0, "Cloudy")

DEMO_READINGS: Dict[str, WeatherReading] = {
    "Malmo": WeatherReading(10.5, "Sunny"),
    "Gothenburg": WeatherReading(8.2, "Windy"),
    "Orebro": WeatherReading(6.3, "Overcast"),
}


class InvalidCoordinate(ValueError):
    """A lat/lon value that is not a usable number or is out of range."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 UTC with second precision: 2026-10-18T10:00:00Z."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_coordinate(name: str, raw: str, limit: float) -> float:
    """
    Parse a coordinate and check it lies within [-limit, limit].

    Args:
        name: "lat" or "lon", used in the error message.
        raw: Decoded query value.
        limit: 90 for latitude, 180 for longitude.

    Raises:
        InvalidCoordinate: With the message to send to the client.
    """
    if not DECIMAL_PATTERN.fullmatch(raw):
        raise InvalidCoordinate(f"{name} is not a number")

    value = float(raw)

    # "1e999" passes the pattern but parses to inf
    if not math.isfinite(value):
        raise InvalidCoordinate(f"{name} is not a number")

    if value < -limit or value > limit:
        bound = int(limit)
        raise InvalidCoordinate(f"{name} out of range (-{bound}..{bound})")

    return value


def reading_for(lat: float, lon: float) -> WeatherReading:
    """Look up the demo reading for a coordinate pair."""
    city = find_by_coordinates(lat, lon)
    if city is None:
        return DEFAULT_READING
    return DEMO_READINGS.get(city.name, DEFAULT_READING)


class WeatherHandler:
    """
    Handles coordinates → weather lookups.

    The clock is injectable so tests can pin updatedAt:

        handler = WeatherHandler(clock=lambda: datetime(2026, 1, 1, tzinfo=timezone.utc))
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        max_query_length: Optional[int] = None,
    ):
        self.clock = clock or utc_now
        self.max_query_length = max_query_length

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        try:
            lat_raw = request.get_query("lat", self.max_query_length)
            lon_raw = request.get_query("lon", self.max_query_length)
        except QueryParamTooLong as e:
            return bad_request(str(e))

        if lat_raw is None or lon_raw is None:
            return bad_request("missing query params: lat, lon")

        try:
            lat = parse_coordinate("lat", lat_raw, 90.0)
            lon = parse_coordinate("lon", lon_raw, 180.0)
        except InvalidCoordinate as e:
            return bad_request(str(e))

        reading = reading_for(lat, lon)

        return ok({
            "tempC": reading.temp_c,
            "description": reading.description,
            "updatedAt": format_timestamp(self.clock()),
        })
