"""
=============================================================================
DEMO CITY DATASET
=============================================================================

A fixed, in-memory table of cities. It is created once at import time and
never changes, so every lookup is deterministic for the life of the
process.

    ┌────────────┬─────────┬──────────┬───────────┐
    │  City      │ Country │ Latitude │ Longitude │
    ├────────────┼─────────┼──────────┼───────────┤
    │ Stockholm  │   SE    │ 59.3293  │  18.0686  │
    │ Orebro     │   SE    │ 59.2741  │  15.2066  │
    │ Malmo      │   SE    │ 55.6050  │  13.0038  │
    │ Gothenburg │   SE    │ 57.7089  │  11.9746  │
    │ Uppsala    │   SE    │ 59.8586  │  17.6389  │
    └────────────┴─────────┴──────────┴───────────┘

Table order matters: coordinate lookups return the FIRST city within
tolerance, not the closest one.

=============================================================================
"""

import json
from dataclasses import dataclass
from typing import Optional, Tuple


# Degrees on each axis; roughly "the same demo city"
COORDINATE_TOLERANCE = 0.01


@dataclass(frozen=True)
class CityRecord:
    """
    One row of the demo table.

    Attributes:
        name:         Unique, case-sensitive city name
        country_code: ISO 3166-1 alpha-2 code
        latitude:     Degrees, -90..90
        longitude:    Degrees, -180..180
    """

    name: str
    country_code: str
    latitude: float
    longitude: float

    def to_json(self) -> str:
        """
        Render the geo endpoint body.

        Coordinates are written with exactly 4 decimal places, trailing
        zeros kept: Malmo is "lat":55.6050, not 55.605. json.dumps() would
        drop the zero, so only the strings go through it.
        """
        return (
            f'{{"city":{json.dumps(self.name, ensure_ascii=False)},'
            f'"country":{json.dumps(self.country_code, ensure_ascii=False)},'
            f'"lat":{self.latitude:.4f},'
            f'"lon":{self.longitude:.4f}}}'
        )


DEMO_CITIES: Tuple[CityRecord, ...] = (
    CityRecord("Stockholm", "SE", 59.3293, 18.0686),
    CityRecord("Orebro", "SE", 59.2741, 15.2066),
    CityRecord("Malmo", "SE", 55.6050, 13.0038),
    CityRecord("Gothenburg", "SE", 57.7089, 11.9746),
    CityRecord("Uppsala", "SE", 59.8586, 17.6389),
)


def find_by_name(name: str) -> Optional[CityRecord]:
    """Exact, case-sensitive name lookup."""
    for city in DEMO_CITIES:
        if city.name == name:
            return city
    return None


def find_by_coordinates(lat: float, lon: float) -> Optional[CityRecord]:
    """
    Return the first city within COORDINATE_TOLERANCE on both axes.

    No distance minimization: if two cities were both within tolerance,
    the one earlier in the table wins.
    """
    for city in DEMO_CITIES:
        if (
            abs(city.latitude - lat) < COORDINATE_TOLERANCE
            and abs(city.longitude - lon) < COORDINATE_TOLERANCE
        ):
            return city
    return None
