"""
=============================================================================
GEO HANDLER: GET /api/v1/geo?city=NAME
=============================================================================

City name → coordinates.

    GET /api/v1/geo?city=Malmo

    200 {"city":"Malmo","country":"SE","lat":55.6050,"lon":13.0038}

=============================================================================
VALIDATION (in order)
=============================================================================

    city absent                    → 400 "missing query param: city"
    more than 100 characters       → 400 "city too long (max 100)"
    not in the demo table          → 404 "city not found"

The hard query ceiling only shows through when it is set below 100;
anything longer than 100 characters always gets the city message.

=============================================================================
"""

import logging
from typing import Optional

from ..cities import find_by_name
from ..http.request import HTTPRequest
from ..http.query import QueryParamTooLong
from ..http.response import HTTPResponse, ok_json_text, bad_request, not_found


logger = logging.getLogger(__name__)


MAX_CITY_LENGTH = 100


class GeoHandler:
    """
    Handles city → coordinates lookups.

    Usage:
        geo = GeoHandler(max_query_length=config.max_query_value_length)
        router.get("/api/v1/geo")(geo.handle)
    """

    def __init__(self, max_query_length: Optional[int] = None):
        """
        Args:
            max_query_length: Hard ceiling on any decoded query value.
                              None disables the ceiling; the 100-character
                              city rule still applies.
        """
        self.max_query_length = max_query_length

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        too_long = f"city too long (max {MAX_CITY_LENGTH})"

        try:
            city_name = request.get_query("city", self.max_query_length)
        except QueryParamTooLong as e:
            # A ceiling of 100 or more only trips on names already too long
            if e.max_length < MAX_CITY_LENGTH:
                return bad_request(str(e))
            return bad_request(too_long)

        if city_name is None:
            return bad_request("missing query param: city")

        if len(city_name) > MAX_CITY_LENGTH:
            return bad_request(too_long)

        city = find_by_name(city_name)
        if city is None:
            logger.debug(f"Unknown city requested: {city_name!r}")
            return not_found("city not found")

        return ok_json_text(city.to_json())
