"""
Geocoding of zip codes and free-text addresses via the MapQuest API.
"""

import logging
from typing import Any, Dict, List, Optional

from .client import BaseClient
from .config import ClientConfig
from .exceptions import (
    AmbiguousMatch,
    ConditionsError,
    InvalidQuery,
    MalformedRequest,
    NoMatchError,
    UpstreamError,
)
from .models import Coordinate, GeocodeOption, GeocodeResult, LocationOptions, SingleLocation

logger = logging.getLogger(__name__)


class MapQuestClient(BaseClient):
    """Client for the MapQuest geocoding ``address`` endpoint."""

    service_name = "MapQuest"

    def __init__(self, config: Optional[ClientConfig] = None):
        super().__init__(config)
        self.base_url = self.config.mapquest_url

    def _error_for_status(self, status_code: int, error: Exception) -> ConditionsError:
        if status_code == 400:
            return InvalidQuery("Invalid query")
        return super()._error_for_status(status_code, error)

    async def geocode(self, location: str) -> Dict[str, Any]:
        """Return the raw MapQuest payload for a location string."""
        if not self.config.mapquest_api_key:
            raise UpstreamError("MapQuest API key is not configured")

        params = {"key": self.config.mapquest_api_key, "location": location}
        logger.debug(f"Geocoding location {location!r}")
        data = await self._make_request(f"{self.base_url}/address", params)

        if not isinstance(data, dict):
            raise UpstreamError("MapQuest returned an unexpected payload")

        status = (data.get("info") or {}).get("statusCode")
        if status == 400:
            raise InvalidQuery("Invalid query")

        return data


def _parse_coordinate(location: Dict[str, Any]) -> Coordinate:
    try:
        lat_lng = location["latLng"]
        return Coordinate(latitude=float(lat_lng["lat"]), longitude=float(lat_lng["lng"]))
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamError(f"MapQuest location is missing coordinates: {e}") from e


def _display_name(location: Dict[str, Any]) -> str:
    city = location.get("adminArea5", "")
    state = location.get("adminArea3", "")
    county = location.get("adminArea4", "")
    return f"{city}, {state} ({county})"


def parse_geocode_payload(data: Dict[str, Any]) -> GeocodeResult:
    """
    Turn a MapQuest payload into a single location or a list of options.

    Raises:
        NoMatchError: If the payload holds no locations
        UpstreamError: If a location lacks coordinates
    """
    results = data.get("results") or []
    locations: List[Dict[str, Any]] = (results[0].get("locations") or []) if results else []

    if not locations:
        raise NoMatchError("No locations matched the query")

    if len(locations) > 1:
        options = tuple(
            GeocodeOption(
                display=_display_name(loc),
                coordinate=_parse_coordinate(loc),
                county=loc.get("adminArea4", ""),
            )
            for loc in locations
        )
        logger.debug(f"Geocode returned {len(options)} candidate locations")
        return LocationOptions(options=options)

    only = locations[0]
    return SingleLocation(
        coordinate=_parse_coordinate(only),
        county=only.get("adminArea4") or None,
        display=_display_name(only),
    )


class GeocodeResolver:
    """Resolve user-supplied locations to coordinates."""

    def __init__(self, client: MapQuestClient):
        self.client = client

    async def resolve(self, query: str) -> GeocodeResult:
        """
        Geocode a zip code or free-text address.

        Multiple matches are returned as ``LocationOptions`` in provider order
        so the caller can disambiguate.
        """
        if not isinstance(query, str) or not query.strip():
            raise MalformedRequest("A location query is required")

        data = await self.client.geocode(query.strip())
        return parse_geocode_payload(data)

    async def resolve_coordinate(self, query: str) -> Coordinate:
        """Geocode a query that must match exactly one location."""
        result = await self.resolve(query)
        if isinstance(result, LocationOptions):
            raise AmbiguousMatch(
                f"{len(result)} locations matched {query!r}", options=result.options
            )
        return result.coordinate
