"""
High-level pipeline operations for station and weather conditions.

Each operation geocodes its location, queries the upstream providers and
returns normalized models. Clients may be passed in for reuse; otherwise a
client is created for the call and closed afterwards. Every operation has a
``.sync`` attribute for blocking use.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Type, TypeVar, Union

from .client import BaseClient
from .config import ClientConfig
from .exceptions import InvalidQuery, MalformedRequest, UpstreamError
from .geocode import GeocodeResolver, MapQuestClient
from .geometry import compute_bounding_box
from .models import (
    BoundingBox,
    Conditions,
    Coordinate,
    CurrentWeather,
    LocationOptions,
    StationCollection,
    StationWithRange,
)
from .stations import aggregate_stations, sample_time_series
from .usgs import USGSClient
from .utils import add_sync_version, with_deadline
from .weather import OpenWeatherClient, enrich_weather

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=BaseClient)


@asynccontextmanager
async def _use_client(
    client: Optional[C], client_class: Type[C], config: ClientConfig
) -> AsyncIterator[C]:
    """Yield the given client, or a temporary one that is closed on exit."""
    if client is not None:
        yield client
        return
    async with client_class(config) as temp_client:
        yield temp_client


def _search_box(coordinate: Coordinate, radius_miles: float) -> BoundingBox:
    try:
        return compute_bounding_box(coordinate, radius_miles)
    except ValueError as e:
        raise InvalidQuery(str(e)) from e


async def _stations_near(
    coordinate: Coordinate,
    radius_miles: float,
    config: ClientConfig,
    usgs: Optional[USGSClient],
) -> StationCollection:
    box = _search_box(coordinate, radius_miles)
    async with _use_client(usgs, USGSClient, config) as client:
        records = await client.get_sites_in_box(box)
    return aggregate_stations(records)


async def _weather_at(
    coordinate: Coordinate,
    config: ClientConfig,
    weather: Optional[OpenWeatherClient],
) -> CurrentWeather:
    async with _use_client(weather, OpenWeatherClient, config) as client:
        payload = await client.get_current(coordinate)
    return enrich_weather(payload)


async def _coordinate_for(
    query: str, config: ClientConfig, geocoder: Optional[MapQuestClient]
) -> Coordinate:
    async with _use_client(geocoder, MapQuestClient, config) as client:
        return await GeocodeResolver(client).resolve_coordinate(query)


@add_sync_version
async def get_stations_by_box(
    zip_code: str,
    radius_miles: Optional[float] = None,
    config: Optional[ClientConfig] = None,
    geocoder: Optional[MapQuestClient] = None,
    usgs: Optional[USGSClient] = None,
    timeout: Optional[float] = None,
) -> StationCollection:
    """
    Find lake and stream stations around a zip code.

    Args:
        zip_code: Zip code to search around
        radius_miles: Search radius; defaults to ``config.radius_miles``
        config: Client configuration
        geocoder: Optional MapQuest client to reuse
        usgs: Optional USGS client to reuse
        timeout: Deadline in seconds for the whole operation

    Returns:
        StationCollection with lakes and merged stream summaries

    Raises:
        AmbiguousMatch: If the zip code matches more than one location
    """
    config = config or ClientConfig()
    radius = radius_miles if radius_miles is not None else config.radius_miles

    async def run() -> StationCollection:
        coordinate = await _coordinate_for(zip_code, config, geocoder)
        return await _stations_near(coordinate, radius, config, usgs)

    return await with_deadline(run(), timeout)


@add_sync_version
async def get_stations_fuzzy(
    location: str,
    radius_miles: Optional[float] = None,
    config: Optional[ClientConfig] = None,
    geocoder: Optional[MapQuestClient] = None,
    usgs: Optional[USGSClient] = None,
    timeout: Optional[float] = None,
) -> Union[StationCollection, LocationOptions]:
    """
    Find stations around a free-text location.

    When the location matches several places the candidate options are
    returned instead of stations, and no station query is made.

    Args:
        location: Address, city or landmark text
        radius_miles: Search radius; defaults to ``config.radius_miles``
        config: Client configuration
        geocoder: Optional MapQuest client to reuse
        usgs: Optional USGS client to reuse
        timeout: Deadline in seconds for the whole operation
    """
    config = config or ClientConfig()
    radius = radius_miles if radius_miles is not None else config.radius_miles

    async def run() -> Union[StationCollection, LocationOptions]:
        async with _use_client(geocoder, MapQuestClient, config) as client:
            result = await GeocodeResolver(client).resolve(location)

        if isinstance(result, LocationOptions):
            logger.info(f"{len(result)} locations matched {location!r}")
            return result

        return await _stations_near(result.coordinate, radius, config, usgs)

    return await with_deadline(run(), timeout)


@add_sync_version
async def get_station_by_id(
    site_id: str,
    range_days: int,
    config: Optional[ClientConfig] = None,
    usgs: Optional[USGSClient] = None,
    timeout: Optional[float] = None,
) -> StationWithRange:
    """
    Get a station's recent history, decimated for charting.

    Args:
        site_id: USGS site number
        range_days: Number of days of history
        config: Client configuration
        usgs: Optional USGS client to reuse
        timeout: Deadline in seconds for the whole operation

    Returns:
        StationWithRange with gage and flow series of at most 31 points each
    """
    if not isinstance(site_id, str) or not site_id.strip():
        raise MalformedRequest("A station id is required")
    try:
        days = int(range_days)
    except (TypeError, ValueError) as e:
        raise MalformedRequest(f"range must be a whole number of days: {range_days!r}") from e
    if days < 1:
        raise MalformedRequest(f"range must be at least 1 day, got {days}")

    config = config or ClientConfig()
    site_id = site_id.strip()

    async def run() -> StationWithRange:
        async with _use_client(usgs, USGSClient, config) as client:
            records = await client.get_station_history(site_id, days)

        if not records:
            raise UpstreamError(f"No time series returned for station {site_id}")

        first = records[0]
        return StationWithRange(
            name=first.site_name,
            external_id=first.site_code,
            coordinate=first.coordinate,
            values=sample_time_series(records),
        )

    return await with_deadline(run(), timeout)


@add_sync_version
async def get_weather_by_zip(
    zip_code: str,
    config: Optional[ClientConfig] = None,
    geocoder: Optional[MapQuestClient] = None,
    weather: Optional[OpenWeatherClient] = None,
    timeout: Optional[float] = None,
) -> CurrentWeather:
    """
    Get classified current weather for a zip code.

    Raises:
        AmbiguousMatch: If the zip code matches more than one location
    """
    config = config or ClientConfig()

    async def run() -> CurrentWeather:
        coordinate = await _coordinate_for(zip_code, config, geocoder)
        return await _weather_at(coordinate, config, weather)

    return await with_deadline(run(), timeout)


@add_sync_version
async def get_conditions(
    zip_code: str,
    radius_miles: Optional[float] = None,
    config: Optional[ClientConfig] = None,
    geocoder: Optional[MapQuestClient] = None,
    usgs: Optional[USGSClient] = None,
    weather: Optional[OpenWeatherClient] = None,
    timeout: Optional[float] = None,
) -> Conditions:
    """
    Get nearby stations and current weather for a zip code.

    The station and weather queries run concurrently once the location is
    known. If either fails the whole call fails and the other is cancelled.
    """
    config = config or ClientConfig()
    radius = radius_miles if radius_miles is not None else config.radius_miles

    async def run() -> Conditions:
        coordinate = await _coordinate_for(zip_code, config, geocoder)
        station_task = asyncio.ensure_future(_stations_near(coordinate, radius, config, usgs))
        weather_task = asyncio.ensure_future(_weather_at(coordinate, config, weather))
        try:
            stations, current = await asyncio.gather(station_task, weather_task)
        except BaseException:
            for task in (station_task, weather_task):
                task.cancel()
            # let cancelled branches close their clients before propagating
            await asyncio.gather(station_task, weather_task, return_exceptions=True)
            raise
        return Conditions(coordinate=coordinate, stations=stations, weather=current)

    return await with_deadline(run(), timeout)
