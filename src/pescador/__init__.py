"""
Station discovery and current conditions for anglers.

Resolve a location, find nearby USGS lake and stream stations, decimate
station history for charting, and classify current weather.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .conditions import (
    get_conditions,
    get_station_by_id,
    get_stations_by_box,
    get_stations_fuzzy,
    get_weather_by_zip,
)
from .config import ClientConfig
from .events import normalize_request
from .exceptions import (
    AmbiguousMatch,
    ConditionsError,
    InvalidQuery,
    MalformedRequest,
    NoMatchError,
    UpstreamError,
    UpstreamTimeout,
)
from .geocode import GeocodeResolver, MapQuestClient
from .geometry import compute_bounding_box
from .models import (
    BoundingBox,
    Conditions,
    Coordinate,
    CurrentWeather,
    DecimatedSeries,
    GeocodeOption,
    GeocodeResult,
    LocationOptions,
    RawTimeSeriesRecord,
    SingleLocation,
    StationCollection,
    StationSummary,
    StationWithRange,
    TimePoint,
    TimeSeriesValue,
    WeatherCondition,
    Wind,
)
from .stations import aggregate_stations, sample_time_series
from .usgs import USGSClient
from .weather import OpenWeatherClient, classify_clouds, enrich_weather, wind_direction

__all__ = [
    "__version__",
    # Pipeline operations
    "get_conditions",
    "get_station_by_id",
    "get_stations_by_box",
    "get_stations_fuzzy",
    "get_weather_by_zip",
    # Components
    "GeocodeResolver",
    "compute_bounding_box",
    "aggregate_stations",
    "sample_time_series",
    "enrich_weather",
    "classify_clouds",
    "wind_direction",
    "normalize_request",
    # Clients and configuration
    "ClientConfig",
    "MapQuestClient",
    "USGSClient",
    "OpenWeatherClient",
    # Exceptions
    "ConditionsError",
    "MalformedRequest",
    "InvalidQuery",
    "NoMatchError",
    "AmbiguousMatch",
    "UpstreamError",
    "UpstreamTimeout",
    # Models
    "BoundingBox",
    "Conditions",
    "Coordinate",
    "CurrentWeather",
    "DecimatedSeries",
    "GeocodeOption",
    "GeocodeResult",
    "LocationOptions",
    "RawTimeSeriesRecord",
    "SingleLocation",
    "StationCollection",
    "StationSummary",
    "StationWithRange",
    "TimePoint",
    "TimeSeriesValue",
    "WeatherCondition",
    "Wind",
]
