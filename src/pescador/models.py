"""
Data models for geocoding, station and weather results.
"""

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd

# USGS parameter codes
GAGE_HEIGHT_CODE = "00065"
FLOW_RATE_CODE = "00060"

# USGS site type tags
LAKE = "LK"
STREAM = "ST"


@dataclass(frozen=True)
class Coordinate:
    """A point in decimal degrees."""

    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class GeocodeOption:
    """One candidate location offered for disambiguation."""

    display: str
    coordinate: Coordinate
    county: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display": self.display,
            "coordinate": self.coordinate.to_dict(),
            "county": self.county,
        }


@dataclass(frozen=True)
class SingleLocation:
    """Geocode result with exactly one match."""

    coordinate: Coordinate
    county: Optional[str] = None
    display: Optional[str] = None
    kind: str = field(default="single", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "coordinate": self.coordinate.to_dict(),
            "county": self.county,
            "display": self.display,
        }


@dataclass(frozen=True)
class LocationOptions:
    """Geocode result with several matches, in provider order."""

    options: Tuple[GeocodeOption, ...]
    kind: str = field(default="options", init=False)

    def __len__(self) -> int:
        return len(self.options)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "options": [o.to_dict() for o in self.options]}


GeocodeResult = Union[SingleLocation, LocationOptions]


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular search region; edges truncated to 6 fractional digits."""

    west: Decimal
    north: Decimal
    south: Decimal
    east: Decimal

    def contains(self, coordinate: Coordinate) -> bool:
        lat = Decimal(str(coordinate.latitude))
        lon = Decimal(str(coordinate.longitude))
        return self.west <= lon <= self.east and self.south <= lat <= self.north

    def to_query(self) -> str:
        """Render as the USGS ``bBox`` parameter (west,south,east,north)."""
        return f"{self.west},{self.south},{self.east},{self.north}"


@dataclass(frozen=True)
class TimeSeriesValue:
    """A single raw sample from the station network."""

    timestamp: str
    value: Optional[float]


@dataclass(frozen=True)
class RawTimeSeriesRecord:
    """One site/variable time series as reported by the station network."""

    site_name: str
    site_code: str
    coordinate: Coordinate
    site_type: str
    variable_code: str
    variable_name: str
    values: Tuple[TimeSeriesValue, ...] = ()

    @property
    def is_lake(self) -> bool:
        return self.site_type == LAKE

    @property
    def is_gage_height(self) -> bool:
        # USGS variable names read "Gage height, ft" / "Streamflow, ft^3/s"
        return self.variable_name[:1].upper() == "G"

    @property
    def is_flow_rate(self) -> bool:
        return not self.is_gage_height


@dataclass
class StationSummary:
    """Latest readings for one logical lake or stream station."""

    name: str
    external_id: str
    coordinate: Coordinate
    gage_height: Optional[float] = None
    flow_rate: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "external_id": self.external_id,
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "gage_height": self.gage_height,
            "flow_rate": self.flow_rate,
        }


@dataclass
class StationCollection:
    """Stations found in a search region, split by site type."""

    lakes: List[StationSummary] = field(default_factory=list)
    streams: List[StationSummary] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.lakes) + len(self.streams)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "lakes": [s.to_dict() for s in self.lakes],
            "streams": [s.to_dict() for s in self.streams],
        }

    def to_pandas(self) -> pd.DataFrame:
        """One row per station with a ``kind`` column of 'lake' or 'stream'."""
        rows = [{"kind": "lake", **s.to_dict()} for s in self.lakes]
        rows.extend({"kind": "stream", **s.to_dict()} for s in self.streams)
        columns = [
            "kind",
            "name",
            "external_id",
            "latitude",
            "longitude",
            "gage_height",
            "flow_rate",
        ]
        return pd.DataFrame(rows, columns=columns)


@dataclass(frozen=True)
class TimePoint:
    """A decimated sample kept for charting."""

    timestamp: str
    value: Optional[float]


@dataclass
class DecimatedSeries:
    """Bounded gage height and flow rate series for one station."""

    gage: List[TimePoint] = field(default_factory=list)
    flow: List[TimePoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "gage": [asdict(p) for p in self.gage],
            "flow": [asdict(p) for p in self.flow],
        }

    def to_pandas(self) -> pd.DataFrame:
        """Long-format frame with ``series``, ``timestamp`` and ``value`` columns."""
        rows = [{"series": "gage", **asdict(p)} for p in self.gage]
        rows.extend({"series": "flow", **asdict(p)} for p in self.flow)
        df = pd.DataFrame(rows, columns=["series", "timestamp", "value"])
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
        return df


@dataclass
class StationWithRange:
    """A single station and its decimated history."""

    name: str
    external_id: str
    coordinate: Coordinate
    values: DecimatedSeries

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "external_id": self.external_id,
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "values": self.values.to_dict(),
        }


@dataclass(frozen=True)
class Wind:
    speed: float
    direction: str
    gust: Optional[float] = None


@dataclass(frozen=True)
class WeatherCondition:
    main: str
    description: str
    icon: str


@dataclass(frozen=True)
class CurrentWeather:
    """Classified current conditions at a location."""

    temperature: float
    wind: Wind
    pressure: float
    humidity: float
    cloud_cover_label: str
    sunrise: Optional[int] = None
    sunset: Optional[int] = None
    condition: Optional[WeatherCondition] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Conditions:
    """Stations and weather for the same location."""

    coordinate: Coordinate
    stations: StationCollection
    weather: CurrentWeather

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coordinate": self.coordinate.to_dict(),
            "stations": self.stations.to_dict(),
            "weather": self.weather.to_dict(),
        }
