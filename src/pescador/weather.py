"""
Current weather from the OpenWeather One Call API.
"""

import logging
from typing import Any, Dict, Optional

from .client import BaseClient
from .config import ClientConfig
from .exceptions import UpstreamError
from .models import Coordinate, CurrentWeather, WeatherCondition, Wind

logger = logging.getLogger(__name__)

# 16-point compass, clockwise from north; each label spans 22.5 degrees
COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE",
    "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW",
    "W", "WNW", "NW", "NNW",
)
SECTOR_DEGREES = 360.0 / len(COMPASS_POINTS)

CLOUD_LABELS = (
    (25, "Mostly sunny"),
    (50, "Partly cloudy"),
    (75, "Mostly cloudy"),
)


class OpenWeatherClient(BaseClient):
    """Client for the OpenWeather ``onecall`` endpoint."""

    service_name = "OpenWeather"

    def __init__(self, config: Optional[ClientConfig] = None):
        super().__init__(config)
        self.base_url = self.config.openweather_url

    async def get_current(self, coordinate: Coordinate) -> Dict[str, Any]:
        """Return the raw One Call payload (imperial units) for a coordinate."""
        if not self.config.openweather_api_key:
            raise UpstreamError("OpenWeather API key is not configured")

        params = {
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "appid": self.config.openweather_api_key,
            "units": "imperial",
        }
        logger.debug(
            f"Fetching weather for ({coordinate.latitude}, {coordinate.longitude})"
        )
        data = await self._make_request(f"{self.base_url}/onecall", params)
        if not isinstance(data, dict):
            raise UpstreamError("OpenWeather returned an unexpected payload")
        return data


def classify_clouds(cloudiness: float) -> str:
    """Describe cloud cover percentage; bucket upper bounds are inclusive."""
    if cloudiness <= 0:
        return "Clear skies"
    for upper, label in CLOUD_LABELS:
        if cloudiness <= upper:
            return label
    return "Overcast"


def wind_direction(degrees: float) -> str:
    """
    Map a bearing to a 16-point compass label.

    Buckets are centred on each label, so N covers [348.75, 360) and
    [0, 11.25).
    """
    bearing = float(degrees) % 360.0
    index = int((bearing + SECTOR_DEGREES / 2) // SECTOR_DEGREES) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]


def _condition(current: Dict[str, Any]) -> Optional[WeatherCondition]:
    descriptions = current.get("weather") or []
    if not descriptions:
        return None
    first = descriptions[0]
    return WeatherCondition(
        main=first.get("main", ""),
        description=first.get("description", ""),
        icon=first.get("icon", ""),
    )


def enrich_weather(payload: Dict[str, Any]) -> CurrentWeather:
    """
    Build a classified weather record from a One Call payload.

    Raises:
        UpstreamError: If the payload has no usable current conditions
    """
    current = payload.get("current") if isinstance(payload, dict) else None
    if not current:
        raise UpstreamError("Weather request failed: no current conditions")

    try:
        gust = current.get("wind_gust")
        return CurrentWeather(
            temperature=float(current["temp"]),
            wind=Wind(
                speed=float(current["wind_speed"]),
                direction=wind_direction(current["wind_deg"]),
                gust=float(gust) if gust is not None else None,
            ),
            pressure=float(current["pressure"]),
            humidity=float(current["humidity"]),
            cloud_cover_label=classify_clouds(float(current["clouds"])),
            sunrise=current.get("sunrise"),
            sunset=current.get("sunset"),
            condition=_condition(current),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamError(f"Weather payload is incomplete: {e}") from e
