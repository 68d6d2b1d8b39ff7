"""
Client configuration for pescador.

API keys, endpoints and request policy are carried in a ``ClientConfig``
instance handed to every client at construction time.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Optional

from dotenv import load_dotenv

MAPQUEST_URL = "http://www.mapquestapi.com/geocoding/v1"
USGS_IV_URL = "http://waterservices.usgs.gov/nwis/iv"
OPENWEATHER_URL = "https://api.openweathermap.org/data/3.0"


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by the geocoding, station and weather clients."""

    mapquest_api_key: Optional[str] = None
    openweather_api_key: Optional[str] = None
    mapquest_url: str = MAPQUEST_URL
    usgs_url: str = USGS_IV_URL
    openweather_url: str = OPENWEATHER_URL
    timeout: float = 30.0
    max_retries: int = 2
    retry_backoff: float = 0.5
    radius_miles: float = 10.0
    user_agent: str = "pescador-conditions/0.1.0"

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.radius_miles <= 0:
            raise ValueError(f"radius_miles must be positive, got {self.radius_miles}")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides: Any) -> "ClientConfig":
        """
        Build a config from the process environment.

        A ``.env`` file is loaded first (existing variables win). Keyword
        overrides take precedence over anything read from the environment.
        """
        load_dotenv(dotenv_path)

        values: dict = {
            "mapquest_api_key": os.getenv("MAPQUEST_API_KEY"),
            "openweather_api_key": os.getenv("OPEN_WEATHER_API_KEY"),
        }
        if os.getenv("PESCADOR_TIMEOUT"):
            values["timeout"] = float(os.environ["PESCADOR_TIMEOUT"])
        if os.getenv("PESCADOR_MAX_RETRIES"):
            values["max_retries"] = int(os.environ["PESCADOR_MAX_RETRIES"])
        if os.getenv("PESCADOR_RADIUS_MILES"):
            values["radius_miles"] = float(os.environ["PESCADOR_RADIUS_MILES"])

        values.update(overrides)
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "ClientConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)
