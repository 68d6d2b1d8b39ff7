"""
Synchronous wrapper functions and utilities for pescador.

This module provides synchronous versions of the async pipeline operations
for users who prefer blocking calls or cannot use async/await syntax. Under
the hood, these functions use asyncio to run async code synchronously.

Usage:
    # Instead of this async code:
    stations = await get_stations_by_box("78704", config=config)

    # Use this sync code:
    from pescador.sync import get_stations_by_box_sync
    stations = get_stations_by_box_sync("78704", config=config)
"""

import asyncio
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar, Union

if TYPE_CHECKING:
    from .config import ClientConfig
    from .models import (
        Conditions,
        CurrentWeather,
        LocationOptions,
        StationCollection,
        StationWithRange,
    )

R = TypeVar("R")


class AsyncSyncBridge:
    """Runs async pipeline code from synchronous callers."""

    @staticmethod
    def run_async(
        async_fn: Callable[..., Awaitable[R]],
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> R:
        """Run an async function synchronously.

        Args:
            async_fn: Async function to run
            args: Positional arguments for the function
            kwargs: Keyword arguments for the function

        Returns:
            Result of running the async function

        Raises:
            RuntimeError: If called from within an existing event loop
        """
        if kwargs is None:
            kwargs = {}

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError(
                "Cannot use sync version from within an existing asyncio event loop. "
                "Use the async version instead."
            )

        return asyncio.run(async_fn(*args, **kwargs))


def get_stations_by_box_sync(
    zip_code: str,
    radius_miles: Optional[float] = None,
    config: Optional["ClientConfig"] = None,
    timeout: Optional[float] = None,
) -> "StationCollection":
    """Synchronous version of get_stations_by_box.

    Examples:
        >>> stations = get_stations_by_box_sync("78704")
        >>> df = stations.to_pandas()
    """
    from .conditions import get_stations_by_box

    return AsyncSyncBridge.run_async(
        get_stations_by_box,
        args=(zip_code,),
        kwargs={"radius_miles": radius_miles, "config": config, "timeout": timeout},
    )


def get_stations_fuzzy_sync(
    location: str,
    radius_miles: Optional[float] = None,
    config: Optional["ClientConfig"] = None,
    timeout: Optional[float] = None,
) -> Union["StationCollection", "LocationOptions"]:
    """Synchronous version of get_stations_fuzzy."""
    from .conditions import get_stations_fuzzy

    return AsyncSyncBridge.run_async(
        get_stations_fuzzy,
        args=(location,),
        kwargs={"radius_miles": radius_miles, "config": config, "timeout": timeout},
    )


def get_station_by_id_sync(
    site_id: str,
    range_days: int,
    config: Optional["ClientConfig"] = None,
    timeout: Optional[float] = None,
) -> "StationWithRange":
    """Synchronous version of get_station_by_id.

    Examples:
        >>> station = get_station_by_id_sync("08155500", 3)
        >>> station.values.to_pandas().head()
    """
    from .conditions import get_station_by_id

    return AsyncSyncBridge.run_async(
        get_station_by_id,
        args=(site_id, range_days),
        kwargs={"config": config, "timeout": timeout},
    )


def get_weather_by_zip_sync(
    zip_code: str,
    config: Optional["ClientConfig"] = None,
    timeout: Optional[float] = None,
) -> "CurrentWeather":
    """Synchronous version of get_weather_by_zip."""
    from .conditions import get_weather_by_zip

    return AsyncSyncBridge.run_async(
        get_weather_by_zip,
        args=(zip_code,),
        kwargs={"config": config, "timeout": timeout},
    )


def get_conditions_sync(
    zip_code: str,
    radius_miles: Optional[float] = None,
    config: Optional["ClientConfig"] = None,
    timeout: Optional[float] = None,
) -> "Conditions":
    """Synchronous version of get_conditions."""
    from .conditions import get_conditions

    return AsyncSyncBridge.run_async(
        get_conditions,
        args=(zip_code,),
        kwargs={"radius_miles": radius_miles, "config": config, "timeout": timeout},
    )


__all__ = [
    "AsyncSyncBridge",
    "get_stations_by_box_sync",
    "get_stations_fuzzy_sync",
    "get_station_by_id_sync",
    "get_weather_by_zip_sync",
    "get_conditions_sync",
]
