"""
Invocation entry points.

Each handler takes a raw event, normalizes it, runs the matching pipeline
operation and returns a JSON-ready dict. Pipeline errors are returned as
``{"error": {"kind": ..., "message": ...}}``; provider payloads and
tracebacks are never included.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .conditions import (
    get_station_by_id,
    get_stations_by_box,
    get_stations_fuzzy,
    get_weather_by_zip,
)
from .config import ClientConfig
from .events import normalize_request
from .exceptions import ConditionsError, MalformedRequest

logger = logging.getLogger(__name__)


def _respond(operation: Callable[[], Any]) -> Dict[str, Any]:
    try:
        return operation().to_dict()
    except ConditionsError as e:
        logger.info(f"Request failed with {e.kind}: {e.message}")
        return {"error": e.to_dict()}
    except Exception:
        logger.exception("Unexpected error while handling request")
        return {
            "error": {"kind": "internal_error", "message": "An unexpected error occurred"}
        }


def _config(config: Optional[ClientConfig]) -> ClientConfig:
    return config or ClientConfig.from_env()


def handle_get_weather_by_zip(
    event: Any, context: Any = None, config: Optional[ClientConfig] = None
) -> Dict[str, Any]:
    """Current weather for ``{"zip": ...}``."""

    def run():
        zip_code = str(normalize_request(event, "zip")["zip"])
        return get_weather_by_zip.sync(zip_code, config=_config(config))

    return _respond(run)


def handle_get_stations_by_box(
    event: Any, context: Any = None, config: Optional[ClientConfig] = None
) -> Dict[str, Any]:
    """Stations around ``{"zip": ..., "radius": ...?}``."""

    def run():
        data = normalize_request(event, "zip")
        return get_stations_by_box.sync(
            str(data["zip"]),
            radius_miles=_radius(data),
            config=_config(config),
        )

    return _respond(run)


def handle_get_station_by_id(
    event: Any, context: Any = None, config: Optional[ClientConfig] = None
) -> Dict[str, Any]:
    """Decimated history for ``{"id": ..., "range": ...}``."""

    def run():
        data = normalize_request(event, "id")
        if data.get("range") is None:
            raise MalformedRequest("Invalid event format - no range found")
        return get_station_by_id.sync(
            str(data["id"]), data["range"], config=_config(config)
        )

    return _respond(run)


def handle_get_stations_fuzzy(
    event: Any, context: Any = None, config: Optional[ClientConfig] = None
) -> Dict[str, Any]:
    """Stations or location options for ``{"location": ..., "radius": ...?}``.

    ``userInput`` is accepted in place of ``location``.
    """

    def run():
        try:
            data = normalize_request(event, "location")
            location = data["location"]
        except MalformedRequest:
            data = normalize_request(event, "userInput")
            location = data["userInput"]
        return get_stations_fuzzy.sync(
            str(location),
            radius_miles=_radius(data),
            config=_config(config),
        )

    return _respond(run)


def _radius(data: Dict[str, Any]) -> Optional[float]:
    raw = data.get("radius")
    if raw is None:
        return None
    try:
        radius = float(raw)
    except (TypeError, ValueError) as e:
        raise MalformedRequest(f"radius must be a number: {raw!r}") from e
    if radius <= 0:
        raise MalformedRequest(f"radius must be positive, got {radius}")
    return radius
