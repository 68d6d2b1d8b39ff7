"""
USGS Water Services instantaneous-values client and payload parsing.

API Documentation:
- https://waterservices.usgs.gov/docs/instantaneous-values/
"""

import logging
from typing import Any, Dict, List, Optional

from .client import BaseClient
from .config import ClientConfig
from .exceptions import UpstreamError
from .models import (
    FLOW_RATE_CODE,
    GAGE_HEIGHT_CODE,
    BoundingBox,
    Coordinate,
    RawTimeSeriesRecord,
    TimeSeriesValue,
)

logger = logging.getLogger(__name__)

PARAMETER_CODES = f"{FLOW_RATE_CODE},{GAGE_HEIGHT_CODE}"
SITE_TYPES = "LK,ST"


class USGSClient(BaseClient):
    """Client for the USGS ``nwis/iv`` service."""

    service_name = "USGS"

    def __init__(self, config: Optional[ClientConfig] = None):
        super().__init__(config)
        self.base_url = self.config.usgs_url

    async def get_sites_in_box(self, box: BoundingBox) -> List[RawTimeSeriesRecord]:
        """
        Get the latest readings for active lake and stream sites in a box.

        Args:
            box: Search region

        Returns:
            One record per site and parameter
        """
        params = {
            "format": "json",
            "bBox": box.to_query(),
            "parameterCd": PARAMETER_CODES,
            "siteStatus": "active",
            "siteType": SITE_TYPES,
        }
        logger.debug(f"Querying USGS sites in bBox={params['bBox']}")
        data = await self._make_request(self.base_url, params)
        return parse_time_series(data)

    async def get_station_history(self, site_id: str, days: int) -> List[RawTimeSeriesRecord]:
        """
        Get a station's readings over the last ``days`` days.

        Args:
            site_id: USGS site number (e.g. '08155500')
            days: Length of the period in days

        Returns:
            One record per parameter reported by the site
        """
        if int(days) < 1:
            raise ValueError(f"days must be at least 1, got {days}")

        params = {
            "format": "json",
            "sites": site_id,
            "siteStatus": "active",
            "period": f"P{int(days)}D",
        }
        logger.debug(f"Querying USGS history for site {site_id} over {params['period']}")
        data = await self._make_request(self.base_url, params)
        return parse_time_series(data)


def _site_type(source_info: Dict[str, Any]) -> str:
    properties = source_info.get("siteProperty") or []
    for prop in properties:
        if prop.get("name") == "siteTypeCd":
            return str(prop.get("value", ""))
    # Older payloads list the site type first without naming it
    if properties:
        return str(properties[0].get("value", ""))
    return ""


def _parse_value(raw: Any, no_data: Any) -> Optional[float]:
    if raw is None:
        return None
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return None
    if no_data is not None and number == float(no_data):
        return None
    return number


def parse_time_series_entry(entry: Dict[str, Any]) -> RawTimeSeriesRecord:
    """Parse one ``timeSeries`` element of a Water Services JSON response."""
    source = entry["sourceInfo"]
    variable = entry["variable"]
    geo = source["geoLocation"]["geogLocation"]
    no_data = variable.get("noDataValue")

    blocks = entry.get("values") or []
    samples = (blocks[0].get("value") or []) if blocks else []

    return RawTimeSeriesRecord(
        site_name=source["siteName"],
        site_code=source["siteCode"][0]["value"],
        coordinate=Coordinate(
            latitude=float(geo["latitude"]), longitude=float(geo["longitude"])
        ),
        site_type=_site_type(source),
        variable_code=variable["variableCode"][0]["value"],
        variable_name=variable.get("variableName", ""),
        values=tuple(
            TimeSeriesValue(
                timestamp=sample.get("dateTime", ""),
                value=_parse_value(sample.get("value"), no_data),
            )
            for sample in samples
        ),
    )


def parse_time_series(data: Any) -> List[RawTimeSeriesRecord]:
    """
    Parse a Water Services JSON response into raw records.

    Raises:
        UpstreamError: If the response lacks the ``value.timeSeries`` list
    """
    try:
        entries = data["value"]["timeSeries"]
    except (KeyError, TypeError) as e:
        raise UpstreamError("USGS response is missing timeSeries data") from e

    records = []
    for entry in entries:
        try:
            records.append(parse_time_series_entry(entry))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed USGS time series entry: {e}")
            continue

    logger.debug(f"Parsed {len(records)} of {len(entries)} USGS time series")
    return records
