"""
Reduction of raw USGS time series into station summaries and chart series.

The network reports gage height and flow rate as separate time series even
when both come from the same physical stream gauge, and the shape of the data
differs between lake and stream sites. These functions normalize both cases.
"""

import logging
import math
from typing import Dict, Iterable, List, Sequence

from .models import (
    FLOW_RATE_CODE,
    GAGE_HEIGHT_CODE,
    DecimatedSeries,
    RawTimeSeriesRecord,
    StationCollection,
    StationSummary,
    TimePoint,
    TimeSeriesValue,
)

logger = logging.getLogger(__name__)

# Target number of intervals per series; a series keeps at most MAX_POINTS
TARGET_INTERVALS = 30
MAX_POINTS = TARGET_INTERVALS + 1


def station_key(name: str) -> str:
    """Merge key for a station name (whitespace trimmed, case folded)."""
    return " ".join(name.split()).casefold()


def aggregate_stations(records: Iterable[RawTimeSeriesRecord]) -> StationCollection:
    """
    Group raw per-variable records into lake and stream summaries.

    Lakes are appended as they come. Stream records sharing a site name are
    merged into one summary carrying gage height and/or flow rate; the first
    value seen for each field is kept.
    """
    collection = StationCollection()
    streams_by_key: Dict[str, StationSummary] = {}

    for record in records:
        if not record.values:
            logger.debug(f"Skipping {record.site_code} ({record.variable_code}): no samples")
            continue

        reading = record.values[0].value

        if record.is_lake:
            collection.lakes.append(
                StationSummary(
                    name=record.site_name,
                    external_id=record.site_code,
                    coordinate=record.coordinate,
                    gage_height=reading,
                )
            )
            continue

        field_name = "gage_height" if record.is_gage_height else "flow_rate"
        key = station_key(record.site_name)
        existing = streams_by_key.get(key)

        if existing is None:
            summary = StationSummary(
                name=record.site_name,
                external_id=record.site_code,
                coordinate=record.coordinate,
            )
            setattr(summary, field_name, reading)
            streams_by_key[key] = summary
            collection.streams.append(summary)
        elif getattr(existing, field_name) is None:
            setattr(existing, field_name, reading)

    logger.debug(
        f"Aggregated {len(collection.lakes)} lakes and {len(collection.streams)} streams"
    )
    return collection


def sample_interval(length: int) -> int:
    """
    Stride used to decimate a series of ``length`` samples.

    Nominally ``length // 30``. Short series (fewer than 30 samples) keep
    every point, and the stride never drops below ``ceil(length / 31)`` so a
    decimated series holds at most 31 points.
    """
    if length <= 0:
        return 1
    return max(length // TARGET_INTERVALS, math.ceil(length / MAX_POINTS), 1)


def _decimate(values: Sequence[TimeSeriesValue], base_interval: int) -> List[TimePoint]:
    interval = max(base_interval, sample_interval(len(values)))
    return [
        TimePoint(timestamp=v.timestamp, value=v.value)
        for i, v in enumerate(values)
        if i == 0 or i % interval == 0
    ]


def sample_time_series(records: Sequence[RawTimeSeriesRecord]) -> DecimatedSeries:
    """
    Decimate one station's raw series for charting.

    The stride comes from the first record's length. Streams route each
    record by parameter code into ``gage`` or ``flow``; lakes use only the
    first record and report everything as ``gage``.

    Args:
        records: All raw records for a single station

    Returns:
        DecimatedSeries with at most 31 points per populated series
    """
    series = DecimatedSeries()
    if not records:
        return series

    first = records[0]
    base_interval = sample_interval(len(first.values))

    if first.is_lake:
        series.gage.extend(_decimate(first.values, base_interval))
        return series

    targets = {GAGE_HEIGHT_CODE: series.gage, FLOW_RATE_CODE: series.flow}
    for record in records:
        target = targets.get(record.variable_code)
        if target is None:
            logger.debug(f"Ignoring unsupported parameter {record.variable_code}")
            continue
        if target:
            # a second sensor for the same parameter would break the point budget
            logger.debug(f"Ignoring additional {record.variable_code} series")
            continue
        target.extend(_decimate(record.values, base_interval))

    return series
