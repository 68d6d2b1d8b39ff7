"""
Bounding box math for station searches.

USGS takes a bounding box rather than a radius, so a point and a radius in
miles are turned into a box whose longitude span is widened to account for
meridians converging with latitude. This is a planar approximation intended
for radii of a few tens of miles.
"""

import math
from decimal import ROUND_DOWN, Decimal
from typing import Union

from .models import BoundingBox, Coordinate

MILES_PER_DEGREE_LAT = 69.172

# cos(latitude) vanishes at the poles and the longitude offset diverges
MAX_LATITUDE = 85.0

MAX_FRACTION_DIGITS = 6
_QUANTUM = Decimal(1).scaleb(-MAX_FRACTION_DIGITS)

# Offsets must exceed two truncation steps so edges stay ordered around the centre
MIN_OFFSET_DEGREES = 2 * float(_QUANTUM)


def truncate_decimal(value: Union[float, Decimal]) -> Decimal:
    """
    Truncate (never round) a value to at most six fractional digits.

    Values that already have six or fewer fractional digits are returned
    unchanged, without padding.
    """
    number = value if isinstance(value, Decimal) else Decimal(repr(float(value)))
    exponent = number.as_tuple().exponent
    if isinstance(exponent, int) and exponent < -MAX_FRACTION_DIGITS:
        return number.quantize(_QUANTUM, rounding=ROUND_DOWN)
    return number


def miles_per_degree_longitude(latitude: float) -> float:
    """Length in miles of one degree of longitude at the given latitude."""
    return math.cos(math.radians(latitude)) * MILES_PER_DEGREE_LAT


def compute_bounding_box(coordinate: Coordinate, radius_miles: float = 10) -> BoundingBox:
    """
    Compute a search box extending ``radius_miles`` from a coordinate.

    Args:
        coordinate: Centre of the search
        radius_miles: Half-width of the box in miles (must be positive)

    Returns:
        BoundingBox with west/north/south/east edges

    Raises:
        ValueError: If the radius is not positive or too small to resolve at
            six decimal places, or the coordinate lies outside the supported
            latitude/longitude range
    """
    lat = float(coordinate.latitude)
    lon = float(coordinate.longitude)

    if not radius_miles > 0:
        raise ValueError(f"radius_miles must be positive, got {radius_miles}")
    if not abs(lat) <= MAX_LATITUDE:
        raise ValueError(
            f"Latitude {lat} is outside the supported range of +/-{MAX_LATITUDE} degrees"
        )
    if not abs(lon) <= 180.0:
        raise ValueError(f"Longitude {lon} is outside the range of +/-180 degrees")

    lat_offset = radius_miles / MILES_PER_DEGREE_LAT
    lon_offset = radius_miles / miles_per_degree_longitude(lat)
    if min(lat_offset, lon_offset) < MIN_OFFSET_DEGREES:
        raise ValueError(
            f"radius_miles {radius_miles} is too small to resolve at "
            f"{MAX_FRACTION_DIGITS} decimal places"
        )

    return BoundingBox(
        west=truncate_decimal(lon - lon_offset),
        north=truncate_decimal(lat + lat_offset),
        south=truncate_decimal(lat - lat_offset),
        east=truncate_decimal(lon + lon_offset),
    )
