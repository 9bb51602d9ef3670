"""Coordinate normalization to the resolution of the backing basin datasets."""
import math
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP

from .models import Coordinate
from ..exceptions import InvalidCoordinate

# Resolution of the local basin depth grids (degrees)
BASIN_DATA_SPACING = 0.01

# Resolution used for ArcGIS basin-model queries (degrees)
ARCGIS_ROUND_MODEL = 0.02


def round_to(value: float, granularity: float) -> float:
    """Round value to the nearest multiple of granularity, ties away from zero."""
    step = Decimal(str(granularity))
    steps = (Decimal(str(value)) / step).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return float(steps * step)


def clamp_to_grid(value: float, granularity: float, limit: float) -> float:
    """Pull a rounded value back onto the outermost grid line within +/-limit."""
    if abs(value) <= limit:
        return value
    step = Decimal(str(granularity))
    steps = (Decimal(limit) / step).to_integral_value(rounding=ROUND_DOWN)
    return math.copysign(float(steps * step), value)


def validate_coordinate(latitude: float, longitude: float) -> None:
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise InvalidCoordinate(latitude, longitude, "coordinates must be numeric")
    if not isinstance(latitude, (int, float)) or not isinstance(longitude, (int, float)):
        raise InvalidCoordinate(latitude, longitude, "coordinates must be numeric")
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinate(latitude, longitude, "coordinates must be finite")
    if not -90 <= latitude <= 90:
        raise InvalidCoordinate(latitude, longitude, "latitude must be between -90 and 90 degrees")
    if not -180 <= longitude <= 180:
        raise InvalidCoordinate(latitude, longitude, "longitude must be between -180 and 180 degrees")


def normalize(latitude: float, longitude: float, granularity: float) -> Coordinate:
    """
    Validate and snap a coordinate onto a dataset grid.

    Region and value lookups are keyed on the rounded coordinate, so the
    granularity must match the dataset being queried exactly. A value that
    rounds past a pole or the antimeridian is pulled back to the last grid
    line inside the valid range.

    Raises:
        InvalidCoordinate: if either axis is non-finite or out of range, or
            the granularity is not a positive finite number
    """
    validate_coordinate(latitude, longitude)
    if not (isinstance(granularity, (int, float)) and math.isfinite(granularity) and granularity > 0):
        raise InvalidCoordinate(latitude, longitude, f"invalid granularity {granularity!r}")

    return Coordinate(
        latitude=clamp_to_grid(round_to(latitude, granularity), granularity, 90),
        longitude=clamp_to_grid(round_to(longitude, granularity), granularity, 180),
    )
