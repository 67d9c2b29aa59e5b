"""Great-circle distance helpers."""

import math
from typing import Optional

from nannymatch.profile.models import Coordinates

EARTH_RADIUS_KM = 6371.0


def calculate_distance(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance between two points in kilometres, rounded to 2 decimals."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return round(EARTH_RADIUS_KM * c, 2)


def distance_between(
    a: Optional[Coordinates], b: Optional[Coordinates]
) -> Optional[float]:
    """Distance in km, or None when either side has no coordinates."""
    if a is None or b is None:
        return None
    return calculate_distance(a, b)
