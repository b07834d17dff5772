"""Great-circle (haversine) distances on a spherical Earth."""
import math
from typing import Sequence, Tuple, Union

from core.exceptions import InsufficientPoints
from models.entities import RoutePoint

EARTH_RADIUS_KM = 6371.0

PointLike = Union[Tuple[float, float], RoutePoint]


def _lat_lng(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, tuple):
        return point
    return point.lat, point.lng


def great_circle_distance_km(a: PointLike, b: PointLike) -> float:
    """Haversine distance in km between two (lat, lng) points in degrees."""
    lat1, lng1 = _lat_lng(a)
    lat2, lng2 = _lat_lng(b)

    # Convert to radians
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    h = math.sin(dlat / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def sum_path_distance_km(points: Sequence[PointLike]) -> float:
    """Sum of consecutive great-circle legs along *points*, in order."""
    if len(points) < 2:
        raise InsufficientPoints(len(points))
    total = 0.0
    for start, end in zip(points, points[1:]):
        total += great_circle_distance_km(start, end)
    return total
