"""Region validation for the target state (Paraná).

The check is a bounding rectangle plus a few exclusion rectangles near the
coastline and the neighbouring borders. It is a heuristic spatial filter, not
a point-in-polygon test against the real state boundary: some border points
are accepted or rejected wrongly and that is an accepted approximation.
"""
from typing import Dict, Optional, Tuple

from shapely.geometry import Polygon, box

from configurations.config import Config

BOUNDS: Dict[str, float] = Config.REGION_BOUNDS
EXCLUSION_ZONES: Dict[str, Tuple] = Config.REGION_EXCLUSION_ZONES


def _in_open_range(value: float, low: Optional[float], high: Optional[float]) -> bool:
    if low is not None and not value > low:
        return False
    if high is not None and not value < high:
        return False
    return True


def excluded_by(lat: float, lng: float) -> Optional[str]:
    """Return the name of the exclusion zone containing the point, if any."""
    for name, (lat_min, lat_max, lng_min, lng_max) in EXCLUSION_ZONES.items():
        if _in_open_range(lat, lat_min, lat_max) and _in_open_range(lng, lng_min, lng_max):
            return name
    return None


def in_bounding_box(lat: float, lng: float) -> bool:
    return (
        BOUNDS["south"] <= lat <= BOUNDS["north"]
        and BOUNDS["west"] <= lng <= BOUNDS["east"]
    )


def is_inside_region(lat: float, lng: float) -> bool:
    """True if (lat, lng) passes the bounding box and no exclusion zone claims it."""
    if not in_bounding_box(lat, lng):
        return False
    return excluded_by(lat, lng) is None


def region_bounds() -> Dict[str, float]:
    return dict(BOUNDS)


def region_centroid() -> Tuple[float, float]:
    """Centre of the bounding rectangle as (lat, lng)."""
    return (
        (BOUNDS["north"] + BOUNDS["south"]) / 2,
        (BOUNDS["east"] + BOUNDS["west"]) / 2,
    )


def region_polygon() -> Polygon:
    """Bounding rectangle as a shapely polygon in (lng, lat) order."""
    return box(BOUNDS["west"], BOUNDS["south"], BOUNDS["east"], BOUNDS["north"])
