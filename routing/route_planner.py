"""Route planning: exact OSRM routes with great-circle fallback."""
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from loguru import logger

from core.exceptions import InsufficientPoints, RoutingError, UnknownRoutePoint
from models.entities import RoutePoint, RouteResult, RouteType
from routing.distance import sum_path_distance_km
from routing.osrm_client import OSRMRouteClient


def _new_route_id() -> str:
    return f"route-{uuid.uuid4().hex}"


class RoutePlanner:
    """
    Builds RouteResults for an ordered list of points.

    With ``prefer_exact`` a single OSRM request is made; any failure falls
    back to the estimated route, so planning only fails on its precondition.
    """

    def __init__(self, osrm_client: Optional[OSRMRouteClient] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.osrm_client = osrm_client or OSRMRouteClient()
        self._clock = clock

    def plan_route(self, points: Sequence[RoutePoint], prefer_exact: bool = True) -> RouteResult:
        points = list(points)
        if len(points) < 2:
            raise InsufficientPoints(len(points))

        if prefer_exact:
            try:
                return self.exact_route(points)
            except RoutingError as e:
                logger.warning(f"OSRM routing failed, using great-circle estimate: {e}")
        return self.estimated_route(points)

    def exact_route(self, points: List[RoutePoint]) -> RouteResult:
        route = self.osrm_client.get_route(points)
        return RouteResult(
            id=_new_route_id(),
            points=points,
            distance_km=route['distance_m'] / 1000,
            duration_min=route['duration_s'] / 60,
            type=RouteType.EXACT,
            geometry=route['coordinates'],
            created_at=self._clock(),
        )

    def estimated_route(self, points: List[RoutePoint]) -> RouteResult:
        return RouteResult(
            id=_new_route_id(),
            points=points,
            distance_km=sum_path_distance_km(points),
            type=RouteType.ESTIMATED,
            geometry=[(point.lat, point.lng) for point in points],
            created_at=self._clock(),
        )


def resolve_route_points(refs: Sequence[str], store) -> List[RoutePoint]:
    """
    Turn picker references into RoutePoints.

    ``unit:<id>`` points at a stored unit, ``city:<name>`` at a highlighted
    city (case-insensitive).
    """
    points = []
    for ref in refs:
        kind, _, key = ref.partition(":")
        if kind == "unit":
            unit = store.get_unit(key)
            if unit is None:
                raise UnknownRoutePoint(ref)
            points.append(RoutePoint(lat=unit.lat, lng=unit.lng, unit_id=unit.id, label=unit.display_name))
        elif kind == "city":
            city = store.get_highlighted_city(key)
            if city is None:
                raise UnknownRoutePoint(ref)
            points.append(RoutePoint(lat=city.lat, lng=city.lng, label=city.name))
        else:
            raise UnknownRoutePoint(ref)
    return points
