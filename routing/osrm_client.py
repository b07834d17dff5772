"""OSRM road-routing client."""
from typing import Dict, List, Optional, Sequence

import requests

from configurations.config import Config
from core.exceptions import InsufficientPoints, RoutingError
from models.entities import RoutePoint


class OSRMRouteClient:
    """
    Talks to the OSRM /route service.

    Takes points as (lat, lng), sends them as OSRM's ``lng,lat`` list and
    returns geometry converted back to (lat, lng). Every failure surfaces as
    RoutingError.
    """

    def __init__(self, osrm_url: str = Config.OSRM_URL, profile: str = Config.OSRM_PROFILE,
                 session: Optional[requests.Session] = None, timeout: int = Config.HTTP_TIMEOUT_SECONDS):
        self.osrm_url = osrm_url.rstrip('/')
        self.profile = profile
        self.session = session or requests.Session()
        self.timeout = timeout

    def format_coordinates(self, points: Sequence[RoutePoint]) -> str:
        """Convert points to OSRM format 'lng,lat;lng,lat;...'"""
        return ";".join(f"{point.lng},{point.lat}" for point in points)

    def get_route(self, points: Sequence[RoutePoint]) -> Dict:
        """
        Request one route through all points in order.

        Returns:
            {
                "distance_m": float,
                "duration_s": float,
                "coordinates": [(lat, lng), ...],
            }
        """
        if len(points) < 2:
            raise InsufficientPoints(len(points))

        url = f"{self.osrm_url}/route/v1/{self.profile}/{self.format_coordinates(points)}"
        params = {
            'overview': 'full',
            'geometries': 'geojson',
        }

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise RoutingError("osrm", f"request failed: {e}") from e
        except ValueError as e:
            raise RoutingError("osrm", f"invalid JSON: {e}") from e

        return self._process_osrm_response(data)

    def _process_osrm_response(self, data: Dict) -> Dict:
        if not isinstance(data, dict):
            raise RoutingError("osrm", "unexpected payload")
        if data.get('code', 'Ok') != 'Ok':
            raise RoutingError("osrm", data.get('message', data.get('code', 'Unknown error')))
        routes = data.get('routes')
        if not isinstance(routes, list) or not routes:
            raise RoutingError("osrm", "response without routes")

        try:
            route = routes[0]
            coordinates: List = [(float(lat), float(lng)) for lng, lat in route['geometry']['coordinates']]
            result = {
                'distance_m': float(route['distance']),
                'duration_s': float(route['duration']),
                'coordinates': coordinates,
            }
        except (KeyError, TypeError, ValueError) as e:
            raise RoutingError("osrm", f"malformed route: {e}") from e

        if len(coordinates) < 2:
            raise RoutingError("osrm", "route without geometry")
        return result
