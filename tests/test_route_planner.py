"""Tests for the OSRM client and route planner."""
from datetime import datetime

import pytest
import requests

from conftest import osrm_payload
from core.exceptions import InsufficientPoints, RoutingError, UnknownRoutePoint
from core.store import UnitStore
from models.entities import (
    CompanyType,
    GeocoderSource,
    HighlightedCity,
    RoutePoint,
    RouteType,
    Unit,
)
from routing.distance import great_circle_distance_km
from routing.osrm_client import OSRMRouteClient
from routing.route_planner import RoutePlanner, resolve_route_points

OSRM = "router.project-osrm.org"
CURITIBA = RoutePoint(lat=-25.43, lng=-49.27)
PONTA_GROSSA = RoutePoint(lat=-25.09, lng=-50.16)


def make_planner(session):
    return RoutePlanner(OSRMRouteClient(session=session), clock=lambda: datetime(2024, 5, 10, 12, 0))


class TestOSRMRouteClient:
    def test_coordinates_are_sent_lng_first(self, session):
        session.add(OSRM, osrm_payload(105000, 5400, [[-49.27, -25.43], [-50.16, -25.09]]))
        client = OSRMRouteClient(session=session)

        route = client.get_route([CURITIBA, PONTA_GROSSA])

        call = session.calls[0]
        assert call['url'].endswith("/route/v1/driving/-49.27,-25.43;-50.16,-25.09")
        assert call['params'] == {'overview': 'full', 'geometries': 'geojson'}
        assert route['coordinates'] == [(-25.43, -49.27), (-25.09, -50.16)]

    def test_error_code_raises_routing_error(self, session):
        session.add(OSRM, {"code": "NoRoute", "message": "Impossible route between points"})
        with pytest.raises(RoutingError):
            OSRMRouteClient(session=session).get_route([CURITIBA, PONTA_GROSSA])

    def test_http_error_raises_routing_error(self, session):
        session.add(OSRM, status_code=502)
        with pytest.raises(RoutingError) as exc_info:
            OSRMRouteClient(session=session).get_route([CURITIBA, PONTA_GROSSA])
        assert exc_info.value.provider == "osrm"


class TestRoutePlanner:
    def test_exact_route(self, session):
        session.add(OSRM, osrm_payload(105000, 5400, [[-49.27, -25.43], [-49.8, -25.2], [-50.16, -25.09]]))
        route = make_planner(session).plan_route([CURITIBA, PONTA_GROSSA])

        assert route.type == RouteType.EXACT
        assert route.distance_km == pytest.approx(105.0)
        assert route.duration_min == pytest.approx(90.0)
        assert len(route.geometry) == 3
        assert route.created_at == datetime(2024, 5, 10, 12, 0)

    def test_osrm_404_falls_back_to_estimate(self, session):
        session.add(OSRM, status_code=404)
        route = make_planner(session).plan_route([CURITIBA, PONTA_GROSSA])

        assert route.type == RouteType.ESTIMATED
        assert route.duration_min is None
        assert route.distance_km == pytest.approx(great_circle_distance_km(CURITIBA, PONTA_GROSSA))
        assert route.geometry == [(-25.43, -49.27), (-25.09, -50.16)]

    def test_network_failure_falls_back_to_estimate(self, session):
        session.add(OSRM, error=requests.ConnectionError("down"))
        assert make_planner(session).plan_route([CURITIBA, PONTA_GROSSA]).type == RouteType.ESTIMATED

    @pytest.mark.parametrize("payload", [
        {"code": "Ok", "routes": []},
        {"code": "Ok", "routes": {"unexpected": 1}},
        {"code": "Ok"},
        osrm_payload(105000, 5400, []),
        {"code": "Ok", "routes": [{"distance": 1.0, "duration": 1.0}]},
        {"code": "Ok", "routes": ["not a route"]},
    ])
    def test_unusable_osrm_payload_falls_back_to_estimate(self, session, payload):
        """Empty or malformed OSRM answers never surface; the route is estimated instead."""
        session.add(OSRM, payload)
        route = make_planner(session).plan_route([CURITIBA, PONTA_GROSSA])

        assert route.type == RouteType.ESTIMATED
        assert route.duration_min is None
        assert route.distance_km == pytest.approx(great_circle_distance_km(CURITIBA, PONTA_GROSSA))

    def test_estimated_only_makes_no_calls(self, session):
        route = make_planner(session).plan_route([CURITIBA, PONTA_GROSSA], prefer_exact=False)
        assert route.type == RouteType.ESTIMATED
        assert session.calls == []

    @pytest.mark.parametrize("points", [[], [CURITIBA]])
    def test_needs_two_points_before_any_call(self, session, points):
        with pytest.raises(InsufficientPoints):
            make_planner(session).plan_route(points)
        assert session.calls == []

    def test_each_route_gets_its_own_id(self, session):
        session.add(OSRM, status_code=404)
        session.add(OSRM, status_code=404)
        planner = make_planner(session)
        store = UnitStore()

        first = planner.plan_route([CURITIBA, PONTA_GROSSA])
        second = planner.plan_route([CURITIBA, PONTA_GROSSA])
        store.add_route(first)
        store.add_route(second)

        assert first.id != second.id
        assert [r.id for r in store.list_routes()] == [first.id, second.id]


class TestResolveRoutePoints:
    def setup_method(self):
        self.store = UnitStore()
        self.store.add_unit(Unit(
            id="u1", cnpj="11222333000181", legal_name="BELLO MOVEIS LTDA", trade_name="Bello Curitiba",
            street="Rua XV de Novembro", number="100", district="Centro", municipality="Curitiba",
            uf="PR", cep="80020-310", lat=-25.43, lng=-49.27,
            geocoder_used=GeocoderSource.GOOGLE, company=CompanyType.BELLO,
        ))
        self.store.add_highlighted_city(HighlightedCity("Ponta Grossa", -25.09, -50.16))

    def test_units_and_cities(self):
        points = resolve_route_points(["unit:u1", "city:ponta grossa"], self.store)
        assert points == [
            RoutePoint(lat=-25.43, lng=-49.27, unit_id="u1", label="Bello Curitiba"),
            RoutePoint(lat=-25.09, lng=-50.16, label="Ponta Grossa"),
        ]

    @pytest.mark.parametrize("ref", ["unit:missing", "city:Londrina", "Curitiba"])
    def test_unknown_refs(self, ref):
        with pytest.raises(UnknownRoutePoint):
            resolve_route_points([ref], self.store)
