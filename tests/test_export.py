"""Tests for GeoJSON/JSON export, statistics and the Folium map."""
import json
import os
from datetime import datetime

import folium
import pytest

from models.entities import (
    CompanyType,
    GeocoderSource,
    HighlightedCity,
    PrecisionTier,
    RoutePoint,
    RouteResult,
    RouteType,
    Unit,
)
from services.scoring import score_unit
from services.stats import review_queue, summarize_units
from visualization.export_to_geojson import UnitExporter
from visualization.folium_map import UnitMapGenerator


def make_unit(unit_id, company=CompanyType.PLUMA, municipality="Curitiba", **overrides):
    fields = dict(
        id=unit_id, cnpj="11222333000181", legal_name=f"{company.value} {unit_id} LTDA",
        street="Rua XV de Novembro", number="100", district="Centro",
        municipality=municipality, uf="PR", cep="80020-310",
        lat=-25.43, lng=-49.27, geocoder_used=GeocoderSource.GOOGLE, company=company,
        location_type=PrecisionTier.ROOFTOP, partial_match=False, inside_region=True,
        municipality_match=True, cep_match=True,
    )
    fields.update(overrides)
    unit = Unit(**fields)
    unit.score = score_unit(unit)
    return unit


@pytest.fixture
def units():
    return [
        make_unit("u1"),
        make_unit("u2", CompanyType.BELLO, "Londrina", lat=-23.31, lng=-51.16,
                  location_type=PrecisionTier.RANGE_INTERPOLATED, cep_match=False),
        make_unit("u3", CompanyType.LEVO, "Maringá", lat=-23.42, lng=-51.94,
                  location_type=PrecisionTier.APPROXIMATE, cep_match=False),
    ]


@pytest.fixture
def routes():
    points = [RoutePoint(-25.43, -49.27), RoutePoint(-25.09, -50.16)]
    return [
        RouteResult(id="r1", points=points, distance_km=97.0, type=RouteType.ESTIMATED,
                    created_at=datetime(2024, 5, 10)),
        RouteResult(id="r2", points=points, distance_km=105.0, duration_min=90.0, type=RouteType.EXACT,
                    created_at=datetime(2024, 5, 10), geometry=[(-25.43, -49.27), (-25.2, -49.8), (-25.09, -50.16)]),
    ]


class TestUnitExporter:
    def test_units_geojson_points(self, tmp_path, units):
        geojson = UnitExporter(str(tmp_path)).units_geojson(units)

        assert geojson["type"] == "FeatureCollection"
        assert len(geojson["features"]) == 3
        first = geojson["features"][0]
        assert first["geometry"]["type"] == "Point"
        assert first["geometry"]["coordinates"] == pytest.approx([-49.27, -25.43])
        assert first["properties"]["company"] == "PLUMA"
        assert first["properties"]["score"] == 100

    def test_export_files(self, tmp_path, units, routes):
        exporter = UnitExporter(str(tmp_path))

        units_path = exporter.export_units_geojson(units)
        routes_path = exporter.export_routes_geojson(routes)
        state_path = exporter.export_state_json({"units": [u.to_dict() for u in units]})

        assert os.path.dirname(units_path) == str(tmp_path)
        with open(routes_path, encoding="utf-8") as f:
            route_features = json.load(f)["features"]
        assert [feat["geometry"]["type"] for feat in route_features] == ["LineString", "LineString"]
        assert len(route_features[1]["geometry"]["coordinates"]) == 3
        assert route_features[0]["geometry"]["coordinates"][0] == pytest.approx([-49.27, -25.43])
        with open(state_path, encoding="utf-8") as f:
            assert len(json.load(f)["units"]) == 3

    def test_empty_export(self, tmp_path):
        assert UnitExporter(str(tmp_path)).units_geojson([])["features"] == []
        assert UnitExporter(str(tmp_path)).routes_geojson([])["features"] == []


def test_summary(units):
    summary = summarize_units(units)

    assert summary["total"] == 3
    assert summary["score_bands"] == {"excellent": 1, "acceptable": 1, "needs_review": 1}
    assert summary["by_company"] == {"PLUMA": 1, "BELLO": 1, "LEVO": 1}
    assert summary["average_score"] == pytest.approx(round((100 + 60 + 40) / 3, 1))


def test_summary_of_nothing():
    summary = summarize_units([])
    assert summary["total"] == 0
    assert summary["average_score"] == 0.0


def test_review_queue_worst_first(units):
    assert [u.id for u in review_queue(units)] == ["u3", "u2", "u1"]


def test_unit_map(tmp_path, units, routes):
    generator = UnitMapGenerator()
    m = generator.create_unit_map(units, routes=routes, cities=[HighlightedCity("Ponta Grossa", -25.09, -50.16)])

    assert isinstance(m, folium.Map)
    html = m.get_root().render()
    assert "PLUMA u1 LTDA" in html
    assert "Ponta Grossa" in html
    assert "status-warning" in html
    assert "11.222.333/0001-81" in html
    assert "11222333000181" not in html

    output = tmp_path / "map.html"
    generator.save_map(m, str(output))
    assert output.exists()


def test_unit_map_outlines_region():
    html = UnitMapGenerator().create_unit_map([]).get_root().render()

    assert "Polygon" in html
    assert "fitBounds" in html
