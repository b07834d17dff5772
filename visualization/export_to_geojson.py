"""Export units and routes to GeoJSON, and store state to JSON."""
import json
import os
from typing import List, Optional

import geopandas as gpd
from loguru import logger
from shapely.geometry import LineString, Point

from configurations.config import Config
from models.entities import RouteResult, Unit

WGS84 = "EPSG:4326"


class UnitExporter:
    def __init__(self, export_dir: Optional[str] = None):
        self.export_dir = export_dir or Config.EXPORT_DIR
        os.makedirs(self.export_dir, exist_ok=True)

    def units_to_geodataframe(self, units: List[Unit]) -> gpd.GeoDataFrame:
        """One Point feature per unit (lng, lat order)."""
        features = [
            {
                'id': unit.id,
                'cnpj': unit.cnpj,
                'legal_name': unit.legal_name,
                'trade_name': unit.trade_name,
                'company': unit.company.value,
                'status': unit.status.value,
                'score': unit.score,
                'municipality': unit.municipality,
                'address': f"{unit.street}, {unit.number}",
                'geometry': Point(unit.lng, unit.lat),
            }
            for unit in units
        ]
        gdf = gpd.GeoDataFrame(features, geometry='geometry', crs=WGS84) if features else \
            gpd.GeoDataFrame(columns=['id', 'geometry'], geometry='geometry', crs=WGS84)
        logger.info(f"Prepared {len(features)} units for export")
        return gdf

    def routes_to_geodataframe(self, routes: List[RouteResult]) -> gpd.GeoDataFrame:
        """One LineString feature per route, built from its geometry (or its points)."""
        features = []
        for route in routes:
            coords = route.geometry or [(point.lat, point.lng) for point in route.points]
            features.append({
                'id': route.id,
                'type': route.type.value,
                'distance_km': round(route.distance_km, 3),
                'duration_min': round(route.duration_min, 1) if route.duration_min is not None else None,
                'num_points': len(route.points),
                'created_at': route.created_at.isoformat(),
                'geometry': LineString([(lng, lat) for lat, lng in coords]),
            })
        gdf = gpd.GeoDataFrame(features, geometry='geometry', crs=WGS84) if features else \
            gpd.GeoDataFrame(columns=['id', 'geometry'], geometry='geometry', crs=WGS84)
        logger.info(f"Prepared {len(features)} routes for export")
        return gdf

    def units_geojson(self, units: List[Unit]) -> dict:
        return json.loads(self.units_to_geodataframe(units).to_json())

    def export_units_geojson(self, units: List[Unit], filename: str = "units.geojson") -> str:
        output_path = os.path.join(self.export_dir, filename)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.units_geojson(units), f, ensure_ascii=False, indent=2)
        logger.info(f"Exported units to {output_path}")
        return output_path

    def routes_geojson(self, routes: List[RouteResult]) -> dict:
        return json.loads(self.routes_to_geodataframe(routes).to_json())

    def export_routes_geojson(self, routes: List[RouteResult], filename: str = "routes.geojson") -> str:
        output_path = os.path.join(self.export_dir, filename)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.routes_geojson(routes), f, ensure_ascii=False, indent=2)
        logger.info(f"Exported routes to {output_path}")
        return output_path

    def export_state_json(self, state: dict, filename: str = "state.json") -> str:
        output_path = os.path.join(self.export_dir, filename)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(state, f, ensure_ascii=False, indent=2)
        logger.info(f"Exported state to {output_path}")
        return output_path
