"""Create interactive Folium maps of units, routes and highlighted cities."""
from typing import List, Optional

import folium
from loguru import logger
from shapely.geometry import mapping

from geocoding.region import region_bounds, region_centroid, region_polygon
from models.entities import CompanyType, HighlightedCity, RouteResult, RouteType, Unit
from services.cnpj import format_cnpj
from services.scoring import score_status


class UnitMapGenerator:
    def __init__(self):
        self.company_colors = {
            CompanyType.PLUMA: '#1f77b4',
            CompanyType.BELLO: '#d62728',
            CompanyType.LEVO: '#2ca02c',
        }
        self.route_colors = {
            RouteType.EXACT: '#FF8000',
            RouteType.ESTIMATED: '#8000FF',
        }

    def create_unit_map(self, units: List[Unit], routes: Optional[List[RouteResult]] = None,
                        cities: Optional[List[HighlightedCity]] = None, zoom_start: int = 7) -> folium.Map:
        """Create map with one layer per company, plus route and city layers."""
        m = folium.Map(location=list(region_centroid()), zoom_start=zoom_start, tiles='OpenStreetMap')

        self._add_region_outline(m)
        self._add_unit_markers(m, units)
        if routes:
            self._add_route_layers(m, routes)
        if cities:
            self._add_city_markers(m, cities)
        self._add_legend(m, units)

        folium.LayerControl(position='topright', collapsed=False).add_to(m)

        logger.info(f"Created Folium map with {len(units)} units and {len(routes or [])} routes")
        return m

    def _add_region_outline(self, map_obj: folium.Map):
        folium.GeoJson(
            mapping(region_polygon()),
            name='Paraná',
            style_function=lambda _: {'color': '#555555', 'weight': 1, 'fill': False, 'dashArray': '4'},
            tooltip='Paraná',
        ).add_to(map_obj)
        bounds = region_bounds()
        map_obj.fit_bounds([[bounds['south'], bounds['west']], [bounds['north'], bounds['east']]])

    def _add_unit_markers(self, map_obj: folium.Map, units: List[Unit]):
        for company in CompanyType:
            company_units = [unit for unit in units if unit.company == company]
            if not company_units:
                continue
            color = self.company_colors[company]
            group = folium.FeatureGroup(name=f"{company.value} ({len(company_units)})", show=True)

            for unit in company_units:
                folium.CircleMarker(
                    location=[unit.lat, unit.lng],
                    radius=6,
                    popup=folium.Popup(self._create_unit_popup(unit), max_width=300),
                    tooltip=unit.display_name,
                    color=color,
                    fill=True,
                    fillColor=color,
                    fillOpacity=0.8,
                    weight=2,
                ).add_to(group)

            group.add_to(map_obj)

    def _create_unit_popup(self, unit: Unit) -> str:
        band = score_status(unit.score)
        return f"""
        <div style="width: 250px;">
            <h4>{unit.display_name}</h4>
            <p><strong>CNPJ:</strong> {format_cnpj(unit.cnpj)}</p>
            <p><strong>Endereço:</strong> {unit.street}, {unit.number} - {unit.district}, {unit.municipality}</p>
            <p><strong>Score:</strong> <span class="{band.css_class}">{unit.score} ({band.label})</span></p>
            <p><strong>Status:</strong> {unit.status.value}</p>
        </div>
        """

    def _add_route_layers(self, map_obj: folium.Map, routes: List[RouteResult]):
        for route in routes:
            coords = route.geometry or [(point.lat, point.lng) for point in route.points]
            if len(coords) < 2:
                continue
            group = folium.FeatureGroup(name=f"Rota {route.id} ({route.distance_km:.1f} km)", show=True)
            folium.PolyLine(
                locations=[[lat, lng] for lat, lng in coords],
                color=self.route_colors[route.type],
                weight=5,
                opacity=0.8,
                # Estimated routes are straight legs, drawn dashed
                dash_array='10' if route.type == RouteType.ESTIMATED else None,
                tooltip=self._route_tooltip(route),
            ).add_to(group)
            group.add_to(map_obj)

    @staticmethod
    def _route_tooltip(route: RouteResult) -> str:
        text = f"{route.type.value}: {route.distance_km:.1f} km"
        if route.duration_min is not None:
            text += f", {route.duration_min:.0f} min"
        return text

    def _add_city_markers(self, map_obj: folium.Map, cities: List[HighlightedCity]):
        group = folium.FeatureGroup(name=f"Cidades ({len(cities)})", show=True)
        for city in cities:
            folium.Marker(
                location=[city.lat, city.lng],
                popup=city.name,
                icon=folium.Icon(color='orange', icon='star'),
            ).add_to(group)
        group.add_to(map_obj)

    def _add_legend(self, map_obj: folium.Map, units: List[Unit]):
        items = ''.join(
            f'<p><span style="color:{color};">●</span> {company.value}: '
            f'{sum(1 for unit in units if unit.company == company)}</p>'
            for company, color in self.company_colors.items()
        )
        legend_html = f'''
        <div style="position: fixed;
                    bottom: 50px; left: 50px; width: 180px; height: auto;
                    background-color: white; border:2px solid grey; z-index:9999;
                    font-size:14px; padding: 10px">
        <h4>Unidades</h4>
        {items}
        <hr>
        <p><strong>Total:</strong> {len(units)}</p>
        </div>
        '''
        map_obj.get_root().html.add_child(folium.Element(legend_html))

    def save_map(self, map_obj: folium.Map, output_path: str):
        map_obj.save(output_path)
        logger.info(f"Map saved to {output_path}")
