"""Command line entry point for the PR units map."""
import os
import sys
import argparse
from pathlib import Path
from loguru import logger

from configurations.config import Config
from core.exceptions import InsufficientPoints
from core.store import UnitStore
from geocoding.resolver import GeocodingResolver
from models.entities import RoutePoint
from routing.route_planner import RoutePlanner
from services.cnpj import parse_cnpj_list
from services.import_service import UnitImporter
from services.registry_service import BusinessRegistryService
from services.stats import summarize_units
from visualization.export_to_geojson import UnitExporter
from visualization.folium_map import UnitMapGenerator


def configure_logging(level: str = Config.LOG_LEVEL):
    logger.remove()
    logger.add(sys.stderr, level=level)


def parse_point(text: str) -> RoutePoint:
    """Parse "LAT,LNG" into a RoutePoint."""
    try:
        lat, lng = (float(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid point '{text}', expected LAT,LNG")
    return RoutePoint(lat=lat, lng=lng)


def run_import(cnpj_file: str, output_dir: str) -> dict:
    """Import CNPJs from a file and write GeoJSON, JSON state and an HTML map."""
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    with open(cnpj_file, encoding="utf-8") as f:
        cnpjs = parse_cnpj_list(f.read())
    logger.info(f"Importing {len(cnpjs)} CNPJs from {cnpj_file}")

    store = UnitStore()
    importer = UnitImporter(store, BusinessRegistryService(), GeocodingResolver())
    report = importer.import_cnpjs(
        cnpjs, on_progress=lambda stage, done, total: logger.info(f"{stage}: {done}/{total}")
    )

    exporter = UnitExporter(output_dir)
    units = store.list_units()
    map_generator = UnitMapGenerator()
    map_path = os.path.join(output_dir, "unit_map.html")
    map_generator.save_map(map_generator.create_unit_map(units), map_path)

    return {
        'units_geojson': exporter.export_units_geojson(units),
        'state_json': exporter.export_state_json(store.export_state()),
        'unit_map': map_path,
        'imported': len(report.imported),
        'failures': report.failures,
        'invalid': report.invalid,
        'summary': summarize_units(units),
    }


def main():
    """Command line interface for the PR units map."""
    parser = argparse.ArgumentParser(description="Company units map for Paraná")
    parser.add_argument("--api", action="store_true", help="Start FastAPI server")
    parser.add_argument("--port", type=int, default=Config.API_PORT, help=f"Port for FastAPI server (default: {Config.API_PORT})")
    parser.add_argument("--import", dest="import_file", help="File with one CNPJ per line to import")
    parser.add_argument("--output", help="Output directory for --import (default: output) or for the --route GeoJSON")
    parser.add_argument("--geocode", metavar="TEXT", help="Geocode an address or city name")
    parser.add_argument("--route", nargs="+", type=parse_point, metavar="LAT,LNG", help="Plan a route through the given points")
    parser.add_argument("--estimated", action="store_true", help="Skip OSRM and use great-circle distances")

    args = parser.parse_args()
    configure_logging()

    if args.api:
        import uvicorn
        from api.routes import app
        logger.info(f"Starting FastAPI server on port {args.port}...")
        try:
            uvicorn.run(app, host=Config.API_HOST, port=args.port)
        except OSError as e:
            logger.error(f"Server startup failed: {e}")
            sys.exit(1)

    elif args.import_file:
        results = run_import(args.import_file, args.output or "output")
        print(f"\nImported {results['imported']} units")
        print(f"Failures: {len(results['failures'])}, invalid CNPJs: {len(results['invalid'])}")
        print(f"GeoJSON: {results['units_geojson']}")
        print(f"State: {results['state_json']}")
        print(f"Interactive map: {results['unit_map']}")

    elif args.geocode:
        result = GeocodingResolver().resolve_address(args.geocode)
        if result is None:
            print(f"Could not geocode '{args.geocode}'")
            sys.exit(1)
        print(f"{result.latitude}, {result.longitude}")
        print(f"{result.formatted_address} ({result.source.value}, {result.precision.value})")

    elif args.route:
        try:
            route = RoutePlanner().plan_route(args.route, prefer_exact=not args.estimated)
        except InsufficientPoints as e:
            parser.error(str(e))
        print(f"Route {route.id} ({route.type.value})")
        print(f"Distance: {route.distance_km:.2f} km")
        if route.duration_min is not None:
            print(f"Duration: {route.duration_min:.0f} min")
        if args.output:
            print(f"GeoJSON: {UnitExporter(args.output).export_routes_geojson([route])}")

    else:
        parser.error("one of --api, --import, --geocode or --route is required")


if __name__ == "__main__":
    main()
