"""FastAPI app for the PR units map."""
from dataclasses import dataclass
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from loguru import logger
from pydantic import BaseModel

from configurations.config import Config
from core.events import UnitRemoveRequested
from core.exceptions import InsufficientPoints, UnitNotFound, UnknownRoutePoint
from core.store import UnitStore
from geocoding.address import suggest_municipalities
from geocoding.region import is_inside_region
from geocoding.resolver import GeocodingResolver
from models.entities import CompanyType, GeocoderSource, HighlightedCity, RoutePoint
from routing.route_planner import RoutePlanner, resolve_route_points
from services.cnpj import normalize_cnpj
from services.import_service import UnitImporter
from services.registry_service import BusinessRegistryService
from services.scoring import ACCEPTABLE_THRESHOLD
from services.stats import review_queue, summarize_units
from visualization.export_to_geojson import UnitExporter
from visualization.folium_map import UnitMapGenerator


class ImportRequest(BaseModel):
    cnpjs: List[str]


class GeocodeRequest(BaseModel):
    address: str


class CityRequest(BaseModel):
    name: str


class PointModel(BaseModel):
    lat: float
    lng: float
    label: Optional[str] = None


class RouteRequest(BaseModel):
    refs: Optional[List[str]] = None
    points: Optional[List[PointModel]] = None
    prefer_exact: bool = True


class CatalogRequest(BaseModel):
    cnpjs: List[str]


class UnitUpdate(BaseModel):
    legal_name: Optional[str] = None
    trade_name: Optional[str] = None
    street: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    district: Optional[str] = None
    municipality: Optional[str] = None
    cep: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    company: Optional[CompanyType] = None
    custom_description: Optional[str] = None
    custom_icon: Optional[str] = None


@dataclass
class ServiceContainer:
    store: UnitStore
    resolver: GeocodingResolver
    planner: RoutePlanner
    importer: UnitImporter
    exporter: UnitExporter
    map_generator: UnitMapGenerator

    @classmethod
    def create(cls) -> "ServiceContainer":
        store = UnitStore()
        resolver = GeocodingResolver()
        return cls(
            store=store,
            resolver=resolver,
            planner=RoutePlanner(),
            importer=UnitImporter(store, BusinessRegistryService(), resolver),
            exporter=UnitExporter(),
            map_generator=UnitMapGenerator(),
        )


_services: Optional[ServiceContainer] = None


def get_services() -> ServiceContainer:
    global _services
    if _services is None:
        _services = ServiceContainer.create()
    return _services


app = FastAPI(
    title="PR Units Map",
    description="Geocoding, validation and routing for company units in Paraná",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"status": "ok", "service": "pr-units-map", "region": Config.REGION_NAME}


# ── Units ────────────────────────────────────────────────────────

@app.post("/units/import")
def import_units(request: ImportRequest, services: ServiceContainer = Depends(get_services)):
    """Look up, geocode, classify and store the given CNPJs."""
    if not request.cnpjs:
        raise HTTPException(status_code=400, detail="At least one CNPJ is required")
    report = services.importer.import_cnpjs(request.cnpjs)
    return report.to_dict()


@app.post("/geocode")
def geocode(request: GeocodeRequest, services: ServiceContainer = Depends(get_services)):
    result = services.resolver.resolve_address(request.address)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Could not geocode '{request.address}'")
    return result.to_dict()


@app.get("/units")
async def list_units(services: ServiceContainer = Depends(get_services)):
    return [unit.to_dict() for unit in services.store.list_units()]


@app.post("/units/rescore")
async def rescore_units(services: ServiceContainer = Depends(get_services)):
    return {"rescored": services.store.rescore_all()}


@app.get("/units/{unit_id}")
async def get_unit(unit_id: str, services: ServiceContainer = Depends(get_services)):
    unit = services.store.get_unit(unit_id)
    if unit is None:
        raise HTTPException(status_code=404, detail=f"Unit {unit_id} not found")
    return unit.to_dict()


@app.patch("/units/{unit_id}")
async def update_unit(unit_id: str, request: UnitUpdate, services: ServiceContainer = Depends(get_services)):
    """Manual edit; moving a unit marks its position as manually placed."""
    changes = request.model_dump(exclude_unset=True)
    if "lat" in changes or "lng" in changes:
        current = services.store.get_unit(unit_id)
        if current is None:
            raise HTTPException(status_code=404, detail=f"Unit {unit_id} not found")
        lat = changes.get("lat", current.lat)
        lng = changes.get("lng", current.lng)
        changes["geocoder_used"] = GeocoderSource.MANUAL
        changes["inside_region"] = is_inside_region(lat, lng)

    try:
        unit = services.store.update_unit(unit_id, **changes)
    except UnitNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return unit.to_dict()


@app.delete("/units/{unit_id}")
async def delete_unit(unit_id: str, services: ServiceContainer = Depends(get_services)):
    if services.store.get_unit(unit_id) is None:
        raise HTTPException(status_code=404, detail=f"Unit {unit_id} not found")
    services.store.bus.emit(UnitRemoveRequested(unit_id))
    return {"status": "success", "message": f"Unit {unit_id} removed"}


# ── Highlighted cities ───────────────────────────────────────────

@app.get("/cities")
async def list_cities(services: ServiceContainer = Depends(get_services)):
    return [city.to_dict() for city in services.store.list_highlighted_cities()]


@app.get("/cities/suggest")
async def suggest_cities(q: str = ""):
    return suggest_municipalities(q)


@app.post("/cities", status_code=201)
def add_city(request: CityRequest, services: ServiceContainer = Depends(get_services)):
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="City name is required")
    if services.store.get_highlighted_city(name) is not None:
        raise HTTPException(status_code=409, detail=f"City {name} is already highlighted")

    result = services.resolver.resolve_address(f"{name}, {Config.REGION_NAME}, {Config.COUNTRY_NAME}")
    if result is None:
        raise HTTPException(status_code=404, detail=f"City {name} not found in {Config.REGION_NAME}")

    city = HighlightedCity(name=name, lat=result.latitude, lng=result.longitude)
    if not services.store.add_highlighted_city(city):
        raise HTTPException(status_code=409, detail=f"City {name} is already highlighted")
    return city.to_dict()


@app.delete("/cities/{name}")
async def remove_city(name: str, services: ServiceContainer = Depends(get_services)):
    if not services.store.remove_highlighted_city(name):
        raise HTTPException(status_code=404, detail=f"City {name} is not highlighted")
    return {"status": "success", "message": f"City {name} removed"}


# ── Routes ───────────────────────────────────────────────────────

@app.post("/routes")
def create_route(request: RouteRequest, services: ServiceContainer = Depends(get_services)):
    """Plan a route through unit/city references or raw points."""
    try:
        if request.refs is not None:
            points = resolve_route_points(request.refs, services.store)
        else:
            points = [RoutePoint(lat=p.lat, lng=p.lng, label=p.label) for p in request.points or []]
        route = services.planner.plan_route(points, prefer_exact=request.prefer_exact)
    except (InsufficientPoints, UnknownRoutePoint) as e:
        raise HTTPException(status_code=400, detail=str(e))

    services.store.add_route(route)
    return route.to_dict()


@app.get("/routes")
async def list_routes(services: ServiceContainer = Depends(get_services)):
    return [route.to_dict() for route in services.store.list_routes()]


@app.get("/routes/latest")
async def latest_route(services: ServiceContainer = Depends(get_services)):
    route = services.store.latest_route()
    if route is None:
        raise HTTPException(status_code=404, detail="No routes calculated yet")
    return route.to_dict()


# ── Catalogs ─────────────────────────────────────────────────────

@app.get("/catalogs")
async def get_catalogs(services: ServiceContainer = Depends(get_services)):
    return services.store.get_catalogs()


@app.put("/catalogs/{company}")
async def set_catalog(company: str, request: CatalogRequest, services: ServiceContainer = Depends(get_services)):
    try:
        services.store.set_catalog(company.upper(), [normalize_cnpj(c) for c in request.cnpjs])
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return services.store.get_catalogs()


# ── Export / import / stats / map ────────────────────────────────

@app.get("/export/json")
async def export_json(services: ServiceContainer = Depends(get_services)):
    return services.store.export_state()


@app.post("/import/json")
async def import_json(data: dict, services: ServiceContainer = Depends(get_services)):
    try:
        services.store.import_state(data)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Rejected state import: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid state file: {e}")
    return {"status": "success", "units": len(services.store.list_units())}


@app.get("/export/geojson")
async def export_geojson(services: ServiceContainer = Depends(get_services)):
    return JSONResponse(services.exporter.units_geojson(services.store.list_units()))


@app.get("/export/geojson/routes")
async def export_routes_geojson(services: ServiceContainer = Depends(get_services)):
    """Route history as LineString features."""
    return JSONResponse(services.exporter.routes_geojson(services.store.list_routes()))


@app.get("/stats")
async def stats(services: ServiceContainer = Depends(get_services)):
    units = services.store.list_units()
    summary = summarize_units(units)
    summary["review_queue"] = [unit.id for unit in review_queue(units) if unit.score < ACCEPTABLE_THRESHOLD]
    return summary


@app.get("/map", response_class=HTMLResponse)
async def unit_map(services: ServiceContainer = Depends(get_services)):
    store = services.store
    m = services.map_generator.create_unit_map(
        store.list_units(), routes=store.list_routes(), cities=store.list_highlighted_cities()
    )
    return HTMLResponse(m.get_root().render())
