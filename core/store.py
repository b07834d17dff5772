"""Shared store for units, route history, highlighted cities and catalogs."""
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from loguru import logger

from configurations.config import Config
from core.events import EventBus, UnitRemoveRequested
from core.exceptions import UnitNotFound
from models.entities import HighlightedCity, RouteResult, Unit
from services.scoring import derive_unit_status, score_unit

_NON_EDITABLE_FIELDS = {"id", "score"}


class UnitStore:
    """
    In-memory state of the dashboard.

    Units are re-scored on every add and update so the score invariants hold
    whatever the caller passes in. Route history is append-only.
    """

    def __init__(self, bus: Optional[EventBus] = None, days_until_outdated: int = Config.DAYS_UNTIL_OUTDATED):
        self._units: Dict[str, Unit] = {}
        self._routes: List[RouteResult] = []
        self._cities: Dict[str, HighlightedCity] = {}
        self._catalogs: Dict[str, List[str]] = {name: [] for name in Config.COMPANY_CATALOG_ORDER}
        self.days_until_outdated = days_until_outdated
        self._lock = threading.RLock()
        self.bus = bus or EventBus()
        self.bus.subscribe(UnitRemoveRequested, self._on_remove_requested)

    # ── Units ────────────────────────────────────────────────────

    def add_unit(self, unit: Unit) -> Unit:
        """Insert or replace a unit by id."""
        with self._lock:
            self._refresh(unit)
            self._units[unit.id] = unit
            logger.info(f"Stored unit {unit.id} (score {unit.score}, {unit.status.value})")
            return unit

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        with self._lock:
            return self._units.get(unit_id)

    def list_units(self) -> List[Unit]:
        with self._lock:
            return list(self._units.values())

    def update_unit(self, unit_id: str, **changes) -> Unit:
        with self._lock:
            unit = self._units.get(unit_id)
            if unit is None:
                raise UnitNotFound(unit_id)
            for key in changes:
                if key in _NON_EDITABLE_FIELDS or not hasattr(unit, key):
                    raise ValueError(f"Field '{key}' cannot be edited")
            updated = replace(unit, **changes)
            self._refresh(updated)
            self._units[unit_id] = updated
            return updated

    def remove_unit(self, unit_id: str) -> bool:
        with self._lock:
            removed = self._units.pop(unit_id, None)
        if removed is None:
            logger.warning(f"Remove requested for unknown unit {unit_id}")
            return False
        logger.info(f"Removed unit {unit_id}")
        return True

    def rescore_all(self) -> int:
        with self._lock:
            for unit in self._units.values():
                self._refresh(unit)
            return len(self._units)

    def set_units(self, units: List[Unit]) -> None:
        """Replace all units; the store is unchanged if any unit fails to score."""
        with self._lock:
            self._units = self._scored(units, self.days_until_outdated)

    def _scored(self, units: List[Unit], days_until_outdated: int) -> Dict[str, Unit]:
        scored = {}
        for unit in units:
            self._refresh(unit, days_until_outdated)
            scored[unit.id] = unit
        return scored

    def _refresh(self, unit: Unit, days_until_outdated: Optional[int] = None) -> None:
        if days_until_outdated is None:
            days_until_outdated = self.days_until_outdated
        unit.score = score_unit(unit)
        unit.status = derive_unit_status(unit, datetime.now(), days_until_outdated)

    def _on_remove_requested(self, event: UnitRemoveRequested) -> None:
        self.remove_unit(event.unit_id)

    # ── Routes ───────────────────────────────────────────────────

    def add_route(self, route: RouteResult) -> None:
        with self._lock:
            self._routes.append(route)
            logger.info(f"Stored route {route.id} ({route.type.value}, {route.distance_km:.2f} km)")

    def list_routes(self) -> List[RouteResult]:
        with self._lock:
            return list(self._routes)

    def latest_route(self) -> Optional[RouteResult]:
        with self._lock:
            return self._routes[-1] if self._routes else None

    # ── Highlighted cities ───────────────────────────────────────

    def add_highlighted_city(self, city: HighlightedCity) -> bool:
        """Add a city unless one with the same name (any case) exists."""
        key = city.name.lower()
        with self._lock:
            if key in self._cities:
                return False
            self._cities[key] = city
            return True

    def get_highlighted_city(self, name: str) -> Optional[HighlightedCity]:
        with self._lock:
            return self._cities.get(name.lower())

    def list_highlighted_cities(self) -> List[HighlightedCity]:
        with self._lock:
            return list(self._cities.values())

    def remove_highlighted_city(self, name: str) -> bool:
        with self._lock:
            return self._cities.pop(name.lower(), None) is not None

    def clear_highlighted_cities(self) -> None:
        with self._lock:
            self._cities = {}

    # ── Catalogs ─────────────────────────────────────────────────

    def get_catalogs(self) -> Dict[str, List[str]]:
        with self._lock:
            return {name: list(ids) for name, ids in self._catalogs.items()}

    def set_catalog(self, company: str, cnpjs: List[str]) -> None:
        if company not in self._catalogs:
            raise ValueError(f"Unknown catalog '{company}'")
        with self._lock:
            self._catalogs[company] = list(cnpjs)

    # ── Export / import ──────────────────────────────────────────

    def export_state(self) -> dict:
        with self._lock:
            return {
                "units": [unit.to_dict() for unit in self._units.values()],
                "catalogs": self.get_catalogs(),
                "settings": {"days_until_outdated": self.days_until_outdated},
                "exported_at": datetime.now().isoformat(),
            }

    def import_state(self, data: dict) -> None:
        """
        Replace whichever sections *data* carries.

        Every section is parsed and validated before anything is assigned, so a
        rejected file leaves units, catalogs and settings as they were.
        """
        with self._lock:
            settings = data.get("settings") or {}
            days = self.days_until_outdated
            if settings.get("days_until_outdated"):
                days = int(settings["days_until_outdated"])

            catalogs = None
            if "catalogs" in data:
                catalogs = {}
                for company, cnpjs in data["catalogs"].items():
                    if company not in self._catalogs:
                        raise ValueError(f"Unknown catalog '{company}'")
                    catalogs[company] = list(cnpjs)

            units = None
            if "units" in data:
                units = self._scored([Unit.from_dict(item) for item in data["units"]], days)

            self.days_until_outdated = days
            if catalogs is not None:
                self._catalogs.update(catalogs)
            if units is not None:
                self._units = units
        logger.info(f"Imported state with {len(data.get('units', []))} units")
