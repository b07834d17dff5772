"""CNPJ import pipeline: registry lookup -> geocode -> classify -> score -> store."""
import re
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from loguru import logger

from configurations.config import Config
from core.store import UnitStore
from geocoding.address import fold
from geocoding.region import is_inside_region
from geocoding.resolver import GeocodingResolver
from models.entities import CompanyRecord, GeocodingResult, Unit
from services.classifier import CompanyClassifier
from services.cnpj import normalize_cnpj, validate_cnpj
from services.registry_service import BusinessRegistryService

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class ImportReport:
    imported: List[Unit] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    invalid: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "imported": [unit.to_dict() for unit in self.imported],
            "failures": dict(self.failures),
            "invalid": list(self.invalid),
        }


def municipality_matches(record: CompanyRecord, result: GeocodingResult) -> Optional[bool]:
    if not record.municipality:
        return None
    return fold(record.municipality) in fold(result.formatted_address)


def cep_matches(record: CompanyRecord, result: GeocodingResult) -> Optional[bool]:
    digits = re.sub(r"\D", "", record.cep)
    if len(digits) != 8:
        return None
    formatted = result.formatted_address
    return digits in formatted or f"{digits[:5]}-{digits[5:]}" in formatted


def build_unit(record: CompanyRecord, result: GeocodingResult, classifier: CompanyClassifier) -> Unit:
    """Unit for a resolved company; score and status are filled in by the store."""
    return Unit(
        id=f"cnpj-{record.cnpj}",
        cnpj=record.cnpj,
        legal_name=record.legal_name,
        trade_name=record.trade_name,
        street=record.street,
        number=record.number,
        complement=record.complement,
        district=record.district,
        municipality=record.municipality,
        uf=record.uf,
        cep=record.cep,
        lat=result.latitude,
        lng=result.longitude,
        geocoder_used=result.source,
        location_type=result.precision,
        formatted_address=result.formatted_address,
        company=classifier.classify(record.legal_name, record.cnpj),
        source_fetched_at=datetime.now(),
        custom_description=record.primary_activity,
        partial_match=result.partial_match,
        inside_region=is_inside_region(result.latitude, result.longitude),
        municipality_match=municipality_matches(record, result),
        cep_match=cep_matches(record, result),
    )


class UnitImporter:
    def __init__(self, store: UnitStore, registry: BusinessRegistryService,
                 resolver: GeocodingResolver,
                 sleep: Callable[[float], None] = time.sleep,
                 item_delay_s: float = Config.IMPORT_ITEM_DELAY_SECONDS):
        self.store = store
        self.registry = registry
        self.resolver = resolver
        self._sleep = sleep
        self.item_delay_s = item_delay_s

    def import_cnpjs(self, cnpjs: Sequence[str], on_progress: Optional[ProgressCallback] = None) -> ImportReport:
        """
        Import companies by CNPJ.

        Progress is reported as ``on_progress(stage, processed, total)`` with
        stage "lookup" then "geocode".
        """
        report = ImportReport()
        valid: List[str] = []
        for raw in cnpjs:
            digits = normalize_cnpj(raw)
            if validate_cnpj(digits):
                valid.append(digits)
            else:
                report.invalid.append(raw)
        if report.invalid:
            logger.warning(f"Skipping {len(report.invalid)} invalid CNPJs")
        if not valid:
            return report

        def lookup_progress(processed, total, record):
            if on_progress:
                on_progress("lookup", processed, total)

        records = self.registry.lookup_many(valid, on_progress=lookup_progress)
        found = {record.cnpj for record in records}
        for cnpj in valid:
            if cnpj not in found:
                report.failures[cnpj] = "registry lookup failed"

        classifier = CompanyClassifier(self.store.get_catalogs())
        for index, record in enumerate(records):
            result = self.resolver.resolve_address(record.full_address)
            if result is None:
                logger.error(f"Could not geocode {record.legal_name}: {record.full_address}")
                report.failures[record.cnpj] = "geocoding failed"
            else:
                unit = self.store.add_unit(build_unit(record, result, classifier))
                report.imported.append(unit)

            if on_progress:
                on_progress("geocode", index + 1, len(records))
            if index < len(records) - 1:
                self._sleep(self.item_delay_s)

        logger.info(f"Import finished: {len(report.imported)} units, {len(report.failures)} failures")
        return report
