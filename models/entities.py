"""Data models for units, geocoding results and routes."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

# (lat, lng) in decimal degrees, WGS84
Coordinate = Tuple[float, float]


class PrecisionTier(str, Enum):
    ROOFTOP = "ROOFTOP"
    RANGE_INTERPOLATED = "RANGE_INTERPOLATED"
    GEOMETRIC_CENTER = "GEOMETRIC_CENTER"
    APPROXIMATE = "APPROXIMATE"


class GeocoderSource(str, Enum):
    GOOGLE = "google"
    OPENCAGE = "opencage"
    NOMINATIM = "nominatim"
    MANUAL = "manual"


class CompanyType(str, Enum):
    PLUMA = "PLUMA"
    BELLO = "BELLO"
    LEVO = "LEVO"


class UnitStatus(str, Enum):
    OK = "OK"
    REVISAR = "REVISAR"
    FORA_PR = "FORA_PR"
    DIVERGENCIA_MUNICIPIO = "DIVERGENCIA_MUNICIPIO"
    DESATUALIZADO = "DESATUALIZADO"


class RouteType(str, Enum):
    EXACT = "exact"
    ESTIMATED = "estimated"


@dataclass(frozen=True)
class GeocodingResult:
    latitude: float
    longitude: float
    formatted_address: str
    precision: PrecisionTier
    source: GeocoderSource
    partial_match: bool = False

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "formatted_address": self.formatted_address,
            "precision": self.precision.value,
            "source": self.source.value,
            "partial_match": self.partial_match,
        }


@dataclass(frozen=True)
class CompanyRecord:
    """Company data as returned by a business-registry lookup."""

    cnpj: str
    legal_name: str
    trade_name: Optional[str]
    primary_activity: str
    street: str
    number: str
    complement: Optional[str]
    district: str
    municipality: str
    uf: str
    cep: str
    registration_status: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @property
    def full_address(self) -> str:
        complement = f", {self.complement}" if self.complement else ""
        return (
            f"{self.street}, {self.number}{complement}, {self.district}, "
            f"{self.municipality} - {self.uf}, {self.cep}"
        )


def _parse_timestamp(value: Optional[str]) -> datetime:
    """ISO timestamp as naive local time; accepts offsets and a trailing 'Z'."""
    if not value:
        return datetime.now()
    parsed = datetime.fromisoformat(value[:-1] + "+00:00" if value.endswith("Z") else value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@dataclass
class Unit:
    id: str
    cnpj: str
    legal_name: str
    street: str
    number: str
    district: str
    municipality: str
    uf: str
    cep: str
    lat: float
    lng: float
    geocoder_used: GeocoderSource
    company: CompanyType
    status: UnitStatus = UnitStatus.REVISAR
    score: int = 0
    trade_name: Optional[str] = None
    complement: Optional[str] = None
    location_type: Optional[PrecisionTier] = None
    formatted_address: Optional[str] = None
    source_fetched_at: datetime = field(default_factory=datetime.now)
    custom_description: Optional[str] = None
    custom_icon: Optional[str] = None

    # Validation flags; None means "not evaluated"
    partial_match: Optional[bool] = None
    inside_region: Optional[bool] = None
    municipality_match: Optional[bool] = None
    cep_match: Optional[bool] = None

    @property
    def display_name(self) -> str:
        return self.trade_name or self.legal_name

    def to_dict(self) -> dict:
        """Convert to a plain dictionary (useful for JSON serialisation)."""
        return {
            "id": self.id,
            "cnpj": self.cnpj,
            "legal_name": self.legal_name,
            "trade_name": self.trade_name,
            "street": self.street,
            "number": self.number,
            "complement": self.complement,
            "district": self.district,
            "municipality": self.municipality,
            "uf": self.uf,
            "cep": self.cep,
            "lat": self.lat,
            "lng": self.lng,
            "geocoder_used": self.geocoder_used.value,
            "location_type": self.location_type.value if self.location_type else None,
            "formatted_address": self.formatted_address,
            "company": self.company.value,
            "status": self.status.value,
            "score": self.score,
            "source_fetched_at": self.source_fetched_at.isoformat(),
            "custom_description": self.custom_description,
            "custom_icon": self.custom_icon,
            "partial_match": self.partial_match,
            "inside_region": self.inside_region,
            "municipality_match": self.municipality_match,
            "cep_match": self.cep_match,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Unit":
        location_type = data.get("location_type")
        return cls(
            id=data["id"],
            cnpj=data.get("cnpj", ""),
            legal_name=data.get("legal_name", ""),
            trade_name=data.get("trade_name"),
            street=data.get("street", ""),
            number=data.get("number", ""),
            complement=data.get("complement"),
            district=data.get("district", ""),
            municipality=data.get("municipality", ""),
            uf=data.get("uf", ""),
            cep=data.get("cep", ""),
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            geocoder_used=GeocoderSource(data.get("geocoder_used", GeocoderSource.MANUAL.value)),
            location_type=PrecisionTier(location_type) if location_type else None,
            formatted_address=data.get("formatted_address"),
            company=CompanyType(data.get("company", CompanyType.PLUMA.value)),
            status=UnitStatus(data.get("status", UnitStatus.REVISAR.value)),
            score=int(data.get("score", 0)),
            source_fetched_at=_parse_timestamp(data.get("source_fetched_at")),
            custom_description=data.get("custom_description"),
            custom_icon=data.get("custom_icon"),
            partial_match=data.get("partial_match"),
            inside_region=data.get("inside_region"),
            municipality_match=data.get("municipality_match"),
            cep_match=data.get("cep_match"),
        )


@dataclass(frozen=True)
class RoutePoint:
    lat: float
    lng: float
    unit_id: Optional[str] = None
    label: Optional[str] = None

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng, "unit_id": self.unit_id, "label": self.label}


@dataclass(frozen=True)
class RouteResult:
    id: str
    points: List[RoutePoint]
    distance_km: float
    type: RouteType
    created_at: datetime
    duration_min: Optional[float] = None
    geometry: Optional[List[Coordinate]] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "points": [point.to_dict() for point in self.points],
            "distance_km": self.distance_km,
            "duration_min": self.duration_min,
            "type": self.type.value,
            "geometry": [list(coord) for coord in self.geometry] if self.geometry else None,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class HighlightedCity:
    name: str
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"name": self.name, "lat": self.lat, "lng": self.lng}
