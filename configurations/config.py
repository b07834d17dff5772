"""Configuration settings for the PR units map service."""
import os
import tempfile
from typing import Dict, List, Tuple

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    # Business registry providers (tried in this order)
    BRASILAPI_URL: str = os.getenv("BRASILAPI_URL", "https://brasilapi.com.br/api/cnpj/v1")
    RECEITAWS_URL: str = os.getenv("RECEITAWS_URL", "https://www.receitaws.com.br/v1/cnpj")

    # Geocoding providers
    GOOGLE_GEOCODE_URL: str = os.getenv("GOOGLE_GEOCODE_URL", "https://maps.googleapis.com/maps/api/geocode/json")
    GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    OPENCAGE_URL: str = os.getenv("OPENCAGE_URL", "https://api.opencagedata.com/geocode/v1/json")
    OPENCAGE_API_KEY: str = os.getenv("OPENCAGE_API_KEY", "")
    NOMINATIM_URL: str = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
    NOMINATIM_USER_AGENT: str = os.getenv("NOMINATIM_USER_AGENT", "PR-Units-Map/1.0 (contato@exemplo.com)")

    # Road routing
    OSRM_URL: str = os.getenv("OSRM_URL", "https://router.project-osrm.org")
    OSRM_PROFILE: str = os.getenv("OSRM_PROFILE", "driving")

    # HTTP
    HTTP_TIMEOUT_SECONDS: int = int(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    # Batch throttles (seconds between items, not a retry)
    GEOCODE_BATCH_DELAY_SECONDS: float = 0.1
    REGISTRY_BATCH_DELAY_SECONDS: float = 0.5
    IMPORT_ITEM_DELAY_SECONDS: float = 0.2

    # Target region: Paraná. Limits are tighter than the real state extent.
    REGION_NAME: str = "Paraná"
    REGION_CODE: str = "PR"
    COUNTRY_NAME: str = "Brasil"
    REGION_BOUNDS: Dict[str, float] = {
        "north": -22.4,
        "south": -26.8,
        "east": -47.8,
        "west": -54.7,
    }

    # Unverified hand-picked exclusions near the border. Keep the numbers as they are.
    # Each zone: (lat_min, lat_max, lng_min, lng_max), open bounds, None = unbounded.
    REGION_EXCLUSION_ZONES: Dict[str, Tuple] = {
        "ocean": (None, -25.0, -48.0, None),
        "sao_paulo_north": (-23.0, None, -50.0, None),
        "santa_catarina_south": (None, -26.5, -52.0, None),
    }

    # Company classification
    COMPANY_CATALOG_ORDER: List[str] = ["PLUMA", "BELLO", "LEVO"]
    # Priority order matters: first rule with a matching keyword wins
    COMPANY_KEYWORD_RULES: List[Tuple[str, List[str]]] = [
        ("BELLO", ["BELLO", "BELLA"]),
        ("LEVO", ["LEVO"]),
        ("PLUMA", ["PLUMA"]),
    ]
    DEFAULT_COMPANY: str = "PLUMA"

    # Units older than this are flagged DESATUALIZADO
    DAYS_UNTIL_OUTDATED: int = int(os.getenv("DAYS_UNTIL_OUTDATED", "7"))

    # Export settings
    EXPORT_DIR: str = os.getenv("EXPORT_DIR", os.path.join(tempfile.gettempdir(), "pr_units_exports"))

    # API settings
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8080

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
