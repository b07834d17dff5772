"""Geocoding providers, each behind the same ``attempt`` contract."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from configurations.config import Config
from core.exceptions import ProviderError
from geocoding.address import normalise_for_country, normalise_for_region
from models.entities import GeocoderSource, GeocodingResult, PrecisionTier

_GOOGLE_PRECISION = {
    "ROOFTOP": PrecisionTier.ROOFTOP,
    "RANGE_INTERPOLATED": PrecisionTier.RANGE_INTERPOLATED,
    "GEOMETRIC_CENTER": PrecisionTier.GEOMETRIC_CENTER,
    "APPROXIMATE": PrecisionTier.APPROXIMATE,
}


class GeocodingProvider(ABC):
    """
    One external geocoding service.

    ``attempt`` returns the provider's first candidate as a GeocodingResult or
    raises ProviderError; transport and parse errors never escape as anything
    else. Region validation is the resolver's job.
    """

    source: GeocoderSource

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = Config.HTTP_TIMEOUT_SECONDS):
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def name(self) -> str:
        return self.source.value

    def attempt(self, address: str) -> GeocodingResult:
        try:
            payload = self._fetch(address)
            return self._parse(payload)
        except ProviderError:
            raise
        except requests.RequestException as e:
            raise ProviderError(self.name, f"request failed: {e}") from e
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(self.name, f"malformed response: {e}") from e

    def _get_json(self, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    @abstractmethod
    def _fetch(self, address: str) -> Any:
        pass

    @abstractmethod
    def _parse(self, payload: Any) -> GeocodingResult:
        pass


class GoogleGeocodingProvider(GeocodingProvider):
    """Primary provider; the only one reporting a precision tier."""

    source = GeocoderSource.GOOGLE

    def __init__(self, api_key: str = Config.GOOGLE_MAPS_API_KEY, url: str = Config.GOOGLE_GEOCODE_URL, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.url = url

    def _fetch(self, address: str) -> Any:
        if not self.api_key:
            raise ProviderError(self.name, "API key not configured")
        params = {
            "address": normalise_for_region(address),
            "key": self.api_key,
            "region": "br",
            "language": "pt-BR",
            "components": f"administrative_area:{Config.REGION_CODE}|country:BR",
        }
        return self._get_json(self.url, params)

    def _parse(self, payload: Any) -> GeocodingResult:
        status = payload.get("status")
        results = payload.get("results") or []
        if status != "OK" or not results:
            raise ProviderError(self.name, f"status {status}")

        result = results[0]
        components = result.get("address_components") or []
        if not self._has_region(components):
            raise ProviderError(self.name, f"result outside {Config.REGION_NAME}")
        if not self._has_city(components):
            raise ProviderError(self.name, "result without a city component")

        geometry = result["geometry"]
        location = geometry["location"]
        return GeocodingResult(
            latitude=float(location["lat"]),
            longitude=float(location["lng"]),
            formatted_address=result.get("formatted_address", ""),
            precision=_GOOGLE_PRECISION.get(geometry.get("location_type"), PrecisionTier.APPROXIMATE),
            source=self.source,
            partial_match=bool(result.get("partial_match", False)),
        )

    @staticmethod
    def _has_region(components) -> bool:
        return any(
            "administrative_area_level_1" in component.get("types", [])
            and (
                component.get("short_name") == Config.REGION_CODE
                or Config.REGION_NAME in component.get("long_name", "")
            )
            for component in components
        )

    @staticmethod
    def _has_city(components) -> bool:
        return any(
            "administrative_area_level_2" in component.get("types", [])
            or "locality" in component.get("types", [])
            for component in components
        )


class OpenCageProvider(GeocodingProvider):
    source = GeocoderSource.OPENCAGE

    def __init__(self, api_key: str = Config.OPENCAGE_API_KEY, url: str = Config.OPENCAGE_URL, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.url = url

    def _fetch(self, address: str) -> Any:
        if not self.api_key:
            raise ProviderError(self.name, "API key not configured")
        params = {
            "q": normalise_for_country(address),
            "key": self.api_key,
            "language": "pt",
            "countrycode": "br",
        }
        return self._get_json(self.url, params)

    def _parse(self, payload: Any) -> GeocodingResult:
        results = payload.get("results") or []
        if not results:
            raise ProviderError(self.name, "no results")
        result = results[0]
        return GeocodingResult(
            latitude=float(result["geometry"]["lat"]),
            longitude=float(result["geometry"]["lng"]),
            formatted_address=result.get("formatted", ""),
            precision=PrecisionTier.APPROXIMATE,
            source=self.source,
        )


class NominatimProvider(GeocodingProvider):
    """OpenStreetMap search; the usage policy requires an identifying User-Agent."""

    source = GeocoderSource.NOMINATIM

    def __init__(self, user_agent: str = Config.NOMINATIM_USER_AGENT, url: str = Config.NOMINATIM_URL, **kwargs):
        super().__init__(**kwargs)
        self.user_agent = user_agent
        self.url = url

    def _fetch(self, address: str) -> Any:
        params = {
            "format": "json",
            "q": normalise_for_country(address),
            "countrycodes": "br",
            "limit": 1,
            "addressdetails": 1,
        }
        return self._get_json(self.url, params, headers={"User-Agent": self.user_agent})

    def _parse(self, payload: Any) -> GeocodingResult:
        if not payload:
            raise ProviderError(self.name, "no results")
        result = payload[0]
        return GeocodingResult(
            latitude=float(result["lat"]),
            longitude=float(result["lon"]),
            formatted_address=result.get("display_name", ""),
            precision=PrecisionTier.APPROXIMATE,
            source=self.source,
        )
