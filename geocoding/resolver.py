"""Ordered multi-provider geocoding with region validation."""
import time
from typing import Callable, List, Optional, Sequence

import requests
from loguru import logger

from configurations.config import Config
from core.exceptions import ProviderError
from geocoding.address import is_admissible
from geocoding.providers import (
    GeocodingProvider,
    GoogleGeocodingProvider,
    NominatimProvider,
    OpenCageProvider,
)
from geocoding.region import is_inside_region
from models.entities import GeocodingResult

ProgressCallback = Callable[[int, int, Optional[GeocodingResult]], None]


def default_providers(session: Optional[requests.Session] = None) -> List[GeocodingProvider]:
    """Google, then OpenCage, then Nominatim, sharing one HTTP session."""
    session = session or requests.Session()
    return [
        GoogleGeocodingProvider(session=session),
        OpenCageProvider(session=session),
        NominatimProvider(session=session),
    ]


class GeocodingResolver:
    """
    Resolve free-text addresses to a coordinate inside the target region.

    Providers are tried strictly one after another; the first result that also
    passes the region check wins. Provider failures are logged and swallowed,
    so callers only ever see a GeocodingResult or None.
    """

    def __init__(self, providers: Optional[Sequence[GeocodingProvider]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.providers = list(providers) if providers is not None else default_providers()
        self._sleep = sleep

    def resolve_address(self, address: str) -> Optional[GeocodingResult]:
        if not is_admissible(address):
            logger.warning(f"Incomplete or invalid address, not geocoding: {address!r}")
            return None

        for provider in self.providers:
            result = self._try_provider(provider, address)
            if result is not None:
                logger.info(
                    f"Geocoded {address!r} -> {result.latitude}, {result.longitude} "
                    f"({result.source.value}, {result.precision.value})"
                )
                return result

        logger.error(f"Geocoding failed for {address!r} on every provider")
        return None

    def resolve_many(self, addresses: Sequence[str], on_progress: Optional[ProgressCallback] = None,
                     delay_s: float = Config.GEOCODE_BATCH_DELAY_SECONDS) -> List[GeocodingResult]:
        """Resolve a batch one address at a time, pausing between items."""
        results: List[GeocodingResult] = []
        total = len(addresses)
        for index, address in enumerate(addresses):
            result = self.resolve_address(address)
            if result is not None:
                results.append(result)
            if on_progress:
                on_progress(index + 1, total, result)
            if index < total - 1:
                self._sleep(delay_s)
        return results

    def _try_provider(self, provider: GeocodingProvider, address: str) -> Optional[GeocodingResult]:
        try:
            result = provider.attempt(address)
        except ProviderError as e:
            logger.warning(f"Geocoder {e.provider} failed for {address!r}: {e.reason}")
            return None

        if not is_inside_region(result.latitude, result.longitude):
            logger.warning(
                f"Geocoder {provider.name} returned coordinates outside {Config.REGION_NAME}: "
                f"{result.latitude}, {result.longitude}"
            )
            return None
        return result
