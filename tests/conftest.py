"""Shared fakes: an HTTP session that never touches the network."""
from collections import defaultdict, deque

import pytest
import requests


class FakeResponse:
    def __init__(self, json_data=None, status_code=200):
        self._json = json_data
        self.status_code = status_code

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Returns queued responses for the first registered URL fragment found in the request URL."""

    def __init__(self):
        self.calls = []
        self._responses = defaultdict(deque)

    def add(self, url_fragment, json_data=None, status_code=200, error=None):
        self._responses[url_fragment].append(error or FakeResponse(json_data, status_code))

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'headers': headers, 'timeout': timeout})
        for fragment, queue in self._responses.items():
            if fragment in url and queue:
                response = queue.popleft()
                if isinstance(response, Exception):
                    raise response
                return response
        raise requests.ConnectionError(f"No fake response registered for {url}")

    def calls_to(self, url_fragment):
        return [call for call in self.calls if url_fragment in call['url']]


def google_payload(lat, lng, location_type="ROOFTOP", formatted="Curitiba - PR, Brasil",
                   state_short="PR", partial_match=False):
    return {
        "status": "OK",
        "results": [{
            "formatted_address": formatted,
            "partial_match": partial_match,
            "geometry": {"location": {"lat": lat, "lng": lng}, "location_type": location_type},
            "address_components": [
                {"long_name": "Curitiba", "short_name": "Curitiba",
                 "types": ["administrative_area_level_2", "political"]},
                {"long_name": "Paraná" if state_short == "PR" else "São Paulo", "short_name": state_short,
                 "types": ["administrative_area_level_1", "political"]},
                {"long_name": "Brasil", "short_name": "BR", "types": ["country", "political"]},
            ],
        }],
    }


def opencage_payload(lat, lng, formatted="Curitiba, Paraná, Brasil"):
    return {"results": [{"geometry": {"lat": lat, "lng": lng}, "formatted": formatted}]}


def nominatim_payload(lat, lng, display_name="Curitiba, Paraná, Brasil"):
    return [{"lat": str(lat), "lon": str(lng), "display_name": display_name}]


def osrm_payload(distance_m, duration_s, coordinates):
    return {
        "code": "Ok",
        "routes": [{
            "distance": distance_m,
            "duration": duration_s,
            "geometry": {"type": "LineString", "coordinates": coordinates},
        }],
    }


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def sleeps():
    """Collects requested delays; pass ``sleeps.append`` as the sleep callable."""
    return []
