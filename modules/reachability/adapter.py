import logging
import math
from typing import Any, Dict, List, Optional

import requests

from core.exceptions import EmptyResultFailure, ServiceFailure, TransportFailure
from .schemas import IsolineRequest

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"

ORS_ACCEPT = "application/json, application/geo+json, application/gpx+xml, img/png; charset=utf-8"

# Offline approximation: km covered per minute of travel
MOCK_KM_PER_MINUTE = {
    "foot-walking": 0.08,
    "cycling-regular": 0.25,
    "driving-car": 0.50,
}
MOCK_DEFAULT_KM_PER_MINUTE = 0.15
KM_PER_DEGREE = 111.32
MOCK_CIRCLE_VERTICES = 32

DISTANCE_UNIT_TO_KM = {
    "m": 0.001,
    "km": 1.0,
    "mi": 1.609344,
}


def is_real_api_key(api_key: Optional[str]) -> bool:
    key = (api_key or "").strip()
    return bool(key) and key != PLACEHOLDER_API_KEY


def mock_circle(lat: float, lng: float, radius_km: float, vertices: int = MOCK_CIRCLE_VERTICES) -> Dict[str, Any]:
    """
    Closed polygon approximating a circle around (lat, lng).
    Equirectangular: degrees = km / 111.32, longitude widened by 1/cos(lat).
    """
    radius_deg = radius_km / KM_PER_DEGREE
    lng_scale = math.cos(math.radians(lat))
    ring: List[List[float]] = []
    for i in range(vertices):
        angle = (i / vertices) * 2 * math.pi
        ring.append([
            lng + radius_deg * math.sin(angle) / lng_scale,
            lat + radius_deg * math.cos(angle),
        ])
    ring.append(list(ring[0]))
    return {"type": "Polygon", "coordinates": [ring]}


class IsolineBackend:
    """Computes a raw isoline FeatureCollection for a request."""

    is_mock = False

    def fetch(self, request: IsolineRequest) -> Dict[str, Any]:
        raise NotImplementedError


class LiveIsolineBackend(IsolineBackend):
    """
    openrouteservice isochrones endpoint. One POST per request, no retries.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openrouteservice.org/v2/isochrones",
        timeout_s: float = 60,
        session: Optional[Any] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    def url_for(self, profile: str) -> str:
        return f"{self._base_url}/{profile}"

    def fetch(self, request: IsolineRequest) -> Dict[str, Any]:
        url = self.url_for(request.profile)
        headers = {
            "Accept": ORS_ACCEPT,
            "Authorization": self._api_key,
            "Content-Type": "application/json; charset=utf-8",
        }
        logger.info(
            "Requesting isolines: %s | key: %s... | %s %s",
            url, self._api_key[:8], request.range_type, request.range,
        )

        try:
            resp = self._session.post(url, json=request.to_payload(), headers=headers, timeout=self._timeout_s)
        except requests.RequestException as e:
            logger.error(f"Isoline service connection failed: {e}")
            raise TransportFailure("Isoline service unreachable", original_error=str(e))

        if resp.status_code != 200:
            logger.error("Isoline service responded %s: %s", resp.status_code, resp.text[:500])
            raise ServiceFailure(
                "Isoline service response was not successful",
                status_code=resp.status_code,
                body=resp.text[:500],
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ServiceFailure("Isoline service returned invalid JSON", status_code=resp.status_code, body=str(e))

        features = data.get("features") if isinstance(data, dict) else None
        if not features:
            logger.warning("Isoline service returned no features.")
            raise EmptyResultFailure()
        return data


class MockIsolineBackend(IsolineBackend):
    """
    Fallback used when no real credential is configured: one circle per
    requested range step, shaped like a service response.
    """

    is_mock = True

    def __init__(self, distance_units: str = "km"):
        self._distance_units = distance_units

    def radius_km(self, request: IsolineRequest, value: float) -> float:
        if request.range_type == "distance":
            units = request.units or self._distance_units
            return value * DISTANCE_UNIT_TO_KM.get(units, 1.0)
        minutes = value / 60
        return minutes * MOCK_KM_PER_MINUTE.get(request.profile, MOCK_DEFAULT_KM_PER_MINUTE)

    def raw_value(self, request: IsolineRequest, value: float) -> float:
        # Service values are seconds or meters
        if request.range_type == "distance":
            return self.radius_km(request, value) * 1000
        return value

    def fetch(self, request: IsolineRequest) -> Dict[str, Any]:
        lng, lat = request.locations[0]
        features = []
        for value in request.range:
            radius_km = self.radius_km(request, value)
            logger.warning(f"Using Fallback Isoline: radius {radius_km:.2f}km for {request.profile}")
            features.append({
                "type": "Feature",
                "properties": {
                    "group_index": 0,
                    "value": self.raw_value(request, value),
                    "center": [lng, lat],
                },
                "geometry": mock_circle(lat, lng, radius_km),
            })
        return {"type": "FeatureCollection", "features": features}


def select_backend(
    api_key: Optional[str],
    base_url: str = "https://api.openrouteservice.org/v2/isochrones",
    timeout_s: float = 60,
    distance_units: str = "km",
    session: Optional[Any] = None,
) -> IsolineBackend:
    """Live backend when a real credential is configured, otherwise the mock."""
    if is_real_api_key(api_key):
        return LiveIsolineBackend(api_key.strip(), base_url=base_url, timeout_s=timeout_s, session=session)
    logger.warning("No isoline service key configured, using the offline approximation")
    return MockIsolineBackend(distance_units=distance_units)
