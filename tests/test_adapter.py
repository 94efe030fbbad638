import math
import sys
from pathlib import Path

# Add project root to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))

import pytest
import requests

from core.exceptions import EmptyResultFailure, ServiceFailure, TransportFailure
from modules.reachability.adapter import (
    KM_PER_DEGREE,
    LiveIsolineBackend,
    MockIsolineBackend,
    is_real_api_key,
    mock_circle,
    select_backend,
)
from modules.reachability.schemas import IsolineRequest

LAT = 40.7580
LNG = -73.9855


def _request(**kwargs):
    values = {
        "profile": "foot-walking",
        "locations": [[LNG, LAT]],
        "range_type": "time",
        "range": [600],
        "attributes": ["area", "reachfactor", "total_pop"],
        "smoothing": 5,
    }
    values.update(kwargs)
    return IsolineRequest(**values)


def _distance_km(lat, lng, lat0=LAT, lng0=LNG):
    dy = (lat - lat0) * KM_PER_DEGREE
    dx = (lng - lng0) * KM_PER_DEGREE * math.cos(math.radians(lat0))
    return math.hypot(dx, dy)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def test_mock_circle_shape():
    geometry = mock_circle(LAT, LNG, 0.8)
    ring = geometry["coordinates"][0]

    assert geometry["type"] == "Polygon"
    assert len(ring) == 33
    assert ring[0] == ring[-1]
    assert len({tuple(pt) for pt in ring[:-1]}) == 32
    for lng, lat in ring:
        assert _distance_km(lat, lng) == pytest.approx(0.8, abs=1e-9)


def test_mock_walking_ten_minutes():
    data = MockIsolineBackend().fetch(_request())

    assert data["type"] == "FeatureCollection"
    assert len(data["features"]) == 1
    feature = data["features"][0]
    assert feature["properties"]["value"] == 600
    assert feature["properties"]["center"] == [LNG, LAT]
    lng, lat = feature["geometry"]["coordinates"][0][0]
    assert _distance_km(lat, lng) == pytest.approx(10 * 0.08, abs=1e-9)


@pytest.mark.parametrize(
    "profile, km_per_minute",
    [("cycling-regular", 0.25), ("driving-car", 0.5), ("wheelchair", 0.15)],
)
def test_mock_radius_per_mode(profile, km_per_minute):
    data = MockIsolineBackend().fetch(_request(profile=profile, range=[1200]))
    lng, lat = data["features"][0]["geometry"]["coordinates"][0][5]
    assert _distance_km(lat, lng) == pytest.approx(20 * km_per_minute, abs=1e-9)


def test_mock_one_circle_per_interval():
    data = MockIsolineBackend().fetch(_request(range=[300, 600, 900]))
    assert [f["properties"]["value"] for f in data["features"]] == [300, 600, 900]


def test_mock_distance_request():
    data = MockIsolineBackend().fetch(_request(range_type="distance", units="km", range=[1.5]))
    feature = data["features"][0]
    assert feature["properties"]["value"] == pytest.approx(1500)
    lng, lat = feature["geometry"]["coordinates"][0][0]
    assert _distance_km(lat, lng) == pytest.approx(1.5, abs=1e-9)


def test_select_backend():
    assert isinstance(select_backend(""), MockIsolineBackend)
    assert isinstance(select_backend(None), MockIsolineBackend)
    assert isinstance(select_backend("YOUR_API_KEY_HERE"), MockIsolineBackend)
    assert isinstance(select_backend("5b3ce3597851110001cf6248"), LiveIsolineBackend)
    assert is_real_api_key("  ") is False


def test_live_request_shape():
    payload = {"type": "FeatureCollection", "features": [{"type": "Feature", "properties": {"value": 600}}]}
    session = FakeSession(FakeResponse(200, payload))
    backend = LiveIsolineBackend("secret-key", base_url="https://ors.example/v2/isochrones/", timeout_s=7, session=session)

    assert backend.fetch(_request()) == payload
    call = session.calls[0]
    assert call["url"] == "https://ors.example/v2/isochrones/foot-walking"
    assert call["headers"]["Authorization"] == "secret-key"
    assert call["headers"]["Content-Type"].startswith("application/json")
    assert call["timeout"] == 7
    assert call["json"]["range"] == [600]
    assert "profile" not in call["json"]


def test_live_non_success_status():
    session = FakeSession(FakeResponse(403, text="Access to this API has been disallowed"))
    backend = LiveIsolineBackend("secret-key", session=session)

    with pytest.raises(ServiceFailure) as info:
        backend.fetch(_request())
    assert info.value.status_code == 403
    assert info.value.events == ("error", "no_data")


def test_live_empty_features():
    session = FakeSession(FakeResponse(200, {"type": "FeatureCollection", "features": []}))
    backend = LiveIsolineBackend("secret-key", session=session)

    with pytest.raises(EmptyResultFailure) as info:
        backend.fetch(_request())
    assert info.value.events == ("no_data",)


def test_live_invalid_json():
    session = FakeSession(FakeResponse(200, invalid_json=True))
    backend = LiveIsolineBackend("secret-key", session=session)

    with pytest.raises(ServiceFailure):
        backend.fetch(_request())


def test_live_transport_error():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    backend = LiveIsolineBackend("secret-key", session=session)

    with pytest.raises(TransportFailure) as info:
        backend.fetch(_request())
    assert info.value.code == 502
    assert "connection refused" in info.value.payload["original_error"]
