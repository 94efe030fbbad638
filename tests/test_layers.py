import sys
from pathlib import Path

# Add project root to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))

from modules.reachability.adapter import MockIsolineBackend
from modules.reachability.layers import IsolineLayerGroup
from modules.reachability.map_surface import InMemoryMapSurface
from modules.reachability.normalizer import ResponseNormalizer
from modules.reachability.schemas import IsolineRequest, LatLng


def _result(lat=40.7580, lng=-73.9855, seconds=(600,)):
    request = IsolineRequest(
        profile="foot-walking",
        locations=[[lng, lat]],
        range_type="time",
        range=list(seconds),
    )
    raw = MockIsolineBackend().fetch(request)
    return ResponseNormalizer().normalize(raw, request, LatLng(lat=lat, lng=lng))


def test_add_attaches_group():
    surface = InMemoryMapSurface()
    group = IsolineLayerGroup(surface, pane="popupPane")
    assert not group.is_attached

    group.add(_result())
    assert group.is_attached
    assert surface.pane_of(group) == "popupPane"
    assert group.has_results
    assert len(group) == 1


def test_remove_one_keeps_others():
    surface = InMemoryMapSurface()
    group = IsolineLayerGroup(surface)
    first, second = _result(), _result(lat=40.75)
    group.add(first)
    group.add(second)

    assert group.remove_one(first) is True
    assert group.results == [second]
    assert group.is_attached
    assert group.remove_one(first) is False


def test_removing_last_result_detaches():
    surface = InMemoryMapSurface()
    group = IsolineLayerGroup(surface)
    only = _result()
    group.add(only)

    group.remove_one(only)
    assert not group.has_results
    assert not group.is_attached
    assert surface.layers == []


def test_remove_all():
    surface = InMemoryMapSurface()
    group = IsolineLayerGroup(surface)
    group.add(_result())
    group.add(_result(seconds=(300, 600)))

    group.remove_all()
    assert not group.is_attached
    assert group.to_geojson() == {"type": "FeatureCollection", "features": []}


def test_to_geojson_flattens_results_in_order():
    group = IsolineLayerGroup(InMemoryMapSurface())
    first = _result()
    second = _result(seconds=(300, 600))
    group.add(first)
    group.add(second)

    features = group.to_geojson()["features"]
    assert [f["geometry"]["type"] for f in features] == ["Polygon", "Point", "Polygon", "Polygon", "Point"]
    assert features[0]["properties"]["Range"] == 10.0
    assert features[2]["properties"]["Range"] == 5.0
    assert features[1]["geometry"]["coordinates"] == (-73.9855, 40.7580)


def test_lookup_by_id():
    group = IsolineLayerGroup(InMemoryMapSurface())
    result = _result()
    group.add(result)
    assert group.get(result.result_id) is result
    assert group.get("missing") is None


def test_bind_moves_group_to_new_surface():
    old, new = InMemoryMapSurface(), InMemoryMapSurface()
    group = IsolineLayerGroup(old, pane="popupPane")
    group.add(_result())

    group.bind(new)
    assert old.layers == []
    assert new.pane_of(group) == "popupPane"


def test_bind_empty_group_stays_detached():
    surface = InMemoryMapSurface()
    group = IsolineLayerGroup(InMemoryMapSurface())
    group.bind(surface)
    assert not group.is_attached
