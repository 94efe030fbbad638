import sys
from pathlib import Path

# Add project root to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))

from modules.reachability.ranges import RangeConfigurationStore
from modules.reachability.request_builder import RequestBuilder
from modules.reachability.schemas import LatLng, ReachabilityOptions
from modules.reachability.travel_modes import TravelModeSelector

TIMES_SQUARE = LatLng(lat=40.7580, lng=-73.9855)


def _builder(**option_overrides):
    options = ReachabilityOptions(**option_overrides)
    ranges = RangeConfigurationStore.from_options(options)
    modes = TravelModeSelector.from_options(options)
    builder = RequestBuilder(ranges, modes, attributes=options.attributes, smoothing=options.smoothing)
    return builder, ranges, modes


def test_time_request_single_value_in_seconds():
    builder, _, _ = _builder()
    request = builder.build(TIMES_SQUARE)

    assert request.profile == "driving-car"
    assert request.range_type == "time"
    assert request.range == [600]
    assert request.units is None
    assert request.locations == [[-73.9855, 40.7580]]
    assert request.attributes == ["area", "reachfactor", "total_pop"]
    assert request.smoothing == 5


def test_time_request_with_intervals():
    builder, ranges, _ = _builder()
    ranges.select_value(15)
    ranges.toggle_intervals(True)

    assert builder.build(TIMES_SQUARE).range == [300, 600, 900]


def test_distance_request_keeps_units():
    builder, ranges, _ = _builder(range_type_default="distance")
    ranges.select_value(1.5)

    request = builder.build(TIMES_SQUARE)
    assert request.range_type == "distance"
    assert request.units == "km"
    assert request.range == [1.5]

    ranges.toggle_intervals(True)
    assert builder.build(TIMES_SQUARE).range == [0.5, 1.0, 1.5]


def test_intervals_with_smallest_bucket_selected():
    builder, ranges, _ = _builder()
    ranges.select_value(5)
    ranges.toggle_intervals(True)
    assert builder.build(TIMES_SQUARE).range == [300]


def test_request_follows_active_travel_mode():
    builder, _, modes = _builder()
    assert modes.set_mode("foot-walking")
    assert builder.build(TIMES_SQUARE).profile == "foot-walking"


def test_payload_excludes_profile_and_empty_units():
    builder, _, _ = _builder()
    payload = builder.build(TIMES_SQUARE).to_payload()

    assert "profile" not in payload
    assert "units" not in payload
    assert payload["range_type"] == "time"
    assert payload["locations"] == [[-73.9855, 40.7580]]
    assert set(payload) == {"locations", "range_type", "range", "attributes", "smoothing"}
