import sys
from pathlib import Path

# Add project root to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))

import pytest
from pydantic import ValidationError

from modules.reachability.ranges import (
    RangeConfigurationStore,
    decimal_places,
    format_number,
    generate_buckets,
)
from modules.reachability.schemas import ReachabilityOptions


def test_decimal_places():
    assert decimal_places(0.5) == 1
    assert decimal_places(3) == 0
    assert decimal_places(3.0) == 0
    assert decimal_places(0.25) == 2
    assert format_number(1.0) == "1"
    assert format_number(1.5) == "1.5"


def test_distance_buckets_default():
    assert generate_buckets(0.5, 3) == [0.5, 1.0, 1.5, 2.0, 2.5, 3.0]


def test_time_buckets_default():
    assert generate_buckets(5, 30) == [5, 10, 15, 20, 25, 30]


@pytest.mark.parametrize(
    "interval, maximum",
    [(0.1, 1), (0.2, 3), (0.3, 2.4), (0.25, 2), (0.05, 0.5), (1.5, 9), (0.7, 5)],
)
def test_buckets_have_no_float_drift(interval, maximum):
    places = max(decimal_places(interval), decimal_places(maximum))
    values = generate_buckets(interval, maximum)

    assert values
    for value in values:
        assert decimal_places(value) <= places
        assert value <= maximum
    for prev, cur in zip(values, values[1:]):
        assert cur > prev


def test_buckets_drift_corrected_in_place():
    values = generate_buckets(0.1, 0.5)
    assert [format_number(v) for v in values] == ["0.1", "0.2", "0.3", "0.4", "0.5"]


def test_buckets_reject_non_positive_interval():
    with pytest.raises(ValueError):
        generate_buckets(0, 3)


def test_store_defaults_from_options():
    store = RangeConfigurationStore.from_options(ReachabilityOptions())
    assert store.range_type == "time"
    assert store.selected_time == 10
    assert store.selected_distance == 1
    assert store.selected_value == 10
    assert store.units == "min"
    assert store.show_intervals is False


def test_store_falls_back_to_first_bucket():
    store = RangeConfigurationStore([1, 2], [5, 10], selected_distance=7, selected_time=3)
    assert store.selected_distance == 1
    assert store.selected_time == 5


def test_set_range_type_is_idempotent():
    store = RangeConfigurationStore.from_options(ReachabilityOptions())
    assert store.set_range_type(True) is True
    assert store.set_range_type(True) is False
    assert store.range_type == "distance"
    assert store.selected_value == 1
    assert store.units == "km"


def test_select_value_outside_active_list_is_rejected():
    store = RangeConfigurationStore.from_options(ReachabilityOptions())
    assert store.select_value(12) is False
    assert store.selected_time == 10

    # distance bucket while time is active
    assert store.select_value(2.5) is False
    assert store.selected_time == 10

    assert store.select_value(20) is True
    assert store.selected_time == 20
    assert store.selected_distance == 1


def test_values_up_to_selected():
    store = RangeConfigurationStore.from_options(ReachabilityOptions())
    store.select_value(15)
    assert store.values_up_to_selected() == [5, 10, 15]


def test_explicit_bucket_lists():
    options = ReachabilityOptions(range_control_time=[2, 4, 8], range_control_time_default=4)
    store = RangeConfigurationStore.from_options(options)
    assert store.time_values == (2, 4, 8)
    assert store.selected_time == 4
    assert store.labels() == ["2 min", "4 min", "8 min"]


def test_explicit_bucket_list_must_ascend():
    with pytest.raises(ValidationError):
        ReachabilityOptions(range_control_distance=[1, 1, 2])
