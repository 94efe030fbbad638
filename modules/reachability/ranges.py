import logging
import math
from typing import List, Optional, Sequence, Tuple, Union

from .schemas import RangeConfiguration, ReachabilityOptions

logger = logging.getLogger(__name__)

Number = Union[int, float]


def format_number(value: Number) -> str:
    """
    Render a number the way it is shown in the range lists:
    integral values without a fractional part, others in shortest form.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def decimal_places(value: Number) -> int:
    text = format_number(value)
    return len(text) - text.index(".") - 1 if "." in text else 0


def generate_buckets(interval: Number, maximum: Number) -> List[Number]:
    """
    Build the bucket list interval, 2*interval, ... <= maximum.

    Repeated float addition drifts (0.1 + 0.2 != 0.3), so whenever the naive
    rendering is longer than the fixed-decimal one the running value is
    replaced by its fixed-decimal form before the next step.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")

    places = max(decimal_places(interval), decimal_places(maximum))
    values: List[Number] = []
    current = interval
    while current <= maximum:
        fixed = f"{current:.{places}f}"
        if len(format_number(current)) > len(fixed):
            current = float(fixed)
        values.append(current)
        current += interval
    return values


def _find_bucket(values: Sequence[Number], value: Number) -> Optional[Number]:
    for bucket in values:
        if math.isclose(bucket, value, rel_tol=1e-9, abs_tol=1e-9):
            return bucket
    return None


class RangeConfigurationStore:
    """
    Distance and time bucket lists, the selection in each, which one is
    active and whether concentric intervals are requested.
    """

    def __init__(
        self,
        distance_values: Sequence[Number],
        time_values: Sequence[Number],
        selected_distance: Optional[Number] = None,
        selected_time: Optional[Number] = None,
        is_distance: bool = False,
        show_intervals: bool = False,
        distance_units: str = "km",
    ):
        if not distance_values or not time_values:
            raise ValueError("range bucket lists must not be empty")
        self._distance_values: Tuple[Number, ...] = tuple(distance_values)
        self._time_values: Tuple[Number, ...] = tuple(time_values)
        self._is_distance = is_distance
        self._show_intervals = show_intervals
        self.distance_units = distance_units

        self._selected_distance = self._initial(self._distance_values, selected_distance)
        self._selected_time = self._initial(self._time_values, selected_time)

    @staticmethod
    def _initial(values: Tuple[Number, ...], default: Optional[Number]) -> Number:
        if default is not None:
            bucket = _find_bucket(values, default)
            if bucket is not None:
                return bucket
            logger.debug("Default range %s not in %s, using first bucket", default, values)
        return values[0]

    @classmethod
    def from_options(cls, options: ReachabilityOptions) -> "RangeConfigurationStore":
        distance_values = options.range_control_distance or generate_buckets(
            options.range_control_distance_interval, options.range_control_distance_max
        )
        time_values = options.range_control_time or generate_buckets(
            options.range_control_time_interval, options.range_control_time_max
        )
        return cls(
            distance_values=distance_values,
            time_values=time_values,
            selected_distance=options.range_control_distance_default,
            selected_time=options.range_control_time_default,
            is_distance=options.range_type_default == "distance",
            show_intervals=options.show_intervals,
            distance_units=options.range_control_distance_units,
        )

    @property
    def is_distance(self) -> bool:
        return self._is_distance

    @property
    def range_type(self) -> str:
        return "distance" if self._is_distance else "time"

    @property
    def distance_values(self) -> Tuple[Number, ...]:
        return self._distance_values

    @property
    def time_values(self) -> Tuple[Number, ...]:
        return self._time_values

    @property
    def selected_distance(self) -> Number:
        return self._selected_distance

    @property
    def selected_time(self) -> Number:
        return self._selected_time

    @property
    def show_intervals(self) -> bool:
        return self._show_intervals

    @property
    def active_values(self) -> Tuple[Number, ...]:
        return self._distance_values if self._is_distance else self._time_values

    @property
    def selected_value(self) -> Number:
        return self._selected_distance if self._is_distance else self._selected_time

    @property
    def units(self) -> str:
        return self.distance_units if self._is_distance else "min"

    def set_range_type(self, is_distance: bool) -> bool:
        """Switch the active bucket list. Returns True when it changed."""
        if self._is_distance == is_distance:
            return False
        self._is_distance = is_distance
        return True

    def select_value(self, value: Number) -> bool:
        """Select a bucket of the active list; values outside it are rejected."""
        bucket = _find_bucket(self.active_values, value)
        if bucket is None:
            logger.debug("Rejected %s range %s, not in %s", self.range_type, value, self.active_values)
            return False
        if self._is_distance:
            self._selected_distance = bucket
        else:
            self._selected_time = bucket
        return True

    def toggle_intervals(self, show: bool) -> None:
        self._show_intervals = bool(show)

    def values_up_to_selected(self) -> List[Number]:
        selected = self.selected_value
        return [v for v in self.active_values if v <= selected]

    def labels(self) -> List[str]:
        return [f"{format_number(v)} {self.units}" for v in self.active_values]

    def snapshot(self) -> RangeConfiguration:
        return RangeConfiguration(
            is_distance=self._is_distance,
            distance_values=list(self._distance_values),
            time_values=list(self._time_values),
            selected_distance=self._selected_distance,
            selected_time=self._selected_time,
            distance_units=self.distance_units,
            show_intervals=self._show_intervals,
        )
