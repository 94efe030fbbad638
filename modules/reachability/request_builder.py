from typing import List, Optional, Sequence

from .ranges import RangeConfigurationStore
from .schemas import IsolineRequest, LatLng
from .travel_modes import TravelModeSelector

SECONDS_PER_MINUTE = 60


class RequestBuilder:
    """
    Turns a clicked point plus the current range and travel-mode selection
    into an isoline request descriptor.
    """

    def __init__(
        self,
        ranges: RangeConfigurationStore,
        modes: TravelModeSelector,
        attributes: Optional[Sequence[str]] = None,
        smoothing: float = 5,
    ):
        self._ranges = ranges
        self._modes = modes
        self._attributes = list(attributes if attributes is not None else ("area", "reachfactor", "total_pop"))
        self._smoothing = smoothing

    def range_list(self) -> List[float]:
        # Time buckets are minutes in the UI and seconds on the wire
        if self._ranges.show_intervals:
            values = self._ranges.values_up_to_selected()
        else:
            values = [self._ranges.selected_value]
        if self._ranges.is_distance:
            return list(values)
        return [v * SECONDS_PER_MINUTE for v in values]

    def build(self, point: LatLng) -> IsolineRequest:
        return IsolineRequest(
            profile=self._modes.active,
            locations=[[point.lng, point.lat]],
            range_type=self._ranges.range_type,
            units=self._ranges.distance_units if self._ranges.is_distance else None,
            range=self.range_list(),
            attributes=self._attributes,
            smoothing=self._smoothing,
        )
