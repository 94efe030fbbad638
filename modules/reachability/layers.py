import logging
from typing import Any, Dict, Iterator, List, Optional

from .map_surface import MapSurface
from .models import IsolineResult

logger = logging.getLogger(__name__)

ORS_ATTRIBUTION = (
    '&copy; <a href="https://openrouteservice.org/" target="_blank">openrouteservice.org</a> by HeiGIT | '
    'Map data &copy; <a href="https://www.openstreetmap.org/copyright" target="_blank">OpenStreetMap</a> contributors'
)


class IsolineLayerGroup:
    """
    All isoline results of a session, in creation order.
    The group sits on the map surface exactly while it holds results.
    """

    def __init__(self, map_surface: MapSurface, pane: str = "overlayPane", attribution: str = ORS_ATTRIBUTION):
        self._map = map_surface
        self.pane = pane
        self.attribution = attribution
        self._results: List[IsolineResult] = []

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[IsolineResult]:
        return iter(list(self._results))

    def __contains__(self, result: object) -> bool:
        return any(r is result for r in self._results)

    @property
    def results(self) -> List[IsolineResult]:
        return list(self._results)

    @property
    def has_results(self) -> bool:
        return bool(self._results)

    @property
    def is_attached(self) -> bool:
        return self._map.has_layer(self)

    def get(self, result_id: str) -> Optional[IsolineResult]:
        for result in self._results:
            if result.result_id == result_id:
                return result
        return None

    def add(self, result: IsolineResult) -> None:
        self._results.append(result)
        if not self.is_attached:
            self._map.add_layer(self, self.pane)

    def remove_one(self, result: IsolineResult) -> bool:
        """Remove one result with all its features and marker."""
        if result not in self:
            return False
        self._results = [r for r in self._results if r is not result]
        if not self._results:
            self.detach()
        return True

    def remove_all(self) -> None:
        self._results.clear()
        self.detach()

    def bind(self, map_surface: MapSurface) -> None:
        """Move the group to a map surface; attached there iff it holds results."""
        if map_surface is not self._map:
            self.detach()
            self._map = map_surface
        if self._results and not self.is_attached:
            self._map.add_layer(self, self.pane)

    def detach(self) -> None:
        if self.is_attached:
            self._map.remove_layer(self)

    def to_geojson(self) -> Dict[str, Any]:
        features: List[Dict[str, Any]] = []
        for result in self._results:
            features.extend(result.to_geojson_features())
        return {"type": "FeatureCollection", "features": features}
