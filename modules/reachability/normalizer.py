import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from shapely.errors import ShapelyError
from shapely.geometry import shape

from core.exceptions import EmptyResultFailure, ServiceFailure
from .models import FeatureEvent, IsolineFeature, IsolineResult, OriginMarker
from .schemas import IsolineRequest, LatLng

logger = logging.getLogger(__name__)

DEFAULT_MARKER_STYLE = {"radius": 3, "weight": 0, "fillColor": "#0073d4", "fillOpacity": 1}


@dataclass
class HostCallbacks:
    """
    Styling and interaction hooks supplied by the host. All optional.

    style_fn(feature) -> style dict; marker_fn(latlng, travel_mode, range_type)
    -> marker style dict; the rest receive a FeatureEvent.
    """

    style_fn: Optional[Callable[[IsolineFeature], Optional[Dict[str, Any]]]] = None
    mouse_over_fn: Optional[Callable[[FeatureEvent], Any]] = None
    mouse_out_fn: Optional[Callable[[FeatureEvent], Any]] = None
    click_fn: Optional[Callable[[FeatureEvent], Any]] = None
    marker_fn: Optional[Callable[[LatLng, str, str], Dict[str, Any]]] = None
    marker_over_fn: Optional[Callable[[FeatureEvent], Any]] = None
    marker_out_fn: Optional[Callable[[FeatureEvent], Any]] = None
    marker_click_fn: Optional[Callable[[FeatureEvent], Any]] = None


def display_range(raw_value: float, range_type: str) -> float:
    """Seconds -> minutes or meters -> km, two decimals, halves rounded up."""
    divisor = 1000 if range_type == "distance" else 60
    return math.floor(raw_value / divisor * 100 + 0.5) / 100


class ResponseNormalizer:
    """
    Maps a raw isoline response onto an IsolineResult: display properties
    per feature, host callbacks attached, optional origin marker.

    `click_interceptor(result)` runs before the host click callback; when it
    returns True the click is consumed (delete mode).
    """

    def __init__(
        self,
        callbacks: Optional[HostCallbacks] = None,
        label_for: Callable[[str], str] = lambda profile: profile,
        distance_units: str = "km",
        show_origin_marker: bool = True,
        click_interceptor: Optional[Callable[[IsolineResult], bool]] = None,
    ):
        self.callbacks = callbacks or HostCallbacks()
        self._label_for = label_for
        self._distance_units = distance_units
        self._show_origin_marker = show_origin_marker
        self.click_interceptor = click_interceptor

    def normalize(self, raw: Dict[str, Any], request: IsolineRequest, point: LatLng) -> IsolineResult:
        if not isinstance(raw, dict):
            raise ServiceFailure("Isoline response is not a JSON object", body=type(raw).__name__)
        raw_features = raw.get("features") or []
        if not raw_features:
            raise EmptyResultFailure()
        if not isinstance(raw_features, list):
            raise ServiceFailure("Isoline response features is not a list", body=type(raw_features).__name__)

        is_distance = request.range_type == "distance"
        range_units = (request.units or self._distance_units) if is_distance else "min"
        label = self._label_for(request.profile)

        result = IsolineResult(
            origin_lat=point.lat,
            origin_lng=point.lng,
            travel_mode=request.profile,
            range_type=request.range_type,
        )
        for item in raw_features:
            result.features.append(self._to_feature(item, request, label, range_units, result))

        if self._show_origin_marker:
            result.marker = self._origin_marker(point, request, result)
        return result

    def _to_feature(
        self,
        item: Dict[str, Any],
        request: IsolineRequest,
        label: str,
        range_units: str,
        result: IsolineResult,
    ) -> IsolineFeature:
        try:
            props = item.get("properties") or {}
            center = props.get("center") or [result.origin_lng, result.origin_lat]
            feature = IsolineFeature(
                geometry=shape(item["geometry"]),
                travel_mode_label=label,
                range_value=display_range(float(props["value"]), request.range_type),
                range_units=range_units,
                latitude=float(center[1]),
                longitude=float(center[0]),
            )
        except (KeyError, IndexError, TypeError, ValueError, AttributeError, ShapelyError) as e:
            raise ServiceFailure("Malformed isoline feature", body=str(e))

        if "area" in props:
            feature.area_value = props["area"]
            feature.area_units = f"{request.units or self._distance_units}^2"
        if "total_pop" in props:
            feature.population = props["total_pop"]
        if "reachfactor" in props:
            feature.reach_factor = props["reachfactor"]

        cb = self.callbacks
        if cb.style_fn is not None:
            feature.style = cb.style_fn(feature)
        feature.handlers = self._handlers(result, cb.mouse_over_fn, cb.mouse_out_fn, cb.click_fn)
        return feature

    def _origin_marker(self, point: LatLng, request: IsolineRequest, result: IsolineResult) -> OriginMarker:
        cb = self.callbacks
        if cb.marker_fn is not None:
            style = cb.marker_fn(point, request.profile, request.range_type)
        else:
            style = dict(DEFAULT_MARKER_STYLE)
        marker = OriginMarker(lat=point.lat, lng=point.lng, style=style or {})
        marker.handlers = self._handlers(result, cb.marker_over_fn, cb.marker_out_fn, cb.marker_click_fn)
        return marker

    def _handlers(self, result: IsolineResult, over_fn, out_fn, click_fn) -> Dict[str, Callable[[FeatureEvent], Any]]:
        def mouseover(event: FeatureEvent):
            event.result = result
            if over_fn is not None:
                return over_fn(event)

        def mouseout(event: FeatureEvent):
            event.result = result
            if out_fn is not None:
                return out_fn(event)

        def click(event: FeatureEvent):
            event.result = result
            if self.click_interceptor is not None and self.click_interceptor(result):
                return True
            if click_fn is not None:
                return click_fn(event)

        return {"mouseover": mouseover, "mouseout": mouseout, "click": click}
