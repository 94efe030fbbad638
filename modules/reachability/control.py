"""
Reachability control: click a point in draw mode, get isolines.

Wires the range and travel-mode stores, the interaction state machine,
the isoline service client and the layer group of one map session.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from core.exceptions import BizError, PreconditionFailure, ReachabilityFailure
from utils.exporter import export_geojson
from . import events as ev
from .adapter import IsolineBackend, select_backend
from .client import IsolineServiceClient
from .layers import IsolineLayerGroup
from .map_surface import MapSurface
from .models import IsolineResult
from .normalizer import HostCallbacks, ResponseNormalizer
from .ranges import RangeConfigurationStore
from .request_builder import RequestBuilder
from .schemas import ControlState, LatLng, ReachabilityOptions
from .state import DRAW_CONTROL, InteractionStateMachine
from .travel_modes import TravelModeSelector

logger = logging.getLogger(__name__)


@dataclass
class ExportArtifact:
    filename: str
    content: bytes
    document: Dict[str, Any]


class ReachabilityControl:
    version = "2.0.1"

    def __init__(
        self,
        options: Optional[ReachabilityOptions] = None,
        callbacks: Optional[HostCallbacks] = None,
        backend: Optional[IsolineBackend] = None,
        bus: Optional[ev.EventBus] = None,
        **state_kwargs: Any,
    ):
        self.options = options or ReachabilityOptions.from_settings()
        self.events = bus or ev.EventBus()

        self.ranges = RangeConfigurationStore.from_options(self.options)
        self.modes = TravelModeSelector.from_options(self.options)
        self.state = InteractionStateMachine(
            self.events,
            collapsed=self.options.collapsed,
            error_duration_s=self.options.error_indicator_s,
            **state_kwargs,
        )
        self.normalizer = ResponseNormalizer(
            callbacks,
            label_for=self.modes.label_for,
            distance_units=self.options.range_control_distance_units,
            show_origin_marker=self.options.show_origin_marker,
            click_interceptor=self._intercept_click,
        )
        self.builder = RequestBuilder(
            self.ranges,
            self.modes,
            attributes=self.options.attributes,
            smoothing=self.options.smoothing,
        )
        self.client = IsolineServiceClient(
            backend or select_backend(
                self.options.api_key,
                base_url=self.options.service_url,
                timeout_s=self.options.timeout_s,
                distance_units=self.options.range_control_distance_units,
            ),
            self.builder,
            self.normalizer,
            self.state,
            self.events,
        )
        self._map: Optional[MapSurface] = None
        self.layers: Optional[IsolineLayerGroup] = None

    # ---------------------------------------------------------------- lifecycle

    @property
    def is_added(self) -> bool:
        return self._map is not None

    def on_add(self, map_surface: MapSurface) -> "ReachabilityControl":
        self._map = map_surface
        if self.layers is None:
            self.layers = IsolineLayerGroup(map_surface, pane=self.options.pane)
        else:
            self.layers.bind(map_surface)
        self.state.set_draw_mode(False)
        self.events.fire(ev.CONTROL_ADDED, version=self.version)
        return self

    def on_remove(self) -> None:
        if not self.is_added:
            return
        self.state.set_draw_mode(False)
        self.state.invalidate_requests()
        if self.layers is not None:
            self.layers.detach()
        self._map = None
        self.events.fire(ev.CONTROL_REMOVED)

    def _require_layers(self) -> IsolineLayerGroup:
        if not self.is_added or self.layers is None:
            raise BizError("Reachability control is not added to a map", code=409)
        return self.layers

    # ------------------------------------------------------------------ modes

    def toggle_draw(self) -> bool:
        self._require_layers()
        return self.state.toggle_draw()

    def set_draw_mode(self, active: bool) -> bool:
        self._require_layers()
        self.state.set_draw_mode(active)
        return self.state.is_draw_active

    def toggle_delete(self) -> bool:
        layers = self._require_layers()
        return self.state.toggle_delete(has_results=layers.has_results)

    def expand(self) -> None:
        self.state.expand()

    def collapse(self) -> None:
        self.state.collapse()

    # ------------------------------------------------------------- selections

    def set_range_type(self, range_type: str) -> bool:
        if range_type not in ("time", "distance"):
            return False
        self.ranges.set_range_type(range_type == "distance")
        return True

    def select_range(self, value: float) -> bool:
        return self.ranges.select_value(value)

    def toggle_intervals(self, show: bool) -> None:
        self.ranges.toggle_intervals(show)

    def set_travel_mode(self, profile: str) -> bool:
        return self.modes.set_mode(profile)

    def select_travel_mode_slot(self, slot: int) -> bool:
        return self.modes.select_slot(slot)

    # ---------------------------------------------------------------- drawing

    async def click(self, lat: float, lng: float) -> Optional[IsolineResult]:
        """
        Map click. Only acts in draw mode; returns the displayed result, or
        None when the click was ignored or the request failed.
        """
        if not self.is_added:
            logger.debug("Click on a removed control ignored")
            return None
        if not self.state.is_draw_active:
            logger.debug("Click at (%s, %s) ignored, draw mode is off", lat, lng)
            return None

        point = LatLng(lat=lat, lng=lng)
        try:
            result = await self.client.submit(point)
        except ReachabilityFailure as exc:
            self._handle_failure(exc)
            return None

        if result is None or not self.is_added or self.layers is None:
            return None
        self.layers.add(result)
        self.events.fire(ev.DISPLAYED, result_id=result.result_id, features=len(result.features))
        return result

    def _handle_failure(self, exc: ReachabilityFailure) -> None:
        logger.warning("Isoline request failed: %s %s", exc.message, exc.payload or "")
        for name in exc.events:
            self.events.fire(name, message=exc.message, detail=exc.payload)
        self.state.flag_error(DRAW_CONTROL)
        self.state.set_draw_mode(False)

    # --------------------------------------------------------------- deleting

    def _intercept_click(self, result: IsolineResult) -> bool:
        if not self.state.is_delete_active or self.layers is None:
            return False
        self.delete_result(result)
        return True

    def delete_result(self, result: IsolineResult) -> bool:
        layers = self._require_layers()
        if not layers.remove_one(result):
            return False
        self.events.fire(ev.DELETE, result_id=result.result_id, remaining=len(layers))
        if not layers.has_results:
            self.state.set_delete_mode(False)
            self.events.fire(ev.CLEARED)
        return True

    def click_result(self, result_id: str, target: str = "feature") -> bool:
        """
        Click on a drawn feature or origin marker. In delete mode this removes
        the whole result; otherwise the host click callback runs.
        Returns True when the result was deleted.
        """
        layers = self._require_layers()
        result = layers.get(result_id)
        if result is None:
            raise BizError("Isoline result not found", code=404, payload={"result_id": result_id})
        member = result.marker if target == "marker" and result.marker is not None else result.features[0]
        member.fire("click")
        return result not in layers

    def clear_all(self) -> None:
        layers = self._require_layers()
        layers.remove_all()
        self.state.set_delete_mode(False)
        self.events.fire(ev.CLEARED)

    # ----------------------------------------------------------------- export

    def to_geojson(self) -> Dict[str, Any]:
        return self._require_layers().to_geojson()

    def export(self, now: Optional[datetime] = None) -> ExportArtifact:
        layers = self._require_layers()
        if not layers.has_results:
            raise PreconditionFailure("No reachability data to export")
        document = layers.to_geojson()
        filename, content = export_geojson(document, self.options.export_area_label, now)
        self.events.fire(ev.EXPORTED, filename=filename, data=document)
        return ExportArtifact(filename, content, document)

    def snapshot(self) -> ControlState:
        return ControlState(
            version=self.version,
            interaction=self.state.snapshot(),
            ranges=self.ranges.snapshot(),
            travel_mode=self.modes.snapshot(),
            result_count=len(self.layers) if self.layers is not None else 0,
            attached=bool(self.is_added and self.layers is not None and self.layers.is_attached),
            mock=self.client.is_mock,
        )
