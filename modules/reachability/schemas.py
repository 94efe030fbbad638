from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import Settings, settings as default_settings

RangeType = Literal["time", "distance"]


class LatLng(BaseModel):
    """
    Geographic point as delivered by the map surface.
    """
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)


class IsolineRequest(BaseModel):
    """
    Request descriptor for the isoline service.
    `profile` selects the endpoint, everything else goes into the JSON body.
    """
    profile: str = Field(..., description="Travel profile, e.g. foot-walking")
    locations: List[List[float]] = Field(..., description="[[lon, lat]]")
    range_type: RangeType
    units: Optional[str] = Field(None, description="Distance units, distance requests only")
    range: List[float] = Field(..., min_length=1, description="Seconds or distance units, ascending")
    attributes: List[str] = Field(default_factory=list)
    smoothing: float = 5

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"profile"}, exclude_none=True)


class ReachabilityOptions(BaseModel):
    """
    Options a control is constructed from.
    """
    model_config = ConfigDict(extra="ignore")

    pane: str = "overlayPane"
    collapsed: bool = True

    range_type_default: RangeType = "time"
    range_control_distance: Optional[List[float]] = Field(
        None, description="Explicit distance buckets, replaces interval/max generation"
    )
    range_control_distance_interval: float = Field(0.5, gt=0)
    range_control_distance_max: float = Field(3, gt=0)
    range_control_distance_units: str = "km"
    range_control_distance_default: float = 1
    range_control_time: Optional[List[float]] = Field(
        None, description="Explicit time buckets in minutes"
    )
    range_control_time_interval: float = Field(5, gt=0)
    range_control_time_max: float = Field(30, gt=0)
    range_control_time_default: float = 10
    show_intervals: bool = False

    travel_mode_profile_1: Optional[str] = "driving-car"
    travel_mode_profile_2: Optional[str] = "cycling-regular"
    travel_mode_profile_3: Optional[str] = "foot-walking"
    travel_mode_profile_4: Optional[str] = "wheelchair"
    travel_mode_default: str = "driving-car"

    api_key: str = ""
    service_url: str = "https://api.openrouteservice.org/v2/isochrones"
    timeout_s: float = 60
    smoothing: float = 5
    attributes: List[str] = Field(default_factory=lambda: ["area", "reachfactor", "total_pop"])

    show_origin_marker: bool = True
    error_indicator_s: float = 0.5
    export_area_label: str = "Manhattan"

    @field_validator("range_control_distance", "range_control_time")
    @classmethod
    def _validate_buckets(cls, value):
        if value is None:
            return value
        if not value:
            raise ValueError("bucket list must not be empty")
        for prev, cur in zip(value, value[1:]):
            if cur <= prev:
                raise ValueError("bucket list must be strictly ascending")
        return value

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **overrides: Any) -> "ReachabilityOptions":
        config = config or default_settings
        values = {
            "collapsed": config.control_collapsed,
            "range_type_default": config.range_type_default,
            "range_control_distance_interval": config.range_distance_interval,
            "range_control_distance_max": config.range_distance_max,
            "range_control_distance_units": config.range_distance_units,
            "range_control_distance_default": config.range_distance_default,
            "range_control_time_interval": config.range_time_interval,
            "range_control_time_max": config.range_time_max,
            "range_control_time_default": config.range_time_default,
            "travel_mode_profile_1": config.travel_mode_profile_1,
            "travel_mode_profile_2": config.travel_mode_profile_2,
            "travel_mode_profile_3": config.travel_mode_profile_3,
            "travel_mode_profile_4": config.travel_mode_profile_4,
            "travel_mode_default": config.travel_mode_default,
            "api_key": config.ors_api_key,
            "service_url": config.ors_base_url,
            "timeout_s": config.ors_timeout_s,
            "smoothing": config.isoline_smoothing,
            "attributes": list(config.isoline_attributes),
            "show_origin_marker": config.show_origin_marker,
            "error_indicator_s": config.error_indicator_s,
            "export_area_label": config.export_area_label,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class RangeConfiguration(BaseModel):
    """Snapshot of the range store."""
    is_distance: bool
    distance_values: List[float]
    time_values: List[float]
    selected_distance: float
    selected_time: float
    distance_units: str
    show_intervals: bool


class InteractionState(BaseModel):
    """Snapshot of the interaction state machine."""
    panel_expanded: bool
    mode: Literal["idle", "draw", "delete"]
    pending_request: bool
    control_active: bool
    errors: List[str] = Field(default_factory=list, description="Controls currently flashing an error")


class TravelModeState(BaseModel):
    profile: str
    label: str
    available: Dict[str, str] = Field(default_factory=dict, description="profile -> label")


class ControlState(BaseModel):
    """
    Full control snapshot returned by the HTTP surface.
    """
    session_id: Optional[str] = None
    version: str
    interaction: InteractionState
    ranges: RangeConfiguration
    travel_mode: TravelModeState
    result_count: int = Field(0, ge=0)
    attached: bool = False
    mock: bool = Field(False, description="Offline approximation in use")


# ==================== HTTP payloads ====================

class SessionCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    travel_mode_default: Optional[str] = None
    range_type_default: Optional[RangeType] = None
    show_intervals: Optional[bool] = None
    collapsed: Optional[bool] = None
    range_control_distance: Optional[List[float]] = None
    range_control_time: Optional[List[float]] = None
    export_area_label: Optional[str] = None


class RangeTypeRequest(BaseModel):
    range_type: RangeType


class RangeValueRequest(BaseModel):
    value: float


class IntervalsRequest(BaseModel):
    show_intervals: bool


class TravelModeRequest(BaseModel):
    profile: Optional[str] = None
    slot: Optional[int] = Field(None, ge=1, le=4)


class FeatureClickRequest(BaseModel):
    target: Literal["feature", "marker"] = "feature"


class ClickResponse(BaseModel):
    status: Literal["displayed", "ignored", "no_data", "error"]
    result: Optional[Dict[str, Any]] = Field(None, description="GeoJSON FeatureCollection of the new result")
    result_id: Optional[str] = None
    events: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class FeatureClickResponse(BaseModel):
    deleted: bool
    events: List[str] = Field(default_factory=list)
    result_count: int = 0


class EventRecord(BaseModel):
    name: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    fired_at: str
