"""
Isoline results as held by the layer group.

Coordinates follow GeoJSON convention ([lng, lat]); geometries are shapely
objects and are serialized with ``shapely.geometry.mapping``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from shapely.geometry import Point, mapping
from shapely.geometry.base import BaseGeometry

Handler = Callable[["FeatureEvent"], Any]


@dataclass
class FeatureEvent:
    """Interaction event passed to host callbacks."""

    type: str
    target: Any
    result: Optional["IsolineResult"] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IsolineFeature:
    """One polygon of a result with its display properties."""

    geometry: BaseGeometry
    travel_mode_label: str
    range_value: float
    range_units: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    area_value: Optional[float] = None
    area_units: Optional[str] = None
    population: Optional[float] = None
    reach_factor: Optional[float] = None
    style: Optional[Dict[str, Any]] = None
    handlers: Dict[str, Handler] = field(default_factory=dict)

    @property
    def properties(self) -> Dict[str, Any]:
        props: Dict[str, Any] = {
            "Travel mode": self.travel_mode_label,
            "Range": self.range_value,
            "Range units": self.range_units,
            "Latitude": self.latitude,
            "Longitude": self.longitude,
        }
        if self.area_value is not None:
            props["Area"] = self.area_value
            props["Area units"] = self.area_units
        if self.population is not None:
            props["Population"] = self.population
        if self.reach_factor is not None:
            props["Reach factor"] = self.reach_factor
        return props

    def to_geojson(self) -> Dict[str, Any]:
        return {"type": "Feature", "properties": self.properties, "geometry": mapping(self.geometry)}

    def fire(self, event_type: str, **data: Any) -> Any:
        handler = self.handlers.get(event_type)
        if handler is None:
            return None
        return handler(FeatureEvent(event_type, self, data=data))


@dataclass
class OriginMarker:
    """Marker at the clicked point a result was computed from."""

    lat: float
    lng: float
    style: Dict[str, Any] = field(default_factory=dict)
    handlers: Dict[str, Handler] = field(default_factory=dict)

    @property
    def geometry(self) -> Point:
        return Point(self.lng, self.lat)

    def to_geojson(self) -> Dict[str, Any]:
        return {"type": "Feature", "properties": {}, "geometry": mapping(self.geometry)}

    def fire(self, event_type: str, **data: Any) -> Any:
        handler = self.handlers.get(event_type)
        if handler is None:
            return None
        return handler(FeatureEvent(event_type, self, data=data))


@dataclass
class IsolineResult:
    """
    Everything one accepted click produced. Removed as a unit, never mutated.
    """

    origin_lat: float
    origin_lng: float
    travel_mode: str
    range_type: str
    features: List[IsolineFeature] = field(default_factory=list)
    marker: Optional[OriginMarker] = None
    result_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=datetime.now)

    def members(self) -> List[Any]:
        items: List[Any] = list(self.features)
        if self.marker is not None:
            items.append(self.marker)
        return items

    def to_geojson_features(self) -> List[Dict[str, Any]]:
        return [m.to_geojson() for m in self.members()]

    def to_geojson(self) -> Dict[str, Any]:
        return {"type": "FeatureCollection", "features": self.to_geojson_features()}
