from .adapter import LiveIsolineBackend, MockIsolineBackend, mock_circle, select_backend
from .control import ExportArtifact, ReachabilityControl
from .events import EventBus, ReachabilityEvent
from .layers import IsolineLayerGroup
from .map_surface import InMemoryMapSurface, MapSurface
from .normalizer import HostCallbacks, ResponseNormalizer
from .ranges import RangeConfigurationStore, generate_buckets
from .request_builder import RequestBuilder
from .state import InteractionMode, InteractionStateMachine
from .travel_modes import TravelModeSelector

__all__ = [
    "EventBus",
    "ExportArtifact",
    "HostCallbacks",
    "InMemoryMapSurface",
    "InteractionMode",
    "InteractionStateMachine",
    "IsolineLayerGroup",
    "LiveIsolineBackend",
    "MapSurface",
    "MockIsolineBackend",
    "RangeConfigurationStore",
    "ReachabilityControl",
    "ReachabilityEvent",
    "RequestBuilder",
    "ResponseNormalizer",
    "TravelModeSelector",
    "generate_buckets",
    "mock_circle",
    "select_backend",
]
