from typing import Any, List, Optional, Tuple


class MapSurface:
    """
    What the control needs from a map: overlay add/remove in a pane.
    """

    def add_layer(self, layer: Any, pane: str = "overlayPane") -> None:
        raise NotImplementedError

    def remove_layer(self, layer: Any) -> None:
        raise NotImplementedError

    def has_layer(self, layer: Any) -> bool:
        raise NotImplementedError


class InMemoryMapSurface(MapSurface):
    """Map surface that only records attached layers, used by HTTP sessions."""

    def __init__(self, center: Optional[Tuple[float, float]] = None, zoom: int = 11):
        self.center = center
        self.zoom = zoom
        self._layers: List[Tuple[Any, str]] = []

    @property
    def layers(self) -> List[Any]:
        return [layer for layer, _ in self._layers]

    def pane_of(self, layer: Any) -> Optional[str]:
        for item, pane in self._layers:
            if item is layer:
                return pane
        return None

    def add_layer(self, layer: Any, pane: str = "overlayPane") -> None:
        if not self.has_layer(layer):
            self._layers.append((layer, pane))

    def remove_layer(self, layer: Any) -> None:
        self._layers = [(item, pane) for item, pane in self._layers if item is not layer]

    def has_layer(self, layer: Any) -> bool:
        return any(item is layer for item, _ in self._layers)
