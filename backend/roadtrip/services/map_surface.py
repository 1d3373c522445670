from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..schemas.trip import LatLng


DEFAULT_CENTER: LatLng = (54.0, 10.0)
DEFAULT_ZOOM = 5

TILE_LAYERS: Dict[str, Dict[str, Any]] = {
    "light": {
        "url": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        "attribution": (
            '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
        ),
        "max_zoom": 18,
    },
    "dark": {
        "url": "https://{s}.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}{r}.png",
        "attribution": (
            '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors '
            '&copy; <a href="https://carto.com/attributions">CARTO</a>'
        ),
        "max_zoom": 19,
    },
}


class MapSurface(Protocol):
    """What the map widget can do. Layer handles are opaque ints."""

    def add_marker(self, position: LatLng, label: str, popup: str, color: str) -> int: ...

    def add_polyline(self, path: Sequence[LatLng], color: str, weight: int, opacity: float) -> int: ...

    def remove_layer(self, handle: int) -> None: ...

    def fit_bounds(self, points: Sequence[LatLng], padding: Tuple[int, int]) -> None: ...

    def set_view(self, center: LatLng, zoom: int) -> None: ...

    def set_tiles(self, url: str, attribution: str, max_zoom: int) -> None: ...


class LayerMap:
    """
    In-memory MapSurface. Records the layers and viewport the page should
    show; the browser mirrors snapshot() onto Leaflet.
    """

    def __init__(self) -> None:
        self._next_handle = 1
        self._layers: Dict[int, Dict[str, Any]] = {}
        self.viewport: Dict[str, Any] = {
            "kind": "view",
            "center": list(DEFAULT_CENTER),
            "zoom": DEFAULT_ZOOM,
        }
        self.tiles: Dict[str, Any] = {}
        self.revision = 0

    def _add(self, layer: Dict[str, Any]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._layers[handle] = {"id": handle, **layer}
        self.revision += 1
        return handle

    def add_marker(self, position: LatLng, label: str, popup: str, color: str) -> int:
        return self._add(
            {
                "type": "marker",
                "position": [position[0], position[1]],
                "label": label,
                "popup": popup,
                "color": color,
            }
        )

    def add_polyline(self, path: Sequence[LatLng], color: str, weight: int, opacity: float) -> int:
        return self._add(
            {
                "type": "polyline",
                "path": [[lat, lng] for lat, lng in path],
                "color": color,
                "weight": weight,
                "opacity": opacity,
            }
        )

    def remove_layer(self, handle: int) -> None:
        if self._layers.pop(handle, None) is not None:
            self.revision += 1

    def fit_bounds(self, points: Sequence[LatLng], padding: Tuple[int, int]) -> None:
        lats = [p[0] for p in points]
        lngs = [p[1] for p in points]
        self.viewport = {
            "kind": "bounds",
            "bounds": [[min(lats), min(lngs)], [max(lats), max(lngs)]],
            "padding": list(padding),
        }
        self.revision += 1

    def set_view(self, center: LatLng, zoom: int) -> None:
        self.viewport = {"kind": "view", "center": [center[0], center[1]], "zoom": zoom}
        self.revision += 1

    def set_tiles(self, url: str, attribution: str, max_zoom: int) -> None:
        self.tiles = {"url": url, "attribution": attribution, "max_zoom": max_zoom}
        self.revision += 1

    def layers(self, layer_type: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            layer for layer in self._layers.values()
            if layer_type is None or layer["type"] == layer_type
        ]

    def snapshot(self) -> Dict[str, Any]:
        return {
            "revision": self.revision,
            "tiles": dict(self.tiles),
            "viewport": dict(self.viewport),
            "markers": self.layers("marker"),
            "polylines": self.layers("polyline"),
        }
