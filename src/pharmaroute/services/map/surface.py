"""Map display surfaces.

``MapSurface`` is the narrow interface the renderer draws on. ``GeoJSONMapSurface``
keeps layers in memory and serializes them for a browser map client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from ..geospatial import Bounds
from .icons import MarkerIcon


@dataclass(slots=True)
class Marker:
    position: tuple[float, float]
    icon: MarkerIcon
    popup: str = ""
    order_id: Optional[str] = None
    courier_id: Optional[str] = None
    stop_number: Optional[int] = None

    @property
    def kind(self) -> str:
        return self.icon.kind


@dataclass(slots=True)
class PathLine:
    coordinates: list[tuple[float, float]]
    color: str
    weight: int = 5
    opacity: float = 0.7
    courier_id: Optional[str] = None


@dataclass(slots=True)
class MapView:
    center: tuple[float, float]
    zoom: Optional[int] = None
    bounds: Optional[Bounds] = None
    padding: Optional[tuple[int, int]] = None


class MapSurface(Protocol):
    def create(self, center: tuple[float, float], zoom: int) -> None: ...

    def add_layer(self, name: str) -> None: ...

    def add_marker(self, layer: str, marker: Marker) -> None: ...

    def add_path(self, layer: str, path: PathLine) -> None: ...

    def clear_layer(self, layer: str) -> None: ...

    def fit_bounds(self, bounds: Bounds, padding: tuple[int, int]) -> None: ...

    def set_view(self, center: tuple[float, float], zoom: int) -> None: ...

    def remove(self) -> None: ...


@dataclass
class GeoJSONMapSurface:
    """In-memory surface whose state is exported as a GeoJSON FeatureCollection."""

    tile_url: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
    layers: dict[str, list[Any]] = field(default_factory=dict)
    view: Optional[MapView] = None
    removed: bool = False

    def _require_created(self) -> None:
        if self.view is None or self.removed:
            raise RuntimeError("Map surface has not been created or was already removed.")

    def create(self, center: tuple[float, float], zoom: int) -> None:
        self.layers = {}
        self.view = MapView(center=center, zoom=zoom)
        self.removed = False

    def add_layer(self, name: str) -> None:
        self._require_created()
        self.layers.setdefault(name, [])

    def add_marker(self, layer: str, marker: Marker) -> None:
        self._require_created()
        self.layers[layer].append(marker)

    def add_path(self, layer: str, path: PathLine) -> None:
        self._require_created()
        self.layers[layer].append(path)

    def clear_layer(self, layer: str) -> None:
        self._require_created()
        self.layers[layer] = []

    def fit_bounds(self, bounds: Bounds, padding: tuple[int, int]) -> None:
        self._require_created()
        self.view = MapView(center=bounds.center, bounds=bounds, padding=padding)

    def set_view(self, center: tuple[float, float], zoom: int) -> None:
        self._require_created()
        self.view = MapView(center=center, zoom=zoom)

    def remove(self) -> None:
        self.layers = {}
        self.view = None
        self.removed = True

    def markers(self, layer: str = "markers") -> list[Marker]:
        return [item for item in self.layers.get(layer, []) if isinstance(item, Marker)]

    def paths(self, layer: str = "paths") -> list[PathLine]:
        return [item for item in self.layers.get(layer, []) if isinstance(item, PathLine)]

    def to_geojson(self) -> dict:
        features: list[dict] = []
        for layer, items in self.layers.items():
            for item in items:
                features.append(_feature(layer, item))
        view = self.view
        return {
            "type": "FeatureCollection",
            "features": features,
            "view": None
            if view is None
            else {
                "center": list(view.center),
                "zoom": view.zoom,
                "bounds": view.bounds.as_list() if view.bounds else None,
                "padding": list(view.padding) if view.padding else None,
            },
            "tile_url": self.tile_url,
        }


def _feature(layer: str, item: Marker | PathLine) -> dict:
    # GeoJSON positions are [lng, lat]
    if isinstance(item, Marker):
        lat, lng = item.position
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [lng, lat]},
            "properties": {
                "layer": layer,
                "kind": item.kind,
                "popup": item.popup,
                "order_id": item.order_id,
                "courier_id": item.courier_id,
                "stop_number": item.stop_number,
                "icon": item.icon.to_dict(),
            },
        }
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": [[lng, lat] for lat, lng in item.coordinates]},
        "properties": {
            "layer": layer,
            "kind": "path",
            "color": item.color,
            "weight": item.weight,
            "opacity": item.opacity,
            "courier_id": item.courier_id,
        },
    }


def marker_positions(markers: Sequence[Marker]) -> list[tuple[float, float]]:
    return [marker.position for marker in markers]
