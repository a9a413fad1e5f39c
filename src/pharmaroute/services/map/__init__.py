"""Map rendering services."""

from .renderer import MapRenderer, MissingCoordinatesWarning, RendererState, RendererStateError, RenderResult
from .surface import GeoJSONMapSurface, MapSurface

__all__ = [
    "MapRenderer",
    "MapSurface",
    "GeoJSONMapSurface",
    "MissingCoordinatesWarning",
    "RendererState",
    "RendererStateError",
    "RenderResult",
]
