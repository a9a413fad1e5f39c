"""Export services."""

from .geojson import linestring_to_wkt, path_features_to_wkt, save_geojson

__all__ = [
    "linestring_to_wkt",
    "path_features_to_wkt",
    "save_geojson",
]
