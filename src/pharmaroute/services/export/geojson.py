"""GeoJSON export utilities for rendered map layers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List


def linestring_to_wkt(coordinates: List[List[float]]) -> str:
    """Convert path coordinates to WKT format.

    Args:
        coordinates: List of [lat, lon] pairs

    Returns:
        WKT LINESTRING string
    """
    if not coordinates or len(coordinates) < 2:
        raise ValueError("LineString must have at least 2 coordinates")

    # WKT uses lon,lat order (x,y)
    coord_pairs = [f"{lon} {lat}" for lat, lon in coordinates]
    return f"LINESTRING({','.join(coord_pairs)})"


def path_features_to_wkt(collection: Dict[str, Any]) -> List[Dict[str, Any]]:
    """List every path of a rendered map as WKT, keyed by courier.

    Paths with fewer than two points are skipped.
    """
    rows: List[Dict[str, Any]] = []
    for feature in collection.get("features", []):
        geometry = feature.get("geometry") or {}
        if geometry.get("type") != "LineString":
            continue
        # GeoJSON positions are [lng, lat]
        coordinates = [[lat, lng] for lng, lat in geometry.get("coordinates", [])]
        try:
            wkt = linestring_to_wkt(coordinates)
        except ValueError:
            continue
        properties = feature.get("properties") or {}
        rows.append(
            {
                "courier_id": properties.get("courier_id"),
                "color": properties.get("color"),
                "wkt": wkt,
            }
        )
    return rows


def save_geojson(collection: Dict[str, Any], output_path: Path) -> None:
    """Save a rendered map FeatureCollection.

    Args:
        collection: FeatureCollection produced by ``GeoJSONMapSurface.to_geojson``
        output_path: Path to save JSON file
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(collection, f, indent=2, ensure_ascii=False)
