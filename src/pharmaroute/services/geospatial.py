"""Geospatial helper functions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from shapely.geometry import MultiPoint


@dataclass(slots=True, frozen=True)
class Bounds:
    """Axis-aligned lat/lng box."""

    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def as_list(self) -> list[list[float]]:
        """Leaflet style [[south, west], [north, east]]."""
        return [[self.south, self.west], [self.north, self.east]]


def bounds_for_points(points: Sequence[tuple[float, float]]) -> Bounds:
    """Compute the bounding box of (lat, lng) points."""
    if not points:
        raise ValueError("At least one point is required to compute bounds.")
    # shapely works in (x, y) = (lng, lat)
    min_lng, min_lat, max_lng, max_lat = MultiPoint([(lng, lat) for lat, lng in points]).bounds
    return Bounds(south=min_lat, west=min_lng, north=max_lat, east=max_lng)
