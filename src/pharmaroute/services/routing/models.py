"""Routing domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ...models.domain import Courier, Location, Order


def format_distance(meters: float) -> str:
    """Render a distance in meters as kilometers with one decimal ("3.5 km")."""
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    """Render a duration in seconds as whole minutes, rounding halves up."""
    minutes = math.floor(seconds / 60 + 0.5)
    return f"{minutes} minutes"


@dataclass(slots=True, frozen=True)
class RouteStop:
    """One element of a stop set submitted to the optimizer."""

    order_id: str
    address: str


@dataclass(slots=True, frozen=True)
class OptimizedStop:
    order_id: str
    stop_number: int


@dataclass(slots=True)
class OptimizedRoute:
    """Result of one optimization call.

    Distance and duration stay numeric (meters, seconds); display strings are
    derived on access.
    """

    stops: List[OptimizedStop]
    total_distance_m: int
    total_duration_s: int
    encoded_polyline: str

    @classmethod
    def empty(cls) -> "OptimizedRoute":
        return cls(stops=[], total_distance_m=0, total_duration_s=0, encoded_polyline="")

    @property
    def estimated_distance(self) -> str:
        if not self.stops:
            return "0 km"
        return format_distance(self.total_distance_m)

    @property
    def estimated_time(self) -> str:
        return format_duration(self.total_duration_s)

    @property
    def order_ids(self) -> list[str]:
        return [stop.order_id for stop in self.stops]


@dataclass(slots=True)
class RouteInfo:
    """Render-ready route for one courier.

    ``encoded_polyline`` is ``None`` exactly when optimization failed and the
    orders are kept in their fallback (creation time) order.
    """

    courier: Courier
    orders: List[Order]
    color: str
    origin_location: Optional[Location]
    encoded_polyline: Optional[str]
    estimated_distance: Optional[str] = None
    estimated_time: Optional[str] = None
    error: Optional[str] = None

    @property
    def optimized(self) -> bool:
        return self.encoded_polyline is not None


@dataclass(slots=True)
class RoutePlanResult:
    origin: Location
    routes: List[RouteInfo]
    pending_orders: List[Order]
    pending_route: Optional[OptimizedRoute] = None
    metadata: dict = field(default_factory=dict)
