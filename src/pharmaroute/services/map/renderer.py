"""Live delivery map: marker/path layers driven by assembled routes."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ...models.domain import Location, Order
from ..geospatial import bounds_for_points
from ..routing.models import RouteInfo
from ..routing.polyline import PolylineDecodingError, decode_polyline
from .icons import PRIMARY_COLOR, courier_icon, origin_icon, pending_icon, route_point_icon
from .surface import MapSurface, Marker, PathLine, marker_positions

logger = logging.getLogger(__name__)

MARKERS_LAYER = "markers"
PATHS_LAYER = "paths"
DEFAULT_ZOOM = 13
SINGLE_POINT_ZOOM = 15
FIT_PADDING = (50, 50)


class RendererState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    MOUNTED = "mounted"
    TORN_DOWN = "torn_down"


class RendererStateError(RuntimeError):
    """Raised when the renderer is used outside its lifecycle."""


@dataclass(slots=True, frozen=True)
class MissingCoordinatesWarning:
    """Orders skipped in one render pass because they have no coordinates."""

    count: int

    @property
    def message(self) -> str:
        return f"{self.count} order(s) have no coordinates and are not shown on the map."


@dataclass(slots=True)
class RenderResult:
    markers: list[Marker]
    paths: list[PathLine]
    warnings: list[MissingCoordinatesWarning] = field(default_factory=list)
    decoding_errors: list[str] = field(default_factory=list)

    def markers_of_kind(self, kind: str) -> list[Marker]:
        return [marker for marker in self.markers if marker.kind == kind]


class MapRenderer:
    """Owns one map surface and redraws it completely on every update.

    Layer mutations are serialized; a redraw never overlaps another one.
    """

    def __init__(self, surface: MapSurface) -> None:
        self.surface = surface
        self.state = RendererState.UNINITIALIZED
        self._lock = threading.Lock()

    def mount(self, pharmacy_location: Location) -> None:
        with self._lock:
            if self.state is not RendererState.UNINITIALIZED:
                raise RendererStateError(f"Cannot mount a renderer in state {self.state.value}.")
            if not pharmacy_location.has_coordinates:
                raise ValueError("The pharmacy location needs coordinates to center the map.")
            self.surface.create(pharmacy_location.coordinates, DEFAULT_ZOOM)
            self.surface.add_layer(MARKERS_LAYER)
            self.surface.add_layer(PATHS_LAYER)
            self.state = RendererState.MOUNTED

    def teardown(self) -> None:
        with self._lock:
            if self.state is RendererState.MOUNTED:
                self.surface.remove()
            self.state = RendererState.TORN_DOWN

    def update(
        self,
        routes: Sequence[RouteInfo],
        pending_orders: Sequence[Order],
        pharmacy_location: Location,
        pending_polyline: Optional[str] = None,
    ) -> RenderResult:
        with self._lock:
            if self.state is not RendererState.MOUNTED:
                raise RendererStateError(f"Cannot update a renderer in state {self.state.value}.")
            return _RenderPass(self.surface).run(routes, pending_orders, pharmacy_location, pending_polyline)


class _RenderPass:
    def __init__(self, surface: MapSurface) -> None:
        self.surface = surface
        self.markers: list[Marker] = []
        self.paths: list[PathLine] = []
        self.decoding_errors: list[str] = []
        self.missing: int = 0

    def _place(self, marker: Marker) -> None:
        self.surface.add_marker(MARKERS_LAYER, marker)
        self.markers.append(marker)

    def _draw_path(self, encoded: str, color: str, courier_id: Optional[str], label: str) -> None:
        try:
            coordinates = decode_polyline(encoded)
        except PolylineDecodingError as exc:
            logger.warning(f"Skipping path for {label}: {exc}")
            self.decoding_errors.append(f"{label}: {exc}")
            return
        if not coordinates:
            return
        path = PathLine(coordinates=coordinates, color=color, courier_id=courier_id)
        self.surface.add_path(PATHS_LAYER, path)
        self.paths.append(path)

    def _order_marker(self, order: Order, icon, popup: str, **extra) -> None:
        location = order.delivery_location
        if not location.has_coordinates:
            self.missing += 1
            return
        self._place(Marker(position=location.coordinates, icon=icon, popup=popup, order_id=order.order_id, **extra))

    def run(
        self,
        routes: Sequence[RouteInfo],
        pending_orders: Sequence[Order],
        pharmacy_location: Location,
        pending_polyline: Optional[str],
    ) -> RenderResult:
        self.surface.clear_layer(MARKERS_LAYER)
        self.surface.clear_layer(PATHS_LAYER)

        if pharmacy_location.has_coordinates:
            self._place(
                Marker(
                    position=pharmacy_location.coordinates,
                    icon=origin_icon(),
                    popup=f"Starting point: {pharmacy_location.address}",
                )
            )

        if pending_polyline:
            self._draw_path(pending_polyline, PRIMARY_COLOR, None, "pending orders")
            for number, order in enumerate(pending_orders, start=1):
                self._order_marker(
                    order,
                    route_point_icon(number, PRIMARY_COLOR),
                    f"Optimized route #{number} - order for {order.client.full_name}\n{order.delivery_location.address}",
                    stop_number=number,
                )
        else:
            for order in pending_orders:
                self._order_marker(
                    order,
                    pending_icon(),
                    f"Pending order\nClient: {order.client.full_name}\nAddress: {order.delivery_location.address}",
                )

        for route in routes:
            courier_id = route.courier.courier_id
            if route.encoded_polyline is not None:
                self._draw_path(route.encoded_polyline, route.color, courier_id, route.courier.name)

            origin = route.origin_location
            if origin is not None and origin.has_coordinates:
                self._place(
                    Marker(
                        position=origin.coordinates,
                        icon=courier_icon(route.color),
                        popup=f"{route.courier.name}\nOn route from the pharmacy",
                        courier_id=courier_id,
                    )
                )

            for number, order in enumerate(route.orders, start=1):
                self._order_marker(
                    order,
                    route_point_icon(number, route.color),
                    f"Route: {route.courier.name}\n#{number} - order for {order.client.full_name}\n"
                    f"{order.delivery_location.address}",
                    courier_id=courier_id,
                    stop_number=number,
                )

        self._fit_viewport(pharmacy_location)

        warnings: list[MissingCoordinatesWarning] = []
        if self.missing:
            warning = MissingCoordinatesWarning(count=self.missing)
            logger.warning(warning.message)
            warnings.append(warning)

        return RenderResult(
            markers=self.markers,
            paths=self.paths,
            warnings=warnings,
            decoding_errors=self.decoding_errors,
        )

    def _fit_viewport(self, pharmacy_location: Location) -> None:
        points = marker_positions(self.markers)
        if len(points) > 1:
            self.surface.fit_bounds(bounds_for_points(points), FIT_PADDING)
        elif len(points) == 1:
            self.surface.set_view(points[0], SINGLE_POINT_ZOOM)
        elif pharmacy_location.has_coordinates:
            self.surface.set_view(pharmacy_location.coordinates, DEFAULT_ZOOM)
