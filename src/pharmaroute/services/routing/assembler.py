"""Fan out per-courier optimization calls and merge them into render-ready routes."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Sequence

from ...config import settings
from ...models.domain import Courier, Location, Order
from .directions_client import RouteOptimizer
from .grouping import to_stop_set
from .models import OptimizedRoute, RouteInfo

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_COLORS: tuple[str, ...] = ("#2563eb", "#16a34a", "#f59e0b", "#dc2626", "#9333ea")


def route_color(index: int, palette: Sequence[str] = DEFAULT_ROUTE_COLORS) -> str:
    """Pick a route color round-robin from the palette."""
    return palette[index % len(palette)]


def reorder_orders(orders: Sequence[Order], result: OptimizedRoute) -> list[Order]:
    """Apply an optimizer result to the original orders.

    Order ids the optimizer returned that do not match any input order are dropped.
    """
    lookup = {order.order_id: order for order in orders}
    reordered: list[Order] = []
    for stop in sorted(result.stops, key=lambda s: s.stop_number):
        order = lookup.get(stop.order_id)
        if order is None:
            logger.warning(f"Optimizer returned unknown order id {stop.order_id!r}, dropping it")
            continue
        reordered.append(order)
    return reordered


class RouteAssembler:
    """Builds one ``RouteInfo`` per courier group.

    One courier's optimization failure only degrades that courier's route to the
    fallback order; it never reaches the caller or the other couriers.
    """

    def __init__(
        self,
        optimizer: RouteOptimizer,
        palette: Sequence[str] | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.optimizer = optimizer
        self.palette = tuple(palette or settings.route_colors or DEFAULT_ROUTE_COLORS)
        self.max_workers = max_workers or settings.max_parallel_optimizations

    def _route_for_courier(
        self,
        origin: Location,
        courier: Courier,
        orders: Sequence[Order],
        color: str,
    ) -> RouteInfo:
        try:
            result = self.optimizer.optimize(origin.address, to_stop_set(orders))
        except Exception as exc:
            logger.warning(f"Could not optimize route for {courier.name} ({courier.courier_id}): {exc}")
            return RouteInfo(
                courier=courier,
                orders=list(orders),
                color=color,
                origin_location=origin,
                encoded_polyline=None,
                error=str(exc),
            )

        return RouteInfo(
            courier=courier,
            orders=reorder_orders(orders, result),
            color=color,
            origin_location=origin,
            encoded_polyline=result.encoded_polyline,
            estimated_distance=result.estimated_distance,
            estimated_time=result.estimated_time,
        )

    def assemble(
        self,
        origin: Location,
        courier_groups: Mapping[str, Sequence[Order]],
        couriers: Sequence[Courier],
    ) -> list[RouteInfo]:
        courier_lookup = {courier.courier_id: courier for courier in couriers}
        jobs: list[tuple[Courier, Sequence[Order], str]] = []
        for index, (courier_id, orders) in enumerate(courier_groups.items()):
            courier = courier_lookup.get(courier_id)
            if courier is None:
                logger.warning(f"Skipping route group for unknown courier {courier_id!r}")
                continue
            if not orders:
                continue
            jobs.append((courier, tuple(orders), route_color(index, self.palette)))

        if not jobs:
            return []

        logger.info(f"Optimizing {len(jobs)} courier route(s) from {origin.address!r}")
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(jobs))) as executor:
            futures = [
                executor.submit(self._route_for_courier, origin, courier, orders, color)
                for courier, orders, color in jobs
            ]
            routes = [future.result() for future in futures]

        failed = sum(1 for route in routes if not route.optimized)
        if failed:
            logger.warning(f"{failed}/{len(routes)} route(s) fell back to creation-time order")
        return routes
