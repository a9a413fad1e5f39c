"""Route planning orchestration service."""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Optional, Sequence

from ...config import settings
from ...data.orders_repository import get_orders_for_courier, get_pharmacy_settings, load_couriers, load_orders
from ...models.domain import Client, Courier, Location, Order
from ...persistence.filesystem import FileStorage
from ...schemas.routing import (
    ClientModel,
    CourierModel,
    LocationModel,
    MapWarningModel,
    OptimizedStopModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    OrderModel,
    PendingRouteModel,
    RouteInfoModel,
    RoutePlanRequest,
    RoutePlanResponse,
)
from ..export.geojson import path_features_to_wkt, save_geojson
from ..map.renderer import MapRenderer, RenderResult
from ..map.surface import GeoJSONMapSurface
from ..outputs.routing_formatter import route_plan_to_csv, route_plan_to_json
from .assembler import RouteAssembler, reorder_orders
from .directions_client import DirectionsClient, RouteOptimizer
from .errors import DirectionsServiceError
from .grouping import group_orders_by_courier, pending_orders, to_stop_set
from .models import OptimizedRoute, RoutePlanResult, RouteStop


def _courier_to_model(courier: Courier) -> CourierModel:
    return CourierModel(id=courier.courier_id, name=courier.name, role=courier.role)


def _order_to_model(order: Order) -> OrderModel:
    location = order.delivery_location
    return OrderModel(
        id=order.order_id,
        client=ClientModel(id=order.client.client_id, full_name=order.client.full_name, phone=order.client.phone),
        delivery_location=LocationModel(address=location.address, lat=location.latitude, lng=location.longitude),
        total=order.total,
        payment_method=order.payment_method,
        status=order.status,
        assigned_to=_courier_to_model(order.assigned_to) if order.assigned_to else None,
        created_at=order.created_at,
    )


def _order_from_model(model: OrderModel) -> Order:
    courier = model.assigned_to
    created_at = model.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Order(
        order_id=model.id,
        client=Client(client_id=model.client.id, full_name=model.client.full_name, phone=model.client.phone),
        delivery_location=Location(
            address=model.delivery_location.address,
            latitude=model.delivery_location.lat,
            longitude=model.delivery_location.lng,
        ),
        total=model.total,
        payment_method=model.payment_method,
        status=model.status,
        created_at=created_at,
        assigned_to=Courier(courier_id=courier.id, name=courier.name, role=courier.role) if courier else None,
    )


def resolve_pharmacy_location(client: DirectionsClient, address: str) -> Location:
    """Geocode the pharmacy address, falling back to the configured coordinates."""
    location = Location(
        address=address,
        latitude=settings.default_pharmacy_latitude,
        longitude=settings.default_pharmacy_longitude,
    )
    try:
        location.latitude, location.longitude = client.geocode(address)
    except DirectionsServiceError as e:
        logging.warning(f"Could not geocode pharmacy address, using default location: {e}")
    return location


def optimize_pending_orders(
    optimizer: RouteOptimizer,
    origin: Location,
    orders: Sequence[Order],
) -> tuple[list[Order], Optional[OptimizedRoute]]:
    """Plan the unassigned orders as one prospective route.

    On failure the orders keep their creation-time order and no route is returned.
    """
    if not orders:
        return [], None
    try:
        result = optimizer.optimize(origin.address, to_stop_set(orders))
    except Exception as e:
        logging.warning(f"Could not optimize pending orders: {e}")
        return list(orders), None
    return reorder_orders(orders, result), result


def build_route_plan(
    orders: Sequence[Order],
    couriers: Sequence[Courier],
    origin: Location,
    optimizer: RouteOptimizer,
    *,
    courier_id: Optional[str] = None,
    optimize_pending: bool = False,
) -> RoutePlanResult:
    """Group, optimize and assemble every courier route plus the pending list."""
    if courier_id is not None:
        # courier view: own orders only, nothing unassigned
        orders = [order for order in orders if order.assigned_to and order.assigned_to.courier_id == courier_id]
        pending: list[Order] = []
    else:
        pending = pending_orders(orders)

    groups = group_orders_by_courier(orders)
    routes = RouteAssembler(optimizer).assemble(origin, groups, couriers)

    pending_route: Optional[OptimizedRoute] = None
    if optimize_pending and pending:
        pending, pending_route = optimize_pending_orders(optimizer, origin, pending)

    return RoutePlanResult(
        origin=origin,
        routes=routes,
        pending_orders=pending,
        pending_route=pending_route,
        metadata={
            "courier_groups": len(groups),
            "routes_optimized": sum(1 for route in routes if route.optimized),
            "routes_fallback": sum(1 for route in routes if not route.optimized),
            "pending_count": len(pending),
            "courier_view": courier_id,
        },
    )


def render_route_plan(plan: RoutePlanResult) -> tuple[dict, RenderResult]:
    """Draw a plan on a fresh in-memory surface and export it as GeoJSON."""
    surface = GeoJSONMapSurface()
    renderer = MapRenderer(surface)
    renderer.mount(plan.origin)
    try:
        result = renderer.update(
            plan.routes,
            plan.pending_orders,
            plan.origin,
            pending_polyline=plan.pending_route.encoded_polyline if plan.pending_route else None,
        )
        return surface.to_geojson(), result
    finally:
        renderer.teardown()


def optimize_stop_set(payload: OptimizeRouteRequest, client: RouteOptimizer | None = None) -> OptimizeRouteResponse:
    optimizer = client or DirectionsClient()
    stops = [RouteStop(order_id=stop.order_id, address=stop.address) for stop in payload.orders]
    result = optimizer.optimize(payload.start_address, stops)
    return OptimizeRouteResponse(
        optimized_route=[
            OptimizedStopModel(order_id=stop.order_id, stop_number=stop.stop_number) for stop in result.stops
        ],
        estimated_time=result.estimated_time,
        estimated_distance=result.estimated_distance,
        encoded_polyline=result.encoded_polyline,
    )


def _resolve_inputs(payload: RoutePlanRequest) -> tuple[list[Order], list[Courier]]:
    if payload.orders is not None:
        orders = [_order_from_model(model) for model in payload.orders]
        if payload.couriers is not None:
            couriers = [Courier(courier_id=c.id, name=c.name, role=c.role) for c in payload.couriers]
        else:
            derived: dict[str, Courier] = {}
            for order in orders:
                if order.assigned_to is not None:
                    derived.setdefault(order.assigned_to.courier_id, order.assigned_to)
            couriers = list(derived.values())
        return orders, couriers

    couriers = (
        [Courier(courier_id=c.id, name=c.name, role=c.role) for c in payload.couriers]
        if payload.couriers is not None
        else load_couriers()
    )
    if payload.courier_id is not None:
        return get_orders_for_courier(payload.courier_id, couriers=couriers), couriers
    return load_orders(couriers=couriers), couriers


def plan_routes(payload: RoutePlanRequest, client: DirectionsClient | None = None) -> RoutePlanResponse:
    client = client or DirectionsClient()
    orders, couriers = _resolve_inputs(payload)

    if payload.courier_id is not None and not any(c.courier_id == payload.courier_id for c in couriers):
        own = next(
            (o.assigned_to for o in orders if o.assigned_to and o.assigned_to.courier_id == payload.courier_id),
            None,
        )
        if own is None:
            raise ValueError(f"No orders found for courier '{payload.courier_id}'.")
        couriers = [*couriers, own]

    pharmacy = get_pharmacy_settings()
    origin = resolve_pharmacy_location(client, pharmacy["address"])
    logging.info(f"Planning routes for {len(orders)} order(s) and {len(couriers)} courier(s)")

    plan = build_route_plan(
        orders,
        couriers,
        origin,
        client,
        courier_id=payload.courier_id,
        optimize_pending=payload.optimize_pending,
    )
    map_payload, render_result = render_route_plan(plan)

    plan.metadata["pharmacy_name"] = pharmacy["name"]
    if render_result.decoding_errors:
        plan.metadata["decoding_errors"] = render_result.decoding_errors

    response = RoutePlanResponse(
        pharmacy_location=LocationModel(address=origin.address, lat=origin.latitude, lng=origin.longitude),
        routes=[
            RouteInfoModel(
                courier=_courier_to_model(route.courier),
                color=route.color,
                optimized=route.optimized,
                encoded_polyline=route.encoded_polyline,
                estimated_distance=route.estimated_distance,
                estimated_time=route.estimated_time,
                error=route.error,
                orders=[_order_to_model(order) for order in route.orders],
            )
            for route in plan.routes
        ],
        pending_orders=[_order_to_model(order) for order in plan.pending_orders],
        pending_route=PendingRouteModel(
            encoded_polyline=plan.pending_route.encoded_polyline,
            estimated_distance=plan.pending_route.estimated_distance,
            estimated_time=plan.pending_route.estimated_time,
        )
        if plan.pending_route
        else None,
        map=map_payload,
        warnings=[
            MapWarningModel(count=warning.count, message=warning.message) for warning in render_result.warnings
        ],
        metadata=plan.metadata,
    )

    if payload.persist:
        storage = FileStorage()
        run_dir = storage.make_run_directory(prefix="routes")
        storage.write_json(run_dir / "summary.json", route_plan_to_json(plan))
        storage.write_text(run_dir / "assignments.csv", route_plan_to_csv(plan))
        try:
            save_geojson(map_payload, run_dir / "map.geojson")
            storage.write_json(run_dir / "paths_wkt.json", path_features_to_wkt(map_payload))
        except Exception as exc:
            # Log error but don't fail the entire request
            logging.warning(f"Failed to write map GeoJSON export: {exc}")
        response.metadata["output_dir"] = str(run_dir)

    return response
