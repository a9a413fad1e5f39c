"""Serializers for route planning outputs."""

from __future__ import annotations

import csv
import io

from ..routing.models import RoutePlanResult


def route_plan_to_json(plan: RoutePlanResult) -> dict:
    return {
        "origin": {
            "address": plan.origin.address,
            "lat": plan.origin.latitude,
            "lng": plan.origin.longitude,
        },
        "metadata": plan.metadata,
        "routes": [
            {
                "courier_id": route.courier.courier_id,
                "courier_name": route.courier.name,
                "color": route.color,
                "optimized": route.optimized,
                "estimated_distance": route.estimated_distance,
                "estimated_time": route.estimated_time,
                "encoded_polyline": route.encoded_polyline,
                "order_ids": [order.order_id for order in route.orders],
            }
            for route in plan.routes
        ],
        "pending_order_ids": [order.order_id for order in plan.pending_orders],
        "pending_route": None
        if plan.pending_route is None
        else {
            "estimated_distance": plan.pending_route.estimated_distance,
            "estimated_time": plan.pending_route.estimated_time,
            "encoded_polyline": plan.pending_route.encoded_polyline,
        },
    }


def route_plan_to_csv(plan: RoutePlanResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "courier_id",
        "courier_name",
        "stop_number",
        "order_id",
        "client_name",
        "address",
        "latitude",
        "longitude",
        "status",
        "optimized",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for route in plan.routes:
        for number, order in enumerate(route.orders, start=1):
            writer.writerow(
                {
                    "courier_id": route.courier.courier_id,
                    "courier_name": route.courier.name,
                    "stop_number": number,
                    "order_id": order.order_id,
                    "client_name": order.client.full_name,
                    "address": order.delivery_location.address,
                    "latitude": order.delivery_location.latitude,
                    "longitude": order.delivery_location.longitude,
                    "status": order.status,
                    "optimized": route.optimized,
                }
            )
    return buffer.getvalue()
