"""Partition orders into per-courier route groups and a pending list."""

from __future__ import annotations

from typing import Iterable, Sequence

from ...models.domain import ROUTED_STATUSES, Order
from .models import RouteStop


def _by_creation_time(orders: Iterable[Order]) -> list[Order]:
    # sorted() is stable, so equal timestamps keep input order
    return sorted(orders, key=lambda order: order.created_at)


def is_routable(order: Order) -> bool:
    """An order belongs to a courier route iff it is assigned/in transit and has a courier."""
    return order.status in ROUTED_STATUSES and order.assigned_to is not None


def group_orders_by_courier(orders: Sequence[Order]) -> dict[str, list[Order]]:
    """Group routable orders by courier id.

    Groups appear in first-appearance order of their courier; each group is
    sorted by creation time, which is also the fallback visiting order.
    """
    groups: dict[str, list[Order]] = {}
    for order in orders:
        if not is_routable(order):
            continue
        groups.setdefault(order.assigned_to.courier_id, []).append(order)
    return {courier_id: _by_creation_time(group) for courier_id, group in groups.items()}


def pending_orders(orders: Sequence[Order]) -> list[Order]:
    """Orders not yet assigned to anyone, oldest first."""
    return _by_creation_time(order for order in orders if order.status == "pending")


def to_stop_set(orders: Sequence[Order]) -> list[RouteStop]:
    return [RouteStop(order_id=order.order_id, address=order.delivery_location.address) for order in orders]
