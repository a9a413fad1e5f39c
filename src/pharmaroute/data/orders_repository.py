"""Read-only access to orders, couriers and pharmacy settings.

Supabase is used when configured; otherwise JSON snapshots under the data root
are read. Rows are accepted in either snake_case or camelCase.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import ORDER_STATUSES, Client, Courier, Location, Order


def _pick(row: dict, *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def _first(*values: Any) -> Any:
    return next((value for value in values if value is not None), None)


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # epoch milliseconds
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unable to parse timestamp from value '{value}'")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def courier_from_row(row: dict) -> Courier:
    courier_id = _pick(row, "id", "courier_id", "user_id")
    if courier_id is None:
        raise ValueError("Courier row is missing an id.")
    return Courier(
        courier_id=str(courier_id),
        name=str(_pick(row, "name", "full_name", "fullName") or courier_id),
        role=str(_pick(row, "role") or "delivery"),
    )


def order_from_row(row: dict, couriers: dict[str, Courier] | None = None) -> Order:
    """Build an ``Order`` from a database row or JSON record."""
    couriers = couriers or {}
    order_id = _pick(row, "id", "order_id", "orderId")
    if order_id is None:
        raise ValueError("Order row is missing an id.")

    client_data = row.get("client") if isinstance(row.get("client"), dict) else {}
    client = Client(
        client_id=str(_pick(client_data, "id", "client_id") or _pick(row, "client_id", "clientId") or ""),
        full_name=str(
            _pick(client_data, "full_name", "fullName", "name") or _pick(row, "client_name", "clientName") or ""
        ),
        phone=_pick(client_data, "phone"),
    )

    location_data = _pick(row, "delivery_location", "deliveryLocation")
    location_data = location_data if isinstance(location_data, dict) else {}
    location = Location(
        address=str(_pick(location_data, "address") or _pick(row, "delivery_address", "address") or ""),
        latitude=_coerce_float(_first(_pick(location_data, "lat", "latitude"), _pick(row, "delivery_lat", "latitude"))),
        longitude=_coerce_float(
            _first(_pick(location_data, "lng", "longitude"), _pick(row, "delivery_lng", "longitude"))
        ),
    )

    status = str(_pick(row, "status") or "pending").strip().lower()
    if status not in ORDER_STATUSES:
        raise ValueError(f"Order {order_id} has unknown status '{status}'")

    assigned = _pick(row, "assigned_to", "assignedTo")
    courier: Optional[Courier] = None
    if isinstance(assigned, dict):
        courier = courier_from_row(assigned)
    elif assigned is not None:
        courier = couriers.get(str(assigned)) or Courier(courier_id=str(assigned), name=str(assigned))

    return Order(
        order_id=str(order_id),
        client=client,
        delivery_location=location,
        total=_coerce_float(_pick(row, "total")) or 0.0,
        payment_method=str(_pick(row, "payment_method", "paymentMethod") or ""),
        status=status,
        created_at=_parse_datetime(_pick(row, "created_at", "createdAt")),
        assigned_to=courier,
        raw=row,
    )


def _read_json_list(path: Path) -> list[dict]:
    if not path.exists():
        logging.info(f"Data file not found, treating as empty: {path}")
        return []
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError(f"Data file '{path}' must contain a JSON array.")
    return data


def _parse_orders(rows: Iterable[dict], couriers: dict[str, Courier]) -> list[Order]:
    orders: list[Order] = []
    for row in rows:
        try:
            orders.append(order_from_row(row, couriers))
        except ValueError as e:
            logging.warning(f"Skipping malformed order row: {e}")
    return orders


def load_couriers(source: Path | None = None) -> list[Courier]:
    """Staff members with the delivery role."""
    supabase = get_supabase_client()
    if supabase:
        response = supabase.table("users").select("*").eq("role", "delivery").execute()
        rows = response.data or []
    else:
        rows = [row for row in _read_json_list(source or settings.couriers_file) if row.get("role", "delivery") == "delivery"]
    couriers: list[Courier] = []
    for row in rows:
        try:
            couriers.append(courier_from_row(row))
        except ValueError as e:
            logging.warning(f"Skipping malformed courier row: {e}")
    return couriers


def load_orders(source: Path | None = None, couriers: Iterable[Courier] | None = None) -> list[Order]:
    lookup = {courier.courier_id: courier for courier in (couriers if couriers is not None else load_couriers())}
    supabase = get_supabase_client()
    if supabase:
        response = supabase.table("orders").select("*").order("created_at").execute()
        rows = response.data or []
        logging.info(f"Retrieved {len(rows)} orders from database")
    else:
        rows = _read_json_list(source or settings.orders_file)
    return _parse_orders(rows, lookup)


def get_orders_for_courier(
    courier_id: str,
    source: Path | None = None,
    couriers: Iterable[Courier] | None = None,
) -> list[Order]:
    return [
        order
        for order in load_orders(source, couriers=couriers)
        if order.assigned_to is not None and order.assigned_to.courier_id == courier_id
    ]


def get_pharmacy_settings() -> dict:
    """Pharmacy name and address; configured values unless the database overrides them."""
    result = {"name": settings.pharmacy_name, "address": settings.pharmacy_address}
    supabase = get_supabase_client()
    if not supabase:
        return result
    try:
        response = supabase.table("pharmacy_settings").select("*").limit(1).execute()
    except Exception as e:
        logging.warning(f"Failed to read pharmacy settings, using configured defaults: {e}")
        return result
    if response.data:
        row = response.data[0]
        result["name"] = _pick(row, "name") or result["name"]
        result["address"] = _pick(row, "address") or result["address"]
    return result
