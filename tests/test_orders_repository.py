import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from pharmaroute.data import orders_repository
from pharmaroute.models.domain import Courier


@pytest.fixture(autouse=True)
def no_database(monkeypatch):
    monkeypatch.setattr(orders_repository, "get_supabase_client", lambda: None)


def test_order_from_camel_case_row():
    row = {
        "id": "o1",
        "client": {"id": "c1", "fullName": "Laura Gómez", "phone": "3001234567"},
        "deliveryLocation": {"address": "Calle 80 # 10-20", "lat": 4.68, "lng": "-74.06"},
        "total": "45,000",
        "paymentMethod": "cash",
        "status": "ASSIGNED",
        "assignedTo": "u1",
        "createdAt": "2024-05-01T08:00:00Z",
    }

    order = orders_repository.order_from_row(row, {"u1": Courier(courier_id="u1", name="Ana")})

    assert order.client.full_name == "Laura Gómez"
    assert order.delivery_location.coordinates == (4.68, -74.06)
    assert order.total == 45000.0
    assert order.status == "assigned"
    assert order.assigned_to.name == "Ana"
    assert order.created_at == datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def test_order_from_snake_case_row_keeps_zero_coordinates():
    row = {
        "order_id": "o2",
        "client_name": "Pedro",
        "delivery_address": "Null Island",
        "delivery_lat": 0.0,
        "delivery_lng": 0.0,
        "status": "pending",
        "created_at": 1714550400000,
    }

    order = orders_repository.order_from_row(row)

    assert order.delivery_location.has_coordinates
    assert order.delivery_location.coordinates == (0.0, 0.0)
    assert order.assigned_to is None
    assert order.created_at.tzinfo is not None


def test_order_without_coordinates():
    row = {"id": "o3", "delivery_location": {"address": "Calle 1"}, "created_at": "2024-05-01T08:00:00"}

    order = orders_repository.order_from_row(row)

    assert order.delivery_location.coordinates is None
    assert order.status == "pending"


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        orders_repository.order_from_row({"id": "o4", "status": "lost", "created_at": "2024-05-01T08:00:00Z"})


def test_load_orders_from_json_skips_malformed_rows(tmp_path: Path):
    couriers_file = tmp_path / "couriers.json"
    orders_file = tmp_path / "orders.json"
    couriers_file.write_text(
        json.dumps(
            [
                {"id": "u1", "name": "Ana", "role": "delivery"},
                {"id": "adm", "name": "Admin", "role": "admin"},
            ]
        ),
        encoding="utf-8",
    )
    orders_file.write_text(
        json.dumps(
            [
                {"id": "o1", "status": "assigned", "assigned_to": "u1", "created_at": "2024-05-01T08:00:00Z"},
                {"id": "o2", "status": "pending", "created_at": "2024-05-01T08:05:00Z"},
                {"id": "bad", "status": "pending"},
            ]
        ),
        encoding="utf-8",
    )

    couriers = orders_repository.load_couriers(couriers_file)
    orders = orders_repository.load_orders(orders_file, couriers=couriers)

    assert [courier.courier_id for courier in couriers] == ["u1"]
    assert [order.order_id for order in orders] == ["o1", "o2"]
    assert orders[0].assigned_to.name == "Ana"

    own = orders_repository.get_orders_for_courier("u1", orders_file, couriers=couriers)
    assert [order.order_id for order in own] == ["o1"]


def test_load_couriers_skips_rows_without_id(tmp_path: Path):
    couriers_file = tmp_path / "couriers.json"
    couriers_file.write_text(
        json.dumps([{"id": "u1", "name": "Ana", "role": "delivery"}, {"name": "no id", "role": "delivery"}]),
        encoding="utf-8",
    )

    couriers = orders_repository.load_couriers(couriers_file)

    assert [courier.courier_id for courier in couriers] == ["u1"]

def test_missing_data_file_means_no_orders(tmp_path: Path):
    assert orders_repository.load_orders(tmp_path / "missing.json", couriers=[]) == []


def test_pharmacy_settings_default_to_configuration():
    result = orders_repository.get_pharmacy_settings()

    assert result == {
        "name": orders_repository.settings.pharmacy_name,
        "address": orders_repository.settings.pharmacy_address,
    }


def test_pharmacy_settings_from_database(monkeypatch):
    class DummyQuery:
        def __init__(self, rows):
            self.rows = rows

        def select(self, *args, **kwargs):
            return self

        def limit(self, count):
            return self

        def execute(self):
            return type("Response", (), {"data": self.rows})()

    class DummySupabase:
        def table(self, name):
            assert name == "pharmacy_settings"
            return DummyQuery([{"name": "Farmacia Norte", "address": "Calle 140 # 11-20"}])

    monkeypatch.setattr(orders_repository, "get_supabase_client", lambda: DummySupabase())

    assert orders_repository.get_pharmacy_settings() == {
        "name": "Farmacia Norte",
        "address": "Calle 140 # 11-20",
    }
