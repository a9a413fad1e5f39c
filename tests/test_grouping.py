from datetime import datetime, timedelta, timezone

from pharmaroute.models.domain import Client, Courier, Location, Order
from pharmaroute.services.routing.grouping import group_orders_by_courier, pending_orders, to_stop_set

BASE_TIME = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
ANA = Courier(courier_id="u1", name="Ana")
LUIS = Courier(courier_id="u2", name="Luis")


def _order(oid: str, status: str, minutes: int, courier: Courier | None = None) -> Order:
    return Order(
        order_id=oid,
        client=Client(client_id=f"c-{oid}", full_name=f"Client {oid}"),
        delivery_location=Location(address=f"Calle {oid}", latitude=4.6, longitude=-74.08),
        total=10000.0,
        payment_method="cash",
        status=status,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        assigned_to=courier,
    )


def test_groups_by_courier_sorted_by_creation_time():
    orders = [
        _order("o1", "assigned", 30, ANA),
        _order("o2", "in_transit", 10, LUIS),
        _order("o3", "in_transit", 5, ANA),
        _order("o4", "assigned", 20, ANA),
    ]

    groups = group_orders_by_courier(orders)

    assert list(groups) == ["u1", "u2"]
    assert [o.order_id for o in groups["u1"]] == ["o3", "o4", "o1"]
    assert [o.order_id for o in groups["u2"]] == ["o2"]


def test_equal_timestamps_keep_input_order():
    orders = [_order("b", "assigned", 0, ANA), _order("a", "assigned", 0, ANA)]

    assert [o.order_id for o in group_orders_by_courier(orders)["u1"]] == ["b", "a"]


def test_assigned_without_courier_is_excluded_everywhere():
    orphan = _order("o1", "assigned", 0, None)

    assert group_orders_by_courier([orphan]) == {}
    assert pending_orders([orphan]) == []


def test_closed_orders_are_not_grouped_or_pending():
    orders = [_order("o1", "delivered", 0, ANA), _order("o2", "cancelled", 1, ANA)]

    assert group_orders_by_courier(orders) == {}
    assert pending_orders(orders) == []


def test_pending_orders_oldest_first():
    orders = [_order("late", "pending", 50), _order("early", "pending", 1), _order("o3", "assigned", 0, ANA)]

    assert [o.order_id for o in pending_orders(orders)] == ["early", "late"]


def test_to_stop_set():
    stops = to_stop_set([_order("o1", "assigned", 0, ANA)])

    assert len(stops) == 1
    assert stops[0].order_id == "o1"
    assert stops[0].address == "Calle o1"
