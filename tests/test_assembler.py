import threading
from datetime import datetime, timedelta, timezone

import pytest

from pharmaroute.models.domain import Client, Courier, Location, Order
from pharmaroute.services.routing.assembler import RouteAssembler, reorder_orders, route_color
from pharmaroute.services.routing.errors import ConfigurationError, OptimizationError
from pharmaroute.services.routing.grouping import group_orders_by_courier
from pharmaroute.services.routing.models import OptimizedRoute, OptimizedStop

BASE_TIME = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
ORIGIN = Location(address="Pharmacy", latitude=4.60971, longitude=-74.08175)
ANA = Courier(courier_id="u1", name="Ana")
LUIS = Courier(courier_id="u2", name="Luis")
PALETTE = ("#111111", "#222222")


def _order(oid: str, minutes: int, courier: Courier) -> Order:
    return Order(
        order_id=oid,
        client=Client(client_id=f"c-{oid}", full_name=f"Client {oid}"),
        delivery_location=Location(address=f"Calle {oid}", latitude=4.6 + minutes / 1000, longitude=-74.08),
        total=15000.0,
        payment_method="cash",
        status="assigned",
        created_at=BASE_TIME + timedelta(minutes=minutes),
        assigned_to=courier,
    )


class DummyOptimizer:
    """Reverses every stop set; fails for stop sets containing a listed order id."""

    def __init__(self, fail_on=(), error=None):
        self.fail_on = set(fail_on)
        self.error = error or ConnectionError("network unreachable")
        self.calls = []
        self._lock = threading.Lock()

    def optimize(self, origin, stops):
        with self._lock:
            self.calls.append((origin, [stop.order_id for stop in stops]))
        if self.fail_on & {stop.order_id for stop in stops}:
            raise self.error
        ordered = list(reversed(stops))
        return OptimizedRoute(
            stops=[OptimizedStop(order_id=stop.order_id, stop_number=i) for i, stop in enumerate(ordered, start=1)],
            total_distance_m=3500,
            total_duration_s=150,
            encoded_polyline=f"path-{ordered[0].order_id}",
        )


def _groups():
    orders = [
        _order("a1", 1, ANA),
        _order("b1", 2, LUIS),
        _order("a2", 3, ANA),
        _order("b2", 4, LUIS),
    ]
    return group_orders_by_courier(orders)


def test_one_courier_failure_is_isolated():
    optimizer = DummyOptimizer(fail_on={"b1"})
    routes = RouteAssembler(optimizer, palette=PALETTE).assemble(ORIGIN, _groups(), [ANA, LUIS])

    assert len(routes) == 2
    ana, luis = routes

    assert ana.courier is ANA
    assert ana.encoded_polyline == "path-a2"
    assert [o.order_id for o in ana.orders] == ["a2", "a1"]
    assert ana.estimated_distance == "3.5 km"
    assert ana.optimized is True

    assert luis.encoded_polyline is None
    assert [o.order_id for o in luis.orders] == ["b1", "b2"]
    assert luis.optimized is False
    assert "network unreachable" in luis.error
    assert len(optimizer.calls) == 2


@pytest.mark.parametrize("error", [OptimizationError("ZERO_RESULTS", "no route"), ConfigurationError()])
def test_optimization_errors_fall_back_to_creation_order(error):
    optimizer = DummyOptimizer(fail_on={"a1", "b1"}, error=error)
    routes = RouteAssembler(optimizer).assemble(ORIGIN, _groups(), [ANA, LUIS])

    assert all(route.encoded_polyline is None for route in routes)
    assert [[o.order_id for o in route.orders] for route in routes] == [["a1", "a2"], ["b1", "b2"]]


def test_origin_address_is_sent_and_origin_attached():
    optimizer = DummyOptimizer()
    routes = RouteAssembler(optimizer).assemble(ORIGIN, _groups(), [ANA, LUIS])

    assert {origin for origin, _ in optimizer.calls} == {"Pharmacy"}
    assert all(route.origin_location is ORIGIN for route in routes)


def test_colors_are_assigned_round_robin_by_group_position():
    couriers = [Courier(courier_id=f"u{i}", name=f"Courier {i}") for i in range(3)]
    groups = {c.courier_id: [_order(f"o{i}", i, c)] for i, c in enumerate(couriers)}

    routes = RouteAssembler(DummyOptimizer(), palette=PALETTE).assemble(ORIGIN, groups, couriers)

    assert [route.color for route in routes] == ["#111111", "#222222", "#111111"]
    assert route_color(5, PALETTE) == "#222222"


def test_unknown_courier_group_is_skipped():
    routes = RouteAssembler(DummyOptimizer()).assemble(ORIGIN, _groups(), [LUIS])

    assert [route.courier.courier_id for route in routes] == ["u2"]


def test_empty_groups_produce_no_routes():
    optimizer = DummyOptimizer()

    assert RouteAssembler(optimizer).assemble(ORIGIN, {"u1": []}, [ANA]) == []
    assert RouteAssembler(optimizer).assemble(ORIGIN, {}, [ANA]) == []
    assert optimizer.calls == []


def test_reorder_drops_unknown_order_ids():
    orders = [_order("a1", 1, ANA), _order("a2", 2, ANA)]
    result = OptimizedRoute(
        stops=[
            OptimizedStop(order_id="a2", stop_number=1),
            OptimizedStop(order_id="ghost", stop_number=2),
            OptimizedStop(order_id="a1", stop_number=3),
        ],
        total_distance_m=0,
        total_duration_s=0,
        encoded_polyline="",
    )

    assert [o.order_id for o in reorder_orders(orders, result)] == ["a2", "a1"]


class BarrierOptimizer(DummyOptimizer):
    """Blocks every call until all couriers are being optimized at once."""

    def __init__(self, parties, fail_on=()):
        super().__init__(fail_on=fail_on)
        self.barrier = threading.Barrier(parties, timeout=5)

    def optimize(self, origin, stops):
        self.barrier.wait()
        return super().optimize(origin, stops)


def test_courier_routes_are_optimized_concurrently():
    optimizer = BarrierOptimizer(parties=2)

    routes = RouteAssembler(optimizer, max_workers=2).assemble(ORIGIN, _groups(), [ANA, LUIS])

    assert [route.optimized for route in routes] == [True, True]


def test_concurrent_failure_does_not_stop_other_couriers():
    marta = Courier(courier_id="u3", name="Marta")
    groups = _groups()
    groups["u3"] = [_order("c1", 5, marta)]
    optimizer = BarrierOptimizer(parties=3, fail_on={"b1"})

    routes = RouteAssembler(optimizer, max_workers=3).assemble(ORIGIN, groups, [ANA, LUIS, marta])

    assert [route.courier.courier_id for route in routes] == ["u1", "u2", "u3"]
    assert [route.optimized for route in routes] == [True, False, True]
    assert "network unreachable" in routes[1].error
