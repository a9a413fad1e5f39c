"""Domain models for orders, clients and couriers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

OrderStatus = Literal["pending", "assigned", "in_transit", "delivered", "cancelled"]

ORDER_STATUSES: tuple[str, ...] = ("pending", "assigned", "in_transit", "delivered", "cancelled")
ROUTED_STATUSES: frozenset[str] = frozenset({"assigned", "in_transit"})


@dataclass(slots=True)
class Location:
    """A street address, optionally geocoded."""

    address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def coordinates(self) -> Optional[tuple[float, float]]:
        if not self.has_coordinates:
            return None
        return (self.latitude, self.longitude)


@dataclass(slots=True)
class Client:
    client_id: str
    full_name: str
    phone: Optional[str] = None


@dataclass(slots=True)
class Courier:
    """Staff member who delivers orders. Opaque beyond identity and display."""

    courier_id: str
    name: str
    role: str = "delivery"


@dataclass(slots=True)
class Order:
    """A delivery order as seen by route planning. Never mutated here."""

    order_id: str
    client: Client
    delivery_location: Location
    total: float
    payment_method: str
    status: OrderStatus
    created_at: datetime
    assigned_to: Optional[Courier] = None
    raw: dict = field(default_factory=dict)
