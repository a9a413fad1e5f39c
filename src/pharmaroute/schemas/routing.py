"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class OrderStopModel(BaseModel):
    order_id: str = Field(..., description="The unique identifier for the order.")
    address: str = Field(..., min_length=1, description="The delivery address for this order.")


class OptimizeRouteRequest(BaseModel):
    start_address: str = Field(..., min_length=1, description="Starting address, typically the pharmacy.")
    orders: List[OrderStopModel] = Field(default_factory=list)


class OptimizedStopModel(BaseModel):
    order_id: str
    stop_number: int = Field(..., ge=1)


class OptimizeRouteResponse(BaseModel):
    optimized_route: List[OptimizedStopModel]
    estimated_time: str
    estimated_distance: str
    encoded_polyline: str


class LocationModel(BaseModel):
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None


class ClientModel(BaseModel):
    id: str = ""
    full_name: str = ""
    phone: Optional[str] = None


class CourierModel(BaseModel):
    id: str
    name: str
    role: str = "delivery"


class OrderModel(BaseModel):
    id: str
    client: ClientModel = Field(default_factory=ClientModel)
    delivery_location: LocationModel
    total: float = 0.0
    payment_method: str = ""
    status: Literal["pending", "assigned", "in_transit", "delivered", "cancelled"]
    assigned_to: Optional[CourierModel] = None
    created_at: datetime


class RoutePlanRequest(BaseModel):
    courier_id: Optional[str] = Field(
        default=None,
        description="Plan only this courier's route (courier view); pending orders are hidden.",
    )
    optimize_pending: bool = Field(
        default=False,
        description="Also optimize the pending orders as one prospective route.",
    )
    orders: Optional[List[OrderModel]] = Field(
        default=None,
        description="Orders to plan. Loaded from the data provider when omitted.",
    )
    couriers: Optional[List[CourierModel]] = None
    persist: bool = False


class RouteInfoModel(BaseModel):
    courier: CourierModel
    color: str
    optimized: bool
    encoded_polyline: Optional[str]
    estimated_distance: Optional[str] = None
    estimated_time: Optional[str] = None
    error: Optional[str] = None
    orders: List[OrderModel]


class PendingRouteModel(BaseModel):
    encoded_polyline: str
    estimated_distance: str
    estimated_time: str


class MapWarningModel(BaseModel):
    kind: str = "missing_coordinates"
    count: int
    message: str


class RoutePlanResponse(BaseModel):
    pharmacy_location: LocationModel
    routes: List[RouteInfoModel]
    pending_orders: List[OrderModel]
    pending_route: Optional[PendingRouteModel] = None
    map: dict
    warnings: List[MapWarningModel] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)


class DecodedPolylineResponse(BaseModel):
    coordinates: List[List[float]]
    count: int
