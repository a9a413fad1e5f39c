"""Route planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, status

from ...schemas.routing import (
    DecodedPolylineResponse,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    RoutePlanRequest,
    RoutePlanResponse,
)
from ...services.routing.errors import ConfigurationError, OptimizationError
from ...services.routing.polyline import PolylineDecodingError, decode_polyline
from ...services.routing.service import optimize_stop_set, plan_routes

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=OptimizeRouteResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    """Optimize the visiting order of one stop set."""
    try:
        return optimize_stop_set(payload)
    except ConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message) from exc
    except OptimizationError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Route optimization failed: {exc.status} {exc.message}".strip(),
        ) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc


@router.post("/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    """Build every courier route plus pending orders and render the map layers.

    Optimization failures never fail this endpoint; affected routes come back
    unoptimized.
    """
    try:
        return plan_routes(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error planning routes: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan routes: {str(exc)}"
        ) from exc


@router.get("/decode", response_model=DecodedPolylineResponse, status_code=status.HTTP_200_OK)
def decode(polyline: str = Query(..., description="Encoded polyline string")) -> DecodedPolylineResponse:
    try:
        coordinates = decode_polyline(polyline)
    except PolylineDecodingError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return DecodedPolylineResponse(coordinates=[[lat, lng] for lat, lng in coordinates], count=len(coordinates))
