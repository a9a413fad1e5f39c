"""HTTP client for the waypoint-optimizing directions service."""

from __future__ import annotations

import logging
import time
from typing import Any, Protocol, Sequence

import httpx

from ...config import settings
from .errors import ConfigurationError, GeocodingError, OptimizationError
from .models import OptimizedRoute, OptimizedStop, RouteStop

logger = logging.getLogger(__name__)


class RouteOptimizer(Protocol):
    """Anything that can order a stop set starting from an origin address."""

    def optimize(self, origin: str, stops: Sequence[RouteStop]) -> OptimizedRoute: ...


def validate_waypoint_order(waypoint_order: Any, expected: int) -> list[int]:
    """Return the permutation as a list, or raise if it is not one of 0..expected-1."""
    if not isinstance(waypoint_order, list) or len(waypoint_order) != expected:
        raise OptimizationError(
            "INVALID_RESPONSE",
            f"waypoint_order has {len(waypoint_order) if isinstance(waypoint_order, list) else 'no'} "
            f"entries, expected {expected}",
        )
    if any(not isinstance(index, int) or isinstance(index, bool) for index in waypoint_order):
        raise OptimizationError("INVALID_RESPONSE", "waypoint_order contains non-integer entries")
    if sorted(waypoint_order) != list(range(expected)):
        raise OptimizationError(
            "INVALID_RESPONSE", f"waypoint_order {waypoint_order} is not a permutation of 0..{expected - 1}"
        )
    return list(waypoint_order)


def sum_legs(legs: Sequence[dict]) -> tuple[int, int]:
    """Total distance (meters) and duration (seconds) over every leg of a route."""
    distance = 0
    duration = 0
    for leg in legs:
        distance += int((leg.get("distance") or {}).get("value") or 0)
        duration += int((leg.get("duration") or {}).get("value") or 0)
    return distance, duration


class DirectionsClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        geocoding_url: str | None = None,
        mode: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.base_url = base_url or settings.directions_base_url
        self.geocoding_url = geocoding_url or settings.geocoding_base_url
        self.mode = mode or settings.travel_mode
        self.timeout = timeout if timeout is not None else settings.directions_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.directions_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.directions_backoff_seconds
        )
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.Client:
        """Create a fresh HTTP client; callers run on different worker threads."""
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 3.0)),
            transport=self._transport,
        )

    def _get_json(self, url: str, params: dict) -> dict:
        """GET with bounded retries for transport failures and 5xx responses.

        Every failure is surfaced as an ``OptimizationError``.
        """
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as e:
                    code = e.response.status_code
                    attempt += 1
                    if code < 500 or attempt > self.max_retries:
                        raise OptimizationError(f"HTTP_{code}", e.response.text[:200]) from e
                    logger.debug(f"Directions service returned {code}, retrying (attempt {attempt}/{self.max_retries})")
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Directions request timed out after {attempt} attempt(s): {e}")
                        raise OptimizationError("TIMEOUT", f"No response within {self.timeout:.1f}s") from e
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TransportError as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise OptimizationError("NETWORK_ERROR", str(e)) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Directions network error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
                except ValueError as e:
                    raise OptimizationError("INVALID_RESPONSE", f"Response is not valid JSON: {e}") from e
        finally:
            client.close()

    def optimize(self, origin: str, stops: Sequence[RouteStop]) -> OptimizedRoute:
        """Ask the service for the best visiting order of ``stops`` starting at ``origin``.

        The last stop of the unoptimized list is sent as the nominal destination and
        every stop is also listed as an optimizable waypoint, so the returned
        ``waypoint_order`` is a permutation over all input stops.
        """
        if not stops:
            return OptimizedRoute.empty()
        if not self.configured:
            raise ConfigurationError()

        addresses = [stop.address for stop in stops]
        params = {
            "origin": origin,
            "destination": addresses[-1],
            "waypoints": "|".join(["optimize:true", *addresses]),
            "mode": self.mode,
            "key": self.api_key,
        }
        logger.info(f"Requesting optimized route for {len(stops)} stop(s) from {origin!r}")
        data = self._get_json(self.base_url, params)

        status = data.get("status", "UNKNOWN_ERROR")
        routes = data.get("routes") or []
        if status != "OK" or not routes:
            message = data.get("error_message") or "Could not optimize route."
            logger.error(f"Directions API failed: {status} - {message}")
            raise OptimizationError(status, message)

        route = routes[0]
        order = validate_waypoint_order(route.get("waypoint_order"), len(stops))
        total_distance_m, total_duration_s = sum_legs(route.get("legs") or [])
        encoded = (route.get("overview_polyline") or {}).get("points") or ""

        return OptimizedRoute(
            stops=[
                OptimizedStop(order_id=stops[index].order_id, stop_number=position)
                for position, index in enumerate(order, start=1)
            ],
            total_distance_m=total_distance_m,
            total_duration_s=total_duration_s,
            encoded_polyline=encoded,
        )

    def geocode(self, address: str) -> tuple[float, float]:
        """Resolve an address to (lat, lng) using the geocoding endpoint."""
        if not self.configured:
            raise ConfigurationError()
        try:
            data = self._get_json(self.geocoding_url, {"address": address, "key": self.api_key})
        except OptimizationError as exc:
            raise GeocodingError(exc.status, exc.message) from exc

        status = data.get("status", "UNKNOWN_ERROR")
        results = data.get("results") or []
        if status != "OK" or not results:
            raise GeocodingError(status, data.get("error_message") or f"No results for {address!r}")
        location = (results[0].get("geometry") or {}).get("location") or {}
        try:
            return float(location["lat"]), float(location["lng"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError("INVALID_RESPONSE", "Geocoding result has no location") from exc


def check_health(client: DirectionsClient | None = None) -> dict:
    """Report whether the directions service is configured.

    No request is made.
    """
    client = client or DirectionsClient()
    return {
        "configured": client.configured,
        "endpoint": client.base_url,
        "mode": client.mode,
        "timeout_seconds": client.timeout,
    }
