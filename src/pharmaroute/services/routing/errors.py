"""Exceptions raised by the route optimization layer."""

from __future__ import annotations


class DirectionsServiceError(Exception):
    """Failure reported by (or while talking to) the external maps service."""

    def __init__(self, status: str, message: str = "") -> None:
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}" if message else status)


class OptimizationError(DirectionsServiceError):
    """The waypoint-optimization call failed or returned an unusable response."""


class ConfigurationError(OptimizationError):
    """The optimization service is not configured; no request was attempted."""

    def __init__(self, message: str = "Google Maps API key is not configured.") -> None:
        super().__init__("NOT_CONFIGURED", message)


class GeocodingError(DirectionsServiceError):
    """An address could not be resolved to coordinates."""
