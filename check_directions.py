#!/usr/bin/env python3
"""Manual check that the Google Directions key works. Makes one billed request."""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from pharmaroute.config import settings
from pharmaroute.services.routing.directions_client import DirectionsClient, check_health
from pharmaroute.services.routing.errors import DirectionsServiceError
from pharmaroute.services.routing.models import RouteStop


def main():
    print("=" * 60)
    print("Directions Service Check")
    print("=" * 60)

    report = check_health()
    print(f"   Endpoint: {report['endpoint']}")
    print(f"   Mode: {report['mode']}  Timeout: {report['timeout_seconds']}s")
    if not report["configured"]:
        print("   [ERROR] PHARMAROUTE_GOOGLE_MAPS_API_KEY is not configured")
        return 1

    stops = [
        RouteStop(order_id="check-1", address="Calle 80 # 10-20, Bogotá"),
        RouteStop(order_id="check-2", address="Carrera 15 # 93-60, Bogotá"),
    ]
    try:
        result = DirectionsClient().optimize(settings.pharmacy_address, stops)
    except DirectionsServiceError as e:
        print(f"   [ERROR] {e}")
        return 1

    print(f"   [OK] Visiting order: {', '.join(result.order_ids)}")
    print(f"   [OK] {result.estimated_distance}, {result.estimated_time}")
    print(f"   [OK] Polyline length: {len(result.encoded_polyline)} characters")
    return 0


if __name__ == "__main__":
    sys.exit(main())
