#!/usr/bin/env python3
"""Helper script to check and create the .env file for PharmaRoute."""

from pathlib import Path
import os

TEMPLATE = """# Google Maps (required for route optimization and geocoding)
PHARMAROUTE_GOOGLE_MAPS_API_KEY=your-google-maps-key
# PHARMAROUTE_TRAVEL_MODE=driving

# Pharmacy (origin of every route)
PHARMAROUTE_PHARMACY_NAME=Droguería Avenida
PHARMAROUTE_PHARMACY_ADDRESS=Avenida Calle 26 #68-35, Bogotá, Colombia

# Supabase (optional - JSON snapshots under PHARMAROUTE_DATA_ROOT are used otherwise)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
PHARMAROUTE_SUPABASE_URL=https://your-project-id.supabase.co
PHARMAROUTE_SUPABASE_KEY=your-service-role-key-here

# API Configuration
PHARMAROUTE_API_PREFIX=/api
# PHARMAROUTE_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated

# Data Paths
PHARMAROUTE_DATA_ROOT=./data
PHARMAROUTE_ORDERS_FILE=./data/orders.json
PHARMAROUTE_COURIERS_FILE=./data/couriers.json
"""

SECRET_KEYS = ("PHARMAROUTE_SUPABASE_KEY", "PHARMAROUTE_GOOGLE_MAPS_API_KEY")


def _mask(value: str) -> str:
    if len(value) > 20:
        return value[:8] + "..." + value[-4:]
    return value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("PharmaRoute Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Google Maps key (and Supabase credentials if used).")
        return

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        name, sep, value = line.partition("=")
        if sep and name.strip() in SECRET_KEYS:
            print(f"{name}={_mask(value.strip())}")
        else:
            print(line)
    print("-" * 60)
    print()

    for name in SECRET_KEYS:
        if os.getenv(name):
            print(f"✅ {name} set in environment")
        else:
            print(f"ℹ️  {name} not set in environment (the .env file is read on startup)")
    print()

    try:
        import sys
        sys.path.insert(0, str(project_root / "src"))
        from pharmaroute.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    print(f"{'✅' if settings.google_maps_api_key else '❌'} Google Maps key configured: {bool(settings.google_maps_api_key)}")
    print(f"✅ Travel mode: {settings.travel_mode}")
    print(f"✅ Pharmacy address: {settings.pharmacy_address}")
    if settings.supabase_url and settings.supabase_key:
        print("✅ Supabase configured: orders are read from the database")
    else:
        print(f"ℹ️  Supabase not configured: orders are read from {settings.orders_file}")


if __name__ == "__main__":
    main()
