"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PHARMAROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "PharmaRoute Delivery Planning API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for data files and outputs.")
    orders_file: Path = Field(
        default=Path("data/orders.json"),
        description="Order snapshot used when Supabase is not configured.",
    )
    couriers_file: Path = Field(
        default=Path("data/couriers.json"),
        description="Courier snapshot used when Supabase is not configured.",
    )

    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Google Directions and Geocoding services.",
    )
    directions_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/directions/json",
        description="Endpoint of the waypoint-optimizing directions service.",
    )
    geocoding_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/geocode/json",
        description="Endpoint used to resolve the pharmacy address to coordinates.",
    )
    travel_mode: Literal["driving", "bicycling", "walking", "two_wheeler"] = Field(
        default="driving",
        description="Travel mode requested from the directions service.",
    )
    directions_timeout_seconds: float = Field(default=5.0, gt=0.0)
    directions_max_retries: int = Field(default=1, ge=0)
    directions_backoff_seconds: float = Field(default=0.5, ge=0.0)
    max_parallel_optimizations: int = Field(default=8, ge=1)

    pharmacy_name: str = "Droguería Avenida"
    pharmacy_address: str = Field(
        default="Avenida Calle 26 #68-35, Bogotá, Colombia",
        description="Origin of every delivery route.",
    )
    default_pharmacy_latitude: float = Field(default=4.60971, ge=-90.0, le=90.0)
    default_pharmacy_longitude: float = Field(default=-74.08175, ge=-180.0, le=180.0)
    route_colors: tuple[str, ...] = Field(
        default=("#2563eb", "#16a34a", "#f59e0b", "#dc2626", "#9333ea"),
        description="Palette assigned round-robin to courier routes.",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:9002",
            "http://127.0.0.1:9002",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend reads.",
    )

    @field_validator("data_root", "orders_file", "couriers_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", "route_colors", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        # Return empty tuple if value is None or empty
        return tuple()

    @field_validator("google_maps_api_key", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


settings = Settings()
