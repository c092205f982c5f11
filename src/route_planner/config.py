"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="CRP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        frozen=True,
    )

    app_name: str = "Cylinder Route Planner API"
    api_prefix: str = "/api"

    # Cost model
    fuel_price_per_liter: float = Field(default=21.95, ge=0.0, description="Default fuel price per liter.")
    maintenance_cost_per_km: float = Field(default=0.85, ge=0.0)
    base_fuel_consumption_rate: float = Field(
        default=12.0,
        ge=0.0,
        description="Fuel consumption of the unloaded vehicle in L/100km.",
    )
    fuel_load_factor: float = Field(
        default=0.02,
        ge=0.0,
        description="Relative consumption increase per 100 kg carried.",
    )

    # Load model
    full_cylinder_weight_kg: float = Field(default=22.0, ge=0.0)
    empty_cylinder_weight_kg: float = Field(default=12.0, ge=0.0)
    vehicle_max_cylinders: int = Field(default=50, ge=0)

    # Local travel-time model
    urban_speed_kmh: float = Field(default=35.0, gt=0.0)
    rural_speed_kmh: float = Field(default=60.0, gt=0.0)
    stop_dwell_minutes: float = Field(default=15.0, ge=0.0)
    segment_jitter_magnitude: float = Field(
        default=0.0,
        ge=0.0,
        lt=1.0,
        description="Relative +/- noise applied to locally estimated segment distances.",
    )
    segment_jitter_seed: int = Field(default=0)
    traffic_timezone: str = Field(
        default="Africa/Johannesburg",
        description="IANA time zone used to read the wall clock for traffic bands.",
    )

    # External routing service
    routing_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    routing_profile: Literal["driving", "driving-hgv", "driving-traffic"] = Field(default="driving")
    routing_timeout_seconds: float = Field(default=10.0, gt=0.0)
    routing_max_retries: int = Field(default=2, ge=0)
    routing_backoff_seconds: float = Field(default=0.5, ge=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("routing_base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip().rstrip("/")
        return text or None

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
