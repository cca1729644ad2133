"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Detour Pricing API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for job feeds and outputs.")
    jobs_file: Path = Field(
        default=Path("data/jobs.csv"),
        description="Job sheet export (CSV or XLSX) used when pricing from a file.",
    )
    rate_table_file: Optional[Path] = Field(
        default=None,
        description="JSON rate table. The built-in table is used when unset.",
    )

    # Routing service
    routes_api_key: Optional[str] = Field(
        default=None,
        description="Credential for the Google Routes API (X-Goog-Api-Key).",
    )
    routes_api_url: str = Field(
        default="https://routes.googleapis.com/directions/v2:computeRoutes",
        description="computeRoutes endpoint used for driving distances.",
    )
    routes_travel_mode: str = Field(default="DRIVE")
    routes_timeout_seconds: float = Field(default=10.0, gt=0.0)
    routes_max_retries: int = Field(default=0, ge=0)
    routes_backoff_seconds: float = Field(default=1.0, ge=0.0)
    max_parallel_requests: int = Field(default=8, ge=1)

    # Distance cache
    distance_cache_ttl_seconds: int = Field(default=21600, ge=0)
    distance_cache_file: Optional[Path] = Field(
        default=None,
        description="Persist cached distances to this JSON file. In-memory only when unset.",
    )
    unavailable_distance_meters: float = Field(
        default=999_999_999,
        description="Placeholder distance reported for failed lookups.",
    )

    # Business rules
    base_location: str = Field(default="Toronto", description="Where every technician's day starts.")
    premium_keyword: str = Field(default="SVD", description="Notes value that selects premium pricing.")
    detour_lower_bound: float = Field(default=-0.05, le=0.0)
    detour_upper_bound: float = Field(default=0.25, gt=0.0)

    # Job sheet column headers
    column_location: str = "City"
    column_date: str = "Date"
    column_notes: str = "Notes"
    column_technician: str = "Technician"
    column_job_id: Optional[str] = Field(
        default=None,
        description="Header holding a job identifier. Sheet row numbers are used when unset.",
    )

    @field_validator("data_root", "jobs_file", "rate_table_file", "distance_cache_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Optional[Path]:
        if value is None or value == "":
            return None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("premium_keyword", "base_location", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return str(value).strip()


settings = Settings()
