"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="PostgreSQL async connection string",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., pr_42)",
    )
    db_pool_size: int = Field(
        default=20,
        description="Maximum pooled database connections",
        gt=0,
    )
    db_pool_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for a pooled connection before failing",
        gt=0,
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # Result cache (in-process, keyed by H3 cell)
    result_cache_max_size: int = Field(
        default=10000,
        description="Maximum number of cached H3 cell lookups",
        gt=0,
    )
    result_cache_ttl_seconds: float = Field(
        default=86400.0,
        description="Seconds a cached cell lookup stays valid",
        gt=0,
    )

    # Census Bureau geocoder
    census_geocoder_base_url: str = Field(
        default="https://geocoding.geo.census.gov/geocoder/geographies",
        description="Census geographies geocoder base URL",
    )
    census_geocoder_timeout: float = Field(
        default=10.0,
        description="Census geocoder request timeout in seconds",
        gt=0,
    )

    # FCC Broadband Data Collection (BDC) public API
    bdc_base_url: str = Field(
        default="https://broadbandmap.fcc.gov/api/public/map",
        description="FCC BDC public map API base URL",
    )
    bdc_username: str | None = Field(
        default=None,
        description="FCC BDC API username (broadbandmap.fcc.gov account)",
    )
    bdc_hash_value: str | None = Field(
        default=None,
        description="FCC BDC API token (hash_value header)",
    )
    bdc_download_dir: str = Field(
        default="data/bdc",
        description="Directory for downloaded BDC archives",
    )
    bdc_rate_limit_delay: float = Field(
        default=6.5,
        description="Minimum seconds between consecutive BDC download starts (~10 req/min)",
        ge=0,
    )
    bdc_download_attempts: int = Field(
        default=3,
        description="Download attempts per file before giving up",
        gt=0,
    )
    bdc_backoff_base: float = Field(
        default=10.0,
        description="Initial retry backoff in seconds (doubles per attempt)",
        ge=0,
    )
    bdc_download_timeout: float = Field(
        default=600.0,
        description="Per-attempt download timeout in seconds",
        gt=0,
    )

    # Pipeline
    pipeline_regions: str = Field(
        default="37,44,45",
        description="Comma-separated state FIPS codes imported by the pipeline",
    )

    @field_validator("pipeline_regions")
    @classmethod
    def validate_pipeline_regions(cls, v: str) -> str:
        for code in (p.strip() for p in v.split(",")):
            if code and not re.fullmatch(r"\d{2}", code):
                msg = f"Invalid region code {code!r}: must be a two-digit state FIPS code"
                raise ValueError(msg)
        return v

    @property
    def pipeline_region_list(self) -> list[str]:
        """Parse pipeline regions string into a list of state FIPS codes."""
        if not self.pipeline_regions.strip():
            return []
        return [r.strip() for r in self.pipeline_regions.split(",") if r.strip()]

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins",
    )

    # API
    api_prefix: str = Field(
        default="/api",
        description="API route prefix",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
