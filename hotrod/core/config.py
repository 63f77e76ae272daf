"""
Configuration module with strict validation.

Key principles:
- APP STARTUP requires nothing: every upstream is a public FCC endpoint
- The Socrata app token is optional (raises the anonymous throttle ceiling)
- Timeouts and cache TTLs are configurable per call class / data class
- Safe defaults for all optional settings
"""
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation.

    Loads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # FCC Broadband Data Collection (hex tiles + provider search)
    bdc_base_url: str = Field(
        default="https://broadbandmap.fcc.gov/nbm/map/api",
        description="FCC BDC map API base URL"
    )

    bdc_process_uuid: str = Field(
        default="ae8c39d5-170d-4178-8147-5ac7dcaca06a",
        description="BDC filing period UUID (Jun 2025); update when the FCC publishes a new filing"
    )

    bdc_data_date: str = Field(
        default="June 2025",
        description="Human-readable date of the configured BDC filing"
    )

    hex_tile_layer: str = Field(
        default="fixedproviderhex",
        description="Vector tile layer holding provider hexagons"
    )

    # FCC Open Data (Socrata, Form 477)
    socrata_base_url: str = Field(
        default="https://opendata.fcc.gov/resource",
        description="FCC Open Data Socrata base URL"
    )

    form477_dataset: str = Field(
        default="4kuc-phrr",
        description="Form 477 fixed broadband deployment dataset id"
    )

    form477_data_date: str = Field(
        default="June 2020",
        description="Human-readable date of the Form 477 dataset"
    )

    fcc_app_token: Optional[str] = Field(
        default=None,
        description="Socrata app token - optional, raises the anonymous rate limit"
    )

    # Reference boundaries (us-atlas TopoJSON)
    states_topology_url: str = Field(
        default="https://cdn.jsdelivr.net/npm/us-atlas@3/states-10m.json",
        description="US state boundaries topology"
    )

    counties_topology_url: str = Field(
        default="https://cdn.jsdelivr.net/npm/us-atlas@3/counties-10m.json",
        description="US county boundaries topology"
    )

    # Timeouts (seconds) per call class
    probe_timeout: float = Field(default=6.0, gt=0, le=60.0)
    bdc_timeout: float = Field(default=10.0, gt=0, le=60.0)
    socrata_timeout: float = Field(default=12.0, gt=0, le=120.0)
    tile_timeout: float = Field(default=15.0, gt=0, le=120.0)
    boundary_timeout: float = Field(default=20.0, gt=0, le=120.0)

    # Cache TTLs (seconds) per data class
    provider_search_ttl: float = Field(
        default=3600.0,
        gt=0,
        description="TTL for provider search results"
    )

    technology_ttl: float = Field(
        default=3600.0,
        gt=0,
        description="TTL for probed / tabular technology lists"
    )

    coverage_ttl: float = Field(
        default=1800.0,
        gt=0,
        description="TTL for coverage query results"
    )

    # Coverage aggregation
    hex_zoom: int = Field(
        default=6,
        ge=3,
        le=10,
        description="Zoom level of the hex tile grid (6 = H3 resolution 5 hexagons)"
    )

    dedupe_precision: int = Field(
        default=4,
        ge=1,
        le=8,
        description="Decimal places for coordinate-derived dedupe keys (4 = ~11m)"
    )

    coverage_granularity: str = Field(
        default="state",
        description="Tabular fallback granularity: state or county"
    )

    county_row_limit: int = Field(
        default=50000,
        ge=1,
        description="Form 477 block rows fetched per page when building county coverage"
    )

    county_max_pages: int = Field(
        default=10,
        ge=1,
        description="Pages of block rows scanned before county coverage is marked truncated"
    )

    # Concurrency
    max_concurrency: int = Field(
        default=64,
        ge=1,
        le=256,
        description="Maximum concurrent requests per upstream client"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Testing
    run_integration_tests: bool = Field(
        default=False,
        description="Enable integration tests (requires network)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("coverage_granularity")
    @classmethod
    def validate_granularity(cls, v: str) -> str:
        """Validate the tabular fallback granularity."""
        v_lower = v.lower()
        if v_lower not in {"state", "county"}:
            raise ValueError("coverage_granularity must be 'state' or 'county'")
        return v_lower

    def get_fcc_app_token(self) -> Optional[str]:
        """
        Get the Socrata app token if configured.

        Without a token Socrata throttles anonymous callers per IP; the
        fallback tier still works, just slower under load.

        Returns:
            Optional[str]: The token if configured, None otherwise
        """
        return self.fcc_app_token


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    This pattern allows:
    - Easy testing (can reset settings between tests)
    - Lazy loading (only loads when first accessed)
    - Singleton pattern (same instance used everywhere)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Reset the global settings instance.

    Useful for testing to ensure clean state between tests.
    """
    global _settings
    _settings = None
