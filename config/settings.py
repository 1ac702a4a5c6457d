"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SHOPIFY
    # ===================
    shopify_store: str = Field(
        default="eyhp3z-x1",
        description="Shopify store handle (<handle>.myshopify.com)"
    )
    shopify_access_token: Optional[str] = Field(
        None,
        description="Shopify Admin API access token"
    )
    shopify_api_version: str = Field(
        default="2024-10",
        description="Shopify Admin API version"
    )
    shopify_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="HTTP timeout for a single Shopify request"
    )

    # ===================
    # FETCHING
    # ===================
    page_size: int = Field(
        default=250,
        ge=1,
        le=250,
        description="Records per page (Shopify caps this at 250)"
    )
    max_pages: int = Field(
        default=200,
        ge=1,
        description="Hard stop for pagination of a single query"
    )
    max_concurrent_fetches: int = Field(
        default=4,
        ge=1,
        le=16,
        description="Worker threads for independent fetches"
    )

    # ===================
    # REPORTING
    # ===================
    business_timezone: str = Field(
        default="Australia/Brisbane",
        description="IANA timezone used for all day/week/month boundaries"
    )
    all_time_days: int = Field(
        default=180,
        ge=1,
        description="Look-back length of the 'all' period"
    )
    top_variants_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Default number of variants in rankings"
    )
    mix_seed: str = Field(
        default="monthly-mix",
        description="Seed prefix for synthesized monthly product mixes"
    )

    # ===================
    # INVENTORY COVER
    # ===================
    velocity_window_weeks: int = Field(
        default=4,
        description="Trailing weeks of sales used for velocity (4, 8 or 12)"
    )
    cover_critical_weeks: float = Field(
        default=2,
        ge=0,
        description="Below this many weeks of cover: Critical"
    )
    cover_low_weeks: float = Field(
        default=4,
        ge=0,
        description="Below this many weeks of cover: Low"
    )
    cover_adequate_weeks: float = Field(
        default=8,
        ge=0,
        description="Below this many weeks of cover: Adequate, otherwise Healthy"
    )
    production_lead_weeks: int = Field(
        default=12,
        ge=0,
        le=52,
        description="Weeks from purchase order to finished goods"
    )
    air_freight_weeks: int = Field(
        default=1,
        ge=0,
        le=12,
        description="Transit weeks by air"
    )
    sea_freight_weeks: int = Field(
        default=6,
        ge=0,
        le=26,
        description="Transit weeks by sea"
    )
    safety_stock_weeks: int = Field(
        default=4,
        ge=0,
        le=26,
        description="Extra weeks of cover kept as buffer"
    )

    # ===================
    # STORAGE
    # ===================
    inbound_store_path: str = Field(
        default="data/inbound_orders.json",
        description="JSON file holding scheduled inbound shipments"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def shopify_configured(self) -> bool:
        """Check if Shopify credentials are present."""
        return bool(self.shopify_store and self.shopify_access_token)

    @property
    def shopify_endpoint(self) -> str:
        """GraphQL Admin API endpoint for the configured store."""
        return (
            f"https://{self.shopify_store}.myshopify.com"
            f"/admin/api/{self.shopify_api_version}/graphql.json"
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
