"""Configuration management for the parts service."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

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

    # API Configuration
    api_port: int = Field(default=8000, description="API server port")
    api_host: str = Field(default="0.0.0.0", description="API server host")

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log format")

    # Lifecycle
    monitor_autostart: bool = Field(
        default=True, description="Start the reorder monitor on application startup"
    )
    seed_demo_data: bool = Field(
        default=True, description="Load the demo catalog when the service is built"
    )

    # Reordering
    reorder_check_interval_seconds: float = Field(
        default=300.0, gt=0, description="Seconds between reorder sweeps"
    )
    order_history_limit: int = Field(
        default=50, ge=1, description="Default page size for order history"
    )

    # Supplier simulation
    price_refresh_interval_seconds: float = Field(
        default=60.0, ge=0, description="Seconds between price cache refreshes (0 disables)"
    )
    supplier_latency_ms: int = Field(
        default=100, ge=0, description="Simulated latency per supplier quote"
    )
    supplier_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Upper bound for a supplier price fetch"
    )
    price_variation: float = Field(
        default=0.10, ge=0, lt=1, description="Max relative price swing of a quote"
    )
    random_seed: int | None = Field(
        default=None, description="Seed for the pricing simulator"
    )

    # Invoicing
    tax_rate: Decimal = Field(default=Decimal("0.15"), ge=0, description="Invoice tax rate")
    invoice_due_days: int = Field(default=30, ge=0, description="Days until an invoice is due")
    default_warranty_months: int = Field(
        default=12, ge=0, description="Warranty applied when a period cannot be parsed"
    )

    # Analytics
    analytics_window_days: int = Field(
        default=30, ge=1, description="Default trailing window for analytics"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
