"""Configuration management for the pizzeria service."""

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

    # Redis Configuration
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL")

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

    # Security
    secret_key: str = Field(..., description="Secret key for JWT signing")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(
        default=60 * 24, description="Access token expiration in minutes"
    )

    # Optimistic transaction retry
    max_retries: int = Field(default=5, description="Max retries on a WATCH conflict")
    retry_delay: float = Field(default=0.05, description="Initial retry delay in seconds")
    retry_max_delay: float = Field(default=1.0, description="Retry delay cap in seconds")

    # Delivery windows
    prep_window_minutes: int = Field(
        default=30, description="Estimated delivery window once in the kitchen"
    )
    delivery_window_minutes: int = Field(
        default=15, description="Estimated delivery window once out for delivery"
    )
    base_delivery_minutes: int = Field(
        default=30, description="Initial delivery estimate for a new order"
    )
    minutes_per_topping: int = Field(
        default=2, description="Extra delivery minutes per topping"
    )

    # Inventory Settings
    low_stock_threshold: int = Field(
        default=10, description="Default threshold for low stock alert sweeps"
    )

    # Order policy
    admin_can_cancel: bool = Field(
        default=True, description="Allow admins to cancel orders they do not own"
    )
    notifications_enabled: bool = Field(default=True)
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

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
