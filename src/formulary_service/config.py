"""Configuration management for the formulary service."""

from typing import Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from formulary_service.utils.namespace import validate_plan_id


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application
    app_name: str = "formulary-service"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Key-value store
    store_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Use the in-memory stub or a Redis server"
    )
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = Field(
        default=5.0, description="Redis socket timeout in seconds"
    )

    # Formulary
    plan_id: str = Field(default="default", description="Plan namespace for all keys")
    max_tier: int = Field(default=5, description="Highest tier covered by stats and export")
    search_default_limit: int = 50
    filter_default_limit: int = 100
    pa_request_ttl_seconds: int = 30 * 24 * 60 * 60  # 30 days

    # Index maintenance
    index_prune_stale_memberships: bool = Field(
        default=True,
        description="Remove memberships implied by a record's previous values on upsert",
    )
    index_track_search_terms: bool = Field(
        default=False,
        description="Keep an ndc -> tokens reverse set so removal cleans search sets",
    )

    # Observability
    metrics_enabled: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator("plan_id")
    @classmethod
    def check_plan_id(cls, v: str) -> str:
        """Plan ids become key prefixes and scan patterns."""
        return validate_plan_id(v)

    @field_validator("max_tier")
    @classmethod
    def validate_max_tier(cls, v: int) -> int:
        """Tiers are small positive integers."""
        if v < 1:
            raise ValueError("max_tier must be at least 1")
        return v

    @field_validator("pa_request_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("pa_request_ttl_seconds must be positive")
        return v


# Global settings instance
settings = Settings()
