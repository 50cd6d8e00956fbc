"""
Shared configuration management for the product catalog cache service.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias="CATALOG_ENV")
    log_level: str = Field(default="info", validation_alias="CATALOG_LOG_LEVEL")

    # Listener
    host: str = Field(default="0.0.0.0", validation_alias="CATALOG_HOST")
    port: int = Field(default=2000, validation_alias=AliasChoices("PORT", "CATALOG_PORT"))
    drain_timeout_seconds: Optional[float] = Field(
        default=None,
        validation_alias="CATALOG_DRAIN_TIMEOUT_SECONDS",
    )
    cors_allow_origins: List[str] = Field(
        default=["*"],
        validation_alias="CATALOG_CORS_ALLOW_ORIGINS",
    )

    # Cache store
    redis_url: str = Field(
        default="redis://127.0.0.1:6379",
        validation_alias=AliasChoices("REDIS_CONNECTION", "CATALOG_REDIS_URL"),
    )
    redis_instance: str = Field(
        default="Project_RedisLocal_",
        validation_alias=AliasChoices("REDIS_INSTANCE", "CATALOG_REDIS_INSTANCE"),
    )

    # Retention hint for cache entries. Only attached to writes when
    # apply_cache_ttl is enabled; entries otherwise never expire.
    cache_ttl_seconds: int = Field(
        default=86400,
        validation_alias=AliasChoices("TOKEN_CACHE_TIME", "CATALOG_CACHE_TTL"),
    )
    apply_cache_ttl: bool = Field(
        default=False,
        validation_alias="CATALOG_APPLY_CACHE_TTL",
    )

    # Origin source
    origin_max_delay_seconds: float = Field(
        default=5.0,
        validation_alias="CATALOG_ORIGIN_MAX_DELAY_SECONDS",
    )


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str

    def __init__(self, service_name: str, **kwargs):
        super().__init__(service_name=service_name, **kwargs)


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
