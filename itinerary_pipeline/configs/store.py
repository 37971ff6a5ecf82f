"""
Content store configuration.

Settings for the REST document store holding jobs, image statuses,
media records, itineraries and notifications.

Dependencies: pydantic_settings
System role: Store client configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Settings for the document store REST API."""

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    api_url: str = Field(
        default="http://localhost:3000/api",
        description="Base URL of the store REST API (collections are appended)",
    )
    api_key: str = Field(
        default="",
        description="API key sent as 'users API-Key <key>'",
    )
    api_key_secret_arn: str = Field(
        default="",
        description="Secrets Manager ARN holding the API key (Lambda only)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
    )
    max_attempts: int = Field(
        default=3,
        description="Attempts per request before a transient failure is surfaced",
    )
    backoff_initial: float = Field(
        default=2.0,
        description="Initial backoff in seconds between retried requests",
    )
    backoff_max: float = Field(
        default=8.0,
        description="Maximum backoff in seconds between retried requests",
    )


@lru_cache
def get_store_settings() -> StoreSettings:
    """
    Get cached store settings instance.

    Returns:
        StoreSettings: Singleton settings loaded from environment
    """
    return StoreSettings()
