"""
Portal scraper configuration.

Dependencies: pydantic_settings
System role: Headless browser scraping configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScraperSettings(BaseSettings):
    """Settings for the partner portal scraper."""

    model_config = SettingsConfigDict(
        env_prefix="SCRAPER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    itinerary_endpoint: str = Field(
        default="/api/Itineraries",
        description="URL substring identifying the itinerary metadata response",
    )
    itinerary_endpoint_exclude: str = Field(
        default="/api/Itineraries/",
        description="URL substring that disqualifies an itinerary metadata match",
    )
    render_endpoint: str = Field(
        default="/api/PresentationEdits/renderDataClient",
        description="URL substring identifying the rendered content response",
    )
    navigation_timeout_ms: int = Field(
        default=120_000,
        description="Hard navigation timeout in milliseconds",
    )
    settle_delay_ms: int = Field(
        default=5_000,
        description="Delay after network idle before checking captures",
    )
    settle_delay_step_ms: int = Field(
        default=5_000,
        description="Extra settle delay added on each later attempt",
    )
    max_attempts: int = Field(
        default=3,
        description="Scrape attempts before a capture miss is surfaced",
    )
    backoff_initial: float = Field(
        default=2.0,
        description="Initial backoff in seconds between scrape attempts",
    )
    backoff_max: float = Field(
        default=30.0,
        description="Maximum backoff in seconds between scrape attempts",
    )
    headless: bool = Field(
        default=True,
        description="Run Chromium headless",
    )


@lru_cache
def get_scraper_settings() -> ScraperSettings:
    """
    Get cached scraper settings instance.

    Returns:
        ScraperSettings: Singleton settings loaded from environment
    """
    return ScraperSettings()
