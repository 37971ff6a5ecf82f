"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the pipeline
"""

from functools import lru_cache

from pydantic import Field

from itinerary_pipeline.configs.base import BaseSettings
from itinerary_pipeline.configs.media_storage import MediaStorageSettings
from itinerary_pipeline.configs.pipeline import PipelineSettings
from itinerary_pipeline.configs.scraper import ScraperSettings
from itinerary_pipeline.configs.store import StoreSettings


class Settings(BaseSettings):
    """Unified settings aggregating all config modules."""

    store: StoreSettings = Field(default_factory=StoreSettings)
    media_storage: MediaStorageSettings = Field(default_factory=MediaStorageSettings)
    scraper: ScraperSettings = Field(default_factory=ScraperSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once per process.

    Returns:
        Settings: Application settings instance

    Usage:
        from itinerary_pipeline.configs import get_settings
        settings = get_settings()
    """
    return Settings()
