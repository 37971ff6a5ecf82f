"""
Ingestion pipeline configuration.

Provides environment-based configuration for chunked media processing,
video conversion and published page URLs.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Settings for the itinerary ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    chunk_size: int = Field(
        default=20,
        description="Maximum pending image rows processed per chunk invocation",
    )
    media_lookup_limit: int = Field(
        default=500,
        description="Maximum media records fetched per itinerary at finalization",
    )
    site_url: str = Field(
        default="https://kiuli.com",
        description="Public site URL used for canonical and breadcrumb links",
    )
    itinerary_path_prefix: str = Field(
        default="/safaris",
        description="Path prefix of published itinerary pages",
    )
    ffmpeg_path: str = Field(
        default="ffmpeg",
        description="ffmpeg binary used to remux HLS video to MP4",
    )
    ffmpeg_timeout_seconds: int = Field(
        default=300,
        description="Timeout for a single HLS to MP4 conversion",
    )
    min_video_bytes: int = Field(
        default=1000,
        description="Converted videos smaller than this are rejected",
    )


@lru_cache
def get_pipeline_settings() -> PipelineSettings:
    """
    Get cached pipeline settings instance.

    Returns:
        PipelineSettings: Singleton settings loaded from environment
    """
    return PipelineSettings()
