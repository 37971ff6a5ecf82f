"""
Media storage configuration.

Settings for the owned S3 media bucket, the image CDN in front of it,
and the partner origin CDNs media is downloaded from.

Dependencies: pydantic_settings
System role: Media rehosting configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MediaStorageSettings(BaseSettings):
    """Settings for media download and rehosting."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="itinerary-media-dev",
        description="S3 bucket for rehosted media originals",
    )
    region: str = Field(
        default="eu-north-1",
        description="AWS region for the media bucket",
    )
    imgix_domain: str = Field(
        default="kiuli.imgix.net",
        description="Image CDN domain serving the media bucket",
    )
    imgix_default_params: str = Field(
        default="auto=format,compress&q=80",
        description="Default image CDN transform parameters",
    )
    origin_cdn_base: str = Field(
        default="https://itrvl-production-media.imgix.net",
        description="Partner CDN base URL that source references resolve against",
    )
    video_cdn_base: str = Field(
        default="https://cdn-media.itrvl.com",
        description="Partner CDN base URL hosting HLS itinerary videos",
    )
    cache_control: str = Field(
        default="public, max-age=31536000, immutable",
        description="Cache-Control header for uploaded originals",
    )
    download_timeout: float = Field(
        default=60.0,
        description="Origin download timeout in seconds",
    )


@lru_cache
def get_media_storage_settings() -> MediaStorageSettings:
    """
    Get cached media storage settings instance.

    Returns:
        MediaStorageSettings: Singleton settings loaded from environment
    """
    return MediaStorageSettings()
