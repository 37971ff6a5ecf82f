"""
S3 client for the owned media bucket.

Uploads rehosted originals with long-lived immutable cache headers and
builds image CDN URLs for stored keys.

Dependencies: boto3
System role: Owned media storage
"""

import logging
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from itinerary_pipeline.configs.media_storage import (
    MediaStorageSettings,
    get_media_storage_settings,
)
from itinerary_pipeline.core.exceptions import MediaUploadError

logger = logging.getLogger(__name__)


class S3MediaClient:
    """S3 client for media bucket operations."""

    def __init__(self, settings: MediaStorageSettings | None = None, s3_client=None) -> None:
        """
        Initialize S3 client for the media bucket.

        Args:
            settings: Media storage settings (defaults to environment settings)
            s3_client: Preconfigured boto3 S3 client
        """
        self._settings = settings or get_media_storage_settings()
        self._bucket = self._settings.bucket
        self._s3_client = s3_client or boto3.client("s3", region_name=self._settings.region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def upload_bytes(self, key: str, body: bytes, content_type: str, source_ref: str) -> str:
        """
        Upload an object under ``key``.

        Args:
            key: Destination object key
            body: Object bytes
            content_type: MIME type stored on the object
            source_ref: Origin reference, for error attribution

        Returns:
            str: Public S3 URL of the object

        Raises:
            MediaUploadError: S3 rejected the upload
        """
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                CacheControl=self._settings.cache_control,
            )
        except (ClientError, BotoCoreError) as e:
            raise MediaUploadError(
                f"S3 upload failed for {key}: {e}",
                source_ref=source_ref,
                details={"bucket": self._bucket, "key": key},
            ) from e

        logger.info(
            "%s:upload_bytes - Uploaded object",
            __name__,
            extra={"key": key, "bytes": len(body), "content_type": content_type},
        )
        return self.object_url(key)

    def object_exists(self, key: str) -> bool:
        """
        Check if an object exists.

        Returns:
            bool: True if the object exists, False on 404
        """
        try:
            self._s3_client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    def object_url(self, key: str) -> str:
        return f"https://{self._bucket}.s3.{self._settings.region}.amazonaws.com/{quote(key)}"

    def imgix_url(self, key: str, params: str | None = None) -> str:
        """Image CDN URL for ``key`` with default transforms unless ``params`` is given."""
        query = self._settings.imgix_default_params if params is None else params
        url = f"https://{self._settings.imgix_domain}/{quote(key)}"
        return f"{url}?{query}" if query else url
