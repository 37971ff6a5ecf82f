"""
Origin CDN client.

Downloads partner media by source reference and probes optional assets
with HEAD requests.

Dependencies: httpx
System role: Read-only access to the partner's media CDN
"""

import logging
from dataclasses import dataclass

import httpx

from itinerary_pipeline.configs.media_storage import (
    MediaStorageSettings,
    get_media_storage_settings,
)
from itinerary_pipeline.core.exceptions import MediaDownloadError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"


@dataclass(slots=True)
class DownloadedAsset:
    body: bytes
    content_type: str
    url: str


class OriginCdnClient:
    """HTTP client for the partner media CDN."""

    def __init__(
        self,
        settings: MediaStorageSettings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or get_media_storage_settings()
        self._http = http_client or httpx.Client(
            timeout=self._settings.download_timeout,
            follow_redirects=True,
        )

    def url_for(self, source_ref: str) -> str:
        """Absolute URL of a source reference (absolute references pass through)."""
        if source_ref.startswith(("http://", "https://")):
            return source_ref
        return f"{self._settings.origin_cdn_base.rstrip('/')}/{source_ref.lstrip('/')}"

    def download(self, source_ref: str) -> DownloadedAsset:
        """
        Download the asset behind a source reference.

        Raises:
            MediaDownloadError: Network failure, non-2xx status or empty body
        """
        url = self.url_for(source_ref)
        try:
            response = self._http.get(url)
        except httpx.HTTPError as e:
            raise MediaDownloadError(
                f"Download failed for {url}: {type(e).__name__}: {e}", source_ref=source_ref
            ) from e

        if not response.is_success:
            raise MediaDownloadError(
                f"Download failed for {url}: HTTP {response.status_code}",
                source_ref=source_ref,
                details={"status_code": response.status_code},
            )
        if not response.content:
            raise MediaDownloadError(f"Download returned an empty body for {url}", source_ref=source_ref)

        content_type = response.headers.get("content-type", DEFAULT_CONTENT_TYPE).split(";")[0].strip()
        logger.debug(
            "%s:download - Downloaded asset",
            __name__,
            extra={"url": url, "bytes": len(response.content)},
        )
        return DownloadedAsset(body=response.content, content_type=content_type, url=url)

    def probe_exists(self, url: str) -> bool:
        """HEAD-probe ``url``. Any non-2xx answer or network error means it does not exist."""
        try:
            response = self._http.head(url)
        except httpx.HTTPError as e:
            logger.info("%s:probe_exists - Probe failed for %s: %s", __name__, url, e)
            return False
        return response.is_success

    def close(self) -> None:
        self._http.close()
