"""
Partner portal scraper.

Loads a portal page in headless Chromium and captures the two JSON
responses the portal renders from: the itinerary metadata list and the
rendered presentation content. Missing captures are retried with
exponential backoff and a longer settle delay each time; the last attempt
logs every observed response.

Dependencies: playwright, tenacity
System role: Phase 1 data acquisition
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from playwright.sync_api import Browser, Error as PlaywrightError, Response, sync_playwright
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from itinerary_pipeline.boundary.cdn.origin_cdn_client import OriginCdnClient
from itinerary_pipeline.configs.media_storage import get_media_storage_settings
from itinerary_pipeline.configs.scraper import ScraperSettings, get_scraper_settings
from itinerary_pipeline.core.exceptions import BrowserLaunchError, ScrapeError
from itinerary_pipeline.core.scraping.endpoint_discovery import (
    ITINERARY_TARGET,
    RENDER_TARGET,
    group_api_responses,
    suggest_endpoints,
)
from itinerary_pipeline.core.scraping.media_references import extract_media_references
from itinerary_pipeline.core.scraping.price import extract_price_minor_units
from itinerary_pipeline.core.scraping.url_parser import PortalUrl, parse_portal_url
from itinerary_pipeline.models.scrape_result import ObservedResponse, ScrapeResult, VideoReference

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}
CHROMIUM_ARGS = ["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"]


@dataclass
class ResponseCapture:
    """Response listener state for one page load."""

    settings: ScraperSettings
    itineraries: Any = None
    render_data: Any = None
    observed: list[ObservedResponse] = field(default_factory=list)

    def classify(self, url: str) -> str | None:
        """Which capture target a response URL belongs to, if any."""
        if self.settings.render_endpoint in url:
            return RENDER_TARGET
        if self.settings.itinerary_endpoint in url and self.settings.itinerary_endpoint_exclude not in url:
            return ITINERARY_TARGET
        return None

    def on_response(self, response: Response) -> None:
        content_type = response.headers.get("content-type", "")
        self.observed.append(ObservedResponse(url=response.url, status=response.status, content_type=content_type))

        target = self.classify(response.url)
        if target == ITINERARY_TARGET and self.itineraries is None:
            self.itineraries = self._read_json(response)
        elif target == RENDER_TARGET and self.render_data is None:
            self.render_data = self._read_json(response)

    @staticmethod
    def _read_json(response: Response) -> Any:
        try:
            return response.json()
        except (PlaywrightError, ValueError) as e:
            logger.warning("%s:_read_json - Non-JSON body from %s: %s", __name__, response.url, e)
            return None

    @property
    def missing(self) -> list[str]:
        missing = []
        if self.itineraries is None:
            missing.append(ITINERARY_TARGET)
        if self.render_data is None:
            missing.append(RENDER_TARGET)
        return missing


class PortalScraper:
    """
    Scrapes one portal itinerary.

    Usage:
        scraper = PortalScraper()
        result = scraper.scrape("https://portal.example/portal/KEY/ITINERARY")
    """

    def __init__(
        self,
        settings: ScraperSettings | None = None,
        cdn_client: OriginCdnClient | None = None,
        video_cdn_base: str | None = None,
        wait: wait_base | None = None,
    ) -> None:
        """
        Initialize the scraper.

        Args:
            settings: Scraper settings (defaults to environment settings)
            cdn_client: Client used to probe for the itinerary video
            video_cdn_base: Base URL of the partner video CDN
            wait: Override for the backoff between attempts
        """
        self._settings = settings or get_scraper_settings()
        self._cdn_client = cdn_client or OriginCdnClient()
        self._video_cdn_base = (video_cdn_base or get_media_storage_settings().video_cdn_base).rstrip("/")
        self._wait = wait or wait_exponential(
            multiplier=self._settings.backoff_initial,
            max=self._settings.backoff_max,
        )

    def scrape(self, url: str) -> ScrapeResult:
        """
        Scrape a portal URL.

        Raises:
            InvalidPortalUrlError: URL carries no access key or itinerary id
            BrowserLaunchError: Chromium could not be started
            ScrapeError: Expected responses still missing after every attempt
        """
        portal = parse_portal_url(url)
        logger.info("%s:scrape - Scraping itinerary %s", __name__, portal.itinerary_id)

        with sync_playwright() as playwright:
            try:
                browser = playwright.chromium.launch(headless=self._settings.headless, args=CHROMIUM_ARGS)
            except PlaywrightError as e:
                raise BrowserLaunchError(f"Chromium launch failed: {e}") from e
            try:
                capture = self._capture_with_retries(browser, url)
            finally:
                browser.close()

        return self._build_result(portal, capture)

    def _capture_with_retries(self, browser: Browser, url: str) -> ResponseCapture:
        retrying = Retrying(
            retry=retry_if_exception_type(ScrapeError),
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=self._wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                return self._attempt(browser, url, number, final=number >= self._settings.max_attempts)
        raise ScrapeError("No scrape attempt was made")

    def _attempt(self, browser: Browser, url: str, attempt_number: int, final: bool) -> ResponseCapture:
        """One page load. Raises ScrapeError when a capture target is missing."""
        settle_ms = self._settings.settle_delay_ms + (attempt_number - 1) * self._settings.settle_delay_step_ms
        capture = ResponseCapture(self._settings)
        page = browser.new_page(viewport=VIEWPORT)
        page.on("response", capture.on_response)
        logger.info(
            "%s:_attempt - Attempt %d, settle %dms", __name__, attempt_number, settle_ms
        )
        try:
            page.goto(url, wait_until="networkidle", timeout=self._settings.navigation_timeout_ms)
            page.wait_for_timeout(settle_ms)
        except PlaywrightError as e:
            raise ScrapeError(
                f"Navigation failed on attempt {attempt_number}: {e}",
                observed_responses=[o.model_dump() for o in capture.observed],
            ) from e
        finally:
            page.close()

        if final:
            self._log_diagnostics(capture)
        if capture.missing:
            raise self._capture_error(capture, attempt_number)
        return capture

    def _capture_error(self, capture: ResponseCapture, attempt_number: int) -> ScrapeError:
        suggestions = suggest_endpoints(capture.observed, capture.missing)
        logger.warning(
            "%s:_capture_error - Attempt %d missing %s; candidates: %s",
            __name__,
            attempt_number,
            ", ".join(capture.missing),
            suggestions or "none",
        )
        return ScrapeError(
            f"Failed to capture {', '.join(capture.missing)} response(s)",
            observed_responses=[o.model_dump() for o in capture.observed],
            suggestions=suggestions,
        )

    def _log_diagnostics(self, capture: ResponseCapture) -> None:
        logger.info("%s:_log_diagnostics - %d responses observed", __name__, len(capture.observed))
        for response in capture.observed:
            logger.debug(
                "%s:_log_diagnostics - %s %s [%s]",
                __name__,
                response.status,
                response.url,
                response.content_type,
            )
        for path, responses in group_api_responses(capture.observed).items():
            logger.info("%s:_log_diagnostics - api %s x%d", __name__, path, len(responses))

    def probe_videos(self, itinerary_id: str) -> list[VideoReference]:
        """The itinerary's assembled HLS video, when the partner CDN has one."""
        hls_url = f"{self._video_cdn_base}/video/hls/assembled_{itinerary_id}.m3u8"
        if self._cdn_client.probe_exists(hls_url):
            logger.info("%s:probe_videos - Found video %s", __name__, hls_url)
            return [VideoReference(hls_url=hls_url, context="hero")]
        return []

    def _build_result(self, portal: PortalUrl, capture: ResponseCapture) -> ScrapeResult:
        references = extract_media_references(capture.render_data)
        price = extract_price_minor_units(capture.itineraries, portal.itinerary_id)
        videos = self.probe_videos(portal.itinerary_id)
        logger.info(
            "%s:_build_result - Captured %d media references, %d videos, price %s",
            __name__,
            len(references),
            len(videos),
            price,
        )
        raw = {
            "itinerary": capture.render_data,
            "itineraryId": portal.itinerary_id,
            "accessKey": portal.access_key,
            "images": references,
            "price": price,
            "videos": [v.model_dump(by_alias=False) for v in videos],
        }
        return ScrapeResult(
            itinerary_id=portal.itinerary_id,
            access_key=portal.access_key,
            raw_itinerary=raw,
            media_references=references,
            price_minor_units=price,
            videos=videos,
        )
