"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS GeoJSON feed.
All I/O is contained here; parsing is in the core module.
"""

import logging
from dataclasses import dataclass

import requests

from quakefeed.core.config import DEFAULT_FEED_URL, DEFAULT_REQUEST_TIMEOUT_SECONDS


logger = logging.getLogger(__name__)


@dataclass
class FeedResponse:
    """Response from the USGS feed.

    Attributes:
        success: Whether the feed was fetched successfully
        body: Raw response body (empty on failure)
        status_code: HTTP status code (0 if no response was received)
        error: Error message if failed
    """
    success: bool
    body: bytes = b""
    status_code: int = 0
    error: str | None = None


class USGSClient:
    """Client for fetching the USGS earthquake feed.

    This is part of the imperative shell - it handles HTTP I/O.
    Failures are returned as FeedResponse values, never raised.
    """

    def __init__(
        self,
        feed_url: str = DEFAULT_FEED_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize USGS client.

        Args:
            feed_url: USGS GeoJSON feed URL
            timeout: Request timeout in seconds
        """
        self.feed_url = feed_url
        self.timeout = timeout

    def fetch(self) -> FeedResponse:
        """Fetch the raw feed body.

        This method performs HTTP I/O. No retries: the poller simply
        tries again on its next cycle.

        Returns:
            FeedResponse with the body on success, or the error on failure
        """
        logger.info("Fetching earthquake feed from %s", self.feed_url)

        try:
            response = requests.get(
                self.feed_url,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.Timeout:
            logger.error("Feed request timed out after %ss", self.timeout)
            return FeedResponse(
                success=False,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("Feed request failed: %s", str(e))
            return FeedResponse(
                success=False,
                error=str(e),
            )

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Feed returned non-2xx: %d",
                response.status_code,
            )
            return FeedResponse(
                success=False,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
            )

        logger.info("Fetched %d bytes from feed", len(response.content))

        return FeedResponse(
            success=True,
            body=response.content,
            status_code=response.status_code,
        )
