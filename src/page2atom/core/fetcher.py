"""
Web page fetcher with error handling and retry logic.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

import httpx

from page2atom.config import FetcherConfig, get_config
from page2atom.exceptions import FetchError
from page2atom.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FetchStats:
    """Statistics for page fetching operations."""

    total_pages: int = 0
    successful_fetches: int = 0
    failed_fetches: int = 0
    total_time_seconds: float = 0.0
    errors_by_type: dict = field(default_factory=dict)

    def add_success(self, fetch_time_seconds: float) -> None:
        self.total_pages += 1
        self.successful_fetches += 1
        self.total_time_seconds += fetch_time_seconds

    def add_failure(self, error: str, fetch_time_seconds: float) -> None:
        self.total_pages += 1
        self.failed_fetches += 1
        self.total_time_seconds += fetch_time_seconds

        error_type = error.split(":")[0] if error else "unknown"
        self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total_pages == 0:
            return 0.0
        return self.successful_fetches / self.total_pages


class PageFetcher:
    """Web page fetcher with retry logic and error handling.

    Each attempt uses a fresh client, so no cookies are carried between
    requests.
    """

    def __init__(
        self,
        config: Optional[FetcherConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep=time.sleep,
    ):
        """Initialize page fetcher.

        Args:
            config: Fetcher settings, defaults to the global configuration
            transport: Optional httpx transport (used by tests)
            sleep: Function used to wait between retries
        """
        config = config or get_config().fetcher

        self.timeout_seconds = config.timeout_seconds
        self.max_retries = config.max_retries
        self.user_agent = config.user_agent
        self.retry_delay_seconds = config.retry_delay_seconds
        self.follow_redirects = config.follow_redirects
        self.max_redirects = config.max_redirects

        self.transport = transport
        self._sleep = sleep
        self.stats = FetchStats()

    def fetch_page(self, url: str) -> str:
        """Fetch a web page.

        Args:
            url: URL of the page

        Returns:
            Decoded page source, unmodified

        Raises:
            FetchError: On a non-success response or network failure once
                retries are exhausted
        """
        start_time = time.time()
        last_error = None
        http_status = None

        logger.debug(f"Loading web page at {url}")

        for attempt in range(self.max_retries + 1):
            try:
                response = self._fetch_http(url)

                fetch_time = time.time() - start_time
                self.stats.add_success(fetch_time)
                logger.info(f"Fetched {url} ({len(response.content)} bytes) in {fetch_time:.2f}s")

                return response.text

            except httpx.TimeoutException as e:
                last_error = f"Timeout: {str(e)}"
                logger.warning(f"Timeout fetching {url} (attempt {attempt + 1}/{self.max_retries + 1})")

            except httpx.HTTPStatusError as e:
                http_status = e.response.status_code
                last_error = f"HTTP {http_status}: {e.response.reason_phrase}"

                # Don't retry client errors (4xx)
                if 400 <= http_status < 500:
                    logger.error(f"Client error fetching {url}: {last_error}")
                    break

                logger.warning(f"HTTP error fetching {url} (attempt {attempt + 1})")

            except httpx.RequestError as e:
                last_error = f"Request error: {str(e)}"
                logger.warning(f"Network error fetching {url} (attempt {attempt + 1})")

            # Retry delay
            if attempt < self.max_retries:
                self._sleep(self.retry_delay_seconds * (attempt + 1))

        error = last_error or "Unknown error"
        self.stats.add_failure(error, time.time() - start_time)
        raise FetchError(url, error, status_code=http_status)

    def _fetch_http(self, url: str) -> httpx.Response:
        """Fetch URL with HTTP client.

        Args:
            url: URL to fetch

        Returns:
            httpx Response

        Raises:
            httpx.TimeoutException: On timeout
            httpx.HTTPStatusError: On HTTP error
            httpx.RequestError: On network error
        """
        headers = {"User-Agent": self.user_agent}

        with httpx.Client(
            timeout=self.timeout_seconds,
            follow_redirects=self.follow_redirects,
            max_redirects=self.max_redirects,
            transport=self.transport,
        ) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            return response


def create_fetcher(
    config: Optional[FetcherConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> PageFetcher:
    """Create a configured PageFetcher instance.

    Args:
        config: Optional fetcher settings override
        transport: Optional httpx transport

    Returns:
        Configured PageFetcher instance
    """
    return PageFetcher(config=config, transport=transport)
