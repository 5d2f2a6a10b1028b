"""
HTTP client for fetching listing and article pages behind a token bucket.

This module provides the default HTTP transport, with browser-like headers
and connect/read timeouts, and the rate-limited fetcher that paces every
request through the process-wide token bucket. No retries are performed:
a failed request surfaces to the caller as a NetworkError.
"""

import time
from typing import Callable, Optional, Dict
from dataclasses import dataclass
from urllib.parse import urlparse
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config.logging import get_logger
from ..config.timeouts import get_timeout_manager
from .ratelimit import TokenBucket, get_default_bucket


logger = get_logger(__name__)


class NetworkError(Exception):
    """Raised when a page cannot be fetched (transport or HTTP failure)."""

    def __init__(self, message: str, url: str = "", status_code: int = 0):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.details = {"url": url, "status_code": status_code}


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation."""

    url: str
    content: str
    status_code: int
    headers: Dict[str, str]
    encoding: Optional[str] = None
    fetch_time_ms: int = 0
    success: bool = True
    error_message: Optional[str] = None


class HTTPFetcher:
    """
    HTTP transport with browser-like headers.

    Performs a single GET per call. Retrying is left to the caller.
    """

    def __init__(self, user_agent: Optional[str] = None):
        """
        Initialize HTTP fetcher.

        Args:
            user_agent: Custom user agent string
        """
        self.timeout_manager = get_timeout_manager()

        # Default user agent that mimics a real browser
        self.user_agent = user_agent or (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36"
        )

        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with urllib3 retries disabled."""
        session = requests.Session()

        adapter = HTTPAdapter(max_retries=Retry(total=0, redirect=10, raise_on_status=False))
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def _get_headers(self, url: str) -> Dict[str, str]:
        """
        Generate browser-like headers for the target URL.

        Args:
            url: Target URL for header customization

        Returns:
            Dictionary of HTTP headers
        """
        domain = urlparse(url).netloc

        headers = {
            "User-Agent": self.user_agent,
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;"
                "q=0.9,image/webp,*/*;q=0.8"
            ),
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate",
            "DNT": "1",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        }

        if domain:
            headers["Referer"] = f"https://{domain}/"

        return headers

    def fetch(self, url: str) -> FetchResult:
        """
        Fetch content from URL.

        Args:
            url: URL to fetch

        Returns:
            FetchResult containing response data and metadata
        """
        start_time = time.time()

        if not url or not url.startswith(('http://', 'https://')):
            logger.error("Invalid URL format", url=url)
            return FetchResult(
                url=url or "",
                content="",
                status_code=0,
                headers={},
                success=False,
                error_message="Invalid URL format"
            )

        timeout_tuple = self.timeout_manager.get_http_timeout()

        try:
            response = self.session.get(
                url,
                headers=self._get_headers(url),
                timeout=timeout_tuple,
                allow_redirects=True
            )
        except requests.exceptions.Timeout:
            error = f"Request timeout after {timeout_tuple[0]}s connect, {timeout_tuple[1]}s read"
            logger.warning("HTTP request timed out", url=url, connect_timeout=timeout_tuple[0],
                           read_timeout=timeout_tuple[1])
            return self._failure(url, error, start_time)
        except requests.exceptions.ConnectionError as e:
            logger.warning("HTTP connection error", url=url, error=str(e))
            return self._failure(url, "Connection error - unable to reach server", start_time)
        except requests.exceptions.TooManyRedirects:
            logger.warning("Too many redirects", url=url)
            return self._failure(url, "Too many redirects", start_time)
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP request exception", url=url, error=str(e), error_type=type(e).__name__)
            return self._failure(url, f"Request failed: {str(e)}", start_time)

        fetch_time_ms = int((time.time() - start_time) * 1000)

        logger.log_http_request(
            method="GET",
            url=response.url,
            status_code=response.status_code,
            duration_ms=fetch_time_ms,
            success=response.status_code == 200,
            redirected=response.url != url
        )

        if response.status_code == 200:
            return FetchResult(
                url=response.url,  # Final URL after redirects
                content=response.text,
                status_code=response.status_code,
                headers=dict(response.headers),
                encoding=response.encoding,
                fetch_time_ms=fetch_time_ms,
                success=True
            )

        if response.status_code == 403:
            error = "Access forbidden (403) - possible bot detection"
        elif response.status_code == 404:
            error = "Page not found (404)"
        elif response.status_code == 429:
            error = "Rate limited (429) - too many requests"
        else:
            error = f"HTTP {response.status_code}: {response.reason}"

        logger.warning("HTTP request failed", url=url, status_code=response.status_code, error=error)

        return FetchResult(
            url=url,
            content="",
            status_code=response.status_code,
            headers={},
            fetch_time_ms=fetch_time_ms,
            success=False,
            error_message=error
        )

    def get_html(self, url: str) -> str:
        """
        Fetch a page and return its HTML.

        Raises:
            NetworkError: If the request fails or the status is not 200
        """
        result = self.fetch(url)
        if not result.success:
            raise NetworkError(
                result.error_message or "Unknown error occurred",
                url=url,
                status_code=result.status_code
            )
        return result.content

    def _failure(self, url: str, error: str, start_time: float) -> FetchResult:
        return FetchResult(
            url=url,
            content="",
            status_code=0,
            headers={},
            fetch_time_ms=int((time.time() - start_time) * 1000),
            success=False,
            error_message=error
        )

    def close(self) -> None:
        """Close the HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class RateLimitedFetcher:
    """
    Paces a ``(url) -> html`` transport through a token bucket.

    Every call takes one permit and the single in-flight slot before
    dispatching. Failures are raised as NetworkError.
    """

    def __init__(
        self,
        transport: Optional[Callable[[str], str]] = None,
        bucket: Optional[TokenBucket] = None
    ):
        """
        Initialize the rate-limited fetcher.

        Args:
            transport: Callable returning the HTML for a URL; defaults to HTTPFetcher.get_html
            bucket: Token bucket to pace requests; defaults to the process-wide bucket
        """
        self._http: Optional[HTTPFetcher] = None
        if transport is None:
            self._http = HTTPFetcher()
            transport = self._http.get_html
        self.transport = transport
        self.bucket = bucket or get_default_bucket()

    def fetch(self, url: str) -> str:
        """
        Fetch a page through the token bucket.

        Args:
            url: Absolute URL to fetch

        Returns:
            Response body as text

        Raises:
            NetworkError: On any transport or HTTP failure
        """
        with self.bucket.reserve():
            logger.debug("Dispatching request", url=url, tokens_left=self.bucket.tokens)
            try:
                return self.transport(url)
            except NetworkError:
                raise
            except Exception as e:
                raise NetworkError(f"Fetch failed: {str(e)}", url=url) from e

    def close(self) -> None:
        """Close the default HTTP transport if this fetcher created it."""
        if self._http:
            self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
