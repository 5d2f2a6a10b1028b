"""
Unit tests for HTTP fetcher and rate-limited fetcher functionality.
"""

import threading
import time
import pytest
from unittest.mock import Mock, patch
import requests
from src.scraper.fetcher import HTTPFetcher, NetworkError, RateLimitedFetcher
from src.scraper.ratelimit import TokenBucket


def make_bucket():
    clock = Mock(return_value=0.0)
    return TokenBucket(min_interval=0.0, clock=clock, sleep=Mock())


class TestHTTPFetcher:
    """Test cases for HTTPFetcher class."""

    def test_init_with_defaults(self):
        """Test fetcher initialization with default values."""
        fetcher = HTTPFetcher()
        assert "Mozilla" in fetcher.user_agent
        assert fetcher.session is not None

    def test_init_with_custom_user_agent(self):
        """Test fetcher initialization with a custom user agent."""
        fetcher = HTTPFetcher(user_agent="Custom Agent")
        assert fetcher.user_agent == "Custom Agent"
        assert fetcher._get_headers("https://example.com/a")["User-Agent"] == "Custom Agent"

    def test_headers_include_referer(self):
        """Test that headers carry a referer for the target domain."""
        headers = HTTPFetcher()._get_headers("https://www.nintendo.com/us/whatsnew/")
        assert headers["Referer"] == "https://www.nintendo.com/"

    def test_invalid_url_handling(self):
        """Test handling of invalid URLs."""
        fetcher = HTTPFetcher()

        result = fetcher.fetch("")
        assert not result.success
        assert "Invalid URL format" in result.error_message

        result = fetcher.fetch("not-a-url")
        assert not result.success
        assert "Invalid URL format" in result.error_message

    @patch('src.scraper.fetcher.requests.Session.get')
    def test_successful_fetch(self, mock_get):
        """Test successful HTTP fetch."""
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.text = "<html><body>Test content</body></html>"
        mock_response.url = "https://example.com"
        mock_response.headers = {"Content-Type": "text/html"}
        mock_response.encoding = "utf-8"
        mock_get.return_value = mock_response

        fetcher = HTTPFetcher()
        result = fetcher.fetch("https://example.com")

        assert result.success
        assert result.status_code == 200
        assert result.content == "<html><body>Test content</body></html>"
        assert result.url == "https://example.com"
        assert mock_get.call_count == 1

    @patch('src.scraper.fetcher.requests.Session.get')
    def test_http_error_handling(self, mock_get):
        """Test handling of HTTP errors."""
        mock_response = Mock()
        mock_response.status_code = 404
        mock_response.reason = "Not Found"
        mock_response.url = "https://example.com/nonexistent"
        mock_get.return_value = mock_response

        fetcher = HTTPFetcher()
        result = fetcher.fetch("https://example.com/nonexistent")

        assert not result.success
        assert result.status_code == 404
        assert "404" in result.error_message

    @patch('src.scraper.fetcher.requests.Session.get')
    def test_timeout_is_not_retried(self, mock_get):
        """Test that a timeout fails after a single attempt."""
        mock_get.side_effect = requests.exceptions.Timeout("Request timeout")

        fetcher = HTTPFetcher()
        result = fetcher.fetch("https://example.com")

        assert not result.success
        assert "timeout" in result.error_message.lower()
        assert mock_get.call_count == 1

    @patch('src.scraper.fetcher.requests.Session.get')
    def test_get_html_raises_network_error(self, mock_get):
        """Test that get_html surfaces failures as NetworkError."""
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        fetcher = HTTPFetcher()
        with pytest.raises(NetworkError) as exc_info:
            fetcher.get_html("https://example.com")

        assert exc_info.value.url == "https://example.com"
        assert "Connection error" in str(exc_info.value)

    @patch('src.scraper.fetcher.requests.Session.get')
    def test_get_html_status_code_on_error(self, mock_get):
        """Test that NetworkError carries the HTTP status code."""
        mock_response = Mock()
        mock_response.status_code = 503
        mock_response.reason = "Service Unavailable"
        mock_response.url = "https://example.com"
        mock_get.return_value = mock_response

        with pytest.raises(NetworkError) as exc_info:
            HTTPFetcher().get_html("https://example.com")

        assert exc_info.value.status_code == 503

    def test_context_manager(self):
        """Test fetcher as context manager."""
        with HTTPFetcher() as fetcher:
            assert fetcher is not None
            assert hasattr(fetcher, 'session')


class TestRateLimitedFetcher:
    """Test cases for RateLimitedFetcher class."""

    def test_fetch_returns_transport_html(self):
        """Test that the transport's HTML is returned."""
        transport = Mock(return_value="<html></html>")
        fetcher = RateLimitedFetcher(transport=transport, bucket=make_bucket())

        assert fetcher.fetch("https://example.com") == "<html></html>"
        transport.assert_called_once_with("https://example.com")

    def test_each_fetch_consumes_a_permit(self):
        """Test that every fetch takes one token from the bucket."""
        bucket = make_bucket()
        fetcher = RateLimitedFetcher(transport=Mock(return_value=""), bucket=bucket)

        fetcher.fetch("https://example.com/1")
        fetcher.fetch("https://example.com/2")

        assert bucket.tokens == 28

    def test_network_error_propagates(self):
        """Test that NetworkError from the transport reaches the caller unchanged."""
        error = NetworkError("Page not found (404)", url="https://example.com", status_code=404)
        fetcher = RateLimitedFetcher(transport=Mock(side_effect=error), bucket=make_bucket())

        with pytest.raises(NetworkError) as exc_info:
            fetcher.fetch("https://example.com")

        assert exc_info.value is error

    def test_other_errors_are_wrapped(self):
        """Test that unexpected transport errors become NetworkError."""
        fetcher = RateLimitedFetcher(transport=Mock(side_effect=OSError("socket closed")), bucket=make_bucket())

        with pytest.raises(NetworkError) as exc_info:
            fetcher.fetch("https://example.com")

        assert "socket closed" in str(exc_info.value)
        assert exc_info.value.url == "https://example.com"

    def test_no_retry_on_failure(self):
        """Test that a failed fetch is attempted exactly once."""
        transport = Mock(side_effect=NetworkError("down"))
        fetcher = RateLimitedFetcher(transport=transport, bucket=make_bucket())

        with pytest.raises(NetworkError):
            fetcher.fetch("https://example.com")

        assert transport.call_count == 1

    @patch('src.scraper.fetcher.requests.Session.get')
    def test_default_transport_is_http(self, mock_get):
        """Test that the default transport goes through requests."""
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.text = "<p>ok</p>"
        mock_response.url = "https://example.com"
        mock_response.headers = {}
        mock_response.encoding = "utf-8"
        mock_get.return_value = mock_response

        with RateLimitedFetcher(bucket=make_bucket()) as fetcher:
            assert fetcher.fetch("https://example.com") == "<p>ok</p>"


class SteppedClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


class TestConcurrentFetching:
    """Test cases for callers sharing one bucket from several threads."""

    def test_threads_serialize_through_shared_bucket(self):
        """Test that concurrent fetches never overlap and keep their spacing."""
        clock = SteppedClock()
        bucket = TokenBucket(clock=clock, sleep=clock.sleep)
        state = {"in_flight": 0, "max_in_flight": 0, "dispatches": []}
        state_lock = threading.Lock()

        def transport(url):
            with state_lock:
                state["in_flight"] += 1
                state["max_in_flight"] = max(state["max_in_flight"], state["in_flight"])
                state["dispatches"].append(clock())
            time.sleep(0.005)
            with state_lock:
                state["in_flight"] -= 1
            return url

        fetcher = RateLimitedFetcher(transport=transport, bucket=bucket)
        results = []

        def worker(worker_id):
            for n in range(3):
                results.append(fetcher.fetch(f"https://example.com/{worker_id}/{n}"))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(results) == 12
        assert state["max_in_flight"] == 1
        dispatches = state["dispatches"]
        assert dispatches == [2.0 * i for i in range(12)]
        assert all(b - a >= 2.0 for a, b in zip(dispatches, dispatches[1:]))
        assert bucket.tokens == 18
