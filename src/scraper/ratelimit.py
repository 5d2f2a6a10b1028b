"""
Token bucket used to pace every outbound request to the source site.

The bucket holds ``capacity`` permits, refilled in full every
``refill_interval`` seconds counted from its creation. Consecutive dispatches
are at least ``min_interval`` seconds apart, and only one request may be in
flight at a time. Callers that arrive when the bucket is empty wait for the
next refill instead of failing.
"""

import threading
import time
from contextlib import contextmanager
from typing import Callable, Optional

from ..config.logging import get_logger
from ..config.models import RateLimitSettings


logger = get_logger(__name__)


class TokenBucket:
    """
    Blocking token bucket with minimum spacing and a single in-flight slot.

    ``clock`` and ``sleep`` are injectable so tests can drive the bucket
    with a fake monotonic clock.
    """

    def __init__(
        self,
        capacity: int = 30,
        refill_interval: float = 60.0,
        min_interval: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep
    ):
        if capacity <= 0:
            raise ValueError("Capacity must be positive")
        if refill_interval <= 0:
            raise ValueError("Refill interval must be positive")
        if min_interval < 0:
            raise ValueError("Minimum interval must be non-negative")

        self.capacity = capacity
        self.refill_interval = refill_interval
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep

        self._epoch = clock()
        self._refills = 0
        self._tokens = capacity
        self._last_dispatch: Optional[float] = None
        self._in_flight = threading.Lock()

    @classmethod
    def from_settings(cls, settings: RateLimitSettings, **kwargs) -> 'TokenBucket':
        """Build a bucket from configuration settings."""
        return cls(
            capacity=settings.capacity,
            refill_interval=settings.refill_interval_seconds,
            min_interval=settings.min_interval_seconds,
            **kwargs
        )

    @property
    def tokens(self) -> int:
        """Permits left in the current refill period."""
        self._refill(self._clock())
        return self._tokens

    def _refill(self, now: float) -> None:
        periods = int((now - self._epoch) // self.refill_interval)
        if periods > self._refills:
            self._refills = periods
            self._tokens = self.capacity

    def _wait_time(self, now: float) -> float:
        if self._tokens <= 0:
            next_refill = self._epoch + (self._refills + 1) * self.refill_interval
            return max(next_refill - now, 0.0)
        if self._last_dispatch is not None:
            return max(self._last_dispatch + self.min_interval - now, 0.0)
        return 0.0

    def acquire(self) -> None:
        """
        Block until a request may be dispatched.

        Takes the in-flight slot and one permit. Every ``acquire`` must be
        paired with a ``release`` once the request completes.
        """
        self._in_flight.acquire()
        try:
            while True:
                now = self._clock()
                self._refill(now)
                wait = self._wait_time(now)
                if wait <= 0:
                    break
                logger.log_rate_limit_wait(wait, self._tokens)
                self._sleep(wait)

            self._tokens -= 1
            self._last_dispatch = now
        except BaseException:
            self._in_flight.release()
            raise

    def release(self) -> None:
        """Free the in-flight slot taken by ``acquire``."""
        self._in_flight.release()

    @contextmanager
    def reserve(self):
        """Context manager pairing ``acquire`` and ``release``."""
        self.acquire()
        try:
            yield
        finally:
            self.release()


# Process-wide bucket shared by every fetch
_default_bucket: Optional[TokenBucket] = None
_default_bucket_lock = threading.Lock()


def get_default_bucket(settings: Optional[RateLimitSettings] = None) -> TokenBucket:
    """Get the process-wide token bucket, creating it on first use."""
    global _default_bucket
    with _default_bucket_lock:
        if _default_bucket is None:
            _default_bucket = TokenBucket.from_settings(settings or RateLimitSettings())
        return _default_bucket


def reset_default_bucket() -> None:
    """Drop the process-wide bucket so the next call builds a fresh one."""
    global _default_bucket
    with _default_bucket_lock:
        _default_bucket = None
