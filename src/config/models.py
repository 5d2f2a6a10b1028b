"""
Configuration data models for What's New Insights.

This module defines the core data structures used for configuration management,
including the listing source description and the request pacing policy.
"""

from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlparse


DEFAULT_TITLE_PLACEHOLDER = "Nintendo News Update"
DEFAULT_DESCRIPTION_PLACEHOLDER = "Nintendo news update"


@dataclass
class SourceConfig:
    """Configuration for the news listing source."""

    name: str
    listing_url: str
    candidate_selectors: List[str] = field(default_factory=list)
    marker_phrase: str = "Read more"
    image_keywords: List[str] = field(default_factory=lambda: ["news"])
    title_placeholder: str = DEFAULT_TITLE_PLACEHOLDER
    description_placeholder: str = DEFAULT_DESCRIPTION_PLACEHOLDER

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("Source name cannot be empty")
        if not self.listing_url:
            raise ValueError("Listing URL cannot be empty")
        parsed = urlparse(self.listing_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Listing URL must be absolute: {self.listing_url}")
        if not self.marker_phrase:
            raise ValueError("Marker phrase cannot be empty")

    @property
    def origin(self) -> str:
        """Scheme and host of the listing URL, without a trailing slash."""
        parsed = urlparse(self.listing_url)
        return f"{parsed.scheme}://{parsed.netloc}"


@dataclass
class RateLimitSettings:
    """Token bucket policy applied to every outbound request."""

    capacity: int = 30
    refill_interval_seconds: float = 60.0
    min_interval_seconds: float = 2.0

    def __post_init__(self):
        """Validate rate limit settings after initialization."""
        if self.capacity <= 0:
            raise ValueError("Capacity must be positive")
        if self.refill_interval_seconds <= 0:
            raise ValueError("Refill interval must be positive")
        if self.min_interval_seconds < 0:
            raise ValueError("Minimum interval must be non-negative")


@dataclass
class SystemConfig:
    """Overall system configuration combining all settings."""

    source: SourceConfig
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)

    # Processing defaults
    default_limit: int = 3
    max_limit: int = 10
    enrich: bool = True
    title_guard: bool = True
    log_level: str = "INFO"
