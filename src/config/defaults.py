"""
Default configuration values and factory functions.

This module provides default configurations and factory functions for creating
configuration objects with sensible defaults when values are missing or invalid.
"""

from dataclasses import replace

from .models import RateLimitSettings, SystemConfig, SourceConfig
from .sources import NINTENDO_WHATSNEW_CONFIG
from .validation import VALID_LOG_LEVELS


def get_default_source_config() -> SourceConfig:
    """Get a fresh copy of the default listing source."""
    return replace(
        NINTENDO_WHATSNEW_CONFIG,
        candidate_selectors=list(NINTENDO_WHATSNEW_CONFIG.candidate_selectors),
        image_keywords=list(NINTENDO_WHATSNEW_CONFIG.image_keywords),
    )


def get_default_rate_limit_settings() -> RateLimitSettings:
    """
    Get the default request pacing policy.

    Returns:
        RateLimitSettings: 30 requests per minute, 2 seconds apart
    """
    return RateLimitSettings(
        capacity=30,
        refill_interval_seconds=60.0,
        min_interval_seconds=2.0
    )


def get_default_system_config() -> SystemConfig:
    """
    Get complete default system configuration.

    Returns:
        SystemConfig with all default values
    """
    return SystemConfig(
        source=get_default_source_config(),
        rate_limit=get_default_rate_limit_settings(),
        default_limit=3,
        max_limit=10,
        enrich=True,
        title_guard=True,
        log_level="INFO"
    )


def apply_configuration_defaults(config: SystemConfig) -> SystemConfig:
    """
    Apply default values to missing or invalid configuration fields.

    Args:
        config: SystemConfig to apply defaults to

    Returns:
        SystemConfig with defaults applied
    """
    defaults = get_default_system_config()

    if not config.source.candidate_selectors:
        config.source.candidate_selectors = list(defaults.source.candidate_selectors)

    if config.max_limit <= 0:
        config.max_limit = defaults.max_limit

    if not (1 <= config.default_limit <= config.max_limit):
        config.default_limit = min(defaults.default_limit, config.max_limit)

    if not config.log_level or config.log_level not in VALID_LOG_LEVELS:
        config.log_level = defaults.log_level

    return config


def create_test_config() -> SystemConfig:
    """Create configuration optimized for testing: no pacing delays, no enrichment."""
    config = get_default_system_config()
    config.rate_limit = RateLimitSettings(capacity=1000, refill_interval_seconds=60.0, min_interval_seconds=0.0)
    config.enrich = False
    config.log_level = "CRITICAL"
    return config
