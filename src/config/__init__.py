"""
Configuration management module for What's New Insights.

This module provides configuration management capabilities including:
- The listing source description and its candidate selectors
- Request pacing (token bucket) settings
- Environment variable and file-based configuration loading
- Configuration validation and defaults
"""

from .models import SourceConfig, RateLimitSettings, SystemConfig
from .manager import ConfigManager, get_config_manager, get_system_config
from .sources import (
    NINTENDO_CANDIDATE_SELECTORS,
    NINTENDO_WHATSNEW_CONFIG,
    get_source_config
)
from .validation import (
    ConfigValidator,
    ValidationError,
    ConfigurationError,
    validate_configuration
)
from .defaults import (
    get_default_source_config,
    get_default_rate_limit_settings,
    get_default_system_config,
    apply_configuration_defaults,
    create_test_config
)

__all__ = [
    # Data models
    "SourceConfig",
    "RateLimitSettings",
    "SystemConfig",

    # Configuration manager
    "ConfigManager",
    "get_config_manager",
    "get_system_config",

    # Source configurations
    "NINTENDO_CANDIDATE_SELECTORS",
    "NINTENDO_WHATSNEW_CONFIG",
    "get_source_config",

    # Validation
    "ConfigValidator",
    "ValidationError",
    "ConfigurationError",
    "validate_configuration",

    # Defaults
    "get_default_source_config",
    "get_default_rate_limit_settings",
    "get_default_system_config",
    "apply_configuration_defaults",
    "create_test_config"
]
