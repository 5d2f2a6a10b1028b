"""
Configuration manager for loading and managing system configuration.

This module provides the ConfigManager class that handles loading configuration
from environment variables, files, and default values with proper validation.
"""

import os
import json
from typing import Optional, Any, Dict
from pathlib import Path

from .models import SystemConfig, RateLimitSettings
from .validation import validate_configuration
from .defaults import apply_configuration_defaults, get_default_system_config
from .logging import get_logger


logger = get_logger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")


class ConfigManager:
    """Manages system configuration loading and validation."""

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Optional directory path for configuration files
        """
        self.config_dir = Path(config_dir) if config_dir else Path("config")
        self._system_config: Optional[SystemConfig] = None

    def load_configuration(self) -> SystemConfig:
        """
        Load complete system configuration from all sources.

        Returns:
            SystemConfig object with all loaded settings
        """
        if self._system_config is None:
            self._system_config = self._build_system_config()
        return self._system_config

    def _build_system_config(self) -> SystemConfig:
        """Build system configuration from all sources."""
        try:
            system_config = get_default_system_config()

            system_config.rate_limit = self._load_rate_limit_settings()
            self._load_source_overrides(system_config)
            self._load_selector_file(system_config)
            self._apply_environment_overrides(system_config)

            system_config = apply_configuration_defaults(system_config)

            # Log validation errors but don't fail - use what we have
            validation_errors = validate_configuration(system_config, raise_on_error=False)
            if validation_errors:
                logger.warning(
                    "Configuration validation warnings",
                    issue_count=len(validation_errors),
                    issues=[str(error) for error in validation_errors[:5]]
                )

            return system_config

        except Exception as e:
            logger.error("Configuration loading failed, using default configuration", error=e)
            return get_default_system_config()

    def _load_rate_limit_settings(self) -> RateLimitSettings:
        """Load request pacing settings from environment variables."""
        settings = RateLimitSettings()

        if capacity := os.getenv("RATE_LIMIT_CAPACITY"):
            try:
                settings.capacity = int(capacity)
            except ValueError:
                pass  # Keep default

        if refill := os.getenv("RATE_LIMIT_REFILL_SECONDS"):
            try:
                settings.refill_interval_seconds = float(refill)
            except ValueError:
                pass

        if min_interval := os.getenv("RATE_LIMIT_MIN_INTERVAL_SECONDS"):
            try:
                settings.min_interval_seconds = float(min_interval)
            except ValueError:
                pass

        return settings

    def _load_source_overrides(self, config: SystemConfig) -> None:
        """Apply listing source overrides from environment variables."""
        if listing_url := os.getenv("NEWS_LISTING_URL"):
            config.source.listing_url = listing_url.strip()

    def _load_selector_file(self, config: SystemConfig) -> None:
        """
        Load candidate selectors from ``selectors.json`` if it exists.

        The file holds ``{"candidate_selectors": [...], "mode": "prepend"|"replace"}``.
        Prepended selectors are tried before the built-in ones.
        """
        selectors_file = self.config_dir / "selectors.json"
        if not selectors_file.exists():
            return

        try:
            with open(selectors_file, 'r') as f:
                file_config: Dict[str, Any] = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Could not read selector file", path=str(selectors_file), error=str(e))
            return

        selectors = [s for s in file_config.get("candidate_selectors", []) if isinstance(s, str) and s.strip()]
        if not selectors:
            return

        if file_config.get("mode", "prepend") == "replace":
            config.source.candidate_selectors = selectors
        else:
            existing = [s for s in config.source.candidate_selectors if s not in selectors]
            config.source.candidate_selectors = selectors + existing

        if marker := file_config.get("marker_phrase"):
            config.source.marker_phrase = marker

    def _apply_environment_overrides(self, config: SystemConfig) -> None:
        """Apply environment-specific configuration overrides."""
        if log_level := os.getenv("LOG_LEVEL"):
            config.log_level = log_level.upper()

        if default_limit := os.getenv("NEWS_DEFAULT_LIMIT"):
            try:
                config.default_limit = int(default_limit)
            except ValueError:
                pass

        if max_limit := os.getenv("NEWS_MAX_LIMIT"):
            try:
                config.max_limit = int(max_limit)
            except ValueError:
                pass

        if enrich := os.getenv("NEWS_ENRICH"):
            config.enrich = enrich.lower() in _TRUE_VALUES

        if title_guard := os.getenv("NEWS_TITLE_GUARD"):
            config.title_guard = title_guard.lower() in _TRUE_VALUES

    def reload_configuration(self) -> SystemConfig:
        """Force reload of configuration from all sources."""
        self._system_config = None
        return self.load_configuration()

    def validate_current_configuration(self, raise_on_error: bool = False) -> bool:
        """
        Validate the current configuration.

        Args:
            raise_on_error: If True, raise ConfigurationError on validation failure

        Returns:
            True if configuration is valid, False otherwise

        Raises:
            ConfigurationError: If validation fails and raise_on_error is True
        """
        config = self.load_configuration()
        errors = validate_configuration(config, raise_on_error=raise_on_error)
        return len(errors) == 0


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_system_config() -> SystemConfig:
    """Get the current system configuration."""
    return get_config_manager().load_configuration()
