"""
Configuration validation utilities.

This module provides validation functions and error classes for configuration
management, ensuring that all configuration values are valid and complete.
"""

from typing import List, Any
from urllib.parse import urlparse

from soupsieve import SelectorSyntaxError, compile as compile_selector

from .models import SourceConfig, RateLimitSettings, SystemConfig


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigurationError(Exception):
    """Base exception for configuration-related errors."""
    pass


class ValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"Validation error for '{field}': {message}")


class ConfigValidator:
    """Validates configuration objects and provides detailed error reporting."""

    @staticmethod
    def validate_source_config(config: SourceConfig) -> List[ValidationError]:
        """
        Validate a SourceConfig object.

        Args:
            config: SourceConfig to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not ConfigValidator._is_valid_url(config.listing_url):
            errors.append(ValidationError("listing_url", "Invalid URL format", config.listing_url))

        if not config.candidate_selectors:
            errors.append(ValidationError("candidate_selectors", "At least one candidate selector is required"))

        for i, selector in enumerate(config.candidate_selectors):
            if not selector or not selector.strip():
                errors.append(ValidationError(
                    f"candidate_selectors[{i}]",
                    "Candidate selector cannot be empty"
                ))
            elif not ConfigValidator._is_valid_css_selector(selector):
                errors.append(ValidationError(
                    f"candidate_selectors[{i}]",
                    "Invalid CSS selector syntax",
                    selector
                ))

        if not config.marker_phrase or not config.marker_phrase.strip():
            errors.append(ValidationError("marker_phrase", "Marker phrase cannot be empty"))

        if not config.title_placeholder:
            errors.append(ValidationError("title_placeholder", "Title placeholder cannot be empty"))

        if not config.description_placeholder:
            errors.append(ValidationError("description_placeholder", "Description placeholder cannot be empty"))

        return errors

    @staticmethod
    def validate_rate_limit_settings(settings: RateLimitSettings) -> List[ValidationError]:
        """Validate a RateLimitSettings object."""
        errors = []

        if settings.capacity <= 0:
            errors.append(ValidationError("capacity", "Capacity must be positive", settings.capacity))

        if settings.refill_interval_seconds <= 0:
            errors.append(ValidationError(
                "refill_interval_seconds", "Refill interval must be positive", settings.refill_interval_seconds
            ))

        if settings.min_interval_seconds < 0:
            errors.append(ValidationError(
                "min_interval_seconds", "Minimum interval must be non-negative", settings.min_interval_seconds
            ))
        elif settings.min_interval_seconds * settings.capacity > settings.refill_interval_seconds * 10:
            errors.append(ValidationError(
                "min_interval_seconds",
                "Minimum interval is too large for the bucket to ever drain",
                settings.min_interval_seconds
            ))

        return errors

    @staticmethod
    def validate_system_config(config: SystemConfig) -> List[ValidationError]:
        """
        Validate complete SystemConfig object.

        Args:
            config: SystemConfig to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for error in ConfigValidator.validate_source_config(config.source):
            errors.append(ValidationError(f"source.{error.field}", error.message, error.value))

        for error in ConfigValidator.validate_rate_limit_settings(config.rate_limit):
            errors.append(ValidationError(f"rate_limit.{error.field}", error.message, error.value))

        if config.max_limit <= 0:
            errors.append(ValidationError("max_limit", "Max limit must be positive", config.max_limit))

        if not (1 <= config.default_limit <= max(config.max_limit, 1)):
            errors.append(ValidationError(
                "default_limit", "Default limit must be between 1 and max_limit", config.default_limit
            ))

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(ValidationError("log_level", "Invalid log level", config.log_level))

        return errors

    @staticmethod
    def _is_valid_css_selector(selector: str) -> bool:
        """Check that soupsieve can compile the selector."""
        try:
            compile_selector(selector)
        except (SelectorSyntaxError, ValueError):
            return False
        return True

    @staticmethod
    def _is_valid_url(url: str) -> bool:
        """Check if URL has valid format."""
        try:
            result = urlparse(url)
            return all([result.scheme, result.netloc]) and result.scheme in ("http", "https")
        except Exception:
            return False


def validate_configuration(config: SystemConfig, raise_on_error: bool = False) -> List[ValidationError]:
    """
    Validate a complete system configuration.

    Args:
        config: SystemConfig to validate
        raise_on_error: If True, raise ConfigurationError on validation failure

    Returns:
        List of validation errors (empty if valid)

    Raises:
        ConfigurationError: If validation fails and raise_on_error is True
    """
    errors = ConfigValidator.validate_system_config(config)

    if errors and raise_on_error:
        error_messages = [str(error) for error in errors]
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(error_messages))

    return errors
