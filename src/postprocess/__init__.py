"""
Post-processing module for What's New Insights.

This module provides result formatting for the news pipeline output.
"""

from .formatter import (
    ResultFormatter,
    FormattedResponse,
    FormattingError,
    MAX_DESCRIPTION_LENGTH
)

__all__ = [
    'ResultFormatter',
    'FormattedResponse',
    'FormattingError',
    'MAX_DESCRIPTION_LENGTH'
]
