"""
Result formatter for What's New Insights.

This module turns pipeline output into the structured JSON response returned
by the handler.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..config.logging import get_logger
from ..scraper.models import NewsItem


logger = get_logger(__name__)

MAX_DESCRIPTION_LENGTH = 4000


class FormattingError(Exception):
    """Custom exception for result formatting errors."""

    def __init__(self, message: str, error_type: str = "FORMATTING_ERROR", details: Optional[Dict] = None):
        super().__init__(message)
        self.error_type = error_type
        self.details = details or {}


@dataclass
class FormattedResponse:
    """Complete formatted response structure."""

    success: bool
    source: str
    items: List[Dict[str, Any]] = field(default_factory=list)
    processing_time_ms: int = 0
    timestamp: Optional[str] = None

    def __post_init__(self):
        """Initialize computed fields."""
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    @property
    def count(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "source": self.source,
            "count": self.count,
            "items": self.items,
            "timestamp": self.timestamp,
            "processing_time_ms": self.processing_time_ms,
        }


class ResultFormatter:
    """Formats news items into the handler response."""

    def __init__(self, max_description_length: int = MAX_DESCRIPTION_LENGTH):
        if max_description_length <= 0:
            raise FormattingError("Max description length must be positive", "CONFIGURATION_ERROR")
        self.max_description_length = max_description_length

    def format_item(self, item: NewsItem) -> Dict[str, Any]:
        """Serialize one item, capping the description length."""
        data = item.to_dict()
        description = data.get("description") or ""
        if len(description) > self.max_description_length:
            data["description"] = description[:self.max_description_length] + "..."
        return data

    def format_response(
        self,
        items: List[NewsItem],
        source: str,
        processing_time_ms: int = 0
    ) -> FormattedResponse:
        """
        Build the response for a pipeline run.

        Args:
            items: Pipeline output
            source: Listing URL the items came from
            processing_time_ms: Time spent in the pipeline

        Returns:
            FormattedResponse
        """
        try:
            formatted = [self.format_item(item) for item in items]
        except Exception as e:
            logger.error("Failed to format news items", error=e)
            raise FormattingError(f"Failed to format news items: {str(e)}") from e

        logger.debug("Formatted response", item_count=len(formatted))
        return FormattedResponse(
            success=True,
            source=source,
            items=formatted,
            processing_time_ms=processing_time_ms
        )
