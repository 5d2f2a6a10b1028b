"""
Unit tests for result formatter functionality.
"""

import json
import pytest
from src.postprocess.formatter import (
    ResultFormatter,
    FormattedResponse,
    FormattingError,
    MAX_DESCRIPTION_LENGTH
)
from src.scraper.models import NewsItem


SOURCE = "https://www.nintendo.com/us/whatsnew/"


class TestResultFormatter:
    """Test cases for ResultFormatter class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.formatter = ResultFormatter()
        self.item = NewsItem(
            title="Mario Kart World update",
            link="https://www.nintendo.com/us/whatsnew/mario-kart/",
            date="03/15/24",
            image_url="https://www.nintendo.com/images/mk.jpg",
            description="New tracks are available."
        )

    def test_init_defaults(self):
        """Test formatter initialization."""
        assert self.formatter.max_description_length == MAX_DESCRIPTION_LENGTH == 4000

    def test_invalid_max_length(self):
        """Test that a non-positive cap is rejected."""
        with pytest.raises(FormattingError):
            ResultFormatter(max_description_length=0)

    def test_format_item(self):
        """Test that items serialize with all five fields."""
        data = self.formatter.format_item(self.item)

        assert data == {
            "title": "Mario Kart World update",
            "link": "https://www.nintendo.com/us/whatsnew/mario-kart/",
            "date": "03/15/24",
            "image_url": "https://www.nintendo.com/images/mk.jpg",
            "description": "New tracks are available."
        }

    def test_long_description_truncated(self):
        """Test that descriptions over the cap are truncated with an ellipsis."""
        item = NewsItem(title="T", description="x" * 5000)
        data = self.formatter.format_item(item)

        assert len(data["description"]) == 4003
        assert data["description"].endswith("...")

    def test_description_at_cap_unchanged(self):
        """Test that a description exactly at the cap is untouched."""
        item = NewsItem(title="T", description="x" * 4000)
        assert self.formatter.format_item(item)["description"] == "x" * 4000

    def test_format_response(self):
        """Test a complete response."""
        response = self.formatter.format_response([self.item, self.item], SOURCE, processing_time_ms=120)

        assert isinstance(response, FormattedResponse)
        assert response.success is True
        assert response.count == 2
        assert response.processing_time_ms == 120
        assert response.timestamp is not None

    def test_format_empty_response(self):
        """Test that an empty item list is still a successful response."""
        response = self.formatter.format_response([], SOURCE)

        assert response.success is True
        assert response.count == 0
        assert response.items == []

    def test_response_to_dict_is_json_serializable(self):
        """Test JSON serialization of the response."""
        body = self.formatter.format_response([self.item], SOURCE).to_dict()

        decoded = json.loads(json.dumps(body))
        assert decoded["count"] == 1
        assert decoded["source"] == SOURCE
        assert decoded["items"][0]["title"] == "Mario Kart World update"

    def test_bad_item_raises_formatting_error(self):
        """Test that unformattable input raises FormattingError."""
        with pytest.raises(FormattingError):
            self.formatter.format_response([object()], SOURCE)
