"""
Unit tests for the Lambda handler module.

Tests the entry point for the What's New Insights function, including limit
parsing, API Gateway response shape and error handling.
"""

import json
import pytest
from unittest.mock import Mock, patch

from src.config.defaults import create_test_config
from src.handler import (
    lambda_handler,
    parse_limit,
    create_error_response,
    create_api_response,
    HandlerError
)
from src.scraper.models import NewsItem


class TestLimitParsing:
    """Test limit parsing from the different event shapes."""

    def setup_method(self):
        self.config = create_test_config()

    def test_default_limit(self):
        """Test that a missing limit uses the configured default."""
        assert parse_limit({}, self.config) == 3

    def test_direct_invocation(self):
        """Test a limit on a direct invocation event."""
        assert parse_limit({"limit": 5}, self.config) == 5

    def test_query_string_parameter(self):
        """Test a limit from API Gateway query parameters."""
        event = {"queryStringParameters": {"limit": "7"}}
        assert parse_limit(event, self.config) == 7

    def test_json_body(self):
        """Test a limit from an API Gateway JSON body."""
        event = {"body": json.dumps({"limit": 2})}
        assert parse_limit(event, self.config) == 2

    def test_query_string_wins_over_body(self):
        """Test lookup order between query string and body."""
        event = {"queryStringParameters": {"limit": "4"}, "body": json.dumps({"limit": 9})}
        assert parse_limit(event, self.config) == 4

    def test_null_query_parameters(self):
        """Test API Gateway events with null query parameters."""
        event = {"queryStringParameters": None, "body": None}
        assert parse_limit(event, self.config) == 3

    @pytest.mark.parametrize("value", [0, -1, 11, "abc", "2.5", True, [3]])
    def test_invalid_limits(self, value):
        """Test that out of range or non-integer limits are rejected."""
        with pytest.raises(HandlerError) as exc_info:
            parse_limit({"limit": value}, self.config)

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_type == "VALIDATION_ERROR"

    def test_upper_bound_is_inclusive(self):
        """Test that max_limit itself is accepted."""
        assert parse_limit({"limit": 10}, self.config) == 10

    def test_invalid_json_body(self):
        """Test that malformed JSON bodies are rejected."""
        with pytest.raises(HandlerError) as exc_info:
            parse_limit({"body": "{not json"}, self.config)

        assert exc_info.value.status_code == 400


class TestLambdaHandler:
    """Test the handler end to end with the pipeline mocked."""

    def setup_method(self):
        self.context = Mock(aws_request_id="req-123")

    @patch('src.handler.get_system_config')
    @patch('src.handler.NewsPipeline')
    def test_successful_request(self, mock_pipeline_class, mock_get_config):
        """Test a successful request returns items."""
        mock_get_config.return_value = create_test_config()
        pipeline = mock_pipeline_class.return_value
        pipeline.__enter__.return_value = pipeline
        mock_pipeline_class.return_value.run.return_value = [
            NewsItem(title="Alpha", link="https://www.nintendo.com/a", date="03/15/24")
        ]

        response = lambda_handler({"limit": 2}, self.context)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["success"] is True
        assert body["count"] == 1
        assert body["items"][0]["title"] == "Alpha"
        mock_pipeline_class.return_value.run.assert_called_once_with(2)
        pipeline.__exit__.assert_called_once()

    @patch('src.handler.get_system_config')
    @patch('src.handler.NewsPipeline')
    def test_empty_result_is_success(self, mock_pipeline_class, mock_get_config):
        """Test that no items is still a 200 response."""
        mock_get_config.return_value = create_test_config()
        pipeline = mock_pipeline_class.return_value
        pipeline.__enter__.return_value = pipeline
        mock_pipeline_class.return_value.run.return_value = []

        response = lambda_handler({}, self.context)

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["count"] == 0

    @patch('src.handler.get_system_config')
    @patch('src.handler.NewsPipeline')
    def test_invalid_limit_returns_400(self, mock_pipeline_class, mock_get_config):
        """Test that validation errors map to a 400 response."""
        mock_get_config.return_value = create_test_config()

        response = lambda_handler({"limit": 0}, self.context)

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert body["success"] is False
        assert body["error"]["type"] == "VALIDATION_ERROR"
        mock_pipeline_class.assert_not_called()

    @patch('src.handler.get_system_config')
    def test_unexpected_error_returns_500(self, mock_get_config):
        """Test that unexpected errors map to a 500 response."""
        mock_get_config.side_effect = RuntimeError("config exploded")

        response = lambda_handler({}, self.context)

        assert response["statusCode"] == 500
        body = json.loads(response["body"])
        assert body["error"]["type"] == "INTERNAL_ERROR"
        assert "config exploded" in body["error"]["message"]


class TestErrorHandling:
    """Test error response helpers."""

    def test_create_error_response_basic(self):
        """Test basic error response creation."""
        response = create_error_response("Test error", "TEST_ERROR")

        assert response["success"] is False
        assert response["error"]["type"] == "TEST_ERROR"
        assert response["error"]["message"] == "Test error"
        assert response["items"] == []
        assert response["count"] == 0

    def test_handler_error_defaults(self):
        """Test HandlerError default values."""
        error = HandlerError("Something failed")
        assert str(error) == "Something failed"
        assert error.error_type == "HANDLER_ERROR"
        assert error.status_code == 500


class TestAPIResponseCreation:
    """Test API Gateway response creation."""

    def test_create_api_response(self):
        """Test response shape and headers."""
        response = create_api_response(200, {"ok": True, "title": "Pokémon"})

        assert response["statusCode"] == 200
        assert response["headers"]["Content-Type"] == "application/json"
        assert json.loads(response["body"]) == {"ok": True, "title": "Pokémon"}
