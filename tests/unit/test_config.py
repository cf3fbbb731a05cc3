"""Unit tests for environment-driven factories."""

import os
from unittest.mock import MagicMock, Mock, patch

import pytest

from restaurant_ordering_service.config import (
    create_ai_service,
    create_dynamodb_resource,
    get_api_keys,
    otel_enabled,
    table_name,
)


@pytest.mark.unit
class TestCreateDynamoDBResource:
    """Tests for create_dynamodb_resource."""

    @patch.dict(os.environ, {"DYNAMODB_ENDPOINT": "", "AWS_REGION": "us-west-2"}, clear=True)
    @patch("restaurant_ordering_service.config.boto3.resource")
    def test_creates_aws_resource_when_no_endpoint(self, mock_boto3_resource: Mock) -> None:
        """Test that AWS DynamoDB is used when no local endpoint is configured."""
        mock_resource = MagicMock()
        mock_boto3_resource.return_value = mock_resource

        result = create_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with("dynamodb", region_name="us-west-2")
        assert result == mock_resource

    @patch.dict(
        os.environ,
        {
            "DYNAMODB_ENDPOINT": "http://localhost:8000",
            "AWS_ACCESS_KEY_ID": "test-key",
            "AWS_SECRET_ACCESS_KEY": "test-secret",
        },
        clear=True,
    )
    @patch("restaurant_ordering_service.config.boto3.resource")
    def test_creates_local_resource_when_endpoint_provided(
        self, mock_boto3_resource: Mock
    ) -> None:
        """Test that a local endpoint uses explicit credentials and the default region."""
        create_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with(
            "dynamodb",
            endpoint_url="http://localhost:8000",
            region_name="us-east-1",
            aws_access_key_id="test-key",
            aws_secret_access_key="test-secret",
        )


@pytest.mark.unit
class TestSettings:
    """Tests for table names, API keys, AI and OpenTelemetry settings."""

    @patch.dict(os.environ, {"DYNAMODB_ORDERS_TABLE": "prod-orders"}, clear=True)
    def test_table_name_from_env_or_default(self) -> None:
        """Test table name overrides and defaults."""
        assert table_name("orders") == "prod-orders"
        assert table_name("dishes") == "restaurant-dishes"

    @patch.dict(os.environ, {"ADMIN_API_KEY": "key-1, key-2"}, clear=True)
    def test_api_keys_from_env(self) -> None:
        """Test reading several admin keys."""
        assert get_api_keys() == ["key-1", "key-2"]

    @patch.dict(os.environ, {}, clear=True)
    def test_api_keys_fallback(self) -> None:
        """Test the development key when none is configured."""
        assert get_api_keys() == ["dummy-key-for-development"]

    @patch.dict(
        os.environ,
        {
            "GEMINI_API_KEY": "gemini-key",
            "GEMINI_BASE_URL": "https://ai.test",
            "GEMINI_CHAT_MODEL": "chat-model",
        },
        clear=True,
    )
    def test_create_ai_service(self) -> None:
        """Test that the AI client is configured from GEMINI_* variables."""
        service = create_ai_service()

        assert service.api_key == "gemini-key"
        assert service.base_url == "https://ai.test"
        assert service.chat_model == "chat-model"
        assert service.suggestion_model == "gemini-2.0-flash"

    @pytest.mark.parametrize(("value", "expected"), [("true", True), ("TRUE", True), ("0", False)])
    def test_otel_enabled(self, value: str, expected: bool) -> None:
        """Test the ENABLE_OTEL flag."""
        with patch.dict(os.environ, {"ENABLE_OTEL": value}, clear=True):
            assert otel_enabled() is expected
