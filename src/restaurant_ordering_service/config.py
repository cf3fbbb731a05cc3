"""Environment-driven factories shared by the uvicorn and Lambda entry points."""

import logging
import os
from typing import Any

import boto3

from restaurant_ordering_service.auth.api_key_validator import parse_api_keys
from restaurant_ordering_service.services.ai_service import AIService

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAMES = {
    "dishes": ("DYNAMODB_DISHES_TABLE", "restaurant-dishes"),
    "menus": ("DYNAMODB_MENUS_TABLE", "restaurant-menus"),
    "menu_dishes": ("DYNAMODB_MENU_DISHES_TABLE", "restaurant-menu-dishes"),
    "orders": ("DYNAMODB_ORDERS_TABLE", "restaurant-orders"),
    "order_items": ("DYNAMODB_ORDER_ITEMS_TABLE", "restaurant-order-items"),
    "ai_logs": ("DYNAMODB_AI_LOGS_TABLE", "restaurant-ai-logs"),
}


def table_name(key: str) -> str:
    """Resolve a DynamoDB table name from its environment variable or default."""
    env_var, default = DEFAULT_TABLE_NAMES[key]
    return os.getenv(env_var, default)


def create_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        # Local DynamoDB - use environment variables for credentials
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    # Production - default credential chain (IAM role, env vars, etc.)
    logger.info(f"Using AWS DynamoDB in region {region}")
    return boto3.resource("dynamodb", region_name=region)


def create_ai_service() -> AIService:
    """Create the generative AI client from GEMINI_* environment variables."""
    return AIService(
        api_key=os.getenv("GEMINI_API_KEY"),
        base_url=os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com"),
        suggestion_model=os.getenv("GEMINI_SUGGESTION_MODEL", "gemini-2.0-flash"),
        chat_model=os.getenv("GEMINI_CHAT_MODEL", "gemini-2.0-flash"),
    )


def get_api_keys() -> list[str]:
    """Read admin API keys from ADMIN_API_KEY (comma separated)."""
    api_keys = parse_api_keys(os.getenv("ADMIN_API_KEY"))

    if not api_keys:
        logger.warning("No ADMIN_API_KEY configured - using development key")
        api_keys = ["dummy-key-for-development"]

    return api_keys


def otel_enabled() -> bool:
    """Whether ENABLE_OTEL asks for OpenTelemetry setup."""
    return os.getenv("ENABLE_OTEL", "false").lower() == "true"
