"""Cached dependency factory for the Lambda handler.

Dependencies are created once per Lambda container and reused across
invocations to keep warm starts fast.
"""

import logging
import os
from typing import Any

from fastapi import FastAPI

from restaurant_ordering_service.config import (
    create_ai_service,
    create_dynamodb_resource,
    get_api_keys,
    otel_enabled,
    table_name,
)
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.observability import configure_logging, setup_observability
from restaurant_ordering_service.repositories.menu_repositories import (
    DishRepository,
    MenuRepository,
)
from restaurant_ordering_service.repositories.order_repositories import (
    AIActionLogRepository,
    OrderRepository,
)
from restaurant_ordering_service.services.ai_service import AIService
from restaurant_ordering_service.services.analytics_service import AnalyticsService
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_dynamodb_resource: Any | None = None
_dish_repository: DishRepository | None = None
_order_repository: OrderRepository | None = None
_ai_service: AIService | None = None
_order_service: OrderService | None = None
_menu_service: MenuService | None = None
_analytics_service: AnalyticsService | None = None
_fastapi_app: FastAPI | None = None


def get_dynamodb_resource() -> Any:
    """Create or retrieve cached DynamoDB resource."""
    global _dynamodb_resource

    if _dynamodb_resource is None:
        _dynamodb_resource = create_dynamodb_resource()
    return _dynamodb_resource


def get_dish_repository() -> DishRepository:
    """Create or retrieve cached dish repository."""
    global _dish_repository

    if _dish_repository is None:
        _dish_repository = DishRepository(
            dynamodb_resource=get_dynamodb_resource(),
            table_name=table_name("dishes"),
        )
    return _dish_repository


def get_order_repository() -> OrderRepository:
    """Create or retrieve cached order repository."""
    global _order_repository

    if _order_repository is None:
        _order_repository = OrderRepository(
            dynamodb_resource=get_dynamodb_resource(),
            table_name=table_name("orders"),
            items_table_name=table_name("order_items"),
        )
    return _order_repository


def get_ai_service() -> AIService:
    """Create or retrieve cached AI client."""
    global _ai_service

    if _ai_service is None:
        _ai_service = create_ai_service()
    return _ai_service


def get_order_service() -> OrderService:
    """Create or retrieve cached order service."""
    global _order_service

    if _order_service is None:
        _order_service = OrderService(
            order_repository=get_order_repository(),
            dish_repository=get_dish_repository(),
        )
        logger.info("Order service initialized")
    return _order_service


def get_menu_service() -> MenuService:
    """Create or retrieve cached menu service."""
    global _menu_service

    if _menu_service is None:
        menu_repository = MenuRepository(
            dynamodb_resource=get_dynamodb_resource(),
            table_name=table_name("menus"),
            menu_dishes_table_name=table_name("menu_dishes"),
        )
        _menu_service = MenuService(
            dish_repository=get_dish_repository(), menu_repository=menu_repository
        )
        logger.info("Menu service initialized")
    return _menu_service


def get_analytics_service() -> AnalyticsService:
    """Create or retrieve cached analytics service."""
    global _analytics_service

    if _analytics_service is None:
        ai_log_repository = AIActionLogRepository(
            dynamodb_resource=get_dynamodb_resource(),
            table_name=table_name("ai_logs"),
        )
        _analytics_service = AnalyticsService(
            order_service=get_order_service(),
            order_repository=get_order_repository(),
            dish_repository=get_dish_repository(),
            ai_log_repository=ai_log_repository,
            ai_service=get_ai_service(),
        )
        logger.info("Analytics service initialized")
    return _analytics_service


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application."""
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    _fastapi_app = create_app(
        order_service=get_order_service(),
        menu_service=get_menu_service(),
        analytics_service=get_analytics_service(),
        ai_service=get_ai_service(),
        api_keys=get_api_keys(),
    )

    if otel_enabled():
        setup_observability(_fastapi_app)

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Configure logging. Called once during Lambda cold start."""
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Lambda environment initialized")
